"""
Configurazione - Loader YAML e file di esempio
"""
