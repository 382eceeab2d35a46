"""
Configuration Loader - Carica e valida configurazioni YAML
"""

import os
import yaml
import logging
from typing import Dict, Any, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

# Valori di default delle sezioni opzionali
DEFAULT_SPEAKER = {
    'default_text': '你好',
    'cache_dialect': False,
    'abort_recovery_s': 2.0
}
DEFAULT_QUEUES = {
    'utterance_maxsize': 20
}


def get_xiaoai_home() -> Path:
    """
    Ottiene la directory home del progetto.

    Usa in ordine:
    1. XIAOAI_HOME environment variable (se impostata)
    2. Directory padre di config/

    Returns:
        Path assoluto alla directory home
    """
    # 1. Prova con variabile d'ambiente
    if 'XIAOAI_HOME' in os.environ:
        home = Path(os.environ['XIAOAI_HOME']).resolve()
        logger.debug(f"XIAOAI_HOME from env: {home}")
        return home

    # 2. Usa directory di questo file (config/) e risali alla root
    home = Path(__file__).parent.resolve().parent
    logger.debug(f"XIAOAI_HOME auto-detected: {home}")
    return home


def resolve_path(path: str, relative_to: Optional[Path] = None) -> Path:
    """
    Risolve un path in assoluto.

    Se il path è già assoluto, lo restituisce così com'è.
    Se è relativo, lo risolve rispetto a XIAOAI_HOME o alla directory specificata.
    """
    p = Path(path)

    if p.is_absolute():
        return p.resolve()

    base_dir = relative_to if relative_to else get_xiaoai_home()
    return (base_dir / p).resolve()


class ConfigLoader:
    """
    Loader per configurazioni YAML con validazione.
    """

    @classmethod
    def load(cls, config_path: str, validate_classes: bool = True) -> Dict[str, Any]:
        """
        Carica configurazione da file YAML.

        Args:
            config_path: Path al file YAML (può essere relativo o assoluto)
            validate_classes: Se True, valida che bridge ed engine configurati esistano

        Returns:
            Dict con configurazione completa (con 'xiaoai_home' e default applicati)

        Raises:
            FileNotFoundError: Se il file non esiste
            yaml.YAMLError: Se c'è un errore di parsing YAML
            ValueError: Se la configurazione non è valida
        """
        config_file = resolve_path(config_path)
        home = get_xiaoai_home()

        if not config_file.exists():
            error_msg = f"Configuration file not found: {config_file} (from: {config_path})"
            logger.error(f"❌ {error_msg}")
            logger.error(f"   XIAOAI_HOME: {home}")
            raise FileNotFoundError(error_msg)

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            error_msg = f"YAML parsing error in {config_path}: {e}"
            logger.error(f"❌ {error_msg}")
            raise yaml.YAMLError(error_msg)

        if config is None:
            raise ValueError("Configuration file is empty")

        cls._validate_config_structure(config)

        if validate_classes:
            cls._validate_classes(config)

        cls._apply_defaults(config)
        config['xiaoai_home'] = str(home)

        logger.info(f"✅ Configuration loaded from: {config_file}")
        logger.info(f"   XIAOAI_HOME: {home}")
        cls._log_config_summary(config)

        return config

    @classmethod
    def _validate_config_structure(cls, config: Dict[str, Any]) -> None:
        """
        Valida che la configurazione abbia la struttura minima richiesta.

        Raises:
            ValueError: Se la configurazione non è valida
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration root must be a mapping")

        for section in ('bridge', 'engine'):
            if section not in config:
                raise ValueError(f"Missing required '{section}' section in configuration")
            if not isinstance(config[section], dict) or not config[section].get('class'):
                raise ValueError(f"Missing 'class' in {section} configuration")

        for section in ('speaker', 'queues', 'logging'):
            if section in config and not isinstance(config[section], dict):
                raise ValueError(f"'{section}' section must be a mapping")

    @classmethod
    def _validate_classes(cls, config: Dict[str, Any]) -> None:
        """
        Valida che le classi configurate esistano nei moduli del factory.

        Raises:
            ValueError: Se una classe configurata non esiste
        """
        # Import qui per evitare circular import
        from adapters.factory import AdapterFactory

        available = AdapterFactory.get_available_classes()

        for section in ('bridge', 'engine'):
            class_name = config[section]['class']
            if class_name not in available[section]:
                raise ValueError(
                    f"Unknown {section} class '{class_name}'. "
                    f"Available: {', '.join(available[section])}"
                )

    @classmethod
    def _apply_defaults(cls, config: Dict[str, Any]) -> None:
        config['speaker'] = {**DEFAULT_SPEAKER, **(config.get('speaker') or {})}
        config['queues'] = {**DEFAULT_QUEUES, **(config.get('queues') or {})}
        config.setdefault('logging', {})
        for section in ('bridge', 'engine'):
            if not config[section].get('config'):
                config[section]['config'] = {}

    @classmethod
    def _log_config_summary(cls, config: Dict[str, Any]) -> None:
        """Log riassunto configurazione"""
        logger.info("📋 Configuration Summary:")
        logger.info(f"  Bridge: {config['bridge']['class']}")
        logger.info(f"  Engine: {config['engine']['class']}")
        logger.info(f"  Cache dialect: {config['speaker']['cache_dialect']}")
