"""
Adapters - Adapter secondari per l'architettura esagonale
"""

from .ports import BridgeCallbacks, BridgePort
from .factory import AdapterFactory

__all__ = [
    'BridgeCallbacks',
    'BridgePort',
    'AdapterFactory'
]
