"""
Bridge Adapters
Adattatori verso il bridge nativo che esegue i comandi sul dispositivo.
"""

from .native_bridge import NativeModuleBridge
from .shell_bridge import LocalShellBridge
from .mock_bridge import MockBridge

__all__ = [
    'NativeModuleBridge',
    'LocalShellBridge',
    'MockBridge'
]
