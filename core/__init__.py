"""
XiaoAI Bridge Core - Hexagonal Architecture
Client dei comandi, stato di riproduzione ed eventi del dispositivo.
"""

from .state import CommandResult, DeviceDialect, DeviceInfo, MicStatus, PlaybackStatus
from .events import InboundEvent, InboundEventType, RecognizedUtterance, parse_event
from .sanitizer import remove_thinking_tags
from .bridge_client import BridgeClient
from .device_probe import DeviceProbe
from .speaker import SpeakerController, ABORT_RECOVERY_S, compute_play_timeout
from .event_ingestion import EventIngestion
from .engine import ConversationEngine, Reply, ScriptedEngine

__all__ = [
    'CommandResult',
    'DeviceDialect',
    'DeviceInfo',
    'MicStatus',
    'PlaybackStatus',
    'InboundEvent',
    'InboundEventType',
    'RecognizedUtterance',
    'parse_event',
    'remove_thinking_tags',
    'BridgeClient',
    'DeviceProbe',
    'SpeakerController',
    'ABORT_RECOVERY_S',
    'compute_play_timeout',
    'EventIngestion',
    'ConversationEngine',
    'Reply',
    'ScriptedEngine'
]
