"""
Event System - Eventi in arrivo dal dispositivo e messaggi utente
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class InboundEventType(Enum):
    """
    Tipi di eventi in arrivo dal bridge nativo.
    I valori corrispondono al campo "event" dell'envelope JSON.
    """
    PLAYBACK = "playing"        # Cambio stato del player
    INSTRUCTION = "instruction"  # Riga del canale istruzioni (ASR, NLP, ...)
    KEYWORD = "kws"             # Parola di attivazione rilevata
    AUDIO_FRAME = "audio_frame"  # Frame audio grezzo (callback on_input_data)


@dataclass
class InboundEvent:
    """
    Evento del dispositivo, già classificato.
    Effimero: processato e scartato.
    """
    type: InboundEventType
    content: Any
    timestamp: float = field(default_factory=time.time)

    def __repr__(self):
        content_str = str(self.content)[:50]
        if len(str(self.content)) > 50:
            content_str += "..."
        return f"InboundEvent(type={self.type.value}, content={content_str})"


@dataclass(frozen=True)
class RecognizedUtterance:
    """
    Frase dell'utente riconosciuta in modo definitivo dall'ASR.
    Viene passata al motore conversazionale come nuovo turno.
    """
    text: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    sender: str = "user"
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_message(self) -> dict:
        return {
            "text": self.text,
            "id": self.id,
            "sender": self.sender,
            "timestamp": self.timestamp,
        }


# ===== PARSING =====

def parse_event(raw: str) -> Optional[InboundEvent]:
    """
    Decodifica l'envelope JSON {"event": ..., "data": ...} del bridge.

    Returns:
        InboundEvent oppure None per eventi malformati o sconosciuti
    """
    try:
        envelope = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring malformed event: {str(raw)[:80]}")
        return None

    if not isinstance(envelope, dict):
        return None

    try:
        event_type = InboundEventType(envelope.get("event"))
    except ValueError:
        logger.debug(f"Ignoring unknown event kind: {envelope.get('event')}")
        return None

    if event_type == InboundEventType.AUDIO_FRAME:
        # I frame audio arrivano solo dalla callback binaria
        return None

    return InboundEvent(type=event_type, content=envelope.get("data"))


def extract_final_recognition(data: Any) -> Optional[str]:
    """
    Estrae il testo riconosciuto da un evento 'instruction'.

    La riga arriva come stringa JSON in data["NewLine"]. Solo un
    SpeechRecognizer.RecognizeResult marcato is_final con testo non
    vuoto produce un risultato.
    """
    if not isinstance(data, dict) or not data.get("NewLine"):
        return None

    try:
        line = json.loads(data["NewLine"])
    except (TypeError, ValueError):
        return None

    if not isinstance(line, dict):
        return None

    header = line.get("header") or {}
    payload = line.get("payload") or {}
    if not isinstance(header, dict) or not isinstance(payload, dict):
        return None

    if header.get("namespace") != "SpeechRecognizer" or header.get("name") != "RecognizeResult":
        return None
    if not payload.get("is_final"):
        return None

    results = payload.get("results")
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        return None

    text = results[0].get("text")
    if not isinstance(text, str) or not text:
        return None
    return text
