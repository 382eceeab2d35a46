"""
Event Ingestion - Classifica gli eventi del dispositivo
Aggiorna lo stato dello speaker e inoltra le frasi riconosciute al motore.
"""

import logging
from typing import Callable, Optional

from adapters.ports import BridgeCallbacks

from .events import (
    InboundEvent, InboundEventType, RecognizedUtterance,
    extract_final_recognition, parse_event
)
from .speaker import SpeakerController
from .state import PlaybackStatus

logger = logging.getLogger(__name__)

MessageHandler = Callable[[RecognizedUtterance], None]
KeywordHandler = Callable[[str], None]


class EventIngestion(BridgeCallbacks):
    """
    Handler unico registrato presso il bridge all'avvio.

    Caratteristiche:
    - Non blocca mai il dispatch del bridge (gli handler accodano soltanto)
    - Eventi sconosciuti o malformati vengono ignorati
    - Statistiche di ingestion
    """

    def __init__(
        self,
        speaker: SpeakerController,
        message_handler: MessageHandler,
        keyword_handler: Optional[KeywordHandler] = None
    ):
        """
        Args:
            speaker: Controller di cui aggiornare lo stato di riproduzione
            message_handler: Riceve ogni RecognizedUtterance (non deve bloccare)
            keyword_handler: Osservatore opzionale delle parole di attivazione
        """
        self.speaker = speaker
        self.message_handler = message_handler
        self.keyword_handler = keyword_handler

        self._stats = self._empty_stats()

        logger.info("📥 EventIngestion initialized")

    @staticmethod
    def _empty_stats() -> dict:
        return {
            'playback': 0,
            'utterances': 0,
            'keywords': 0,
            'audio_frames': 0,
            'ignored': 0
        }

    # ===== CALLBACK DEL BRIDGE =====

    def on_event(self, event_json: str) -> None:
        event = parse_event(event_json)
        if event is None:
            self._stats['ignored'] += 1
            return
        self.handle_event(event)

    def on_input_data(self, data: bytes) -> None:
        # Solo osservabilità: il payload non viene conservato
        self._stats['audio_frames'] += 1
        logger.debug(f"🎙️ Audio frame received: {len(data)} bytes")

    # ===== CLASSIFICAZIONE =====

    def handle_event(self, event: InboundEvent) -> None:
        if event.type == InboundEventType.PLAYBACK:
            self._stats['playback'] += 1
            self.speaker.status = PlaybackStatus.from_event_data(event.content)

        elif event.type == InboundEventType.INSTRUCTION:
            text = extract_final_recognition(event.content)
            if text is None:
                self._stats['ignored'] += 1
                return
            self._stats['utterances'] += 1
            logger.info(f"🗣️ Recognized: {text}")
            self._forward(self.message_handler, RecognizedUtterance(text=text))

        elif event.type == InboundEventType.KEYWORD:
            self._stats['keywords'] += 1
            logger.info(f"🔥 Wake word detected: {event.content}")
            if self.keyword_handler:
                self._forward(self.keyword_handler, event.content)

        else:
            self._stats['ignored'] += 1

    def _forward(self, handler: Callable, payload) -> None:
        try:
            handler(payload)
        except Exception as e:
            logger.error(f"❌ Event handler failed: {e}", exc_info=True)

    def get_stats(self) -> dict:
        """Statistiche di ingestion"""
        return dict(self._stats)

    def clear_stats(self) -> None:
        """Reset statistiche"""
        self._stats = self._empty_stats()
        logger.info("📊 Ingestion stats cleared")
