from __future__ import annotations

"""
XiaoAI Orchestrator - Core Component
Collega bridge, speaker, event ingestion e motore conversazionale
e gestisce il ciclo di vita del sistema.
"""

import asyncio
import logging
import signal
from typing import Dict, Any, Optional

from adapters.factory import AdapterFactory

from .bridge_client import BridgeClient
from .device_probe import DeviceProbe
from .engine import ConversationEngine, Reply
from .event_ingestion import EventIngestion
from .events import RecognizedUtterance
from .speaker import SpeakerController


class XiaoAIOrchestrator:
    """
    Orchestratore principale.

    Responsabilità:
    - Creazione bridge e motore dalla configurazione
    - Registrazione UNICA delle callback presso il bridge, poi start()
    - Main loop: frasi riconosciute -> motore -> speaker
    - Gestione shutdown
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Args:
            config: Configurazione già caricata e validata (ConfigLoader.load)
        """
        self.logger = logging.getLogger(__name__)
        self.running = False
        self.config = config

        speaker_config = config['speaker']
        self.abort_recovery_s = float(speaker_config['abort_recovery_s'])

        # Bridge e client
        self.bridge = AdapterFactory.create_bridge(
            config['bridge']['class'],
            config['bridge']['config']
        )
        self.client = BridgeClient(self.bridge)

        # Speaker
        self.probe = DeviceProbe(self.client, cache=bool(speaker_config['cache_dialect']))
        self.speaker = SpeakerController(
            self.client,
            self.probe,
            default_text=speaker_config['default_text']
        )

        # Motore conversazionale
        self.engine: ConversationEngine = AdapterFactory.create_engine(
            config['engine']['class'],
            config['engine']['config']
        )
        self.engine.attach_speaker(self.speaker)

        # Coda frasi utente, creata in run() sul loop corretto
        self.utterance_maxsize = int(config['queues']['utterance_maxsize'])
        self.utterance_queue: Optional[asyncio.Queue] = None

        # Event ingestion registrata una volta sola
        self.ingestion = EventIngestion(self.speaker, self._enqueue_utterance)
        self.bridge.register_callbacks(self.ingestion)

        self.logger.info("🚀 XiaoAIOrchestrator initialized")

    def _enqueue_utterance(self, utterance: RecognizedUtterance) -> None:
        """Chiamato dal dispatch del bridge: accoda soltanto, non blocca mai"""
        if self.utterance_queue is None:
            self.logger.warning(f"⚠️ Orchestrator not running, utterance dropped: {utterance.text}")
            return
        try:
            self.utterance_queue.put_nowait(utterance)
        except asyncio.QueueFull:
            self.logger.error(f"❌ Utterance queue FULL! Dropped: {utterance.text}")

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._signal_handler, sig)
            except (NotImplementedError, RuntimeError):
                self.logger.debug(f"Signal handler not supported for {sig.name}")

    def _signal_handler(self, signum) -> None:
        """Handler per SIGINT (CTRL-C) e SIGTERM"""
        self.logger.info(f"⚠️  {signal.Signals(signum).name} received, shutting down...")
        self.stop()

    def stop(self) -> None:
        self.running = False

    async def run(self, install_signal_handlers: bool = True) -> None:
        """Main loop"""
        self.utterance_queue = asyncio.Queue(maxsize=self.utterance_maxsize)
        self.running = True

        if install_signal_handlers:
            self._install_signal_handlers()

        await self.bridge.start()
        self.logger.info("✅ Service started, waiting for device events")

        try:
            while self.running:
                try:
                    utterance = await asyncio.wait_for(self.utterance_queue.get(), timeout=1.0)
                except asyncio.TimeoutError:
                    continue

                try:
                    await self.handle_utterance(utterance)
                except Exception as e:
                    self.logger.error(f"❌ Error handling '{utterance.text}': {e}", exc_info=True)
                finally:
                    self.utterance_queue.task_done()
        finally:
            await self._shutdown()

    async def handle_utterance(self, utterance: RecognizedUtterance) -> Optional[Reply]:
        """
        Passa una frase al motore ed esegue la risposta.

        Se il motore risponde, l'assistente integrato viene interrotto e si
        attende abort_recovery_s prima di parlare: durante il riavvio il TTS
        del dispositivo non è disponibile.
        """
        self.logger.info(f"💬 User: {utterance.text}")
        reply = await self.engine.on_message(utterance)

        if reply is None:
            self.logger.debug("No reply, built-in assistant keeps the turn")
            return None
        if reply.handled:
            return reply

        if not await self.speaker.abort_xiaoai():
            self.logger.warning("⚠️ Could not abort built-in assistant")
        await asyncio.sleep(self.abort_recovery_s)

        if reply.url:
            ok = await self.speaker.play(url=reply.url)
        else:
            text = await self.engine.process_ai_response(reply.text or "")
            self.logger.info(f"🔊 Reply: {text}")
            ok = await self.speaker.play(text=text, blocking=True)

        if not ok:
            self.logger.warning("⚠️ Playback failed or outcome unknown")
        return reply

    async def _shutdown(self) -> None:
        """Procedura di shutdown pulita"""
        self.logger.info("🛑 Shutting down...")
        self.running = False

        try:
            await self.bridge.stop()
        except Exception as e:
            self.logger.error(f"Error stopping {self.bridge.name}: {e}")

        self.logger.info(f"📊 Ingestion stats: {self.ingestion.get_stats()}")
        self.logger.info("👋 Shutdown complete")
