from __future__ import annotations

"""
Port Interfaces - Contratti tra il core e il bridge nativo
Implementazione del Port Pattern per l'architettura esagonale.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class BridgeCallbacks(ABC):
    """
    Interfaccia fissa delle callback registrate presso il bridge.

    Le callback vengono invocate fuori banda rispetto ai comandi in corso
    e non devono bloccare il dispatch del bridge.
    """

    @abstractmethod
    def on_event(self, event_json: str) -> None:
        """Evento del dispositivo, envelope JSON {"event": ..., "data": ...}"""

    @abstractmethod
    def on_input_data(self, data: bytes) -> None:
        """Frame audio grezzo dal microfono del dispositivo"""


class BridgePort(ABC):
    """
    Classe base per gli adapter del bridge nativo.

    Fornisce:
    - Gestione stato (name, config, running)
    - Registrazione unica delle callback, PRIMA di start()
    - Marshalling delle callback sul loop asyncio del core
    """

    def __init__(self, name: str, config: dict):
        """
        Args:
            name: Nome identificativo dell'adapter
            config: Configurazione specifica dell'adapter
        """
        self.name = name
        self.config = config
        self.running = False
        self.callbacks: Optional[BridgeCallbacks] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        logger.info(f"🔌 {self.__class__.__name__} '{name}' initialized")

    def register_callbacks(self, callbacks: BridgeCallbacks) -> None:
        """
        Registra l'handler degli eventi. Ammessa una sola volta per processo.

        Raises:
            RuntimeError: Se le callback sono già registrate o il bridge è avviato
        """
        if self.callbacks is not None:
            raise RuntimeError(f"Callbacks already registered on {self.name}")
        if self.running:
            raise RuntimeError(f"Cannot register callbacks: {self.name} already started")
        self.callbacks = callbacks
        logger.info(f"📍 Callbacks registered on {self.name}: {callbacks.__class__.__name__}")

    def is_running(self) -> bool:
        """Controlla se il bridge è attivo"""
        return self.running

    async def start(self) -> None:
        """Avvia il bridge (una volta per processo)"""
        self._loop = asyncio.get_running_loop()
        await self._start()
        self.running = True
        logger.info(f"▶️  {self.name} started")

    async def stop(self) -> None:
        """Ferma il bridge in modo pulito"""
        if not self.running:
            return
        self.running = False
        await self._stop()
        logger.info(f"⏹️  {self.name} stopped")

    @abstractmethod
    async def _start(self) -> None:
        pass

    @abstractmethod
    async def _stop(self) -> None:
        pass

    @abstractmethod
    async def run_shell(self, script: str, timeout_ms: int) -> Optional[str]:
        """
        Esegue uno script shell sul dispositivo.

        Returns:
            JSON {"stdout", "stderr", "exit_code"} oppure None
        """

    # ===== DISPATCH DELLE CALLBACK =====

    def emit_event(self, event_json: str) -> None:
        if self.callbacks is not None:
            self._dispatch(self.callbacks.on_event, event_json)

    def emit_input_data(self, data: bytes) -> None:
        if self.callbacks is not None:
            self._dispatch(self.callbacks.on_input_data, data)

    def _dispatch(self, callback: Callable[[Any], None], payload: Any) -> None:
        """Invoca la callback sul thread del loop, anche se chiamata da altri thread"""
        loop = self._loop
        if loop is None or self._on_loop_thread(loop):
            callback(payload)
            return
        if loop.is_closed():
            logger.warning(f"⚠️ Dropping callback on {self.name}: event loop closed")
            return
        loop.call_soon_threadsafe(callback, payload)

    @staticmethod
    def _on_loop_thread(loop: asyncio.AbstractEventLoop) -> bool:
        try:
            return asyncio.get_running_loop() is loop
        except RuntimeError:
            return False
