"""
Native Bridge Adapter - Estensione compilata del server open-xiaoai
"""

import asyncio
import importlib
import inspect
import logging
from typing import Optional

from adapters.ports import BridgePort

logger = logging.getLogger(__name__)


class NativeModuleBridge(BridgePort):
    """
    Bridge verso il server nativo compilato come modulo di estensione Python.

    API attesa dal modulo:
    - register_fn(name, fn): registra "on_event" e "on_input_data"
    - start_server(): avvia il server; se è una coroutine gira in un task
    - run_shell(script, timeout_ms): coroutine, ritorna JSON o None

    Il modulo viene importato all'avvio. Fail-fast se non è installato.
    """

    def __init__(self, name: str, config: dict):
        super().__init__(name, config)
        self.module_name = config.get('module', 'open_xiaoai_server')
        self._module = None
        self._server_task: Optional[asyncio.Future] = None

    def _load_module(self):
        if self._module is None:
            try:
                self._module = importlib.import_module(self.module_name)
            except ImportError as e:
                raise RuntimeError(
                    f"Native bridge module '{self.module_name}' not available. "
                    f"Build and install it before starting {self.name}"
                ) from e
            logger.info(f"✅ Native bridge module loaded: {self.module_name}")
        return self._module

    async def _start(self) -> None:
        module = self._load_module()

        if self.callbacks is None:
            logger.warning(f"⚠️ {self.name} started without callbacks, device events will be lost")
        else:
            module.register_fn("on_event", self.emit_event)
            module.register_fn("on_input_data", self.emit_input_data)

        result = module.start_server()
        if inspect.isawaitable(result):
            # Il server nativo resta in esecuzione per tutta la vita del processo
            self._server_task = asyncio.ensure_future(result)
            self._server_task.add_done_callback(self._on_server_exit)
        logger.info("✅ Native bridge server started")

    def _on_server_exit(self, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"❌ Native bridge server crashed: {error}")
        elif self.running:
            logger.warning("⚠️ Native bridge server exited")

    async def _stop(self) -> None:
        if self._server_task is not None and not self._server_task.done():
            self._server_task.cancel()
            try:
                await self._server_task
            except asyncio.CancelledError:
                pass
        self._server_task = None

    async def run_shell(self, script: str, timeout_ms: int) -> Optional[str]:
        module = self._load_module()
        return await module.run_shell(script, timeout_ms)
