"""
Local Shell Bridge - Esegue i comandi con la shell locale
Utile quando il core gira direttamente sul dispositivo o in sviluppo.
Gli eventi del dispositivo vengono letti da una named pipe (JSON line-delimited).
"""

import asyncio
import logging
import os
import signal
import stat
import threading
from pathlib import Path
from typing import Optional

from adapters.ports import BridgePort
from core.state import CommandResult

logger = logging.getLogger(__name__)


class LocalShellBridge(BridgePort):
    """
    Bridge che esegue gli script con /bin/sh tramite asyncio.

    Config:
    - event_pipe: path opzionale della FIFO da cui leggere gli eventi
      (una riga JSON per evento, es. {"event": "playing", "data": "Playing"})
    - retry_delay_s: attesa prima di riaprire la pipe dopo un errore (default 1.0)

    Un comando oltre il timeout viene terminato (con i suoi figli) e risponde
    None, anche quando è il chiamante a smettere di attendere.
    """

    def __init__(self, name: str, config: dict):
        super().__init__(name, config)
        pipe_path = config.get('event_pipe')
        self.pipe_path: Optional[Path] = Path(pipe_path) if pipe_path else None
        self.retry_delay_s = float(config.get('retry_delay_s', 1.0))
        self._thread: Optional[threading.Thread] = None
        self._reading = False
        self._stopping = threading.Event()

    async def run_shell(self, script: str, timeout_ms: int) -> Optional[str]:
        # Sessione propria: il kill raggiunge anche i figli della shell
        proc = await asyncio.create_subprocess_shell(
            script,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            logger.warning(f"⏱️ Killing local command after {timeout_ms}ms")
            await self._kill(proc)
            return None
        except BaseException:
            # Cancellazione dal chiamante (es. timeout del BridgeClient)
            logger.warning("⏱️ Killing local command: caller stopped waiting")
            await self._kill(proc)
            raise

        return CommandResult(
            stdout=stdout.decode(errors='replace'),
            stderr=stderr.decode(errors='replace'),
            exit_code=proc.returncode,
        ).to_json()

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            try:
                os.killpg(proc.pid, signal.SIGKILL)
            except ProcessLookupError:
                logger.debug(f"Process group {proc.pid} already gone")
        await proc.wait()

    # ===== EVENT PIPE =====

    async def _start(self) -> None:
        if self.pipe_path is None:
            logger.info(f"{self.name}: no event pipe configured")
            return

        # Crea directory se non esiste
        self.pipe_path.parent.mkdir(parents=True, exist_ok=True)

        # Crea named pipe se non esiste
        if not self.pipe_path.exists():
            os.mkfifo(self.pipe_path)
            logger.info(f"Named pipe created: {self.pipe_path}")
        elif not stat.S_ISFIFO(os.stat(self.pipe_path).st_mode):
            raise RuntimeError(f"{self.pipe_path} exists but is not a named pipe")

        self._reading = True
        self._stopping.clear()
        self._thread = threading.Thread(
            target=self._read_loop,
            daemon=True,
            name=f"{self.name}_events"
        )
        self._thread.start()
        logger.info(f"📥 Reading device events from {self.pipe_path}")

    async def _stop(self) -> None:
        if self._thread is None:
            return
        self._reading = False
        self._stopping.set()

        # Sblocca la open/readline in attesa scrivendo una riga vuota
        try:
            fd = os.open(self.pipe_path, os.O_WRONLY | os.O_NONBLOCK)
            try:
                os.write(fd, b"\n")
            finally:
                os.close(fd)
        except OSError as e:
            logger.debug(f"Event pipe wake-up skipped: {e}")

        await asyncio.to_thread(self._thread.join, 3.0)
        if self._thread.is_alive():
            logger.warning(f"⚠️  {self.name} event thread did not terminate")
        self._thread = None

    def _read_loop(self) -> None:
        """Loop di lettura dalla pipe (thread dedicato)"""
        while self._reading:
            try:
                # Apri in read mode (blocca finché qualcuno scrive)
                with open(self.pipe_path, 'r') as pipe:
                    while self._reading:
                        line = pipe.readline()
                        if not line:  # EOF
                            break

                        line = line.strip()
                        if line:
                            self.emit_event(line)
            except Exception as e:
                if self._reading:
                    logger.error(f"❌ Error reading event pipe: {e}", exc_info=True)
                    # Attesa prima di riaprire, interrotta da _stop()
                    self._stopping.wait(self.retry_delay_s)
