"""
Bridge Client - Esegue comandi shell sul dispositivo tramite il bridge nativo
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, TYPE_CHECKING

from .state import CommandResult

if TYPE_CHECKING:
    from adapters.ports import BridgePort

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10 * 1000


class BridgeClient:
    """
    Client sottile verso il bridge nativo.

    Ogni fallimento (timeout, errore di trasporto, risposta non JSON)
    diventa un risultato assente: il chiamante fa solo un controllo
    Optional e tratta None come "esito sconosciuto".
    """

    def __init__(self, bridge: BridgePort):
        """
        Args:
            bridge: Port del bridge nativo su cui inoltrare i comandi
        """
        self.bridge = bridge

    async def run_shell(
        self,
        script: str,
        timeout_ms: int = DEFAULT_TIMEOUT_MS
    ) -> Optional[CommandResult]:
        """
        Esegue uno script shell sul dispositivo.

        Il wait_for qui è il limite che fa fede: scatta anche se il bridge
        applica già un proprio timeout, e cancella la chiamata del bridge
        (LocalShellBridge termina il processo quando viene cancellato).
        Sul bridge nativo il timeout abbandona solo l'attesa: il comando
        remoto potrebbe continuare e il suo effetto resta sconosciuto.

        Args:
            script: Comando shell opaco (può contenere payload JSON quotati)
            timeout_ms: Tempo massimo di attesa in millisecondi

        Returns:
            CommandResult oppure None se l'esito non è noto
        """
        try:
            raw = await asyncio.wait_for(
                self.bridge.run_shell(script, timeout_ms),
                timeout=timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            logger.warning(f"⏱️ Command timed out after {timeout_ms}ms: {script[:60]}")
            return None
        except Exception as e:
            logger.warning(f"⚠️ Bridge failure on '{script[:60]}': {e}")
            return None

        if not raw:
            logger.warning(f"⚠️ Empty bridge response for: {script[:60]}")
            return None

        result = CommandResult.from_json(raw)
        if result is None:
            logger.warning(f"⚠️ Malformed bridge response: {str(raw)[:80]}")
            return None

        logger.debug(f"$ {script[:60]} -> exit={result.exit_code}")
        return result
