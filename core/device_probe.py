"""
Device Capability Probe - Sceglie il dialetto di comandi in base all'hardware
"""

import logging
from typing import Optional

from . import commands
from .bridge_client import BridgeClient
from .state import DeviceDialect

logger = logging.getLogger(__name__)


class DeviceProbe:
    """
    Legge il campo Hardware di /proc/cpuinfo e classifica il dispositivo.

    Di default il risultato viene ricalcolato ad ogni chiamata.
    Con cache=True viene memorizzato per tutta la vita del processo
    (l'hardware non cambia a runtime); un probe fallito non viene mai
    memorizzato.
    """

    def __init__(self, client: BridgeClient, cache: bool = False):
        self.client = client
        self.cache = cache
        self._cached: Optional[DeviceDialect] = None

    async def dialect(self) -> DeviceDialect:
        if self._cached is not None:
            return self._cached

        res = await self.client.run_shell(commands.HARDWARE_PROBE)
        if res is None:
            # Probe fallito: si ripiega sul set di comandi più conservativo
            logger.warning("⚠️ Hardware probe failed, using legacy dialect")
            return DeviceDialect.LEGACY

        if commands.NEW_GENERATION_MARKER in res.stdout.lower():
            dialect = DeviceDialect.NEW_GENERATION
        else:
            dialect = DeviceDialect.LEGACY

        if self.cache:
            self._cached = dialect
            logger.info(f"🔎 Device dialect cached: {dialect.value}")
        return dialect

    async def is_new_generation_device(self) -> bool:
        return await self.dialect() == DeviceDialect.NEW_GENERATION
