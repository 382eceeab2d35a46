"""
Tests per il DeviceProbe
"""

import pytest

from adapters.bridge import MockBridge
from core import commands
from core.bridge_client import BridgeClient
from core.device_probe import DeviceProbe
from core.state import DeviceDialect


def make_probe(stdout=None, cache=False):
    bridge = MockBridge("mock", {})
    if stdout is not None:
        bridge.add_response("/proc/cpuinfo", stdout=stdout)
    return DeviceProbe(BridgeClient(bridge), cache=cache), bridge


class TestDeviceProbe:
    """Test classificazione del dialetto"""

    @pytest.mark.asyncio
    async def test_amlogic_is_new_generation(self):
        probe, bridge = make_probe("Amlogic\n")

        assert await probe.is_new_generation_device() is True
        assert bridge.scripts == [commands.HARDWARE_PROBE]

    @pytest.mark.asyncio
    async def test_other_hardware_is_legacy(self):
        probe, _ = make_probe("sun8iw15p1\n")

        assert await probe.is_new_generation_device() is False
        assert await probe.dialect() == DeviceDialect.LEGACY

    @pytest.mark.asyncio
    async def test_probe_failure_falls_back_to_legacy(self):
        """Probe fallito: dialetto legacy, nessuna eccezione"""
        probe, _ = make_probe(None)

        assert await probe.is_new_generation_device() is False

    @pytest.mark.asyncio
    async def test_not_cached_by_default(self):
        probe, bridge = make_probe("amlogic")

        await probe.dialect()
        await probe.dialect()

        assert len(bridge.scripts) == 2

    @pytest.mark.asyncio
    async def test_cache_keeps_first_result(self):
        probe, bridge = make_probe("amlogic", cache=True)

        assert await probe.dialect() == DeviceDialect.NEW_GENERATION
        assert await probe.dialect() == DeviceDialect.NEW_GENERATION

        assert len(bridge.scripts) == 1

    @pytest.mark.asyncio
    async def test_failed_probe_is_not_cached(self):
        probe, bridge = make_probe(None, cache=True)

        assert await probe.dialect() == DeviceDialect.LEGACY
        bridge.add_response("/proc/cpuinfo", stdout="amlogic")
        assert await probe.dialect() == DeviceDialect.NEW_GENERATION
