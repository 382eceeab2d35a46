"""
Speaker Controller - Operazioni di alto livello sullo speaker

Compone le chiamate del BridgeClient (play, wake-up, microfono, boot)
scegliendo il dialetto tramite DeviceProbe e tiene lo stato di riproduzione.
"""

import logging
from typing import Optional

from . import commands
from .bridge_client import DEFAULT_TIMEOUT_MS, BridgeClient
from .device_probe import DeviceProbe
from .sanitizer import remove_thinking_tags
from .state import DeviceInfo, MicStatus, PlaybackStatus

logger = logging.getLogger(__name__)

# Dopo abort_xiaoai() l'assistente integrato impiega 1-2s a ripartire
ABORT_RECOVERY_S = 2.0

BLOCKING_MIN_TIMEOUT_S = 20
BLOCKING_SECONDS_PER_CHAR = 0.15


def compute_play_timeout(
    text: Optional[str] = None,
    url: Optional[str] = None,
    blocking: bool = False
) -> int:
    """
    Calcola il timeout (ms) di un comando play.

    - bloccante con testo: max(20s, 150ms per carattere)
    - bloccante con URL: 20s fissi
    - non bloccante: 10s fissi

    play() passa il testo già ripulito dai tag <think>: la durata stimata
    riguarda solo ciò che viene pronunciato, non la lunghezza grezza.
    """
    if not blocking:
        return DEFAULT_TIMEOUT_MS
    if text and not url:
        return round(max(BLOCKING_MIN_TIMEOUT_S, len(text) * BLOCKING_SECONDS_PER_CHAR) * 1000)
    return BLOCKING_MIN_TIMEOUT_S * 1000


class SpeakerController:
    """
    Controller di riproduzione dello speaker.

    Stato:
    - status: PlaybackStatus, iniziale IDLE

    Lo stato viene scritto SOLO da get_playing(sync=True) e dagli eventi
    del dispositivo (EventIngestion). set_playing() non lo aggiorna:
    un comando accettato non è ancora riflesso dal firmware.
    Nessun lock, vince l'ultima scrittura.
    """

    def __init__(
        self,
        client: BridgeClient,
        probe: Optional[DeviceProbe] = None,
        default_text: str = "你好"
    ):
        """
        Args:
            client: Client verso il bridge nativo
            probe: Probe del dialetto (default: probe senza cache)
            default_text: Testo pronunciato da play() senza testo né URL
        """
        self.client = client
        self.probe = probe or DeviceProbe(client)
        self.default_text = default_text
        self._status = PlaybackStatus.IDLE

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @status.setter
    def status(self, value: PlaybackStatus) -> None:
        if value != self._status:
            logger.debug(f"🎵 Playback status: {self._status.value} -> {value.value}")
        self._status = value

    # ===== RIPRODUZIONE =====

    async def get_playing(self, sync: bool = False) -> PlaybackStatus:
        """
        Ritorna lo stato di riproduzione.

        Args:
            sync: Se True rilegge lo stato dal dispositivo prima di rispondere
        """
        if sync:
            res = await self.client.run_shell(commands.PLAYBACK_STATUS)
            if res is not None:
                if commands.STATUS_CODE_PLAYING in res.stdout:
                    self.status = PlaybackStatus.PLAYING
                elif commands.STATUS_CODE_PAUSED in res.stdout:
                    self.status = PlaybackStatus.PAUSED
        return self.status

    async def set_playing(self, playing: bool = True) -> bool:
        """Play/pausa del player del dispositivo"""
        res = await self.client.run_shell(
            commands.PLAYBACK_PLAY if playing else commands.PLAYBACK_PAUSE
        )
        return res is not None and commands.has_success_code(res.stdout)

    async def play(
        self,
        text: Optional[str] = None,
        url: Optional[str] = None,
        blocking: bool = False
    ) -> bool:
        """
        Pronuncia un testo oppure riproduce un URL audio.

        Args:
            text: Testo da pronunciare (ripulito dai tag <think>)
            url: URL audio da riprodurre
            blocking: Se True attende la fine della riproduzione

        Returns:
            True solo se il dispositivo riporta successo

        Raises:
            ValueError: Se vengono passati sia text che url
        """
        if text and url:
            raise ValueError("play() accepts either text or url, not both")

        clean_text = remove_thinking_tags(text) if text else text
        if not url and not clean_text:
            clean_text = self.default_text

        timeout_ms = compute_play_timeout(clean_text, url, blocking)

        if await self.probe.is_new_generation_device():
            script = (
                commands.play_url_new(url) if url
                else commands.play_text_new(clean_text)
            )
            res = await self.client.run_shell(script, timeout_ms)
            return res is not None and res.exit_code == 0

        script = (
            commands.play_url_legacy(url) if url
            else commands.play_text_legacy(clean_text)
        )
        res = await self.client.run_shell(script, timeout_ms)
        return res is not None and commands.has_success_code(res.stdout)

    # ===== ASSISTENTE INTEGRATO =====

    async def wake_up(self, awake: bool = True, silent: bool = False) -> bool:
        """
        (Dis)attiva l'ascolto dell'assistente integrato.

        Args:
            awake: True per svegliarlo, False per annullare il risveglio
            silent: Risveglio senza segnale acustico
        """
        if awake:
            script = commands.WAKE_UP_SILENT if silent else commands.WAKE_UP
        else:
            script = commands.UNWAKE
        res = await self.client.run_shell(script)
        return res is not None and commands.has_success_code(res.stdout)

    async def ask_xiaoai(self, text: str, silent: bool = False) -> bool:
        """Passa un'istruzione testuale all'assistente integrato"""
        res = await self.client.run_shell(commands.ask_xiaoai(text, silent))
        return res is not None and commands.has_success_code(res.stdout)

    async def abort_xiaoai(self) -> bool:
        """
        Interrompe l'assistente integrato riavviandone il servizio.

        Post-condizione: per circa 1-2s il TTS del dispositivo non è
        utilizzabile. Chi vuole parlare subito dopo deve attendere almeno
        ABORT_RECOVERY_S prima di chiamare play().
        """
        res = await self.client.run_shell(commands.ABORT_XIAOAI)
        return res is not None and res.exit_code == 0

    # ===== SISTEMA =====

    async def get_boot(self) -> Optional[str]:
        res = await self.client.run_shell(commands.GET_BOOT)
        return res.stdout.strip() if res is not None else None

    async def set_boot(self, boot_part: str) -> bool:
        """
        Imposta la partizione di avvio e verifica rileggendola.

        Raises:
            ValueError: Se boot_part non è boot0/boot1
        """
        if boot_part not in commands.BOOT_PARTITIONS:
            raise ValueError(
                f"Invalid boot partition '{boot_part}'. "
                f"Available: {', '.join(commands.BOOT_PARTITIONS)}"
            )
        res = await self.client.run_shell(commands.set_boot(boot_part))
        return res is not None and boot_part in res.stdout

    async def get_device(self) -> DeviceInfo:
        res = await self.client.run_shell(commands.GET_DEVICE)
        info = res.stdout.split() if res is not None else []
        return DeviceInfo(
            model=info[0] if len(info) > 0 else "unknown",
            sn=info[1] if len(info) > 1 else "unknown",
        )

    async def get_mic(self) -> MicStatus:
        res = await self.client.run_shell(commands.GET_MIC)
        if res is not None and MicStatus.ON.value in res.stdout:
            return MicStatus.ON
        return MicStatus.OFF

    async def set_mic(self, on: bool = True) -> bool:
        res = await self.client.run_shell(commands.MIC_ON if on else commands.MIC_OFF)
        return res is not None and commands.has_success_code(res.stdout)
