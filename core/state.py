"""
Stato del dispositivo - Tipi dati condivisi tra client, speaker e ingestion
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PlaybackStatus(str, Enum):
    """Stato di riproduzione dello speaker"""
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"

    @classmethod
    def from_event_data(cls, data) -> "PlaybackStatus":
        """
        Mappa il valore di un evento 'playing' del firmware.
        Qualsiasi valore diverso da Playing/Paused significa idle.
        """
        if data == "Playing":
            return cls.PLAYING
        if data == "Paused":
            return cls.PAUSED
        return cls.IDLE


class DeviceDialect(str, Enum):
    """Set di comandi da usare in base alla generazione hardware"""
    LEGACY = "legacy"
    NEW_GENERATION = "new_generation"


class MicStatus(str, Enum):
    ON = "on"
    OFF = "off"


@dataclass(frozen=True)
class CommandResult:
    """
    Risultato di un comando shell eseguito sul dispositivo.
    Prodotto una sola volta per esecuzione, consumato dal chiamante.
    """
    stdout: str
    stderr: str
    exit_code: int

    @classmethod
    def from_json(cls, raw: str) -> Optional["CommandResult"]:
        """
        Decodifica la risposta JSON del bridge.

        Returns:
            CommandResult oppure None se la risposta non è strutturata
        """
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None

        if not isinstance(data, dict):
            return None

        exit_code = data.get("exit_code", -1)
        if isinstance(exit_code, bool):
            return None
        try:
            exit_code = int(exit_code)
        except (TypeError, ValueError):
            return None

        return cls(
            stdout=str(data.get("stdout") or ""),
            stderr=str(data.get("stderr") or ""),
            exit_code=exit_code,
        )

    def to_json(self) -> str:
        return json.dumps(
            {"stdout": self.stdout, "stderr": self.stderr, "exit_code": self.exit_code},
            ensure_ascii=False,
        )


@dataclass(frozen=True)
class DeviceInfo:
    """Modello e numero di serie, riletti dal dispositivo ad ogni richiesta"""
    model: str = "unknown"
    sn: str = "unknown"
