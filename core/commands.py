"""
Shell command definitions per il firmware dello speaker.

I comandi sono stringhe opache eseguite dal bridge nativo sul dispositivo.
Il firmware non espone un protocollo formale: successo e stato vengono
dedotti cercando marker testuali nello stdout.
"""

import json
import re
import shlex
from typing import Any

# ===== MARKER DI OUTPUT =====
# "code": 0 (ubus con output indentato) oppure "code":0 (ubus -S compatto)
SUCCESS_CODE_PATTERN = re.compile(r'"code":\s?0(?!\d)')

# mphelper mute_stat: 1 = in riproduzione, 2 = in pausa
STATUS_CODE_PLAYING = "1"
STATUS_CODE_PAUSED = "2"

# Marker nel campo Hardware di /proc/cpuinfo dei modelli nuovi
NEW_GENERATION_MARKER = "amlogic"

BOOT_PARTITIONS = ("boot0", "boot1")

# ===== COMANDI =====
HARDWARE_PROBE = "cat /proc/cpuinfo | grep Hardware | awk '{print $3}'"

PLAYBACK_STATUS = "mphelper mute_stat"
PLAYBACK_PLAY = "mphelper play"
PLAYBACK_PAUSE = "mphelper pause"

WAKE_UP_SILENT = 'ubus call pnshelper event_notify \'{"src":1,"event":0}\''
WAKE_UP = 'ubus call pnshelper event_notify \'{"src":0,"event":0}\''
UNWAKE = (
    'ubus call pnshelper event_notify \'{"src":3, "event":7}\'\n'
    "sleep 0.1\n"
    'ubus call pnshelper event_notify \'{"src":3, "event":8}\''
)

ABORT_XIAOAI = "/etc/init.d/mico_aivs_lab restart >/dev/null 2>&1"

GET_BOOT = "echo $(fw_env -g boot_part)"
GET_DEVICE = "echo $(micocfg_model) $(micocfg_sn)"

GET_MIC = "[ ! -f /tmp/mipns/mute ] && echo on || echo off"
MIC_ON = 'ubus -t1 -S call pnshelper event_notify \'{"src":3, "event":7}\' 2>&1'
MIC_OFF = 'ubus -t1 -S call pnshelper event_notify \'{"src":3, "event":8}\' 2>&1'


def json_arg(payload: dict[str, Any]) -> str:
    """Serializza un payload JSON come singolo argomento shell"""
    return shlex.quote(json.dumps(payload, ensure_ascii=False, separators=(",", ":")))


def has_success_code(stdout: str) -> bool:
    return bool(SUCCESS_CODE_PATTERN.search(stdout))


# ----- Dialetto nuova generazione (pipe audio / script TTS locale) -----

def play_url_new(url: str) -> str:
    return f"curl {shlex.quote(url)} | aplay -Dhw:0,0 -f S16_LE -c 1 -r 24000 -"


def play_text_new(text: str) -> str:
    return f"/usr/sbin/tts_play.sh {shlex.quote(text)}"


# ----- Dialetto legacy (chiamate ubus con payload JSON) -----

def play_url_legacy(url: str) -> str:
    return f"ubus call mediaplayer player_play_url {json_arg({'url': url, 'type': 1})}"


def play_text_legacy(text: str) -> str:
    return f"ubus call mibrain text_to_speech {json_arg({'text': text, 'save': 0})}"


def ask_xiaoai(text: str, silent: bool = False) -> str:
    payload: dict[str, Any] = {"nlp": 1, "nlp_text": text}
    if not silent:
        payload = {"tts": 1, **payload}
    return f"ubus call mibrain ai_service {json_arg(payload)}"


def set_boot(boot_part: str) -> str:
    return f"fw_env -s boot_part {boot_part} >/dev/null 2>&1 && echo $(fw_env -g boot_part)"
