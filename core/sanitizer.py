"""
Text Sanitizer - Rimuove il markup di ragionamento (<think>) dal testo
prima che venga pronunciato o trattato come messaggio.
"""

import re
from typing import Optional

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"

_THINK_BLOCK = re.compile(r"<think>[\s\S]*?</think>")
_THINK_TAG = re.compile(r"</?think>")


def remove_thinking_tags(text: Optional[str]) -> Optional[str]:
    """
    Rimuove ogni blocco <think>...</think> (anche multi-linea) e ogni
    delimitatore rimasto spaiato.

    La pulizia viene ripetuta finché il testo non cambia più: togliere un
    tag può ricomporne un altro (es. "<th<think>ink>").

    Args:
        text: Testo da pulire, None e "" vengono restituiti invariati

    Returns:
        Testo senza delimitatori di ragionamento
    """
    if not text:
        return text

    while True:
        cleaned = _THINK_TAG.sub("", _THINK_BLOCK.sub("", text))
        if cleaned == text:
            return cleaned
        text = cleaned
