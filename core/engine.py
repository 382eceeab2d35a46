"""
Conversation Engine - Confine verso il motore conversazionale

Il motore decide COSA dire; qui è definito solo il contratto usato
dall'orchestratore. La costruzione dei prompt e l'invocazione del
modello restano fuori da questo progetto.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .events import RecognizedUtterance
from .sanitizer import remove_thinking_tags

if TYPE_CHECKING:
    from .speaker import SpeakerController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reply:
    """
    Risposta del motore a una frase dell'utente.

    - text: testo da pronunciare
    - url: audio da riprodurre
    - handled: il motore ha già agito da solo, nessuna riproduzione
    """
    text: Optional[str] = None
    url: Optional[str] = None
    handled: bool = False


class ConversationEngine(ABC):
    """Motore conversazionale collegato allo speaker"""

    def __init__(self, name: str, config: dict):
        self.name = name
        self.config = config
        self.speaker: Optional["SpeakerController"] = None
        logger.info(f"🧠 {self.__class__.__name__} '{name}' initialized")

    @abstractmethod
    async def on_message(self, message: RecognizedUtterance) -> Optional[Reply]:
        """
        Gestisce un nuovo turno dell'utente.

        Returns:
            Reply da eseguire, oppure None per lasciar rispondere
            l'assistente integrato del dispositivo
        """

    async def process_ai_response(self, response: str) -> str:
        """
        Post-processing del testo in uscita prima che venga pronunciato.
        Le sottoclassi possono sovrascriverlo; di default rimuove i tag <think>.
        """
        return remove_thinking_tags(response) or ""

    def attach_speaker(self, speaker: "SpeakerController") -> None:
        """Collega lo speaker, per i motori che agiscono da soli (Reply.handled)"""
        self.speaker = speaker


class ScriptedEngine(ConversationEngine):
    """
    Motore a risposte fisse, configurato da YAML.

    Ogni regola è una risposta semplice ({text} oppure {url}) che
    l'orchestratore pronuncia dopo aver interrotto l'assistente integrato,
    oppure una sequenza di passi ({steps}) eseguita dal motore stesso
    sullo speaker, al termine della quale il turno risulta già gestito.

    Passi ammessi (una chiave per passo):
    - abort: true          interrompe l'assistente integrato
    - sleep: <secondi>     attesa (es. dopo abort)
    - text: <testo>        pronuncia un testo (blocking opzionale)
    - url: <url>           riproduce un audio (blocking opzionale)

    Esempio config:
        replies:
          "测试播放文字": {text: "你好，很高兴认识你！"}
          "测试播放音乐": {url: "https://example.com/prompt.wav"}
          "测试其他能力":
            steps:
              - abort: true
              - sleep: 2
              - {text: "你好，很高兴认识你！", blocking: true}
              - url: "https://example.com/prompt.wav"
    """

    STEP_KINDS = ('abort', 'sleep', 'text', 'url')

    def __init__(self, name: str, config: dict):
        super().__init__(name, config)
        self.replies: dict[str, Reply] = {}
        self.sequences: dict[str, list] = {}

        for trigger, reply_cfg in (config.get('replies') or {}).items():
            trigger = str(trigger)
            if isinstance(reply_cfg, dict) and 'steps' in reply_cfg:
                self.sequences[trigger] = self._validate_steps(trigger, reply_cfg['steps'])
                continue
            if not isinstance(reply_cfg, dict) or not (reply_cfg.get('text') or reply_cfg.get('url')):
                raise ValueError(f"Reply for '{trigger}' needs 'text' or 'url'")
            self.replies[trigger] = Reply(
                text=reply_cfg.get('text'),
                url=reply_cfg.get('url'),
            )

        logger.info(f"  Scripted replies: {len(self.replies)}, sequences: {len(self.sequences)}")

    @classmethod
    def _validate_steps(cls, trigger: str, steps) -> list:
        if not isinstance(steps, list) or not steps:
            raise ValueError(f"Steps for '{trigger}' must be a non-empty list")
        for step in steps:
            kinds = [k for k in cls.STEP_KINDS if isinstance(step, dict) and k in step]
            if len(kinds) != 1:
                raise ValueError(
                    f"Invalid step for '{trigger}': {step}. "
                    f"Each step needs exactly one of: {', '.join(cls.STEP_KINDS)}"
                )
        return steps

    async def on_message(self, message: RecognizedUtterance) -> Optional[Reply]:
        trigger = message.text.strip()

        steps = self.sequences.get(trigger)
        if steps is not None:
            await self._run_steps(steps)
            return Reply(handled=True)

        reply = self.replies.get(trigger)
        if reply is None:
            logger.debug(f"No scripted reply for: {message.text}")
        return reply

    async def _run_steps(self, steps: list) -> None:
        """
        Esegue una sequenza sullo speaker, in ordine.

        Raises:
            RuntimeError: Se nessuno speaker è collegato al motore
        """
        if self.speaker is None:
            raise RuntimeError(f"{self.name}: no speaker attached, cannot run scripted steps")

        for step in steps:
            if 'abort' in step:
                ok = await self.speaker.abort_xiaoai() if step['abort'] else True
            elif 'sleep' in step:
                await asyncio.sleep(float(step['sleep']))
                ok = True
            elif 'text' in step:
                text = await self.process_ai_response(step['text'])
                ok = await self.speaker.play(text=text, blocking=bool(step.get('blocking', False)))
            else:
                ok = await self.speaker.play(url=step['url'], blocking=bool(step.get('blocking', False)))

            if not ok:
                logger.warning(f"⚠️ Scripted step failed or outcome unknown: {step}")


__all__ = ['ConversationEngine', 'ScriptedEngine', 'Reply']
