"""
Mock Bridge - Bridge simulato per test e sviluppo senza dispositivo
"""

import asyncio
import json
import logging
from typing import Optional

from adapters.ports import BridgePort

logger = logging.getLogger(__name__)


class MockBridge(BridgePort):
    """
    Bridge simulato con risposte configurabili.

    Config:
    - responses: lista di {match, stdout, stderr, exit_code, delay_ms, raw}
      La prima voce il cui 'match' è contenuto nello script vince.
      'raw' sostituisce la risposta JSON (per simulare output malformati).
    - default: risposta usata se nessuna voce corrisponde
      (assente = il bridge non risponde, run_shell ritorna None)

    Ogni script ricevuto viene registrato in self.scripts, il relativo
    timeout in self.timeouts.
    """

    def __init__(self, name: str, config: dict):
        super().__init__(name, config)
        self.responses: list = list(config.get('responses') or [])
        self.default: Optional[dict] = config.get('default')
        self.scripts: list = []
        self.timeouts: list = []

    def add_response(self, match: str, stdout: str = "", stderr: str = "",
                     exit_code: int = 0, delay_ms: int = 0) -> None:
        """Aggiunge una risposta in testa (ha priorità sulle precedenti)"""
        self.responses.insert(0, {
            'match': match,
            'stdout': stdout,
            'stderr': stderr,
            'exit_code': exit_code,
            'delay_ms': delay_ms,
        })

    async def _start(self) -> None:
        logger.info(f"🧪 {self.name} running with {len(self.responses)} scripted responses")

    async def _stop(self) -> None:
        pass

    async def run_shell(self, script: str, timeout_ms: int) -> Optional[str]:
        self.scripts.append(script)
        self.timeouts.append(timeout_ms)

        response = next(
            (r for r in self.responses if r.get('match', '') in script),
            self.default
        )
        if response is None:
            return None

        delay_ms = response.get('delay_ms', 0)
        if delay_ms:
            await asyncio.sleep(delay_ms / 1000)

        if 'raw' in response:
            return response['raw']

        return json.dumps({
            'stdout': response.get('stdout', ''),
            'stderr': response.get('stderr', ''),
            'exit_code': response.get('exit_code', 0),
        }, ensure_ascii=False)

    # ===== SIMULAZIONE EVENTI =====

    def emit_playback(self, data: str) -> None:
        self.emit_event(json.dumps({'event': 'playing', 'data': data}))

    def emit_recognition(self, text: str, is_final: bool = True) -> None:
        line = {
            'header': {'namespace': 'SpeechRecognizer', 'name': 'RecognizeResult'},
            'payload': {'is_final': is_final, 'results': [{'text': text}]},
        }
        self.emit_event(json.dumps(
            {'event': 'instruction', 'data': {'NewLine': json.dumps(line, ensure_ascii=False)}},
            ensure_ascii=False
        ))

    def emit_keyword(self, keyword: str) -> None:
        self.emit_event(json.dumps({'event': 'kws', 'data': keyword}, ensure_ascii=False))
