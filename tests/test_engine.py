"""
Tests per il motore conversazionale
"""

import pytest

from adapters.bridge import MockBridge
from core.bridge_client import BridgeClient
from core.engine import ConversationEngine, Reply, ScriptedEngine
from core.events import RecognizedUtterance
from core.speaker import SpeakerController


class TestScriptedEngine:
    """Test del motore a risposte fisse"""

    def make_engine(self):
        return ScriptedEngine("scripted", {
            'replies': {
                "测试播放文字": {'text': "你好，很高兴认识你！"},
                "测试播放音乐": {'url': "https://example.com/hello.wav"},
            }
        })

    @pytest.mark.asyncio
    async def test_text_reply(self):
        engine = self.make_engine()
        reply = await engine.on_message(RecognizedUtterance(text="测试播放文字"))
        assert reply == Reply(text="你好，很高兴认识你！")

    @pytest.mark.asyncio
    async def test_url_reply(self):
        engine = self.make_engine()
        reply = await engine.on_message(RecognizedUtterance(text=" 测试播放音乐 "))
        assert reply.url == "https://example.com/hello.wav"
        assert reply.text is None

    @pytest.mark.asyncio
    async def test_unknown_message_returns_none(self):
        """Nessuna regola: lascia rispondere l'assistente integrato"""
        engine = self.make_engine()
        assert await engine.on_message(RecognizedUtterance(text="altro")) is None

    def test_empty_config(self):
        assert ScriptedEngine("scripted", {}).replies == {}

    def test_reply_without_text_or_url_fails(self):
        with pytest.raises(ValueError, match="needs 'text' or 'url'"):
            ScriptedEngine("scripted", {'replies': {"ciao": {}}})

    @pytest.mark.asyncio
    async def test_process_ai_response_strips_thinking(self):
        engine = self.make_engine()
        assert await engine.process_ai_response("<think>hmm</think>Ecco") == "Ecco"
        assert await engine.process_ai_response("") == ""


class TestConversationEngine:
    """Test del contratto astratto"""

    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            ConversationEngine("base", {})


class TestScriptedSequences:
    """Test delle sequenze di passi eseguite dal motore"""

    STEPS = [
        {'abort': True},
        {'sleep': 0},
        {'text': "<think>x</think>你好，很高兴认识你！", 'blocking': True},
        {'url': "https://example.com/hello.wav"},
    ]

    def make_engine(self):
        bridge = MockBridge("mock", {'default': {'stdout': '{"code": 0}'}})
        bridge.add_response("/proc/cpuinfo", stdout="sun8iw15p1\n")
        bridge.add_response("mico_aivs_lab", exit_code=0)
        engine = ScriptedEngine("scripted", {'replies': {"测试其他能力": {'steps': self.STEPS}}})
        engine.attach_speaker(SpeakerController(BridgeClient(bridge)))
        return engine, bridge

    @pytest.mark.asyncio
    async def test_sequence_runs_in_order_and_is_handled(self):
        engine, bridge = self.make_engine()

        reply = await engine.on_message(RecognizedUtterance(text="测试其他能力"))

        assert reply == Reply(handled=True)
        actions = [s for s in bridge.scripts if "/proc/cpuinfo" not in s]
        assert "mico_aivs_lab" in actions[0]
        assert "text_to_speech" in actions[1]
        assert "think" not in actions[1]
        assert "player_play_url" in actions[2]
        assert len(actions) == 3

    @pytest.mark.asyncio
    async def test_blocking_flag_forwarded(self):
        engine, bridge = self.make_engine()

        await engine.on_message(RecognizedUtterance(text="测试其他能力"))

        tts_index = next(i for i, s in enumerate(bridge.scripts) if "text_to_speech" in s)
        url_index = next(i for i, s in enumerate(bridge.scripts) if "player_play_url" in s)
        assert bridge.timeouts[tts_index] == 20000
        assert bridge.timeouts[url_index] == 10000

    @pytest.mark.asyncio
    async def test_sequence_without_speaker_fails(self):
        engine = ScriptedEngine("scripted", {'replies': {"go": {'steps': [{'abort': True}]}}})

        with pytest.raises(RuntimeError, match="no speaker attached"):
            await engine.on_message(RecognizedUtterance(text="go"))

    @pytest.mark.parametrize("steps", [
        [],
        "abort",
        [{'abort': True, 'sleep': 1}],
        [{'volume': 10}],
    ])
    def test_invalid_steps_rejected(self, steps):
        with pytest.raises(ValueError):
            ScriptedEngine("scripted", {'replies': {"go": {'steps': steps}}})
