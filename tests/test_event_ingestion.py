"""
Tests per EventIngestion
"""

import json
import logging

from adapters.bridge import MockBridge
from core.bridge_client import BridgeClient
from core.event_ingestion import EventIngestion
from core.speaker import SpeakerController
from core.state import PlaybackStatus


def recognition_event(text, is_final=True):
    line = {
        'header': {'namespace': 'SpeechRecognizer', 'name': 'RecognizeResult'},
        'payload': {'is_final': is_final, 'results': [{'text': text}]},
    }
    return json.dumps({
        'event': 'instruction',
        'data': {'NewLine': json.dumps(line, ensure_ascii=False)}
    }, ensure_ascii=False)


def make_ingestion(keyword_handler=None, message_handler=None):
    speaker = SpeakerController(BridgeClient(MockBridge("mock", {})))
    received = []
    ingestion = EventIngestion(
        speaker,
        message_handler or received.append,
        keyword_handler
    )
    return ingestion, speaker, received


class TestPlaybackEvents:
    """Eventi 'playing'"""

    def test_updates_speaker_status(self):
        ingestion, speaker, _ = make_ingestion()

        ingestion.on_event('{"event": "playing", "data": "Playing"}')
        assert speaker.status == PlaybackStatus.PLAYING

        ingestion.on_event('{"event": "playing", "data": "Paused"}')
        assert speaker.status == PlaybackStatus.PAUSED

        ingestion.on_event('{"event": "playing", "data": "Idle"}')
        assert speaker.status == PlaybackStatus.IDLE

        assert ingestion.get_stats()['playback'] == 3


class TestInstructionEvents:
    """Eventi 'instruction'"""

    def test_final_recognition_forwarded(self):
        ingestion, _, received = make_ingestion()

        ingestion.on_event(recognition_event("今天天气怎么样"))

        assert len(received) == 1
        assert received[0].text == "今天天气怎么样"
        assert received[0].sender == "user"
        assert ingestion.get_stats()['utterances'] == 1

    def test_partial_recognition_not_forwarded(self):
        ingestion, _, received = make_ingestion()

        ingestion.on_event(recognition_event("今天", is_final=False))

        assert received == []
        assert ingestion.get_stats()['ignored'] == 1

    def test_failing_handler_does_not_propagate(self, caplog):
        """Un handler che solleva viene loggato, il dispatch continua"""
        def broken(_utterance):
            raise RuntimeError("boom")

        ingestion, _, _ = make_ingestion(message_handler=broken)

        with caplog.at_level(logging.ERROR):
            ingestion.on_event(recognition_event("ciao"))

        assert "Event handler failed" in caplog.text
        assert ingestion.get_stats()['utterances'] == 1


class TestOtherEvents:
    """Keyword, audio e eventi ignorati"""

    def test_keyword_observer(self):
        keywords = []
        ingestion, _, received = make_ingestion(keyword_handler=keywords.append)

        ingestion.on_event('{"event": "kws", "data": "小爱同学"}')

        assert keywords == ["小爱同学"]
        assert received == []
        assert ingestion.get_stats()['keywords'] == 1

    def test_keyword_without_observer(self):
        ingestion, _, received = make_ingestion()

        ingestion.on_event('{"event": "kws", "data": "小爱同学"}')

        assert received == []
        assert ingestion.get_stats()['keywords'] == 1

    def test_audio_frames_counted(self):
        ingestion, speaker, received = make_ingestion()

        ingestion.on_input_data(b"\x00" * 320)
        ingestion.on_input_data(b"\x00" * 320)

        assert ingestion.get_stats()['audio_frames'] == 2
        assert received == []
        assert speaker.status == PlaybackStatus.IDLE

    def test_malformed_and_unknown_ignored(self):
        ingestion, speaker, received = make_ingestion()

        ingestion.on_event("{broken")
        ingestion.on_event('{"event": "reboot", "data": null}')

        assert ingestion.get_stats()['ignored'] == 2
        assert received == []
        assert speaker.status == PlaybackStatus.IDLE

    def test_clear_stats(self):
        ingestion, _, _ = make_ingestion()
        ingestion.on_event("{broken")

        ingestion.clear_stats()

        assert all(v == 0 for v in ingestion.get_stats().values())
