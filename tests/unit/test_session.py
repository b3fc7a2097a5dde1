"""Unit tests for SpeechToTextSession."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest

from streamscribe.errors import (
    ConstructionError,
    DecodeError,
    ReconciliationError,
    ServiceError,
    TransportError,
)
from streamscribe.models.session import SessionState
from streamscribe.transcription.reconciler import GapPolicy
from streamscribe.transcription.session import SpeechToTextSession
from streamscribe.transcription.settings import AudioContentType, RecognitionSettings


@pytest.fixture
def on_result():
    return MagicMock()


@pytest.fixture
def on_failure():
    return MagicMock()


@pytest.fixture
def session(fake_transport, on_result, on_failure):
    return SpeechToTextSession(
        RecognitionSettings(service_url="ws://localhost:9000/v1/recognize"),
        on_result=on_result,
        on_failure=on_failure,
        transport=fake_transport,
    )


def texts(transcript):
    return [unit.text for unit in transcript]


@pytest.mark.unit
class TestSessionConstruction:

    @pytest.mark.parametrize("url", [
        "http://localhost:9000/v1/recognize",
        "ws://",
        "not a url",
        "",
    ])
    def test_unresolvable_destination_fails(self, url, on_result):
        with pytest.raises(ConstructionError):
            SpeechToTextSession(RecognitionSettings(service_url=url), on_result=on_result)

    def test_attaches_itself_to_transport(self, session, fake_transport):
        assert fake_transport.listener is session
        assert session.state is SessionState.CONNECTING
        assert session.transcript == ()

    def test_default_transport_uses_resolved_url(self, on_result):
        settings = RecognitionSettings(service_url="wss://example.com/v1/recognize",
                                       model="en-US_NarrowbandModel", auth_token="secret")

        session = SpeechToTextSession(settings, on_result=on_result)

        assert str(session.transport.url) == "wss://example.com/v1/recognize?model=en-US_NarrowbandModel"
        assert session.transport.headers == {"X-Watson-Authorization-Token": "secret"}


@pytest.mark.unit
class TestSessionDispatch:

    def test_results_notify_full_transcript(self, session, on_result, result_frame):
        session.on_text_frame(result_frame(0, "hi"))
        session.on_text_frame(result_frame(0, "hi there"))
        session.on_text_frame(result_frame(1, "world"))

        assert on_result.call_count == 3
        snapshots = [c.args[0] for c in on_result.call_args_list]
        assert texts(snapshots[0]) == ["hi"]
        assert texts(snapshots[1]) == ["hi there"]
        assert texts(snapshots[2]) == ["hi there", "world"]
        assert session.state is SessionState.PROCESSING

    def test_decode_failure_reported_once(self, session, on_result, on_failure, result_frame):
        session.on_text_frame(result_frame(0, "hi"))
        on_result.reset_mock()

        session.on_text_frame("{this is not json")

        on_failure.assert_called_once()
        assert isinstance(on_failure.call_args.args[0], DecodeError)
        on_result.assert_not_called()
        assert texts(session.transcript) == ["hi"]

    def test_service_error_reported_with_description(self, session, on_result, on_failure, result_frame):
        session.on_text_frame(result_frame(0, "hi"))

        session.on_text_frame(json.dumps({"error": "Session timed out."}))

        error = on_failure.call_args.args[0]
        assert isinstance(error, ServiceError)
        assert error.description == "Session timed out."
        assert error.domain == "service"
        assert texts(session.transcript) == ["hi"]

    def test_state_update_is_not_a_result(self, fake_transport, on_result):
        on_state = MagicMock()
        session = SpeechToTextSession(RecognitionSettings(service_url="ws://localhost/"),
                                      on_result=on_result, on_state=on_state,
                                      transport=fake_transport)

        session.on_text_frame('{"state": "listening"}')

        assert session.state is SessionState.LISTENING
        on_state.assert_called_once_with(SessionState.LISTENING)
        on_result.assert_not_called()

    def test_unmodelled_state_logged_not_reported(self, fake_transport, on_result, on_failure):
        on_state = MagicMock()
        session = SpeechToTextSession(RecognitionSettings(service_url="ws://localhost/"),
                                      on_result=on_result, on_failure=on_failure,
                                      on_state=on_state, transport=fake_transport)
        session.on_text_frame('{"state": "listening"}')

        session.on_text_frame('{"state": "idle"}')

        on_failure.assert_not_called()
        on_state.assert_called_once_with(SessionState.LISTENING)
        assert session.state is SessionState.LISTENING

    def test_binary_frame_ignored(self, session, on_result, on_failure):
        session.on_binary_frame(b"\x00\x01")

        on_result.assert_not_called()
        on_failure.assert_not_called()

    def test_socket_error_wrapped_as_transport_error(self, session, on_failure, result_frame):
        session.on_text_frame(result_frame(0, "kept"))

        session.on_error(ConnectionResetError("reset by peer"))

        error = on_failure.call_args.args[0]
        assert isinstance(error, TransportError)
        assert "reset by peer" in error.description
        assert isinstance(error.cause, ConnectionResetError)
        assert session.state is SessionState.ERRORED
        assert texts(session.transcript) == ["kept"]

    def test_abnormal_close_reported(self, session, on_failure):
        session.on_close(ConnectionError("closed with code 1011"))

        assert isinstance(on_failure.call_args.args[0], TransportError)

    def test_clean_close_not_reported(self, session, on_failure):
        session.on_close(None)

        on_failure.assert_not_called()
        assert session.state is SessionState.CLOSED

    def test_rejected_gap_reported(self, fake_transport, on_result, on_failure, result_frame):
        session = SpeechToTextSession(RecognitionSettings(service_url="ws://localhost/"),
                                      on_result=on_result, on_failure=on_failure,
                                      transport=fake_transport, gap_policy=GapPolicy.REJECT)

        session.on_text_frame(result_frame(3, "too far"))

        assert isinstance(on_failure.call_args.args[0], ReconciliationError)
        on_result.assert_not_called()
        assert session.transcript == ()

    def test_callback_errors_do_not_break_dispatch(self, fake_transport, result_frame):
        def broken(_):
            raise RuntimeError("consumer bug")

        session = SpeechToTextSession(RecognitionSettings(service_url="ws://localhost/"),
                                      on_result=broken, on_failure=broken,
                                      transport=fake_transport)

        session.on_text_frame(result_frame(0, "a"))
        session.on_text_frame("garbage")
        session.on_text_frame(result_frame(1, "b"))

        assert texts(session.transcript) == ["a", "b"]

    def test_failure_without_callback(self, fake_transport, on_result):
        session = SpeechToTextSession(RecognitionSettings(service_url="ws://localhost/"),
                                      on_result=on_result, transport=fake_transport)

        session.on_text_frame("garbage")

        on_result.assert_not_called()


@pytest.mark.unit
class TestSessionOutbound:

    def test_send_audio_forwards_bytes(self, session, fake_transport):
        session.send_audio(bytearray(b"\x01\x02"))

        assert fake_transport.sent == [b"\x01\x02"]

    def test_send_text_and_ping(self, session, fake_transport):
        session.send_text('{"action": "no-op"}')
        session.send_ping(b"ping")

        assert fake_transport.sent == ['{"action": "no-op"}']
        assert fake_transport.pings == [b"ping"]

    def test_start_and_stop_commands(self, fake_transport, on_result):
        settings = RecognitionSettings(service_url="ws://localhost/",
                                       content_type=AudioContentType.OGG_OPUS,
                                       word_confidence=True)
        session = SpeechToTextSession(settings, on_result=on_result, transport=fake_transport)

        session.start_recognition()
        session.stop_recognition()

        start, stop = [json.loads(frame) for frame in fake_transport.sent]
        assert start["action"] == "start"
        assert start["content-type"] == "audio/ogg;codecs=opus"
        assert start["word_confidence"] is True
        assert stop == {"action": "stop"}

    def test_connect_and_close(self, session, fake_transport, result_frame):
        assert asyncio.run(session.connect())
        session.on_text_frame(result_frame(0, "final words", final=True))

        asyncio.run(session.close(timeout=2.0))

        assert fake_transport.close_calls == [2.0]
        assert session.state is SessionState.CLOSED
        assert texts(session.transcript) == ["final words"]

    def test_connect_failure_reported(self, session, fake_transport, on_failure):
        fake_transport.connect_ok = False

        assert not asyncio.run(session.connect())

        assert isinstance(on_failure.call_args.args[0], TransportError)
        assert session.state is SessionState.ERRORED
