"""
Tests for yaytravel/client/voice_agent.py
"""

import base64
import json
import queue
import struct
import threading

import pytest

from yaytravel.client.voice_agent import (
    LISTENING_TRANSCRIPT,
    SPEAKING_TRANSCRIPT,
    VoiceAgentSession,
    convert_float32_to_int16,
    parse_agent_message,
)


class FakeConnection:
    """Stands in for a websockets sync ClientConnection."""

    def __init__(self):
        self.sent = []
        self.closed = False
        self._incoming = queue.Queue()

    def push(self, event):
        self._incoming.put(json.dumps(event))

    def send(self, data):
        self.sent.append(json.loads(data))

    def close(self):
        self.closed = True
        self._incoming.put(None)

    def __iter__(self):
        while True:
            item = self._incoming.get()
            if item is None:
                return
            yield item


@pytest.fixture
def conn():
    return FakeConnection()


@pytest.fixture
def connect(conn):
    calls = []

    def _connect(url, additional_headers=None):
        calls.append((url, additional_headers))
        return conn

    _connect.calls = calls
    return _connect


@pytest.fixture
def session(connect):
    s = VoiceAgentSession(agent_id="agent-123", api_key="xi-key", url="wss://voice/convai", connect=connect)
    yield s
    s.end_session()


class TestAudio:
    def test_scaling_and_clamping(self):
        data = convert_float32_to_int16([0.0, 1.0, -1.0, 0.5, 2.0, -2.0])
        assert struct.unpack("<6h", data) == (0, 32767, -32767, 16383, 32767, -32768)

    def test_empty(self):
        assert convert_float32_to_int16([]) == b""


class TestParseAgentMessage:
    def test_plain_message_from_user(self):
        msg = parse_agent_message({"message": "Book me a hotel", "source": "user"})
        assert msg["role"] == "user"
        assert msg["content"] == "Book me a hotel"
        assert msg["id"]

    def test_plain_message_defaults_to_assistant(self):
        assert parse_agent_message({"message": "Sure!", "source": "ai"})["role"] == "assistant"

    def test_agent_response_event(self):
        msg = parse_agent_message({
            "type": "agent_response",
            "agent_response_event": {"agent_response": "Where to?"},
        })
        assert msg["role"] == "assistant"
        assert msg["content"] == "Where to?"

    def test_user_transcription_overrides(self):
        msg = parse_agent_message({
            "message": "ignored",
            "source": "ai",
            "user_transcription_event": {"user_transcript": "Lisbon please"},
        })
        assert msg["role"] == "user"
        assert msg["content"] == "Lisbon please"

    @pytest.mark.parametrize("event, expected", [
        ({"message": "Hi", "source": "ai", "agent_response_event": "Where to?"}, "Hi"),
        ({"message": "Hi", "source": "user", "user_transcription_event": "Lisbon"}, "Hi"),
        ({"agent_response_event": ["Where to?"]}, None),
        ({"user_transcription_event": 42}, None),
    ])
    def test_non_object_payloads_ignored(self, event, expected):
        msg = parse_agent_message(event)
        assert (msg["content"] if msg else None) == expected

    @pytest.mark.parametrize("event", [
        {"message": "   "},
        {"type": "audio"},
        "not a dict",
        None,
    ])
    def test_nothing_to_say(self, event):
        assert parse_agent_message(event) is None


class TestSession:
    def test_start_connects_with_agent_and_key(self, session, connect):
        session.start_session()
        assert session.is_recording
        assert not session.is_processing_voice
        url, headers = connect.calls[0]
        assert url == "wss://voice/convai?agent_id=agent-123"
        assert headers == {"xi-api-key": "xi-key"}

    def test_start_is_idempotent(self, session, connect):
        session.start_session()
        session.start_session()
        assert len(connect.calls) == 1

    def test_send_text_starts_session(self, session, conn):
        session.send_text("Plan a trip to Rome")
        assert session.is_connected
        assert conn.sent == [{"type": "user_message", "text": "Plan a trip to Rome"}]

    def test_send_audio_requires_session(self, session):
        with pytest.raises(RuntimeError):
            session.send_audio([0.1])

    def test_send_audio_chunk(self, session, conn):
        session.start_session()
        session.send_audio([1.0])
        chunk = base64.b64decode(conn.sent[0]["user_audio_chunk"])
        assert struct.unpack("<h", chunk) == (32767,)

    def test_end_session(self, session, conn):
        session.start_session()
        session.end_session()
        assert conn.closed
        assert not session.is_recording
        assert not session.is_connected

    def test_connect_failure(self):
        def refuse(url, additional_headers=None):
            raise OSError("refused")

        s = VoiceAgentSession(agent_id="a", api_key="", url="wss://x", connect=refuse)
        with pytest.raises(OSError):
            s.start_session()
        assert not s.is_recording
        assert not s.is_processing_voice


class TestIncomingEvents:
    def test_messages_reach_callback(self, session, conn):
        received = []
        got_two = threading.Event()

        def on_message(msg):
            received.append(msg)
            if len(received) == 2:
                got_two.set()

        session.on_message(on_message)
        session.start_session()
        conn.push({"type": "user_transcript", "user_transcription_event": {"user_transcript": "Hi"}})
        conn.push({"type": "agent_response", "agent_response_event": {"agent_response": "Hello!"}})

        assert got_two.wait(5)
        assert [(m["role"], m["content"]) for m in received] == [("user", "Hi"), ("assistant", "Hello!")]

    def test_malformed_frames_keep_reader_alive(self, session, conn):
        received = []
        got_one = threading.Event()

        def on_message(msg):
            received.append(msg)
            got_one.set()

        session.on_message(on_message)
        session.start_session()
        conn.push("just a string")
        conn.push({"type": "agent_response", "agent_response_event": "oops"})
        conn.push({"type": "ping", "ping_event": "7"})
        conn.push({"type": "user_transcript", "user_transcription_event": {"user_transcript": "Hi"}})

        assert got_one.wait(5)
        assert [m["content"] for m in received] == ["Hi"]
        assert session.is_connected
        assert {"type": "pong", "event_id": None} in conn.sent

    def test_ping_is_answered(self, session, conn):
        session.start_session()
        session.handle_event({"type": "ping", "ping_event": {"event_id": 7}})
        assert conn.sent == [{"type": "pong", "event_id": 7}]

    def test_initiation_metadata(self, session, conn):
        session.start_session()
        session.handle_event({
            "type": "conversation_initiation_metadata",
            "conversation_initiation_metadata_event": {"conversation_id": "conv-xyz"},
        })
        assert session.conversation_id == "conv-xyz"

    def test_transcript_follows_speaker(self, session):
        session.handle_event({"type": "agent_response", "agent_response_event": {"agent_response": "Hi"}})
        assert session.transcript == SPEAKING_TRANSCRIPT
        session.handle_event({"type": "user_transcript", "user_transcription_event": {"user_transcript": "Yo"}})
        assert session.transcript == LISTENING_TRANSCRIPT
        session.handle_event({"mode": "speaking"})
        assert session.transcript == SPEAKING_TRANSCRIPT

    def test_remote_close_clears_state(self, session, conn):
        session.start_session()
        conn.close()
        session._reader.join(5)
        assert not session.is_recording
        assert not session.is_connected
