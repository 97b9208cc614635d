# yaytravel/client/voice_agent.py

import base64
import json
import sys
import threading
from array import array
from typing import Callable, Dict, Any, Iterable, Optional
from urllib.parse import urlencode
from uuid import uuid4

from websockets.exceptions import ConnectionClosed
from websockets.sync.client import connect as ws_connect

from yaytravel.core.config_loader import settings
from yaytravel.core.logger import logger


MessageCallback = Callable[[Dict[str, str]], None]

SPEAKING_TRANSCRIPT = "AI is speaking..."
LISTENING_TRANSCRIPT = "Listening..."


# ---------------------------------------------------------------------------
# AUDIO
# ---------------------------------------------------------------------------
def convert_float32_to_int16(samples: Iterable[float]) -> bytes:
    """Float PCM in [-1, 1] to little-endian signed 16-bit, clamped."""
    pcm = array("h", (int(max(-32768, min(32767, s * 32767))) for s in samples))
    if sys.byteorder == "big":
        pcm.byteswap()
    return pcm.tobytes()


# ---------------------------------------------------------------------------
# MESSAGE NORMALIZATION
# ---------------------------------------------------------------------------
def parse_agent_message(event: Any) -> Optional[Dict[str, str]]:
    """
    Turn a voice-agent event into {id, content, role}, or None when it
    carries no text.
    """
    if not isinstance(event, dict):
        return None

    text = ""
    source = ""
    if event.get("message") is not None:
        text = event["message"]
    if event.get("source") is not None:
        source = event["source"]

    agent_event = event.get("agent_response_event")
    if isinstance(agent_event, dict) and agent_event.get("agent_response"):
        text = agent_event["agent_response"]
        source = "agent"

    user_event = event.get("user_transcription_event")
    if isinstance(user_event, dict) and user_event.get("user_transcript"):
        text = user_event["user_transcript"]
        source = "human"

    if not isinstance(text, str) or not text.strip():
        return None

    return {
        "id": str(uuid4()),
        "content": text,
        "role": "user" if source in ("human", "user") else "assistant",
    }


class VoiceAgentSession:
    """
    One conversation with the hosted voice agent over its websocket.

    Mirrors the UI's voice-provider state: ``is_recording`` while connected,
    ``is_processing_voice`` while connecting, and a short ``transcript``
    hint of who is talking.
    """

    def __init__(
        self,
        agent_id: Optional[str] = None,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        connect=ws_connect,
    ):
        self.agent_id = agent_id or settings.AGENT_ID
        self.api_key = api_key if api_key is not None else settings.ELEVENLABS_API_KEY
        self.url = url or settings.VOICE_WS_URL
        self._connect = connect

        self.is_recording = False
        self.is_processing_voice = False
        self.transcript = ""
        self.conversation_id: Optional[str] = None

        self._ws = None
        self._reader: Optional[threading.Thread] = None
        self._on_message: Optional[MessageCallback] = None
        self._send_lock = threading.Lock()

    def on_message(self, callback: MessageCallback):
        self._on_message = callback

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def start_session(self):
        if self._ws is not None:
            return

        self.is_processing_voice = True
        headers = {"xi-api-key": self.api_key} if self.api_key else None
        try:
            self._ws = self._connect(
                f"{self.url}?{urlencode({'agent_id': self.agent_id})}",
                additional_headers=headers,
            )
        except (OSError, ConnectionClosed) as e:
            logger.error(f"Error starting voice conversation: {e}")
            self.is_recording = False
            raise
        finally:
            self.is_processing_voice = False

        logger.info(f"Connected to voice agent {self.agent_id}")
        self.is_recording = True
        self._reader = threading.Thread(target=self._read_loop, name="voice-agent-reader", daemon=True)
        self._reader.start()

    def end_session(self):
        ws, self._ws = self._ws, None
        if ws is None:
            return
        try:
            ws.close()
        finally:
            self.is_recording = False
            if self._reader is not None and self._reader is not threading.current_thread():
                self._reader.join(timeout=5)
            self._reader = None
            logger.info("Disconnected from voice agent")

    # ------------------------------------------------------------------
    # Outgoing
    # ------------------------------------------------------------------
    def _send(self, payload: Dict[str, Any]):
        ws = self._ws
        if ws is None:
            raise RuntimeError("Voice session is not started")
        with self._send_lock:
            ws.send(json.dumps(payload))

    def send_text(self, text: str):
        if self._ws is None:
            self.start_session()
        self._send({"type": "user_message", "text": text})

    def send_audio(self, samples: Iterable[float]):
        chunk = base64.b64encode(convert_float32_to_int16(samples)).decode("ascii")
        self._send({"user_audio_chunk": chunk})

    # ------------------------------------------------------------------
    # Incoming
    # ------------------------------------------------------------------
    def _set_mode(self, mode: str):
        self.transcript = SPEAKING_TRANSCRIPT if mode == "speaking" else LISTENING_TRANSCRIPT

    def handle_event(self, event: Dict[str, Any]):
        event_type = event.get("type")

        if event_type == "ping":
            ping = event.get("ping_event")
            event_id = ping.get("event_id") if isinstance(ping, dict) else None
            self._send({"type": "pong", "event_id": event_id})
            return
        if event_type == "conversation_initiation_metadata":
            metadata = event.get("conversation_initiation_metadata_event")
            if isinstance(metadata, dict):
                self.conversation_id = metadata.get("conversation_id")
            return

        if event_type == "mode" or "mode" in event:
            self._set_mode(event.get("mode", ""))
        elif event_type == "agent_response":
            self._set_mode("speaking")
        elif event_type == "user_transcript":
            self._set_mode("listening")

        message = parse_agent_message(event)
        if message and self._on_message:
            self._on_message(message)

    def _read_loop(self):
        ws = self._ws
        try:
            for raw in ws:
                try:
                    event = json.loads(raw)
                except ValueError:
                    logger.warning("Dropping non-JSON frame from voice agent")
                    continue
                if not isinstance(event, dict):
                    logger.warning("Dropping non-object frame from voice agent")
                    continue
                self.handle_event(event)
        except ConnectionClosed as e:
            logger.info(f"Voice agent closed the connection: {e}")
        finally:
            self.is_recording = False
            if self._ws is ws:
                self._ws = None
