from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Protocol

from .api import DEFAULT_AUDIO_URL_TEMPLATE, audio_url
from .errors import PreconditionError, ReaderError

logger = logging.getLogger(__name__)

IDLE = "idle"
PLAYING = "playing"
PAUSED = "paused"

STREAM_ACTIVE = "active"
STREAM_PAUSED = "paused"
STREAM_STOPPED = "stopped"
STREAM_ENDED = "ended"
STREAM_FAILED = "failed"

AYAH_REQUIRED_MESSAGE = "Please select a specific ayah to play audio"


class AudioPlaybackError(ReaderError):
    """Raised when a recitation stream cannot be started."""


@dataclass(slots=True)
class AudioStream:
    id: str
    url: str
    reciter: str
    surah: int
    ayah: int
    status: str = STREAM_ACTIVE

    @property
    def active(self) -> bool:
        return self.status in {STREAM_ACTIVE, STREAM_PAUSED}

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "url": self.url,
            "reciter": self.reciter,
            "surah": self.surah,
            "ayah": self.ayah,
            "status": self.status,
        }


class PlaybackBackend(Protocol):
    def start(self, stream: AudioStream) -> None: ...

    def pause(self, stream: AudioStream) -> None: ...

    def resume(self, stream: AudioStream) -> None: ...

    def stop(self, stream: AudioStream) -> None: ...


class AudioController:
    """
    Idle/playing/paused state machine around one recitation stream at a time.

    Without a backend the controller only tracks streams; the web page plays
    whatever stream the snapshot reports and calls back on end-of-stream.
    """

    def __init__(
        self,
        url_template: str = DEFAULT_AUDIO_URL_TEMPLATE,
        backend: PlaybackBackend | None = None,
    ) -> None:
        self.url_template = url_template
        self.backend = backend
        self.state = IDLE
        self.stream: AudioStream | None = None

    @property
    def play_visible(self) -> bool:
        return self.state != PLAYING

    @property
    def pause_visible(self) -> bool:
        return self.state == PLAYING

    def play(self, reciter: str, surah: int | None, ayah: int | None) -> AudioStream:
        if surah is None or ayah is None:
            raise PreconditionError(AYAH_REQUIRED_MESSAGE)
        url = audio_url(self.url_template, reciter, surah, ayah)
        current = self.stream
        if self.state == PAUSED and current is not None and current.url == url:
            if self.backend is not None:
                self.backend.resume(current)
            current.status = STREAM_ACTIVE
            self.state = PLAYING
            return current

        self._stop_current()
        stream = AudioStream(
            id=uuid.uuid4().hex,
            url=url,
            reciter=reciter,
            surah=surah,
            ayah=ayah,
        )
        if self.backend is not None:
            try:
                self.backend.start(stream)
            except Exception as exc:
                stream.status = STREAM_FAILED
                self.state = IDLE
                logger.warning("Failed to start recitation %s: %s", url, exc)
                raise AudioPlaybackError(f"Error playing audio: {exc}") from exc
        self.stream = stream
        self.state = PLAYING
        logger.debug("Playing %s", url)
        return stream

    def pause(self) -> None:
        if self.state != PLAYING or self.stream is None:
            return
        if self.backend is not None:
            self.backend.pause(self.stream)
        self.stream.status = STREAM_PAUSED
        self.state = PAUSED

    def ended(self, stream_id: str) -> bool:
        stream = self.stream
        if stream is None or stream.id != stream_id or self.state != PLAYING:
            return False
        stream.status = STREAM_ENDED
        self.state = IDLE
        return True

    def failed(self, stream_id: str, reason: str | None = None) -> bool:
        stream = self.stream
        if stream is None or stream.id != stream_id or self.state != PLAYING:
            return False
        logger.warning("Recitation stream %s failed: %s", stream.url, reason or "unknown error")
        stream.status = STREAM_FAILED
        self.state = IDLE
        return True

    def _stop_current(self) -> None:
        stream = self.stream
        if stream is None or not stream.active:
            return
        if self.backend is not None:
            self.backend.stop(stream)
        stream.status = STREAM_STOPPED

    def to_payload(self) -> dict[str, object]:
        return {
            "state": self.state,
            "stream": self.stream.to_payload() if self.stream is not None else None,
            "playVisible": self.play_visible,
            "pauseVisible": self.pause_visible,
        }


__all__ = [
    "AYAH_REQUIRED_MESSAGE",
    "AudioController",
    "AudioPlaybackError",
    "AudioStream",
    "IDLE",
    "PAUSED",
    "PLAYING",
    "PlaybackBackend",
]
