"""
Voice capture session: record / stop / reset lifecycle for one microphone capture.

The microphone is a scoped resource. Every exit path (stop, reset, failure,
teardown via ``close`` or ``async with``) releases the acquired stream exactly
once.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional

from visitflow.application.dto.voice_dto import AudioArtifact
from visitflow.application.ports.services.audio_device import AudioInputDevice, AudioStream
from visitflow.domain.enums.voice import CaptureState
from visitflow.domain.errors import (
    RecordingInProgressError,
    UnknownCaptureError,
    UnsupportedFormatError,
    VoiceCaptureError,
)

logger = logging.getLogger("visitflow")

# Preference order when negotiating an encoding with the platform
SUPPORTED_MIME_TYPES = (
    "audio/webm;codecs=opus",
    "audio/webm",
    "audio/ogg;codecs=opus",
    "audio/mp4",
    "audio/wav",
)


def format_duration(seconds: int) -> str:
    """Render seconds as m:ss."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


class VoiceCaptureSession:
    """Owns one recording's lifecycle and its timing."""

    def __init__(
        self,
        device: AudioInputDevice,
        clock: Callable[[], float] = time.monotonic,
        on_error: Optional[Callable[[str], None]] = None,
        timeslice_ms: int = 1000,
    ) -> None:
        self._device = device
        self._clock = clock
        self._on_error = on_error
        self._timeslice_ms = timeslice_ms

        self._state = CaptureState.IDLE
        self._stream: Optional[AudioStream] = None
        self._chunks: List[bytes] = []
        self._mime_type: Optional[str] = None
        self._started_at: Optional[float] = None
        self._duration = 0
        self._artifact: Optional[AudioArtifact] = None
        # Bumped on reset/close so an in-flight start or stop can tell it was abandoned
        self._generation = 0
        self.error: Optional[str] = None

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is CaptureState.RECORDING

    @property
    def is_pending(self) -> bool:
        return self._state is CaptureState.PENDING

    @property
    def holds_device(self) -> bool:
        return self._stream is not None

    @property
    def artifact(self) -> Optional[AudioArtifact]:
        return self._artifact

    @property
    def duration_seconds(self) -> int:
        """Whole seconds recorded; never decreases while recording."""
        if self._state is CaptureState.RECORDING and self._started_at is not None:
            elapsed = int(self._clock() - self._started_at)
            self._duration = max(self._duration, elapsed)
        return self._duration

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Acquire the microphone and begin recording.

        Raises RecordingInProgressError unless the session is IDLE or STOPPED.
        Device failures raise a VoiceCaptureError subclass and leave the
        session IDLE with nothing held.
        """
        if self._state not in (CaptureState.IDLE, CaptureState.STOPPED):
            raise RecordingInProgressError(self._state.value)

        generation = self._generation
        self.error = None
        self._artifact = None
        self._duration = 0
        self._state = CaptureState.PENDING

        stream: Optional[AudioStream] = None
        try:
            stream = await self._device.open()
            if generation != self._generation:
                # Reset or torn down while negotiating
                stream.release()
                return
            self._stream = stream

            mime_type = self._negotiate_mime_type()
            self._chunks = []
            stream.start(mime_type, self._on_chunk, self._timeslice_ms)
        except VoiceCaptureError as exc:
            self._fail(exc, stream, generation)
            raise
        except asyncio.CancelledError:
            self._fail(None, stream, generation)
            raise
        except Exception as exc:
            error = UnknownCaptureError(str(exc) or None)
            self._fail(error, stream, generation)
            raise error from exc

        self._mime_type = mime_type
        self._started_at = self._clock()
        self._state = CaptureState.RECORDING
        logger.info("Recording started mime_type=%s", mime_type)

    async def stop(self) -> Optional[AudioArtifact]:
        """Finish recording and return the artifact.

        Outside RECORDING this is a no-op returning None.
        """
        if self._state is not CaptureState.RECORDING or self._stream is None:
            return None

        generation = self._generation
        duration = self.duration_seconds
        stream, self._stream = self._stream, None
        try:
            await stream.stop()
        except Exception as exc:
            self._chunks = []
            if generation == self._generation:
                self._state = CaptureState.IDLE
                self._started_at = None
            error = UnknownCaptureError(str(exc) or None)
            self._report(error)
            raise error from exc
        finally:
            stream.release()

        if generation != self._generation:
            return None

        artifact = AudioArtifact(
            data=b"".join(self._chunks),
            mime_type=self._mime_type or "audio/webm",
            duration_seconds=duration,
        )
        self._chunks = []
        self._artifact = artifact
        self._state = CaptureState.STOPPED
        logger.info(
            "Recording stopped duration=%ss size=%d bytes", duration, artifact.size_bytes
        )
        return artifact

    def reset(self) -> None:
        """Return to IDLE from any state, discarding audio and releasing the device."""
        self._generation += 1
        self._release()
        self._chunks = []
        self._artifact = None
        self._mime_type = None
        self._started_at = None
        self._duration = 0
        self.error = None
        self._state = CaptureState.IDLE

    def close(self) -> None:
        """Teardown hook for the owning component."""
        self.reset()

    async def __aenter__(self) -> "VoiceCaptureSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_chunk(self, chunk: bytes) -> None:
        if chunk:
            self._chunks.append(chunk)

    def _negotiate_mime_type(self) -> str:
        supported = list(self._device.supported_mime_types(SUPPORTED_MIME_TYPES))
        if not supported:
            raise UnsupportedFormatError()
        return supported[0]

    def _release(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.release()

    def _fail(
        self,
        error: Optional[VoiceCaptureError],
        stream: Optional[AudioStream],
        generation: int,
    ) -> None:
        if stream is not None and stream is self._stream:
            self._release()
        elif stream is not None:
            stream.release()
        if generation != self._generation:
            return
        self._chunks = []
        self._state = CaptureState.IDLE
        if error is not None:
            self._report(error)

    def _report(self, error: VoiceCaptureError) -> None:
        self.error = error.message
        logger.warning("Recording failed code=%s message=%s", error.error_code, error.message)
        if self._on_error:
            self._on_error(error.message)
