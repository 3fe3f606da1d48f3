"""
Shared fixtures and fakes.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

import pytest

from visitflow.adapters.db.memory.visit_repository import InMemoryVisitRepository
from visitflow.application.dto.voice_dto import AudioArtifact, VoiceTranscript
from visitflow.application.ports.services.audio_device import AudioInputDevice, AudioStream
from visitflow.application.ports.services.transcription_service import (
    TranscriptionExtractionService,
)
from visitflow.application.services.action_tracker import ActionTracker
from visitflow.core.config import Settings, reset_settings
from visitflow.domain.entities.visit import Visit
from visitflow.domain.enums.voice import ExtractionContext
from visitflow.domain.enums.workflow import Priority, VisitStatus
from visitflow.domain.value_objects.visit_id import VisitId
from visitflow.domain.value_objects.visit_number import VisitNumber

BASE_TIME = datetime(2024, 3, 1, 9, 0, 0)


def make_visit(
    status: VisitStatus = VisitStatus.CREATED,
    priority: Priority = Priority.NORMAL,
    created_at: Optional[datetime] = None,
    assigned_doctor_id: Optional[str] = None,
    visit_id: Optional[str] = None,
) -> Visit:
    created_at = created_at or BASE_TIME
    return Visit(
        visit_id=VisitId(visit_id) if visit_id else VisitId.generate(),
        visit_number=VisitNumber.generate(created_at),
        patient_id="P-001",
        chief_complaint="Headache",
        priority=priority,
        status=status,
        created_at=created_at,
        updated_at=created_at,
        assigned_doctor_id=assigned_doctor_id,
    )


def minutes_after(minutes: int) -> datetime:
    return BASE_TIME + timedelta(minutes=minutes)


# ---------------------------------------------------------------------------
# Voice capture fakes
# ---------------------------------------------------------------------------


class FakeStream(AudioStream):
    def __init__(self, chunks: Sequence[bytes] = (b"abc", b"def"), stop_error: Optional[Exception] = None):
        self.chunks = list(chunks)
        self.stop_error = stop_error
        self.stop_gate: Optional[asyncio.Event] = None
        self.release_count = 0
        self.started_with: Optional[str] = None
        self._on_chunk: Optional[Callable[[bytes], None]] = None

    def start(self, mime_type, on_chunk, timeslice_ms=1000):
        self.started_with = mime_type
        self._on_chunk = on_chunk
        if self.chunks:
            on_chunk(self.chunks[0])

    async def stop(self):
        if self.stop_gate is not None:
            await self.stop_gate.wait()
        if self.stop_error is not None:
            raise self.stop_error
        for chunk in self.chunks[1:]:
            self._on_chunk(chunk)

    def release(self):
        self.release_count += 1


class FakeAudioDevice(AudioInputDevice):
    def __init__(
        self,
        stream: Optional[FakeStream] = None,
        open_error: Optional[Exception] = None,
        supported: Optional[List[str]] = None,
    ):
        self.stream = stream or FakeStream()
        self.open_error = open_error
        self.supported = supported
        self.open_gate: Optional[asyncio.Event] = None
        self.open_calls = 0

    async def open(self):
        self.open_calls += 1
        if self.open_gate is not None:
            await self.open_gate.wait()
        if self.open_error is not None:
            raise self.open_error
        return self.stream

    def supported_mime_types(self, candidates):
        if self.supported is None:
            return list(candidates)
        return [mime for mime in candidates if mime in self.supported]


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


# ---------------------------------------------------------------------------
# Transcription fake
# ---------------------------------------------------------------------------


class FakeTranscriptionService(TranscriptionExtractionService):
    def __init__(self, transcript: Optional[VoiceTranscript] = None, error: Optional[Exception] = None):
        self.transcript = transcript or VoiceTranscript(
            transcript="BP 120 over 80, pulse 72",
            confidence=0.9,
            extracted_fields={"blood_pressure_systolic": 120, "blood_pressure_diastolic": 80, "pulse_rate": 72},
        )
        self.error = error
        self.calls: List[tuple] = []

    async def transcribe_and_extract(self, artifact: AudioArtifact, context: ExtractionContext) -> VoiceTranscript:
        self.calls.append((artifact, context))
        if self.error is not None:
            raise self.error
        return self.transcript


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Every test starts from environment defaults without a real API key."""
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("APP_ENV", "testing")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def repo() -> InMemoryVisitRepository:
    return InMemoryVisitRepository()


@pytest.fixture
def tracker() -> ActionTracker:
    return ActionTracker()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def audio() -> AudioArtifact:
    return AudioArtifact(data=b"\x1a\x45\xdf\xa3" * 64, mime_type="audio/webm;codecs=opus", duration_seconds=12)
