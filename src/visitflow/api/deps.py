"""FastAPI dependency providers."""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Request

from ..adapters.db.memory.visit_repository import InMemoryVisitRepository
from ..adapters.external.transcription_service_openai import (
    OpenAITranscriptionExtractionService,
)
from ..application.ports.repositories.visit_repo import VisitRepository
from ..application.ports.services.transcription_service import (
    TranscriptionExtractionService,
)
from ..application.services.action_tracker import ActionTracker
from ..application.services.doctor_assignment import DoctorAssignmentCoordinator
from ..application.services.extraction_merge import ExtractionMergeEngine
from ..application.services.queue_scheduler import QueueScheduler
from ..core.config import Settings, get_settings
from ..domain.state_machine import VisitStateMachine
from ..middleware.operator_middleware import OperatorContext


@lru_cache()
def get_visit_repository() -> VisitRepository:
    """Get visit repository instance."""
    return InMemoryVisitRepository()


@lru_cache()
def get_action_tracker() -> ActionTracker:
    """One tracker per process so duplicate submissions collide."""
    return ActionTracker()


@lru_cache()
def get_state_machine() -> VisitStateMachine:
    return VisitStateMachine()


@lru_cache()
def get_queue_scheduler() -> QueueScheduler:
    return QueueScheduler()


@lru_cache()
def get_assignment_coordinator() -> DoctorAssignmentCoordinator:
    return DoctorAssignmentCoordinator(get_state_machine())


@lru_cache()
def get_merge_engine() -> ExtractionMergeEngine:
    return ExtractionMergeEngine()


def get_app_settings() -> Settings:
    return get_settings()


_TRANSCRIPTION_SERVICE_SINGLETON: Optional[TranscriptionExtractionService] = None


def get_transcription_service() -> Optional[TranscriptionExtractionService]:
    """Transcription service singleton, or None when voice AI is not configured."""
    global _TRANSCRIPTION_SERVICE_SINGLETON
    if _TRANSCRIPTION_SERVICE_SINGLETON is None:
        settings = get_settings()
        if not settings.voice_ai_available:
            return None
        _TRANSCRIPTION_SERVICE_SINGLETON = OpenAITranscriptionExtractionService(settings)
    return _TRANSCRIPTION_SERVICE_SINGLETON


def get_operator(request: Request) -> OperatorContext:
    """Operator attached by OperatorMiddleware (system default if the route is public)."""
    operator = getattr(request.state, "operator", None)
    if operator is None:
        operator_settings = get_settings().operator
        operator = OperatorContext(
            user_id=operator_settings.default_id, role=operator_settings.default_role.upper()
        )
    return operator


VisitRepositoryDep = Annotated[VisitRepository, Depends(get_visit_repository)]
ActionTrackerDep = Annotated[ActionTracker, Depends(get_action_tracker)]
StateMachineDep = Annotated[VisitStateMachine, Depends(get_state_machine)]
QueueSchedulerDep = Annotated[QueueScheduler, Depends(get_queue_scheduler)]
AssignmentCoordinatorDep = Annotated[DoctorAssignmentCoordinator, Depends(get_assignment_coordinator)]
MergeEngineDep = Annotated[ExtractionMergeEngine, Depends(get_merge_engine)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
TranscriptionServiceDep = Annotated[
    Optional[TranscriptionExtractionService], Depends(get_transcription_service)
]
OperatorDep = Annotated[OperatorContext, Depends(get_operator)]
