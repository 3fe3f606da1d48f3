"""
Application services: queue ordering, doctor assignment, voice capture and
extraction merging.
"""

from .action_tracker import ActionStatus, ActionTracker
from .doctor_assignment import DoctorAssignmentCoordinator
from .extraction_merge import ExtractionMergeEngine
from .queue_scheduler import QueueEntry, QueueScheduler, QueueSnapshot
from .voice_capture import VoiceCaptureSession, format_duration

__all__ = [
    "ActionStatus",
    "ActionTracker",
    "DoctorAssignmentCoordinator",
    "ExtractionMergeEngine",
    "QueueEntry",
    "QueueScheduler",
    "QueueSnapshot",
    "VoiceCaptureSession",
    "format_duration",
]
