"""
Domain enums package.
"""

from .voice import CaptureState, ExtractionContext
from .workflow import Priority, RecordedVia, VisitEvent, VisitStatus

__all__ = [
    "VisitStatus",
    "VisitEvent",
    "Priority",
    "RecordedVia",
    "CaptureState",
    "ExtractionContext",
]
