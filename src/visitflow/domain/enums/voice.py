"""
Voice capture and extraction enums.
"""

from enum import Enum


class CaptureState(str, Enum):
    """Recording session states."""

    IDLE = "idle"
    PENDING = "pending"  # permission/device negotiation
    RECORDING = "recording"
    STOPPED = "stopped"


class ExtractionContext(str, Enum):
    """Which form an extraction is meant to fill."""

    INTAKE = "intake"
    REGISTRATION = "registration"
