"""
Domain-specific error types for business rule violations.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class VisitNotFoundError(DomainError):
    """Visit not found."""

    def __init__(self, visit_id: str) -> None:
        message = f"Visit with ID '{visit_id}' not found"
        super().__init__(message, "VISIT_NOT_FOUND", {"visit_id": visit_id})


class InvalidTransitionError(DomainError):
    """Event is not legal for the visit's current status."""

    def __init__(self, visit_id: str, from_status: str, event: str) -> None:
        self.visit_id = visit_id
        self.from_status = from_status
        self.event = event
        message = f"Cannot apply '{event}' to visit '{visit_id}' in status {from_status}"
        super().__init__(
            message,
            "INVALID_TRANSITION",
            {"visit_id": visit_id, "from_status": from_status, "event": event},
        )


class IllegalAssignmentError(DomainError):
    """Doctor assignment attempted outside VITALS_RECORDED."""

    def __init__(self, visit_id: str, status: str) -> None:
        self.visit_id = visit_id
        self.status = status
        message = (
            f"Visit '{visit_id}' cannot be assigned a doctor in status {status}; "
            "vitals must be recorded first and the visit must not already be assigned"
        )
        super().__init__(
            message, "ILLEGAL_ASSIGNMENT", {"visit_id": visit_id, "status": status}
        )


class AlreadyDispensedError(DomainError):
    """Prescription for the visit was already dispensed."""

    def __init__(self, visit_id: str) -> None:
        message = f"Prescription for visit '{visit_id}' already dispensed"
        super().__init__(message, "ALREADY_DISPENSED", {"visit_id": visit_id})


class VitalsValidationError(DomainError):
    """Invalid vitals data."""

    def __init__(self, field: str, value: Any) -> None:
        message = f"Invalid vitals data. Field: {field}, Value: {value}"
        super().__init__(message, "INVALID_VITALS", {"field": field, "value": value})


class ActionInFlightError(DomainError):
    """An identical action for the same visit has not resolved yet."""

    def __init__(self, visit_id: str, action: str) -> None:
        message = f"Action '{action}' already in progress for visit '{visit_id}'"
        super().__init__(
            message, "ACTION_IN_FLIGHT", {"visit_id": visit_id, "action": action}
        )


# ---------------------------------------------------------------------------
# Voice capture failures
# ---------------------------------------------------------------------------


class VoiceCaptureError(DomainError):
    """Base class for recording-session failures."""

    default_message = "Failed to start recording"
    default_code = "CAPTURE_FAILED"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message, self.default_code)


class PermissionDeniedError(VoiceCaptureError):
    default_message = "Microphone permission denied. Please allow microphone access."
    default_code = "PERMISSION_DENIED"


class NoDeviceFoundError(VoiceCaptureError):
    default_message = "No microphone found. Please connect a microphone."
    default_code = "NO_DEVICE_FOUND"


class UnsupportedFormatError(VoiceCaptureError):
    default_message = "No supported audio format found"
    default_code = "UNSUPPORTED_FORMAT"


class UnknownCaptureError(VoiceCaptureError):
    default_code = "CAPTURE_UNKNOWN"


class RecordingInProgressError(DomainError):
    """start() called while a capture is pending or recording."""

    def __init__(self, state: str) -> None:
        message = f"Cannot start recording while session is {state}"
        super().__init__(message, "RECORDING_IN_PROGRESS", {"state": state})
