"""
Exception handling for the visitflow application.

Infrastructure-level errors; business rule violations live in
``visitflow.domain.errors``.
"""

from typing import Any, Dict, Optional


class VisitFlowException(Exception):
    """Base exception class for visitflow infrastructure."""

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


class ConfigurationError(VisitFlowException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "CONFIG_ERROR", details)


class ExternalServiceError(VisitFlowException):
    """Raised when there's an external service error."""

    def __init__(
        self, service: str, message: str, details: Optional[Dict[str, Any]] = None
    ) -> None:
        self.service = service
        full_message = f"{service} service error: {message}"
        super().__init__(full_message, "EXTERNAL_SERVICE_ERROR", details)


class ExtractionFailedError(ExternalServiceError):
    """Transcription or field extraction did not produce a result."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("transcription", message, details)
        self.error_code = "EXTRACTION_FAILED"


class VoiceDisabledError(VisitFlowException):
    """Voice features are switched off or not configured."""

    def __init__(
        self,
        message: str = "Voice AI features are not configured. Manual form entry is available.",
    ) -> None:
        super().__init__(message, "VOICE_DISABLED")
