"""
HTTP status mapping for domain and infrastructure errors.
"""

from typing import Dict, Type

from ..core.exceptions import (
    ConfigurationError,
    ExtractionFailedError,
    VisitFlowException,
    VoiceDisabledError,
)
from ..domain.errors import (
    ActionInFlightError,
    AlreadyDispensedError,
    DomainError,
    IllegalAssignmentError,
    InvalidTransitionError,
    RecordingInProgressError,
    VisitNotFoundError,
    VitalsValidationError,
)

# Checked in order; first isinstance match wins
DOMAIN_STATUS: Dict[Type[DomainError], int] = {
    VisitNotFoundError: 404,
    InvalidTransitionError: 409,
    IllegalAssignmentError: 409,
    AlreadyDispensedError: 409,
    ActionInFlightError: 409,
    RecordingInProgressError: 409,
    VitalsValidationError: 422,
}

INFRA_STATUS: Dict[Type[VisitFlowException], int] = {
    ExtractionFailedError: 502,
    VoiceDisabledError: 503,
    ConfigurationError: 500,
}


def status_for(exc: Exception) -> int:
    table = DOMAIN_STATUS if isinstance(exc, DomainError) else INFRA_STATUS
    for error_type, status_code in table.items():
        if isinstance(exc, error_type):
            return status_code
    return 400 if isinstance(exc, DomainError) else 500
