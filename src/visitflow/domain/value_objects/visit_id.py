"""
Visit ID value object for type-safe visit identification.
Format: 32 lowercase hex characters (uuid4).
"""

import re
import uuid
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class VisitId:
    """Immutable visit identifier value object."""

    value: str

    def __post_init__(self) -> None:
        """Validate visit ID format."""
        if not self.value:
            raise ValueError("Visit ID cannot be empty")

        if not isinstance(self.value, str):
            raise ValueError("Visit ID must be a string")

        if not re.match(r"^[0-9a-f]{32}$", self.value):
            raise ValueError("Visit ID must be 32 lowercase hex characters")

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __eq__(self, other: Any) -> bool:
        """Equality comparison."""
        if not isinstance(other, VisitId):
            return False
        return self.value == other.value

    def __hash__(self) -> int:
        """Hash for use in sets and dictionaries."""
        return hash(self.value)

    @classmethod
    def generate(cls) -> "VisitId":
        """Generate a new visit ID."""
        return cls(uuid.uuid4().hex)
