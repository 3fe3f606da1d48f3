"""
Human-readable visit number.
Format: APT-YYYY-NNNNNNNNN (6 digits of timestamp + 3 random digits)
"""

import random
import re
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class VisitNumber:
    """Immutable visit number shown to staff and patients."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Visit number cannot be empty")
        if not re.match(r"^APT-\d{4}-\d{9}$", self.value):
            raise ValueError("Visit number must follow format: APT-YYYY-NNNNNNNNN")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls, date: Optional[datetime] = None) -> "VisitNumber":
        """Generate a new visit number."""
        if date is None:
            date = datetime.utcnow()
        timestamp = str(int(time.time() * 1000))[-6:]
        sequence = str(random.randint(0, 999)).zfill(3)
        return cls(f"APT-{date.year:04d}-{timestamp}{sequence}")
