"""
Value objects package for domain layer.
"""

from .visit_id import VisitId
from .visit_number import VisitNumber

__all__ = [
    "VisitId",
    "VisitNumber",
]
