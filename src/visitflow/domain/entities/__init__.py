"""
Domain entities package.
"""

from .visit import StatusChange, Visit, VitalsRecord

__all__ = [
    "Visit",
    "VitalsRecord",
    "StatusChange",
]
