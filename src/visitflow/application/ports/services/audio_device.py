"""
Microphone device interface used by the voice capture session.
"""

from abc import ABC, abstractmethod
from typing import Callable, Sequence


class AudioStream(ABC):
    """An acquired capture stream. Holds the device until ``release``."""

    @abstractmethod
    def start(self, mime_type: str, on_chunk: Callable[[bytes], None], timeslice_ms: int = 1000) -> None:
        """Begin encoding; ``on_chunk`` receives data roughly every ``timeslice_ms``."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop encoding and flush the final chunk through ``on_chunk``."""

    @abstractmethod
    def release(self) -> None:
        """Stop all underlying capture tracks."""


class AudioInputDevice(ABC):
    """Platform microphone access."""

    @abstractmethod
    async def open(self) -> AudioStream:
        """
        Acquire the microphone.

        Raises:
            PermissionDeniedError: the operator or platform refused access
            NoDeviceFoundError: no input device is available
        """

    @abstractmethod
    def supported_mime_types(self, candidates: Sequence[str]) -> Sequence[str]:
        """Subset of ``candidates`` the platform can encode, in the given order."""
