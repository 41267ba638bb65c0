from abc import ABC, abstractmethod


class Sink(ABC):
    """Abstract base class for all record sinks."""

    @abstractmethod
    def write(self, kind: str, record: dict) -> None:
        """Write one record (as returned by ``to_dict()`` or the API)."""
