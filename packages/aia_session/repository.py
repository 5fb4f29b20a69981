from abc import ABC, abstractmethod
from typing import Optional
from .dto import InterviewSnapshot

class SessionSnapshotRepository(ABC):
    """
    Interface for the local durable store.
    The whole state lives under a single key and every save replaces it entirely.
    Implementations raise PersistenceError on storage failure.
    """
    @abstractmethod
    def load(self) -> Optional[InterviewSnapshot]:
        """Return the stored snapshot, or None if nothing (valid) is stored."""
        pass

    @abstractmethod
    def save(self, snapshot: InterviewSnapshot) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Erase the stored key."""
        pass
