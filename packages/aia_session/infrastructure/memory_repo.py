from typing import Any, Dict, Optional
from packages.aia_session.dto import InterviewSnapshot
from packages.aia_session.repository import SessionSnapshotRepository

class MemorySnapshotRepository(SessionSnapshotRepository):
    """
    In-Memory implementation of SessionSnapshotRepository.
    Used for local development and testing.
    Stores the serialized form so that loads never share objects with the caller.
    """
    def __init__(self):
        self._store: Optional[Dict[str, Any]] = None
        self.save_count = 0

    def load(self) -> Optional[InterviewSnapshot]:
        if self._store is None:
            return None
        return InterviewSnapshot.model_validate(self._store)

    def save(self, snapshot: InterviewSnapshot) -> None:
        self._store = snapshot.model_dump(mode="json", by_alias=True)
        self.save_count += 1

    def clear(self) -> None:
        self._store = None

    @property
    def raw(self) -> Optional[Dict[str, Any]]:
        """Serialized payload, as it would appear in durable storage."""
        return self._store
