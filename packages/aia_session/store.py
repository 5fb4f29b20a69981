from typing import List, Optional

from packages.aia_core.errors import PersistenceError
from packages.aia_core.logging import get_logger
from .dto import CandidateSession, FinalizedCandidate, InterviewSnapshot
from .repository import SessionSnapshotRepository

logger = get_logger("aia.session.store")

class SessionStateStore:
    """
    Owns the current candidate record and the append-only list of finalized
    candidates, and mirrors both to the durable repository.

    Persistence failures are logged and swallowed: the in-memory state stays
    authoritative for the lifetime of the process.
    """
    def __init__(self, repository: SessionSnapshotRepository):
        self.repository = repository
        self.current: CandidateSession = CandidateSession()
        self._finalized: List[FinalizedCandidate] = []
        self.last_persist_error: Optional[PersistenceError] = None

    @property
    def finalized(self) -> List[FinalizedCandidate]:
        return list(self._finalized)

    def load(self) -> bool:
        """
        Replace in-memory state with the stored snapshot.
        Returns True if a snapshot was found.
        """
        snapshot = self.repository.load()
        if snapshot is None:
            logger.info("No persisted snapshot found; starting with a fresh session")
            return False
        self._finalized = list(snapshot.completed_candidates)
        if snapshot.current_candidate is not None:
            self.current = snapshot.current_candidate
        logger.info(
            f"Loaded snapshot: current={self.current.id} ({self.current.status.value}), "
            f"finalized={len(self._finalized)}"
        )
        return True

    def snapshot(self) -> InterviewSnapshot:
        return InterviewSnapshot(
            current_candidate=self.current,
            completed_candidates=list(self._finalized)
        )

    def persist(self) -> bool:
        try:
            self.repository.save(self.snapshot())
        except PersistenceError as e:
            self.last_persist_error = e
            logger.error(f"Snapshot persistence failed, keeping in-memory state: {e}")
            return False
        self.last_persist_error = None
        return True

    def replace_current(self, session: CandidateSession) -> None:
        self.current = session
        self.persist()

    def archive(self, record: FinalizedCandidate, next_session: CandidateSession) -> None:
        """Append a finalized record and install the next session in one write."""
        self._finalized.append(record)
        self.current = next_session
        self.persist()

    def find_finalized(self, candidate_id: str) -> Optional[FinalizedCandidate]:
        for record in self._finalized:
            if record.id == candidate_id:
                return record
        return None

    def clear(self) -> None:
        """Erase the stored key and reset both in-memory structures."""
        try:
            self.repository.clear()
        except PersistenceError as e:
            self.last_persist_error = e
            logger.error(f"Failed to erase persisted snapshot: {e}")
        self._finalized = []
        self.current = CandidateSession()
