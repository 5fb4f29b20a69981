import uuid
from datetime import datetime
from typing import List, Optional, Tuple
from pydantic import ConfigDict, Field

from packages.aia_core.dto import SnapshotDTO
from packages.aia_core.errors import InvariantViolationError
from .state import CandidateStatus, TurnRole

def new_candidate_id() -> str:
    return str(uuid.uuid4())

class Turn(SnapshotDTO):
    """
    One entry of the interview history.
    Interviewer turns carry score/rationale once the matching answer is processed;
    candidate turns only carry content and time spent.
    question_id == 0 is the non-scored welcome turn.
    """
    role: TurnRole
    question_id: int = Field(..., ge=0)
    content: str
    score: Optional[int] = Field(default=None, ge=0, le=100)
    rationale: Optional[str] = None
    time_spent: int = Field(default=0, ge=0)

    @property
    def is_question(self) -> bool:
        return self.role == TurnRole.INTERVIEWER and self.question_id > 0

    @property
    def is_pending(self) -> bool:
        return self.is_question and self.score is None

class CandidateSession(SnapshotDTO):
    """
    The single mutable "current" candidate record.
    """
    id: str = Field(default_factory=new_candidate_id)
    name: str = ""
    email: str = ""
    phone: str = ""
    resume_file_name: str = ""
    status: CandidateStatus = CandidateStatus.UPLOAD
    current_question_index: int = Field(default=0, ge=0)
    time_remaining: int = Field(default=0, ge=0)
    score: Optional[int] = Field(default=None, ge=0, le=100)
    summary: str = ""
    history: List[Turn] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)

    def pending_question(self) -> Optional[Turn]:
        """
        Return the one unscored interviewer question, or None.
        Raises InvariantViolationError if more than one question is unscored.
        """
        pending = [turn for turn in self.history if turn.is_pending]
        if len(pending) > 1:
            raise InvariantViolationError(
                f"Session {self.id} has {len(pending)} unscored questions",
                details={"question_ids": [turn.question_id for turn in pending]}
            )
        return pending[0] if pending else None

    def question_turns(self) -> List[Turn]:
        return [turn for turn in self.history if turn.is_question]

    def scored_turns(self) -> List[Turn]:
        return [turn for turn in self.question_turns() if turn.score is not None]

    def has_question_turns(self) -> bool:
        """True once anything beyond the welcome turn was recorded."""
        return any(turn.question_id > 0 for turn in self.history)

    def missing_contact_fields(self) -> List[str]:
        return [key for key in ("name", "email", "phone") if not getattr(self, key)]

class FrozenTurn(Turn):
    """Read-only turn held by a finalized record."""
    model_config = ConfigDict(frozen=True)

class FinalizedCandidate(SnapshotDTO):
    """
    Frozen snapshot of a session that reached COMPLETED or ABANDONED.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    resume_file_name: str = ""
    status: CandidateStatus
    current_question_index: int = 0
    time_remaining: int = 0
    score: int = Field(..., ge=0, le=100)
    summary: str
    history: Tuple[FrozenTurn, ...] = ()
    created_at: datetime = Field(default_factory=datetime.now)
    finalized_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def freeze(
        cls,
        session: CandidateSession,
        status: CandidateStatus,
        score: int,
        summary: str,
        **overrides
    ) -> "FinalizedCandidate":
        if not status.is_terminal:
            raise ValueError(f"Cannot finalize a candidate with status {status}")
        data = session.model_dump()
        data.update(overrides)
        data.update(status=status, score=score, summary=summary, finalized_at=datetime.now())
        return cls.model_validate(data)

class InterviewSnapshot(SnapshotDTO):
    """
    Whole persisted state, stored under a single key.
    """
    current_candidate: Optional[CandidateSession] = None
    completed_candidates: List[FinalizedCandidate] = Field(default_factory=list)
