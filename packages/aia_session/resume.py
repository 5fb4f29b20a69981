from typing import Optional, Tuple
from pydantic import Field

from packages.aia_core.dto import BaseDTO
from packages.aia_core.logging import get_logger
from .state import CandidateStatus, ResumeChoice
from .store import SessionStateStore

logger = get_logger("aia.session.resume")

class ResumeOffer(BaseDTO):
    """
    Offered to the caller when an interrupted session was found.
    Nothing resumes until the caller picks one of `choices`.
    """
    candidate_id: str
    question_index: int
    time_remaining: int
    choices: Tuple[ResumeChoice, ...] = Field(default=(ResumeChoice.RESUME, ResumeChoice.START_NEW))

    @property
    def message(self) -> str:
        return (
            f"You have an unfinished interview session from Q{self.question_index}. "
            "Do you want to continue or start a new one?"
        )

class ResumeProtocol:
    """
    Inspects the state loaded at process start.
    - PROCESSING: the resume parse died with the process; back to UPLOAD.
    - PAUSED, or INTERVIEWING past the welcome turn: downgrade to PAUSED
      (no countdown is reconstructed) and build a ResumeOffer.
    """
    def inspect(self, store: SessionStateStore) -> Optional[ResumeOffer]:
        session = store.current

        if session.status == CandidateStatus.PROCESSING:
            logger.warning(f"Session {session.id} was interrupted while parsing; reverting to UPLOAD")
            session.status = CandidateStatus.UPLOAD
            store.persist()
            return None

        interrupted = session.status == CandidateStatus.PAUSED or (
            session.status == CandidateStatus.INTERVIEWING and len(session.history) > 1
        )
        if not interrupted:
            return None

        if session.status == CandidateStatus.INTERVIEWING:
            session.status = CandidateStatus.PAUSED
            store.persist()
            logger.info(f"Session {session.id} downgraded to PAUSED on load")

        return self.offer_for(store)

    @staticmethod
    def offer_for(store: SessionStateStore) -> ResumeOffer:
        session = store.current
        return ResumeOffer(
            candidate_id=session.id,
            question_index=session.current_question_index,
            time_remaining=session.time_remaining
        )
