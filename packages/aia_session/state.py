from enum import Enum

class CandidateStatus(str, Enum):
    """
    Candidate session lifecycle.
    UPLOAD/PROCESSING/MISSING_INFO are intake states,
    INTERVIEWING/PAUSED are active states,
    COMPLETED/ABANDONED are terminal (only ever seen on finalized records).
    """
    UPLOAD = "UPLOAD"
    PROCESSING = "PROCESSING"
    MISSING_INFO = "MISSING_INFO"
    INTERVIEWING = "INTERVIEWING"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"

    @property
    def is_active(self) -> bool:
        return self in (CandidateStatus.INTERVIEWING, CandidateStatus.PAUSED)

    @property
    def is_terminal(self) -> bool:
        return self in (CandidateStatus.COMPLETED, CandidateStatus.ABANDONED)

class TurnRole(str, Enum):
    INTERVIEWER = "interviewer"
    CANDIDATE = "candidate"

class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

class SessionEvent(str, Enum):
    """
    Events emitted by the Session Controller to registered listeners.
    """
    QUESTION_ISSUED = "QUESTION_ISSUED"
    TIMER_TICK = "TIMER_TICK"
    ANSWER_SCORED = "ANSWER_SCORED"
    QUESTION_TIMEOUT = "QUESTION_TIMEOUT"  # Auto-submission due to time limit
    TIMEOUT_SUBMISSION_FAILED = "TIMEOUT_SUBMISSION_FAILED"
    SESSION_PAUSED = "SESSION_PAUSED"
    SESSION_RESUMED = "SESSION_RESUMED"
    SESSION_COMPLETED = "SESSION_COMPLETED"
    SESSION_ABANDONED = "SESSION_ABANDONED"
    DATA_CLEARED = "DATA_CLEARED"

class ResumeChoice(str, Enum):
    """
    The only two options offered for an interrupted session.
    """
    RESUME = "RESUME"
    START_NEW = "START_NEW"

# Sentinel answer recorded when the countdown expires
TIMEOUT_ANSWER = "TIMEOUT: No answer submitted."
TIMEOUT_RATIONALE = "Answer automatically submitted due to timeout."
ABANDONED_SUMMARY = "Interview abandoned by candidate."
