from typing import Optional, Sequence, Tuple
from pydantic import BaseModel, ConfigDict, Field
from .state import Difficulty

class QuestionSlot(BaseModel):
    """
    Immutable catalog entry: which difficulty to ask and how long the candidate has.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="1-based slot id, also the question id")
    difficulty: Difficulty
    time_limit_seconds: int = Field(..., gt=0)

class QuestionCatalog:
    """
    Ordered, fixed sequence of question slots.
    Slot order is also the delivered difficulty progression.
    """
    def __init__(self, slots: Sequence[QuestionSlot]):
        ids = [slot.id for slot in slots]
        if ids != list(range(1, len(slots) + 1)):
            raise ValueError(f"Catalog slot ids must be 1..{len(slots)} in order, got {ids}")
        self._slots: Tuple[QuestionSlot, ...] = tuple(slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self):
        return iter(self._slots)

    @property
    def exhausted_index(self) -> int:
        """currentQuestionIndex value that marks the sequence as exhausted."""
        return len(self._slots) + 1

    def get(self, question_id: int) -> Optional[QuestionSlot]:
        if 1 <= question_id <= len(self._slots):
            return self._slots[question_id - 1]
        return None

    def require(self, question_id: int) -> QuestionSlot:
        slot = self.get(question_id)
        if slot is None:
            raise KeyError(f"No catalog slot for question {question_id}")
        return slot

DEFAULT_CATALOG = QuestionCatalog([
    QuestionSlot(id=1, difficulty=Difficulty.EASY, time_limit_seconds=20),
    QuestionSlot(id=2, difficulty=Difficulty.EASY, time_limit_seconds=20),
    QuestionSlot(id=3, difficulty=Difficulty.MEDIUM, time_limit_seconds=60),
    QuestionSlot(id=4, difficulty=Difficulty.MEDIUM, time_limit_seconds=60),
    QuestionSlot(id=5, difficulty=Difficulty.HARD, time_limit_seconds=120),
    QuestionSlot(id=6, difficulty=Difficulty.HARD, time_limit_seconds=120),
])
