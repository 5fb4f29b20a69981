from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from packages.aia_session.state import Difficulty

class QuestionGenerationResult:
    """
    Outcome of one generateQuestion call.
    A usable result has success=True and non-blank content.
    """
    def __init__(self, content: str, metadata: Dict[str, Any], success: bool, error: Optional[str] = None):
        self.content = content
        self.metadata = metadata
        self.success = success
        self.error = error

    @classmethod
    def ok(cls, content: str, **metadata) -> "QuestionGenerationResult":
        return cls(content=content, metadata=metadata, success=True)

    @classmethod
    def failed(cls, error: str) -> "QuestionGenerationResult":
        return cls(content="", metadata={}, success=False, error=error)

    @property
    def usable(self) -> bool:
        return self.success and bool(self.content and self.content.strip())

class QuestionGenerator(ABC):
    @abstractmethod
    async def generate_question(self, difficulty: Difficulty) -> QuestionGenerationResult:
        """
        Produce one question text for the given difficulty tier.
        Report failures with QuestionGenerationResult.failed(...) instead of raising.
        """
        pass
