import asyncio
import random
import time
from typing import Dict, List, Optional

from packages.aia_session.state import Difficulty
from .question import QuestionGenerator, QuestionGenerationResult

QUESTION_POOL: Dict[Difficulty, List[str]] = {
    Difficulty.EASY: [
        "Explain the difference between state and props in React.",
        "What is event bubbling in JavaScript and how can you prevent it?",
    ],
    Difficulty.MEDIUM: [
        "Describe the concept of 'lifting state up' in React and when you would use it.",
        "How do you secure a REST API built with Node.js/Express against common vulnerabilities like XSS and CSRF?",
    ],
    Difficulty.HARD: [
        "Design a scalable state management architecture for a large-scale e-commerce application using React and a context-based pattern.",
        "You notice a memory leak in your Node.js application. Detail the steps and tools you would use to diagnose and fix it.",
    ],
}

class MockQuestionGenerator(QuestionGenerator):
    """
    Mock implementation picking from a fixed per-difficulty pool.
    Simulates latency and failure scenarios.
    """
    def __init__(self, should_fail: bool = False, latency: float = 0.0, rng: Optional[random.Random] = None):
        self.should_fail = should_fail
        self.latency = latency
        self.rng = rng or random.Random()

    async def generate_question(self, difficulty: Difficulty) -> QuestionGenerationResult:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        if self.should_fail:
            return QuestionGenerationResult.failed("Mock Failure: Intentional Error")

        pool = QUESTION_POOL.get(difficulty, QUESTION_POOL[Difficulty.MEDIUM])
        return QuestionGenerationResult.ok(
            self.rng.choice(pool),
            model="mock-pool",
            timestamp=time.time(),
            difficulty=difficulty.value
        )
