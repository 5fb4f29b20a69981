from typing import List
from packages.aia_dto.candidate import (
    CandidateDetailDTO,
    CandidateListDTO,
    CandidateSummaryDTO,
    QuestionReviewDTO,
)
from packages.aia_session.catalog import DEFAULT_CATALOG, QuestionCatalog
from packages.aia_session.dto import FinalizedCandidate
from packages.aia_session.state import TurnRole


class CandidateMapper:
    """
    Explicit Mapper to convert finalized candidate records to dashboard DTOs.
    Ensures no session objects leak into the presentation layer.
    """

    @staticmethod
    def to_summary(record: FinalizedCandidate) -> CandidateSummaryDTO:
        return CandidateSummaryDTO(
            id=record.id,
            name=record.name,
            email=record.email,
            score=record.score,
            status=record.status.value,
            finalized_at=record.finalized_at
        )

    @staticmethod
    def to_list_dto(records: List[FinalizedCandidate]) -> CandidateListDTO:
        return CandidateListDTO(
            candidates=[CandidateMapper.to_summary(r) for r in records],
            total_count=len(records)
        )

    @staticmethod
    def to_detail(record: FinalizedCandidate, catalog: QuestionCatalog = DEFAULT_CATALOG) -> CandidateDetailDTO:
        # Welcome turn (question_id 0) is not part of the review
        turns = [t for t in record.history if t.question_id > 0]
        questions: List[QuestionReviewDTO] = []

        for index, turn in enumerate(turns):
            if turn.role != TurnRole.INTERVIEWER:
                continue
            # The answer is the candidate turn right after the question, if any
            following = turns[index + 1] if index + 1 < len(turns) else None
            answer = following if following is not None and following.role == TurnRole.CANDIDATE else None

            slot = catalog.get(turn.question_id)
            questions.append(QuestionReviewDTO(
                question_id=turn.question_id,
                difficulty=slot.difficulty.value if slot else "N/A",
                time_limit_seconds=slot.time_limit_seconds if slot else 0,
                question=turn.content,
                score=turn.score,
                rationale=turn.rationale,
                answer=answer.content if answer else None,
                time_spent=answer.time_spent if answer else None
            ))

        return CandidateDetailDTO(
            id=record.id,
            name=record.name,
            email=record.email,
            phone=record.phone,
            status=record.status.value,
            score=record.score,
            summary=record.summary,
            questions=questions
        )
