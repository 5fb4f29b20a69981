from enum import Enum
from typing import Optional

from packages.aia_dto.candidate import CandidateDetailDTO, CandidateListDTO
from packages.aia_service.mapper import CandidateMapper
from packages.aia_session.engine import SessionController
from packages.aia_session.state import CandidateStatus

class SortField(str, Enum):
    SCORE = "score"
    NAME = "name"
    EMAIL = "email"

class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

def default_order(sort_by: SortField) -> SortOrder:
    """Score sorts best first, text columns alphabetically."""
    return SortOrder.DESC if sort_by == SortField.SCORE else SortOrder.ASC

class InterviewerQueryService:
    """
    Read-Only Service behind the interviewer dashboard.
    Reads finalized records through the controller; never mutates state.
    """
    def __init__(self, controller: SessionController):
        self.controller = controller

    def list_completed(
        self,
        search: str = "",
        sort_by: SortField = SortField.SCORE,
        order: Optional[SortOrder] = None
    ) -> CandidateListDTO:
        """
        COMPLETED candidates only, filtered by a case-insensitive match on name or email.
        """
        order = order or default_order(sort_by)
        term = search.strip().lower()

        records = [r for r in self.controller.finalized if r.status == CandidateStatus.COMPLETED]
        if term:
            records = [r for r in records if term in r.name.lower() or term in r.email.lower()]

        if sort_by == SortField.SCORE:
            key = lambda r: r.score
        else:
            key = lambda r: getattr(r, sort_by.value).lower()
        records.sort(key=key, reverse=(order == SortOrder.DESC))

        return CandidateMapper.to_list_dto(records)

    def get_candidate_detail(self, candidate_id: str) -> Optional[CandidateDetailDTO]:
        record = self.controller.view_finalized_candidate(candidate_id)
        if not record:
            return None
        return CandidateMapper.to_detail(record, self.controller.catalog)
