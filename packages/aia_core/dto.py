from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class BaseDTO(BaseModel):
    """
    Base class of every DTO in the project.

    Features:
        - from_attributes=True (build from plain objects)
        - str_strip_whitespace=True (strings are trimmed on validation)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        populate_by_name=True
    )

class SnapshotDTO(BaseDTO):
    """
    DTO persisted to the local durable store.
    Serialized with camelCase keys (currentCandidate, timeRemaining, ...).
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        populate_by_name=True,
        alias_generator=to_camel,
        validate_assignment=True
    )


# -------------------------------------------------------------------------
# Resume Parser DTOs
# -------------------------------------------------------------------------
class ResumeUploadDTO(BaseDTO):
    file_name: str
    content: bytes = b""
    content_type: str | None = None

    @property
    def extension(self) -> str:
        _, _, ext = self.file_name.rpartition(".")
        return ext.lower() if ext != self.file_name else ""

class ContactInfoDTO(BaseDTO):
    name: str = ""
    email: str = ""
    phone: str = ""

    def missing_fields(self) -> list[str]:
        return [key for key in ("name", "email", "phone") if not getattr(self, key)]


# -------------------------------------------------------------------------
# Scoring / Report DTOs
# -------------------------------------------------------------------------
class AnswerScoreDTO(BaseDTO):
    score: int
    rationale: str

class FinalReportDTO(BaseDTO):
    final_score: int
    summary: str
