from .base import IResumeParser
from .mock import MockResumeParser
from .pdf_provider import LocalPDFResumeParser

__all__ = ["IResumeParser", "MockResumeParser", "LocalPDFResumeParser"]
