from .base import IReportGenerator
from .mock import MockReportGenerator

__all__ = ["IReportGenerator", "MockReportGenerator"]
