"""Voice analysis services."""

from intelligence.analysis import AnalysisError, AnalysisService, MockAnalysisService

__all__ = ["AnalysisError", "AnalysisService", "MockAnalysisService"]
