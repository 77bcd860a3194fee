"""
Exception classes for result processing.
Each exception logs itself when raised so batch jobs leave a trail.
"""

import logging

logger = logging.getLogger(__name__)


class ResultEngineException(Exception):
    """Base exception for result aggregation and grading"""

    def __init__(self, message=None, details=None):
        self.message = message or "An error occurred while processing results"
        self.details = details
        super().__init__(self.message)

        logger.error(f"{self.__class__.__name__}: {self.message} - Details: {details}")


class MarksValidationError(ResultEngineException):
    """Raised when one or more subject entries hold invalid marks"""

    def __init__(self, message="Marks validation failed", entry_errors=None, **kwargs):
        self.entry_errors = entry_errors or []
        super().__init__(message, **kwargs)

    def as_list(self):
        return [error.as_dict() for error in self.entry_errors]


class SubjectGroupingError(ResultEngineException):
    """Raised when subjects sharing a code belong to different class/exam setups"""

    def __init__(self, message="Inconsistent subject grouping", conflicts=None, **kwargs):
        self.conflicts = conflicts or {}
        super().__init__(message, **kwargs)


class CohortChangedError(ResultEngineException):
    """Raised when the cohort changed while positions were being computed"""

    def __init__(self, message="Cohort changed during ranking", **kwargs):
        super().__init__(message, **kwargs)
