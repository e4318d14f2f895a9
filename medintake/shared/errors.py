"""Error taxonomy for the intake platform.

ValidationError is surfaced to the caller with field-level detail.
Oracle errors are always recovered locally by the fallback path and never
reach the patient.
"""
from typing import Any, Dict, List, Optional, Sequence


class IntakeError(Exception):
    """Base class for expected, handled intake failures."""


class ValidationError(IntakeError):
    """Malformed or incomplete questionnaire input.

    Args:
        issues: List of {"field": ..., "message": ...} entries
    """

    def __init__(self, issues: List[Dict[str, str]]):
        self.issues = list(issues)
        summary = "; ".join(f"{i['field']}: {i['message']}" for i in self.issues)
        super().__init__(summary or "Invalid questionnaire data")

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])


class OracleUnavailable(IntakeError):
    """The AI oracle failed, timed out, or returned unparseable output."""


class OracleMalformed(OracleUnavailable):
    """The oracle returned valid JSON that is missing expected fields.

    Args:
        missing_fields: Names of the absent or unusable fields
        partial: The parsed result with safe defaults substituted for
            the missing fields
    """

    def __init__(
        self,
        missing_fields: Sequence[str],
        partial: Optional[Any] = None,
        message: Optional[str] = None,
    ):
        self.missing_fields = list(missing_fields)
        self.partial = partial
        super().__init__(message or f"Oracle response missing fields: {', '.join(self.missing_fields)}")
