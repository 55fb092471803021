"""Exception hierarchy for the triage engine.

Missing data is never an error; these are raised only for structurally
invalid input or for reference data that must stop the process at start-up.
"""

from __future__ import annotations

from typing import Any


class PhysioError(Exception):
    """Base exception for all triage engine errors."""

    def __init__(
        self,
        message: str,
        code: str = "PHYSIO_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {"error": self.code, "message": self.message, "details": self.details}


class KnowledgeBaseError(PhysioError):
    """The reference tables failed validation; the process must not start."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, code="KNOWLEDGE_BASE_ERROR", details=details)


class IntakeError(PhysioError, ValueError):
    """The intake (or answer history) is not a well-formed record."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, code="MALFORMED_INTAKE", details=details)
