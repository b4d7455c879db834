"""Error types shared by the financial engines."""

from __future__ import annotations


class InvalidInput(ValueError):
    """Raised when a caller supplies a value outside an engine's domain.

    Subclasses ``ValueError`` so callers that already guard numeric parsing with
    ``except ValueError`` keep working.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
