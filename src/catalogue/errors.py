"""Error outcomes raised by catalogue operations.

Every condition a caller has to handle derives from CatalogueError, so the
HTTP layer can map each subclass to its own response.
"""

from __future__ import annotations


class CatalogueError(Exception):
    """Base class for catalogue operation failures."""


class ValidationError(CatalogueError):
    """Raised when required properties are missing on create."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required fields: {', '.join(self.missing)}")


class NotFound(CatalogueError):
    """Raised when no feature carries the requested id."""

    def __init__(self, feature_id: int) -> None:
        self.feature_id = feature_id
        super().__init__(f"Attraction not found: {feature_id}")


class BadRequest(CatalogueError):
    """Raised when query parameters are missing or not numeric."""


class PersistenceFailure(CatalogueError):
    """Raised when a mutation could not be written back to the document.

    The in-memory change is discarded; callers must assume it did not happen.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Failed to {operation} attraction")
