"""Error taxonomy for roadmap operations.

None of these are fatal: each is scoped to the single operation that raised
it. Orphaned completion records are not represented here because they are
never an error, only filtered out during aggregation.
"""

from __future__ import annotations


class RoadmapError(Exception):
    """Base class for every roadmap error."""


class TransientStoreError(RoadmapError):
    """A persistence call failed (storage unavailable, I/O error, ...)."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        message = f"Store operation '{operation}' failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ValidationError(RoadmapError):
    """Input violates a field constraint; raised before any store call.

    Attributes:
        field: Name of the offending field (``title``, ``duration_minutes``, ...)
        value: The rejected value
    """

    def __init__(self, field: str, message: str, value: object = None) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field}: {message}")


class NotFoundError(RoadmapError):
    """A mutation targeted an id that the owner no longer has."""

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Activity '{entity_id}' not found")
