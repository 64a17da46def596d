"""Exceptions raised by account moderation operations.

Both subclass ``ValueError`` so callers that only know the generic
"bad request" contract keep working; the HTTP layer maps them to 404/400.
"""


class ModerationError(ValueError):
    """Base class for rejected moderation operations. Nothing was mutated."""


class NotFoundError(ModerationError):
    """The target account, expert profile, course, or group does not exist."""

    def __init__(self, entity: str, entity_id: int) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class InvalidOperationError(ModerationError):
    """A precondition of the requested operation does not hold."""
