"""
Core error taxonomy.

Every failure raised by the kernel and engines derives from LearnPathError and
is scoped to a single operation. The API layer maps each subclass to an HTTP
status via ``status_code``.
"""

from typing import Any, Dict, List, Optional


class LearnPathError(Exception):
    """Base exception for all core errors."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class InvalidPayload(LearnPathError):
    """Malformed or out-of-range input. The caller must correct it."""

    status_code = 400
    code = "invalid_payload"

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message, {"errors": errors} if errors else None)
        self.errors = errors or []


class InvalidIdentifier(LearnPathError):
    """A learner identifier that is present but not a valid UUID."""

    status_code = 400
    code = "invalid_identifier"

    def __init__(self, value: object) -> None:
        super().__init__("Invalid learner identifier")
        # The rejected value is kept off the message so it never reaches logs.
        self.value = value


class NotFound(LearnPathError):
    """A referenced track or lesson does not exist."""

    status_code = 404
    code = "not_found"

    def __init__(self, entity_type: str, key: object) -> None:
        super().__init__(f"{entity_type.capitalize()} not found", {"entity_type": entity_type, "key": str(key)})
        self.entity_type = entity_type
        self.key = key


class ConflictError(LearnPathError):
    """A concurrent write collided with a uniqueness constraint. Safe to retry."""

    status_code = 409
    code = "conflict"
