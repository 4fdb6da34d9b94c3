"""
Error taxonomy for the booking and listing engine.

Every error carries the HTTP status the API layer maps it to, and a stable
``kind`` string that is returned to clients so that errors sharing a status
code (e.g. 409) remain distinguishable.
"""

from __future__ import annotations

from typing import Any, Optional


class HousingError(Exception):
    """Base class for all user-visible domain errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "detail": self.message}


class NotFoundError(HousingError):
    """Unknown listing, booking or review id."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class InvalidRangeError(HousingError):
    """Malformed, zero-length or negative-length date range."""

    status_code = 400


class InvalidInputError(HousingError):
    """A field value outside its allowed domain (guest count, rating, ...)."""

    status_code = 400


class InvalidTransitionError(HousingError):
    """A status change that the transition table or its preconditions forbid."""

    status_code = 409

    def __init__(self, current: Any, target: Any, reason: Optional[str] = None) -> None:
        current_value = getattr(current, "value", current)
        target_value = getattr(target, "value", target)
        message = f"Cannot transition from {current_value} to {target_value}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["from"] = getattr(self.current, "value", self.current)
        payload["to"] = getattr(self.target, "value", self.target)
        return payload


class ConflictError(HousingError):
    """The requested dates or capacity are no longer available."""

    status_code = 409


class UnauthorizedError(HousingError):
    """The actor is not permitted to perform the operation."""

    status_code = 403
