from __future__ import annotations

from typing import Any, Dict, Literal, Optional

ErrorCategory = Literal["UNAUTHORIZED", "NOT_FOUND", "INVALID_INPUT", "CONFLICT"]
UnauthorizedReason = Literal["MISSING", "NOT_FOUND", "EXPIRED"]


class ShopfloorError(Exception):
    """Base for every recoverable error raised by the core.

    The transport layer maps `category` to a protocol-level response.
    """

    category: ErrorCategory = "INVALID_INPUT"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.category, "message": self.message}


class Unauthorized(ShopfloorError):
    category = "UNAUTHORIZED"

    def __init__(self, reason: UnauthorizedReason, message: Optional[str] = None):
        super().__init__(message or f"Unauthorized - {reason.lower().replace('_', ' ')} token")
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["reason"] = self.reason
        return d


class NotFound(ShopfloorError):
    category = "NOT_FOUND"

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class InvalidInput(ShopfloorError):
    category = "INVALID_INPUT"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        if self.field:
            d["field"] = self.field
        return d


class Conflict(ShopfloorError):
    category = "CONFLICT"
