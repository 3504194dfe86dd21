"""Typed failures raised by the report core.

Each error carries a stable ``kind`` so a transport adapter can render a
response without reinterpreting domain logic. Errors are never swallowed
inside the core; they propagate unchanged to the caller.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    kind = "domain"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class ValidationError(DomainError, ValueError):
    """Malformed input. Always caller-fixable."""

    kind = "validation"

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.errors:
            out["errors"] = self.errors
        return out


class NotFoundError(DomainError, LookupError):
    kind = "not_found"


class ConflictError(DomainError):
    """The entity exists but its state does not allow the operation."""

    kind = "conflict"


class ForbiddenError(DomainError, PermissionError):
    kind = "forbidden"


class ConfigurationError(DomainError, RuntimeError):
    """Reference data is inconsistent (e.g. a category without an office)."""

    kind = "configuration"
