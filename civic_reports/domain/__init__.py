from civic_reports.domain.errors import (
    ConfigurationError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from civic_reports.domain.roles import Actor, Role
from civic_reports.domain.states import ReportStatus

__all__ = [
    "Actor",
    "Role",
    "ReportStatus",
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ForbiddenError",
    "ConfigurationError",
]
