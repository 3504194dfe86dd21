from civic_reports.infra.repositories import (
    InMemoryRepository,
    ReportRepository,
    RepositoryError,
    build_repository,
)

__all__ = [
    "ReportRepository",
    "InMemoryRepository",
    "RepositoryError",
    "build_repository",
]
