from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from civic_reports.domain.roles import Role
from civic_reports.domain.states import ReportStatus


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChatScope(str, Enum):
    INTERNAL = "internal"  # citizen <-> technical officer
    EXTERNAL = "external"  # technical officer <-> external maintainer


@dataclass
class Report:
    user_id: int
    category_id: int
    title: str
    description: str
    latitude: float
    longitude: float
    id: int | None = None
    address: str | None = None
    anonymous: bool = False
    photos: list[str] = field(default_factory=list)
    status: ReportStatus = ReportStatus.PENDING_APPROVAL
    rejection_reason: str | None = None
    technical_officer_id: int | None = None
    external_maintainer_id: int | None = None
    company_id: int | None = None
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        row = asdict(self)
        row["status"] = self.status.value
        return row


@dataclass
class User:
    id: int
    username: str
    first_name: str
    last_name: str
    role: Role
    email: str | None = None
    technical_office_id: int | None = None
    company_id: int | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class TechnicalOffice:
    id: int
    name: str
    category_id: int | None = None


@dataclass
class ProblemCategory:
    id: int
    name: str
    technical_office_id: int | None = None


@dataclass
class Company:
    id: int
    name: str
    category_ids: set[int] = field(default_factory=set)

    def services(self, category_id: int) -> bool:
        return category_id in self.category_ids


@dataclass(frozen=True)
class Candidate:
    id: int
    last_name: str
    first_name: str
    active_report_count: int = 0


@dataclass
class NotificationEvent:
    user_id: int
    report_id: int
    kind: str
    message: str
    id: int | None = None
    is_read: bool = False
    created_at: str = field(default_factory=utc_now)


@dataclass
class Message:
    report_id: int
    author_id: int
    scope: ChatScope
    content: str
    id: int | None = None
    created_at: str = field(default_factory=utc_now)


@dataclass(frozen=True)
class Transition:
    report: Report
    previous_status: ReportStatus
    actor_id: int
    action: str

    @property
    def status_changed(self) -> bool:
        return self.report.status != self.previous_status
