from __future__ import annotations

import itertools
import logging
from collections import Counter
from dataclasses import replace
from threading import RLock
from typing import Any

from civic_reports.domain.errors import ConflictError, NotFoundError
from civic_reports.domain.models import (
    Candidate,
    ChatScope,
    Company,
    Message,
    NotificationEvent,
    ProblemCategory,
    Report,
    TechnicalOffice,
    User,
    utc_now,
)
from civic_reports.domain.roles import Role
from civic_reports.domain.states import ReportStatus, is_active

logger = logging.getLogger(__name__)

# Fields fixed at creation time.
IMMUTABLE_REPORT_FIELDS = frozenset({"id", "user_id", "category_id", "created_at"})


class RepositoryError(RuntimeError):
    pass


class ReportRepository:
    """Persistence collaborator used by the report core.

    Implementations return normalized reports: every assignee is a plain id.
    ``update_report`` applies a patch atomically and, when ``expected_status``
    is given, only if the stored status still matches it.
    """

    def create_report(self, report: Report) -> Report:
        raise NotImplementedError

    def find_report_by_id(self, report_id: int) -> Report | None:
        raise NotImplementedError

    def update_report(
        self,
        report_id: int,
        patch: dict[str, Any],
        expected_status: ReportStatus | None = None,
    ) -> Report:
        raise NotImplementedError

    def list_reports(
        self,
        status: ReportStatus | None = None,
        user_id: int | None = None,
        technical_officer_id: int | None = None,
        external_maintainer_id: int | None = None,
    ) -> list[Report]:
        raise NotImplementedError

    def find_user(self, user_id: int) -> User | None:
        raise NotImplementedError

    def find_category_with_office(self, category_id: int) -> tuple[ProblemCategory, TechnicalOffice | None] | None:
        raise NotImplementedError

    def find_office_staff_with_active_counts(self, office_id: int) -> list[Candidate]:
        raise NotImplementedError

    def find_company_with_maintainers(self, company_id: int) -> tuple[Company, list[Candidate]] | None:
        raise NotImplementedError

    def list_companies_for_category(self, category_id: int) -> list[Company]:
        raise NotImplementedError

    def create_notification(self, event: NotificationEvent) -> NotificationEvent:
        raise NotImplementedError

    def list_notifications(self, user_id: int) -> list[NotificationEvent]:
        raise NotImplementedError

    def mark_notification_read(self, notification_id: int, user_id: int) -> NotificationEvent | None:
        raise NotImplementedError

    def create_message(self, message: Message) -> Message:
        raise NotImplementedError

    def list_messages(self, report_id: int, scope: ChatScope | None = None) -> list[Message]:
        raise NotImplementedError


class InMemoryRepository(ReportRepository):
    def __init__(self) -> None:
        self._lock = RLock()
        self._ids = {
            "report": itertools.count(1),
            "notification": itertools.count(1),
            "message": itertools.count(1),
        }
        self._reports: dict[int, Report] = {}
        self._users: dict[int, User] = {}
        self._offices: dict[int, TechnicalOffice] = {}
        self._categories: dict[int, ProblemCategory] = {}
        self._companies: dict[int, Company] = {}
        self._notifications: dict[int, NotificationEvent] = {}
        self._messages: list[Message] = []

    # Reference data. Managed by administrative tooling, not by the core.

    def add_user(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user
            return replace(user)

    def add_office(self, office: TechnicalOffice) -> TechnicalOffice:
        with self._lock:
            self._offices[office.id] = office
            return replace(office)

    def add_category(self, category: ProblemCategory) -> ProblemCategory:
        with self._lock:
            self._categories[category.id] = category
            return replace(category)

    def add_company(self, company: Company) -> Company:
        with self._lock:
            self._companies[company.id] = company
            return replace(company, category_ids=set(company.category_ids))

    # Reports

    def create_report(self, report: Report) -> Report:
        with self._lock:
            now = utc_now()
            item = replace(report, id=next(self._ids["report"]), created_at=now, updated_at=now)
            item.photos = list(report.photos)
            self._reports[item.id] = item
            return replace(item, photos=list(item.photos))

    def find_report_by_id(self, report_id: int) -> Report | None:
        with self._lock:
            row = self._reports.get(report_id)
            return replace(row, photos=list(row.photos)) if row else None

    def update_report(
        self,
        report_id: int,
        patch: dict[str, Any],
        expected_status: ReportStatus | None = None,
    ) -> Report:
        with self._lock:
            existing = self._reports.get(report_id)
            if existing is None:
                raise NotFoundError(f"Report with ID {report_id} not found")
            frozen = IMMUTABLE_REPORT_FIELDS.intersection(patch)
            if frozen:
                raise RepositoryError(f"Cannot patch immutable report fields: {sorted(frozen)}")
            if expected_status is not None and existing.status != expected_status:
                raise ConflictError(
                    f"Report {report_id} changed concurrently. "
                    f"Current status is '{existing.status.value}', expected '{ReportStatus(expected_status).value}'"
                )
            updated = replace(existing, **patch, updated_at=utc_now())
            self._reports[report_id] = updated
            return replace(updated, photos=list(updated.photos))

    def list_reports(
        self,
        status: ReportStatus | None = None,
        user_id: int | None = None,
        technical_officer_id: int | None = None,
        external_maintainer_id: int | None = None,
    ) -> list[Report]:
        with self._lock:
            rows = list(self._reports.values())
        if status is not None:
            rows = [r for r in rows if r.status == status]
        if user_id is not None:
            rows = [r for r in rows if r.user_id == user_id]
        if technical_officer_id is not None:
            rows = [r for r in rows if r.technical_officer_id == technical_officer_id]
        if external_maintainer_id is not None:
            rows = [r for r in rows if r.external_maintainer_id == external_maintainer_id]
        rows.sort(key=lambda r: (r.created_at, r.id or 0), reverse=True)
        return [replace(r, photos=list(r.photos)) for r in rows]

    # Lookups

    def find_user(self, user_id: int) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def find_category_with_office(self, category_id: int) -> tuple[ProblemCategory, TechnicalOffice | None] | None:
        with self._lock:
            category = self._categories.get(category_id)
            if category is None:
                return None
            office = self._offices.get(category.technical_office_id) if category.technical_office_id else None
            return replace(category), (replace(office) if office else None)

    def _active_counts(self, field_name: str) -> Counter:
        counts: Counter = Counter()
        for report in self._reports.values():
            assignee = getattr(report, field_name)
            if assignee is not None and is_active(report.status):
                counts[assignee] += 1
        return counts

    def _candidates(self, users: list[User], field_name: str) -> list[Candidate]:
        counts = self._active_counts(field_name)
        return [
            Candidate(
                id=u.id,
                last_name=u.last_name,
                first_name=u.first_name,
                active_report_count=counts.get(u.id, 0),
            )
            for u in users
        ]

    def find_office_staff_with_active_counts(self, office_id: int) -> list[Candidate]:
        with self._lock:
            staff = [
                u
                for u in self._users.values()
                if u.technical_office_id == office_id and u.role == Role.TECHNICAL_STAFF
            ]
            return self._candidates(staff, "technical_officer_id")

    def find_company_with_maintainers(self, company_id: int) -> tuple[Company, list[Candidate]] | None:
        with self._lock:
            company = self._companies.get(company_id)
            if company is None:
                return None
            maintainers = [
                u
                for u in self._users.values()
                if u.company_id == company_id and u.role == Role.EXTERNAL_MAINTAINER
            ]
            return (
                replace(company, category_ids=set(company.category_ids)),
                self._candidates(maintainers, "external_maintainer_id"),
            )

    def list_companies_for_category(self, category_id: int) -> list[Company]:
        with self._lock:
            rows = [c for c in self._companies.values() if c.services(category_id)]
            return [replace(c, category_ids=set(c.category_ids)) for c in sorted(rows, key=lambda c: c.name)]

    # Notifications

    def create_notification(self, event: NotificationEvent) -> NotificationEvent:
        with self._lock:
            item = replace(event, id=next(self._ids["notification"]))
            self._notifications[item.id] = item
            return replace(item)

    def list_notifications(self, user_id: int) -> list[NotificationEvent]:
        with self._lock:
            rows = [n for n in self._notifications.values() if n.user_id == user_id]
        rows.sort(key=lambda n: (n.created_at, n.id or 0), reverse=True)
        return [replace(n) for n in rows]

    def mark_notification_read(self, notification_id: int, user_id: int) -> NotificationEvent | None:
        with self._lock:
            item = self._notifications.get(notification_id)
            if item is None or item.user_id != user_id:
                return None
            item.is_read = True
            return replace(item)

    # Messages

    def create_message(self, message: Message) -> Message:
        with self._lock:
            item = replace(message, id=next(self._ids["message"]))
            self._messages.append(item)
            return replace(item)

    def list_messages(self, report_id: int, scope: ChatScope | None = None) -> list[Message]:
        with self._lock:
            rows = [m for m in self._messages if m.report_id == report_id]
        if scope is not None:
            rows = [m for m in rows if m.scope == ChatScope(scope)]
        return [replace(m) for m in rows]


def build_repository(seed: bool = False) -> ReportRepository:
    repo = InMemoryRepository()
    if seed:
        from civic_reports.infra.seed import seed_demo_data

        seed_demo_data(repo)
        logger.info("In-memory repository seeded with demo data")
    return repo
