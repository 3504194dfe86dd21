from __future__ import annotations

from enum import Enum


class ReportStatus(str, Enum):
    PENDING_APPROVAL = "Pending Approval"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "In Progress"
    SUSPENDED = "Suspended"
    REJECTED = "Rejected"
    RESOLVED = "Resolved"


# Statuses in which a report sits in someone's queue.
OWNED_STATUSES: frozenset[ReportStatus] = frozenset(
    {
        ReportStatus.ASSIGNED,
        ReportStatus.IN_PROGRESS,
        ReportStatus.SUSPENDED,
    }
)

TERMINAL_STATUSES: frozenset[ReportStatus] = frozenset({ReportStatus.RESOLVED, ReportStatus.REJECTED})

# Counted towards an assignee's workload.
ACTIVE_STATUSES: frozenset[ReportStatus] = frozenset(
    s for s in ReportStatus if s not in TERMINAL_STATUSES and s != ReportStatus.PENDING_APPROVAL
)

# Statuses an assignee may set on a report they manage.
ASSIGNEE_TARGETS: tuple[ReportStatus, ...] = (
    ReportStatus.IN_PROGRESS,
    ReportStatus.RESOLVED,
    ReportStatus.SUSPENDED,
)

ALLOWED_TRANSITIONS: dict[ReportStatus, set[ReportStatus]] = {
    ReportStatus.PENDING_APPROVAL: {ReportStatus.ASSIGNED, ReportStatus.REJECTED},
    ReportStatus.ASSIGNED: set(ASSIGNEE_TARGETS),
    ReportStatus.IN_PROGRESS: set(ASSIGNEE_TARGETS),
    ReportStatus.SUSPENDED: set(ASSIGNEE_TARGETS),
    ReportStatus.REJECTED: set(),
    ReportStatus.RESOLVED: set(),
}


def is_active(status: ReportStatus | str) -> bool:
    return ReportStatus(status) in ACTIVE_STATUSES
