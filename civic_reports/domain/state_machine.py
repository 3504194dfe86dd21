from __future__ import annotations

from collections.abc import Iterable

from civic_reports.domain.errors import ConflictError
from civic_reports.domain.states import ALLOWED_TRANSITIONS, ReportStatus


def _quoted(statuses: Iterable[ReportStatus]) -> str:
    return ", ".join(f"'{s.value}'" for s in statuses)


def status_conflict(action: str, current: ReportStatus, expected: Iterable[ReportStatus]) -> ConflictError:
    expected = list(expected)
    if len(expected) == 1:
        wanted = f"expected {_quoted(expected)}"
    else:
        wanted = f"expected one of {_quoted(expected)}"
    return ConflictError(f"Cannot {action}. Current status is '{current.value}', {wanted}")


class StateMachine:
    def require(self, action: str, current: ReportStatus, expected: Iterable[ReportStatus]) -> None:
        expected = [ReportStatus(s) for s in expected]
        if ReportStatus(current) not in expected:
            raise status_conflict(action, ReportStatus(current), expected)

    def transition(self, current: ReportStatus, target: ReportStatus, action: str = "update report status") -> ReportStatus:
        current = ReportStatus(current)
        target = ReportStatus(target)
        allowed = ALLOWED_TRANSITIONS.get(current, set())
        if target not in allowed:
            sources = [s for s, targets in ALLOWED_TRANSITIONS.items() if target in targets]
            raise status_conflict(action, current, sources)
        return target
