from __future__ import annotations

from civic_reports.domain.errors import ForbiddenError
from civic_reports.domain.models import ChatScope, Report


def participants(report: Report, scope: ChatScope | str) -> tuple[int, int] | None:
    """Ordered pair of users allowed to talk on ``report`` in ``scope``.

    ``None`` while the scope does not exist yet: the internal scope opens once
    a technical officer is assigned, the external one once a maintainer is
    assigned too.
    """
    scope = ChatScope(scope)
    officer = report.technical_officer_id
    if officer is None:
        return None
    if scope == ChatScope.INTERNAL:
        return (report.user_id, officer)
    if report.external_maintainer_id is None:
        return None
    return (officer, report.external_maintainer_id)


def is_participant(report: Report, user_id: int, scope: ChatScope | str) -> bool:
    pair = participants(report, scope)
    if pair is None or user_id is None:
        return False
    return int(user_id) in pair


def ensure_participant(report: Report, user_id: int, scope: ChatScope | str) -> None:
    if not is_participant(report, user_id, scope):
        raise ForbiddenError(
            f"Unauthorized: you are not a participant of the {ChatScope(scope).value} conversation on report {report.id}."
        )
