from __future__ import annotations

import logging

from civic_reports.domain.errors import NotFoundError
from civic_reports.domain.models import NotificationEvent, Report, Transition
from civic_reports.domain.states import ReportStatus
from civic_reports.events.bus import EventBus
from civic_reports.events.contracts import build_event_envelope
from civic_reports.infra.repositories import ReportRepository

logger = logging.getLogger(__name__)

STATUS_CHANGE = "REPORT_STATUS_CHANGE"


class TransitionNotifier:
    """Turns a completed transition into citizen-facing notification records."""

    def notifications_for(self, transition: Transition) -> list[NotificationEvent]:
        report = transition.report
        if not transition.status_changed or report.user_id is None or report.id is None:
            return []
        return [
            NotificationEvent(
                user_id=report.user_id,
                report_id=report.id,
                kind=STATUS_CHANGE,
                message=self._build_message(report),
            )
        ]

    def _build_message(self, report: Report) -> str:
        title = f"Your report \"{report.title}\""
        status = report.status

        if status == ReportStatus.ASSIGNED:
            return f"{title} has been approved and assigned to a technical officer."
        if status == ReportStatus.IN_PROGRESS:
            return f"{title} is now in progress."
        if status == ReportStatus.SUSPENDED:
            return f"{title} has been suspended."
        if status == ReportStatus.RESOLVED:
            return f"{title} has been resolved. Thank you for reporting it."
        if status == ReportStatus.REJECTED:
            return f"{title} has been rejected. Reason: {report.rejection_reason}."

        return f"{title} changed status to {status.value}."


class NotificationService:
    def __init__(self, repo: ReportRepository, bus: EventBus, notifier: TransitionNotifier | None = None) -> None:
        self.repo = repo
        self.bus = bus
        self.notifier = notifier or TransitionNotifier()

    def handle_transition(self, transition: Transition) -> list[NotificationEvent]:
        return self.dispatch(self.notifier.notifications_for(transition))

    def dispatch(self, events: list[NotificationEvent]) -> list[NotificationEvent]:
        """Store and publish events. Returns the ones that could not be stored.

        Runs after the transition has been committed, so a delivery failure is
        logged and left for a later retry instead of being raised.
        """
        failed: list[NotificationEvent] = []
        for event in events:
            try:
                stored = self.repo.create_notification(event)
            except Exception:
                logger.exception("Notification for user %s on report %s was not stored", event.user_id, event.report_id)
                failed.append(event)
                continue
            try:
                self.bus.publish(
                    "notification.created",
                    build_event_envelope(
                        event_type="notification.created",
                        report_id=stored.report_id,
                        actor_id=None,
                        payload={
                            "notification_id": stored.id,
                            "user_id": stored.user_id,
                            "kind": stored.kind,
                            "message": stored.message,
                        },
                    ),
                )
            except Exception:
                # Stored already; subscribers can catch up from the inbox.
                logger.exception("Publishing notification %s failed", stored.id)
        return failed

    def list_for_user(self, user_id: int) -> list[NotificationEvent]:
        return self.repo.list_notifications(user_id)

    def mark_read(self, notification_id: int, user_id: int) -> NotificationEvent:
        row = self.repo.mark_notification_read(notification_id, user_id)
        if row is None:
            raise NotFoundError(f"Notification with ID {notification_id} not found")
        return row
