from __future__ import annotations

import logging

from civic_reports.contracts.payloads import MessageContract, parse_contract
from civic_reports.domain.access_policy import ensure_participant
from civic_reports.domain.errors import NotFoundError
from civic_reports.domain.models import ChatScope, Message, Report
from civic_reports.domain.roles import Actor
from civic_reports.events.bus import EventBus
from civic_reports.events.contracts import build_event_envelope
from civic_reports.infra.repositories import ReportRepository

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, repo: ReportRepository, bus: EventBus) -> None:
        self.repo = repo
        self.bus = bus

    def send_message(self, report_id: int, actor: Actor, payload: MessageContract | dict | None) -> Message:
        report = self._report(report_id)
        data = parse_contract(MessageContract, payload, "message")
        self._authorize(report, actor, data.scope)

        message = self.repo.create_message(
            Message(report_id=report.id, author_id=actor.id, scope=data.scope, content=data.content)
        )
        self.bus.publish(
            "message.created",
            build_event_envelope(
                event_type="message.created",
                report_id=report.id,
                actor_id=actor.id,
                payload={"message_id": message.id, "scope": message.scope.value},
            ),
        )
        return message

    def list_messages(self, report_id: int, actor: Actor, scope: ChatScope | str = ChatScope.INTERNAL) -> list[Message]:
        scope = ChatScope(scope)
        report = self._report(report_id)
        self._authorize(report, actor, scope)
        return self.repo.list_messages(report.id, scope)

    def _report(self, report_id: int) -> Report:
        report = self.repo.find_report_by_id(report_id)
        if report is None:
            raise NotFoundError(f"Report with ID {report_id} not found")
        return report

    def _authorize(self, report: Report, actor: Actor, scope: ChatScope) -> None:
        try:
            ensure_participant(report, actor.id, scope)
        except PermissionError:
            logger.warning("User %s denied %s chat on report %s", actor.id, scope.value, report.id)
            raise
