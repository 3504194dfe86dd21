from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from civic_reports.contracts.payloads import (
    ExternalAssignmentContract,
    ReportCreateContract,
    ReviewContract,
    StatusUpdateContract,
    parse_contract,
)
from civic_reports.domain.errors import ForbiddenError, NotFoundError, ValidationError
from civic_reports.domain.models import Company, Report, Transition
from civic_reports.domain.roles import Actor, Role
from civic_reports.domain.state_machine import StateMachine
from civic_reports.domain.states import ReportStatus
from civic_reports.events.bus import EventBus, build_event_bus
from civic_reports.events.contracts import build_event_envelope
from civic_reports.infra.repositories import ReportRepository, build_repository
from civic_reports.services.assignment_service import AssignmentEngine
from civic_reports.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

Payload = BaseModel | dict[str, Any] | None


class ReportService:
    """Report lifecycle: creation, review, status updates and external hand-off.

    Every mutation follows the same order: role check, input validation,
    ownership check, state check, one atomic repository patch, then
    best-effort notification.
    """

    def __init__(
        self,
        repo: ReportRepository | None = None,
        bus: EventBus | None = None,
        engine: AssignmentEngine | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self.repo = repo or build_repository()
        self.bus = bus or build_event_bus()
        self.sm = StateMachine()
        self.engine = engine or AssignmentEngine(self.repo, self.sm)
        self.notifications = notifications or NotificationService(self.repo, self.bus)

    def create_report(self, actor: Actor, payload: Payload) -> Report:
        self._require_role(actor, {Role.CITIZEN}, "create reports")
        data = parse_contract(ReportCreateContract, payload, "report")

        if self.repo.find_category_with_office(data.category_id) is None:
            raise NotFoundError(f"Category with id \"{data.category_id}\" not found.")

        report = self.repo.create_report(
            Report(
                user_id=actor.id,
                category_id=data.category_id,
                title=data.title,
                description=data.description,
                latitude=data.latitude,
                longitude=data.longitude,
                address=data.address,
                anonymous=data.anonymous,
                photos=list(data.photos),
            )
        )
        logger.info("Report %s created by citizen %s", report.id, actor.id)
        self._event("report.created", report, actor, {"category_id": report.category_id})
        return report

    def review_report(self, report_id: int, actor: Actor, payload: Payload) -> Report:
        self._require_role(actor, {Role.PUBLIC_RELATIONS_OFFICER}, "review reports")
        decision = parse_contract(ReviewContract, payload, "review")
        report = self.get_report(report_id)

        action = "accept report" if decision.accepted else "reject report"
        self.sm.require(action, report.status, [ReportStatus.PENDING_APPROVAL])

        if decision.accepted:
            patch = self.engine.assign_to_technical_office(report)
        else:
            patch = {
                "status": ReportStatus.REJECTED,
                "rejection_reason": decision.rejection_reason,
                "technical_officer_id": None,
            }

        updated = self.repo.update_report(report.id, patch, expected_status=report.status)
        if decision.accepted:
            self._event("report.approved", updated, actor, {"technical_officer_id": updated.technical_officer_id})
        else:
            self._event("report.rejected", updated, actor, {"rejection_reason": updated.rejection_reason})
        return self._complete(updated, report.status, actor, action)

    def update_status(self, report_id: int, actor: Actor, payload: Payload) -> Report:
        self._require_role(actor, {Role.TECHNICAL_STAFF, Role.EXTERNAL_MAINTAINER}, "update report status")
        data = parse_contract(StatusUpdateContract, payload, "status update")
        report = self.get_report(report_id)

        if actor.id not in {report.technical_officer_id, report.external_maintainer_id}:
            logger.warning("User %s tried to update report %s they do not manage", actor.id, report.id)
            raise ForbiddenError(f"You are not assigned to manage report with ID {report.id}")

        target = self.sm.transition(report.status, data.target)
        if target == report.status:
            return report

        updated = self.repo.update_report(report.id, {"status": target}, expected_status=report.status)
        self._event("report.status.changed", updated, actor, {"from": report.status.value, "to": target.value})
        return self._complete(updated, report.status, actor, "update status")

    def assign_external(self, report_id: int, actor: Actor, payload: Payload) -> Report:
        self._require_role(actor, {Role.TECHNICAL_STAFF}, "assign reports to external maintainers")
        data = parse_contract(ExternalAssignmentContract, payload, "external assignment")
        report = self.get_report(report_id)

        if report.technical_officer_id != actor.id:
            logger.warning("User %s tried to hand off report %s they do not manage", actor.id, report.id)
            raise ForbiddenError(f"You are not assigned to manage report with ID {report.id}")

        patch = self.engine.assign_to_external_maintainer(report, data.company_id)
        updated = self.repo.update_report(report.id, patch, expected_status=report.status)
        self._event("report.assigned.external", updated, actor, dict(patch))
        return self._complete(updated, report.status, actor, "assign external")

    def eligible_companies(self, report_id: int, actor: Actor) -> list[Company]:
        self._require_role(actor, {Role.TECHNICAL_STAFF}, "list maintenance companies")
        report = self.get_report(report_id)
        return self.engine.eligible_companies(report.category_id)

    def get_report(self, report_id: int) -> Report:
        report = self.repo.find_report_by_id(report_id)
        if report is None:
            raise NotFoundError(f"Report with ID {report_id} not found")
        return report

    def list_reports(self, status: ReportStatus | str | None = None) -> list[Report]:
        if status is None:
            return self.repo.list_reports()
        try:
            status = ReportStatus(status)
        except ValueError as exc:
            raise ValidationError(f"Unknown status: {status}") from exc
        return self.repo.list_reports(status=status)

    def list_reports_by_user(self, user_id: int) -> list[Report]:
        return self.repo.list_reports(user_id=user_id)

    def list_reports_for_assignee(self, actor: Actor) -> list[Report]:
        if actor.role == Role.TECHNICAL_STAFF:
            return self.repo.list_reports(technical_officer_id=actor.id)
        if actor.role == Role.EXTERNAL_MAINTAINER:
            return self.repo.list_reports(external_maintainer_id=actor.id)
        raise ForbiddenError("Only technical staff and external maintainers have assigned reports.")

    def to_public_dict(self, report: Report) -> dict[str, Any]:
        row = report.to_dict()
        if report.anonymous:
            row["reporter_name"] = "Anonymous"
        else:
            user = self.repo.find_user(report.user_id)
            row["reporter_name"] = (user.full_name or user.username) if user else None
        return row

    def _require_role(self, actor: Actor, allowed: set[Role], what: str) -> None:
        if actor.role not in allowed:
            logger.warning("User %s with role %s may not %s", actor.id, actor.role.value, what)
            raise ForbiddenError(f"Forbidden: role '{actor.role.value}' may not {what}.")

    def _complete(self, updated: Report, previous: ReportStatus, actor: Actor, action: str) -> Report:
        logger.info(
            "Report %s: %s by user %s (%s -> %s)",
            updated.id,
            action,
            actor.id,
            previous.value,
            updated.status.value,
        )
        self.notifications.handle_transition(
            Transition(report=updated, previous_status=previous, actor_id=actor.id, action=action)
        )
        return self.get_report(updated.id)

    def _event(self, event_type: str, report: Report, actor: Actor, payload: dict[str, Any]) -> None:
        envelope = build_event_envelope(
            event_type=event_type,
            report_id=report.id,
            actor_id=actor.id,
            payload=payload,
        )
        self.bus.publish(event_type, envelope)
