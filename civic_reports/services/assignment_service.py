from __future__ import annotations

import logging
from typing import Any

from civic_reports.domain.errors import ConfigurationError, ConflictError, NotFoundError, ValidationError
from civic_reports.domain.models import Company, Report
from civic_reports.domain.state_machine import StateMachine
from civic_reports.domain.states import OWNED_STATUSES, ReportStatus
from civic_reports.domain.workload import pick_least_loaded
from civic_reports.infra.repositories import ReportRepository

logger = logging.getLogger(__name__)


class AssignmentEngine:
    """Picks the least loaded assignee for a report.

    Selection is deterministic for a given snapshot of workloads. Two calls
    racing on the same pool may both pick the same person; callers needing
    exclusivity serialize writes at the storage layer.
    """

    def __init__(self, repo: ReportRepository, sm: StateMachine | None = None) -> None:
        self.repo = repo
        self.sm = sm or StateMachine()

    def assign_to_technical_office(self, report: Report) -> dict[str, Any]:
        self.sm.require("assign report to a technical office", report.status, [ReportStatus.PENDING_APPROVAL])

        found = self.repo.find_category_with_office(report.category_id)
        if found is None:
            raise NotFoundError(f"Category with id \"{report.category_id}\" not found.")
        category, office = found
        if office is None:
            logger.error("Category %s (%s) has no owning technical office", category.id, category.name)
            raise ConfigurationError(f"Category '{category.name}' is not linked to a technical office")

        staff = self.repo.find_office_staff_with_active_counts(office.id)
        winner = pick_least_loaded(staff)
        if winner is None:
            raise ConflictError(f"No technical officers in office '{office.name}'")

        logger.info(
            "Report %s assigned to technical officer %s (%d active) in office %s",
            report.id,
            winner.id,
            winner.active_report_count,
            office.id,
        )
        return {
            "status": ReportStatus.ASSIGNED,
            "technical_officer_id": winner.id,
            "rejection_reason": None,
        }

    def assign_to_external_maintainer(self, report: Report, company_id: int) -> dict[str, Any]:
        self.sm.require("assign report to an external maintainer", report.status, sorted(OWNED_STATUSES, key=_order))

        found = self.repo.find_company_with_maintainers(company_id)
        if found is None:
            raise NotFoundError(f"Company with id \"{company_id}\" not found.")
        company, maintainers = found
        if not company.services(report.category_id):
            raise ValidationError(
                f"Company '{company.name}' does not service the category of report {report.id}."
            )

        winner = pick_least_loaded(maintainers)
        if winner is None:
            raise ConflictError(f"No external maintainers in company '{company.name}'")

        logger.info(
            "Report %s handed off to external maintainer %s (%d active) of company %s",
            report.id,
            winner.id,
            winner.active_report_count,
            company.id,
        )
        return {"external_maintainer_id": winner.id, "company_id": company.id}

    def eligible_companies(self, category_id: int) -> list[Company]:
        return self.repo.list_companies_for_category(category_id)


def _order(status: ReportStatus) -> int:
    return list(ReportStatus).index(status)
