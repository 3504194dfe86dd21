"""
AssignmentEngine: technical-office triage and external hand-off selection.
"""
from dataclasses import replace

import pytest

from conftest import (
    BIANCHI_ID,
    CITIZEN_ID,
    EMPTY_CO,
    LIGHTING,
    LUCE_SRL,
    MAINTAINER_ID,
    ROADS,
    ROSSI_ID,
)
from civic_reports.domain.errors import ConfigurationError, ConflictError, NotFoundError, ValidationError
from civic_reports.domain.models import Company, ProblemCategory, Report, User
from civic_reports.domain.roles import Role
from civic_reports.domain.states import ReportStatus
from civic_reports.services.assignment_service import AssignmentEngine


def make_report(repo, category_id=LIGHTING, **fields):
    report = repo.create_report(
        Report(
            user_id=CITIZEN_ID,
            category_id=category_id,
            title="Pothole",
            description="Deep pothole in the middle of the road.",
            latitude=45.0,
            longitude=7.6,
        )
    )
    if fields:
        report = repo.update_report(report.id, fields)
    return report


@pytest.fixture
def engine(repo):
    return AssignmentEngine(repo)


def test_tie_on_workload_goes_to_earlier_last_name(engine, repo):
    report = make_report(repo)

    patch = engine.assign_to_technical_office(report)

    assert patch == {
        "status": ReportStatus.ASSIGNED,
        "technical_officer_id": BIANCHI_ID,
        "rejection_reason": None,
    }


def test_equal_active_counts_still_pick_bianchi(engine, repo):
    for officer in (BIANCHI_ID, BIANCHI_ID, ROSSI_ID, ROSSI_ID):
        make_report(repo, status=ReportStatus.IN_PROGRESS, technical_officer_id=officer)

    assert engine.assign_to_technical_office(make_report(repo))["technical_officer_id"] == BIANCHI_ID


def test_least_loaded_officer_wins(engine, repo):
    make_report(repo, status=ReportStatus.ASSIGNED, technical_officer_id=BIANCHI_ID)

    assert engine.assign_to_technical_office(make_report(repo))["technical_officer_id"] == ROSSI_ID


def test_closed_reports_do_not_count_as_workload(engine, repo):
    make_report(repo, status=ReportStatus.RESOLVED, technical_officer_id=BIANCHI_ID)
    make_report(repo, status=ReportStatus.RESOLVED, technical_officer_id=BIANCHI_ID)
    make_report(repo, status=ReportStatus.SUSPENDED, technical_officer_id=ROSSI_ID)

    assert engine.assign_to_technical_office(make_report(repo))["technical_officer_id"] == BIANCHI_ID


def test_only_pending_reports_can_be_triaged(engine, repo):
    report = make_report(repo, status=ReportStatus.ASSIGNED, technical_officer_id=ROSSI_ID)

    with pytest.raises(ConflictError) as exc:
        engine.assign_to_technical_office(report)

    assert "Current status is 'Assigned'" in str(exc.value)


def test_unknown_category_is_not_found(engine, repo):
    report = replace(make_report(repo), category_id=999)

    with pytest.raises(NotFoundError):
        engine.assign_to_technical_office(report)


def test_category_without_office_is_a_configuration_error(engine, repo):
    repo.add_category(ProblemCategory(id=50, name="Orphan Category"))

    with pytest.raises(ConfigurationError) as exc:
        engine.assign_to_technical_office(make_report(repo, category_id=50))

    assert "not linked to a technical office" in str(exc.value)


def test_office_without_staff_is_a_conflict(engine, repo):
    repo.add_user(User(3, "neri", "Anna", "Neri", Role.CITIZEN))  # moves the only roads officer out
    report = make_report(repo, category_id=ROADS)

    with pytest.raises(ConflictError) as exc:
        engine.assign_to_technical_office(report)

    assert str(exc.value) == "No technical officers in office 'Roads Office'"


def test_external_assignment_returns_maintainer_and_company(engine, repo):
    report = make_report(repo, status=ReportStatus.IN_PROGRESS, technical_officer_id=BIANCHI_ID)

    patch = engine.assign_to_external_maintainer(report, LUCE_SRL)

    assert patch == {"external_maintainer_id": MAINTAINER_ID, "company_id": LUCE_SRL}


def test_external_assignment_prefers_less_busy_maintainer(engine, repo):
    repo.add_user(User(302, "aldo", "Aldo", "Amato", Role.EXTERNAL_MAINTAINER, company_id=LUCE_SRL))
    make_report(
        repo,
        status=ReportStatus.IN_PROGRESS,
        technical_officer_id=BIANCHI_ID,
        external_maintainer_id=302,
        company_id=LUCE_SRL,
    )
    report = make_report(repo, status=ReportStatus.ASSIGNED, technical_officer_id=BIANCHI_ID)

    assert engine.assign_to_external_maintainer(report, LUCE_SRL)["external_maintainer_id"] == MAINTAINER_ID


def test_external_assignment_requires_triaged_report(engine, repo):
    with pytest.raises(ConflictError) as exc:
        engine.assign_to_external_maintainer(make_report(repo), LUCE_SRL)

    assert "Current status is 'Pending Approval'" in str(exc.value)


@pytest.mark.parametrize("status", [ReportStatus.RESOLVED, ReportStatus.REJECTED])
def test_closed_reports_cannot_be_handed_off(engine, repo, status):
    report = make_report(repo, status=status)

    with pytest.raises(ConflictError):
        engine.assign_to_external_maintainer(report, LUCE_SRL)


def test_unknown_company_is_not_found(engine, repo):
    report = make_report(repo, status=ReportStatus.ASSIGNED, technical_officer_id=BIANCHI_ID)

    with pytest.raises(NotFoundError):
        engine.assign_to_external_maintainer(report, 99999)


def test_company_without_maintainers_is_a_conflict(engine, repo):
    report = make_report(repo, status=ReportStatus.ASSIGNED, technical_officer_id=BIANCHI_ID)

    with pytest.raises(ConflictError) as exc:
        engine.assign_to_external_maintainer(report, EMPTY_CO)

    assert str(exc.value) == "No external maintainers in company 'Empty Co'"


def test_company_must_service_the_report_category(engine, repo):
    repo.add_company(Company(id=12, name="Road Works", category_ids={ROADS}))
    report = make_report(repo, status=ReportStatus.ASSIGNED, technical_officer_id=BIANCHI_ID)

    with pytest.raises(ValidationError):
        engine.assign_to_external_maintainer(report, 12)


def test_eligible_companies_sorted_by_name(engine):
    assert [c.name for c in engine.eligible_companies(LIGHTING)] == ["Empty Co", "Luce Srl"]
    assert engine.eligible_companies(ROADS) == []
