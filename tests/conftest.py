# tests/conftest.py
"""
Shared fixtures: an in-memory repository with one office, one company and
the users needed to walk a report through its whole lifecycle.
"""
import pytest

from civic_reports.domain.models import Company, ProblemCategory, TechnicalOffice, User
from civic_reports.domain.roles import Actor, Role
from civic_reports.events.bus import InMemoryEventBus
from civic_reports.infra.repositories import InMemoryRepository
from civic_reports.services.message_service import MessageService
from civic_reports.services.report_service import ReportService

CITIZEN_ID = 100
PR_OFFICER_ID = 200
BIANCHI_ID = 1
ROSSI_ID = 2
OUTSIDER_STAFF_ID = 3
MAINTAINER_ID = 300
OTHER_MAINTAINER_ID = 301

LIGHTING = 4
ROADS = 7
LIGHTING_OFFICE = 40
ROADS_OFFICE = 70
LUCE_SRL = 10
EMPTY_CO = 11


@pytest.fixture
def repo():
    repo = InMemoryRepository()
    repo.add_office(TechnicalOffice(id=LIGHTING_OFFICE, name="Public Lighting Office", category_id=LIGHTING))
    repo.add_office(TechnicalOffice(id=ROADS_OFFICE, name="Roads Office", category_id=ROADS))
    repo.add_category(ProblemCategory(id=LIGHTING, name="Public Lighting", technical_office_id=LIGHTING_OFFICE))
    repo.add_category(ProblemCategory(id=ROADS, name="Roads and Urban Furnishings", technical_office_id=ROADS_OFFICE))
    repo.add_company(Company(id=LUCE_SRL, name="Luce Srl", category_ids={LIGHTING}))
    repo.add_company(Company(id=EMPTY_CO, name="Empty Co", category_ids={LIGHTING}))

    repo.add_user(User(CITIZEN_ID, "mario", "Mario", "Verdi", Role.CITIZEN))
    repo.add_user(User(PR_OFFICER_ID, "giulia", "Giulia", "Conti", Role.PUBLIC_RELATIONS_OFFICER))
    repo.add_user(User(BIANCHI_ID, "bianchi", "Luca", "Bianchi", Role.TECHNICAL_STAFF, technical_office_id=LIGHTING_OFFICE))
    repo.add_user(User(ROSSI_ID, "rossi", "Sara", "Rossi", Role.TECHNICAL_STAFF, technical_office_id=LIGHTING_OFFICE))
    repo.add_user(User(OUTSIDER_STAFF_ID, "neri", "Anna", "Neri", Role.TECHNICAL_STAFF, technical_office_id=ROADS_OFFICE))
    repo.add_user(User(MAINTAINER_ID, "paolo", "Paolo", "Gallo", Role.EXTERNAL_MAINTAINER, company_id=LUCE_SRL))
    repo.add_user(User(OTHER_MAINTAINER_ID, "franco", "Franco", "Ricci", Role.EXTERNAL_MAINTAINER))
    return repo


@pytest.fixture
def bus():
    return InMemoryEventBus()


@pytest.fixture
def published(bus):
    """Every envelope published on the bus, in order."""
    events = []
    bus.subscribe("*", events.append)
    return events


@pytest.fixture
def service(repo, bus):
    return ReportService(repo=repo, bus=bus)


@pytest.fixture
def message_service(repo, bus):
    return MessageService(repo, bus)


@pytest.fixture
def citizen():
    return Actor(CITIZEN_ID, Role.CITIZEN)


@pytest.fixture
def pr_officer():
    return Actor(PR_OFFICER_ID, Role.PUBLIC_RELATIONS_OFFICER)


@pytest.fixture
def bianchi():
    return Actor(BIANCHI_ID, Role.TECHNICAL_STAFF)


@pytest.fixture
def rossi():
    return Actor(ROSSI_ID, Role.TECHNICAL_STAFF)


@pytest.fixture
def maintainer():
    return Actor(MAINTAINER_ID, Role.EXTERNAL_MAINTAINER)


def report_payload(**overrides):
    payload = {
        "title": "Broken street light",
        "description": "The lamp at the corner has been off for a week.",
        "category_id": LIGHTING,
        "latitude": 45.0703,
        "longitude": 7.6869,
        "anonymous": False,
        "photos": ["https://cdn.example.com/p1.jpg"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def pending_report(service, citizen):
    return service.create_report(citizen, report_payload())


@pytest.fixture
def assigned_report(service, pr_officer, pending_report):
    """Approved report; with equal workloads Bianchi wins the tie."""
    return service.review_report(pending_report.id, pr_officer, {"status": "Assigned"})


@pytest.fixture
def handed_off_report(service, bianchi, assigned_report):
    return service.assign_external(assigned_report.id, bianchi, {"company_id": LUCE_SRL})
