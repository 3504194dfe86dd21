"""Demo reference data for local runs of the API (``SEED_DEMO_DATA=1``)."""

from __future__ import annotations

from civic_reports.domain.models import Company, ProblemCategory, TechnicalOffice, User
from civic_reports.domain.roles import Role
from civic_reports.infra.repositories import InMemoryRepository

CATEGORIES = [
    (1, "Water Supply - Drinking Water", "Water Network Office"),
    (2, "Architectural Barriers", "Accessibility Office"),
    (3, "Sewer System", "Sewerage Office"),
    (4, "Public Lighting", "Public Lighting Office"),
    (5, "Waste", "Waste Management Office"),
    (6, "Road Signs and Traffic Lights", "Mobility Office"),
    (7, "Roads and Urban Furnishings", "Roads Office"),
    (8, "Public Green Areas and Playgrounds", "Parks Office"),
    (9, "Other", "General Services Office"),
]

COMPANIES = [
    (1, "Luce Srl", {4, 6}),
    (2, "Strade Sicure SpA", {2, 7}),
    (3, "Verde Città Coop", {5, 8}),
    (4, "Idro Servizi", {1, 3}),
]


def seed_demo_data(repo: InMemoryRepository) -> None:
    for cid, category_name, office_name in CATEGORIES:
        repo.add_office(TechnicalOffice(id=cid, name=office_name, category_id=cid))
        repo.add_category(ProblemCategory(id=cid, name=category_name, technical_office_id=cid))

    for company_id, name, category_ids in COMPANIES:
        repo.add_company(Company(id=company_id, name=name, category_ids=set(category_ids)))

    users = [
        User(1, "citizen", "Mario", "Rossi", Role.CITIZEN, "citizen@example.com"),
        User(2, "pr_officer", "Giulia", "Conti", Role.PUBLIC_RELATIONS_OFFICER, "pr@example.com"),
        User(3, "admin", "Anna", "Neri", Role.ADMIN, "admin@example.com"),
    ]
    next_id = 10
    for cid, _category_name, _office_name in CATEGORIES:
        for first, last in (("Luca", "Bianchi"), ("Sara", "Rossi")):
            users.append(
                User(
                    next_id,
                    f"staff{next_id}",
                    first,
                    last,
                    Role.TECHNICAL_STAFF,
                    f"staff{next_id}@example.com",
                    technical_office_id=cid,
                )
            )
            next_id += 1
    for company_id, _name, _categories in COMPANIES:
        users.append(
            User(
                next_id,
                f"maintainer{next_id}",
                "Paolo",
                "Verdi",
                Role.EXTERNAL_MAINTAINER,
                f"maintainer{next_id}@example.com",
                company_id=company_id,
            )
        )
        next_id += 1

    for user in users:
        repo.add_user(user)
