from __future__ import annotations

import unicodedata
from collections.abc import Iterable

from civic_reports.domain.models import Candidate


def _collate(name: str) -> str:
    # Accents and case do not affect alphabetical position.
    decomposed = unicodedata.normalize("NFKD", name or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def ranking_key(candidate: Candidate) -> tuple:
    return (
        candidate.active_report_count,
        _collate(candidate.last_name),
        _collate(candidate.first_name),
        candidate.last_name or "",
        candidate.first_name or "",
        candidate.id,
    )


def rank_candidates(candidates: Iterable[Candidate]) -> list[Candidate]:
    return sorted(candidates, key=ranking_key)


def pick_least_loaded(candidates: Iterable[Candidate]) -> Candidate | None:
    """Return the candidate with the fewest active reports.

    Ties fall back to last name, then first name. The id closes the key so
    the same snapshot always yields the same winner.
    """
    ranked = rank_candidates(candidates)
    return ranked[0] if ranked else None
