from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    CITIZEN = "citizen"
    TECHNICAL_STAFF = "technical_staff"
    EXTERNAL_MAINTAINER = "external_maintainer"
    PUBLIC_RELATIONS_OFFICER = "municipal_public_relations_officer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """Caller identity as supplied by the authentication layer. Trusted as-is."""

    id: int
    role: Role

    @classmethod
    def of(cls, user_id: int, role: Role | str) -> "Actor":
        return cls(id=int(user_id), role=Role(role))
