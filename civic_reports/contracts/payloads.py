from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, Field, StrictBool, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from civic_reports.config import settings
from civic_reports.domain.errors import ValidationError
from civic_reports.domain.models import ChatScope
from civic_reports.domain.states import ASSIGNEE_TARGETS, ReportStatus

ContractT = TypeVar("ContractT", bound=BaseModel)


class ReportCreateContract(BaseModel):
    title: str
    description: str
    category_id: int = Field(gt=0)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str | None = None
    anonymous: StrictBool = False
    photos: list[str] = Field(default_factory=list)

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("address")
    @classmethod
    def _blank_address_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("photos")
    @classmethod
    def _check_photos(cls, value: list[str]) -> list[str]:
        if len(value) > settings.max_report_photos:
            raise ValueError(f"at most {settings.max_report_photos} photos are allowed")
        cleaned = [p.strip() for p in value]
        if any(not p for p in cleaned):
            raise ValueError("each photo must be a non-empty string")
        return cleaned


class ReviewContract(BaseModel):
    status: str
    rejection_reason: str | None = None

    @field_validator("status")
    @classmethod
    def _check_status(cls, value: str) -> str:
        if value not in {ReportStatus.ASSIGNED.value, ReportStatus.REJECTED.value}:
            raise ValueError("Invalid status. Allowed values: Assigned, Rejected")
        return value

    @model_validator(mode="after")
    def _check_reason(self) -> "ReviewContract":
        reason = (self.rejection_reason or "").strip()
        if self.status == ReportStatus.REJECTED:
            if not reason:
                raise ValueError("Rejection reason is required when rejecting a report.")
            self.rejection_reason = reason
        elif self.rejection_reason is not None:
            raise ValueError("Rejection reason must not be provided when accepting a report.")
        return self

    @property
    def accepted(self) -> bool:
        return self.status == ReportStatus.ASSIGNED


class StatusUpdateContract(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def _check_status(cls, value: str) -> str:
        allowed = sorted(s.value for s in ASSIGNEE_TARGETS)
        if value not in allowed:
            raise ValueError(f"Invalid status. Allowed values: {', '.join(allowed)}")
        return value

    @property
    def target(self) -> ReportStatus:
        return ReportStatus(self.status)


class ExternalAssignmentContract(BaseModel):
    company_id: int = Field(gt=0)


class MessageContract(BaseModel):
    content: str
    scope: ChatScope = ChatScope.INTERNAL

    @field_validator("content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Message content is required and cannot be empty.")
        return value


def _describe(exc: PydanticValidationError) -> list[tuple[str, str]]:
    out: list[tuple[str, str]] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        # pydantic prefixes custom ValueError messages.
        msg = str(err.get("msg", "invalid value")).removeprefix("Value error, ")
        out.append((loc, msg))
    return out


def parse_contract(contract: type[ContractT], payload: BaseModel | dict[str, Any] | None, label: str) -> ContractT:
    if isinstance(payload, contract):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    try:
        return contract.model_validate(payload or {})
    except PydanticValidationError as exc:
        problems = _describe(exc)
        errors = [f"{loc}: {msg}" if loc else msg for loc, msg in problems]
        if len(problems) == 1:
            raise ValidationError(problems[0][1], errors) from exc
        raise ValidationError(f"Invalid {label} payload.", errors) from exc
