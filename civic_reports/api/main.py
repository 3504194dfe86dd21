from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, StrictBool

from civic_reports import __version__
from civic_reports.config import configure_logging, settings
from civic_reports.domain.errors import DomainError
from civic_reports.domain.models import ChatScope
from civic_reports.domain.roles import Actor
from civic_reports.infra.repositories import build_repository
from civic_reports.services.message_service import MessageService
from civic_reports.services.report_service import ReportService

configure_logging()
logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "validation": 400,
    "forbidden": 403,
    "not_found": 404,
    "conflict": 409,
    "configuration": 500,
}

app = FastAPI(
    title="Civic Reports API",
    version=__version__,
    docs_url=None if settings.is_production() else "/docs",
    redoc_url=None if settings.is_production() else "/redoc",
)
service = ReportService(repo=build_repository(seed=settings.seed_demo_data))
message_service = MessageService(service.repo, service.bus)


class ReportCreateRequest(BaseModel):
    title: str
    description: str
    category_id: int
    latitude: float
    longitude: float
    address: str | None = None
    anonymous: StrictBool = False
    photos: list[str] = Field(default_factory=list)


class ReviewRequest(BaseModel):
    status: str
    rejection_reason: str | None = None


class StatusUpdateRequest(BaseModel):
    status: str


class ExternalAssignmentRequest(BaseModel):
    company_id: int


class MessageRequest(BaseModel):
    content: str
    scope: ChatScope = ChatScope.INTERNAL


def get_report_service() -> ReportService:
    return service


def get_message_service() -> MessageService:
    return message_service


def current_actor(
    x_user_id: int = Header(..., alias="X-User-ID"),
    x_user_role: str = Header(..., alias="X-User-Role"),
) -> Actor:
    try:
        return Actor.of(x_user_id, x_user_role.strip())
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=f"Unknown role: {x_user_role}") from exc


@app.exception_handler(DomainError)
async def domain_error_handler(_request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    if status_code >= 500:
        logger.error("%s error: %s", exc.kind, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message, **exc.to_dict()})


@app.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok", "env": settings.app_env, "persistence": "memory"}


@app.post("/reports", status_code=201)
def create_report(
    payload: ReportCreateRequest,
    actor: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    return svc.to_public_dict(svc.create_report(actor, payload))


@app.get("/reports")
def list_reports(
    status: str | None = None,
    _caller: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> list[dict[str, Any]]:
    return [svc.to_public_dict(r) for r in svc.list_reports(status)]


@app.get("/reports/assigned")
def list_assigned_reports(
    actor: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> list[dict[str, Any]]:
    return [svc.to_public_dict(r) for r in svc.list_reports_for_assignee(actor)]


@app.get("/reports/{report_id}")
def get_report(
    report_id: int,
    _caller: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    return svc.to_public_dict(svc.get_report(report_id))


@app.get("/users/{user_id}/reports")
def list_user_reports(
    user_id: int,
    _caller: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> list[dict[str, Any]]:
    return [svc.to_public_dict(r) for r in svc.list_reports_by_user(user_id)]


@app.put("/reports/{report_id}/review")
def review_report(
    report_id: int,
    payload: ReviewRequest,
    actor: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    return svc.to_public_dict(svc.review_report(report_id, actor, payload))


@app.put("/reports/{report_id}/status")
def update_report_status(
    report_id: int,
    payload: StatusUpdateRequest,
    actor: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    return svc.to_public_dict(svc.update_status(report_id, actor, payload))


@app.get("/reports/{report_id}/companies")
def list_eligible_companies(
    report_id: int,
    actor: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> list[dict[str, Any]]:
    return [{"id": c.id, "name": c.name} for c in svc.eligible_companies(report_id, actor)]


@app.put("/reports/{report_id}/assign-external")
def assign_external(
    report_id: int,
    payload: ExternalAssignmentRequest,
    actor: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    return svc.to_public_dict(svc.assign_external(report_id, actor, payload))


@app.post("/reports/{report_id}/messages", status_code=201)
def send_message(
    report_id: int,
    payload: MessageRequest,
    actor: Actor = Depends(current_actor),
    messages: MessageService = Depends(get_message_service),
) -> dict[str, Any]:
    message = messages.send_message(report_id, actor, payload.model_dump())
    return _message_dict(message)


@app.get("/reports/{report_id}/messages")
def list_messages(
    report_id: int,
    scope: ChatScope = ChatScope.INTERNAL,
    actor: Actor = Depends(current_actor),
    messages: MessageService = Depends(get_message_service),
) -> list[dict[str, Any]]:
    return [_message_dict(m) for m in messages.list_messages(report_id, actor, scope)]


@app.get("/notifications")
def list_notifications(
    actor: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> list[dict[str, Any]]:
    return [asdict(n) for n in svc.notifications.list_for_user(actor.id)]


@app.put("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    actor: Actor = Depends(current_actor),
    svc: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    return asdict(svc.notifications.mark_read(notification_id, actor.id))


def _message_dict(message: Any) -> dict[str, Any]:
    return {
        "id": message.id,
        "report_id": message.report_id,
        "author_id": message.author_id,
        "scope": message.scope.value,
        "content": message.content,
        "created_at": message.created_at,
    }


def run() -> None:
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())
