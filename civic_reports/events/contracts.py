from __future__ import annotations

from typing import Any

EVENT_REQUIRED_KEYS: dict[str, set[str]] = {
    "report.created": {"category_id"},
    "report.approved": {"technical_officer_id"},
    "report.rejected": {"rejection_reason"},
    "report.status.changed": {"from", "to"},
    "report.assigned.external": {"external_maintainer_id", "company_id"},
    "message.created": {"message_id", "scope"},
    "notification.created": {"notification_id", "user_id", "kind"},
}


def is_valid_event_type(event_type: str) -> bool:
    return event_type in EVENT_REQUIRED_KEYS


def validate_event_payload(event_type: str, payload: dict[str, Any]) -> None:
    if not is_valid_event_type(event_type):
        raise ValueError(f"Unsupported event type: {event_type}")

    missing = sorted(k for k in EVENT_REQUIRED_KEYS[event_type] if k not in payload)
    if missing:
        raise ValueError(f"Event payload missing required keys for {event_type}: {missing}")


def build_event_envelope(
    *,
    event_type: str,
    report_id: int,
    actor_id: int | None,
    payload: dict[str, Any],
) -> dict[str, Any]:
    validate_event_payload(event_type, payload)
    return {
        "event_type": event_type,
        "report_id": report_id,
        "actor_id": actor_id,
        "payload": payload,
    }
