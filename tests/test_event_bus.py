import pytest

from civic_reports.events.bus import InMemoryEventBus
from civic_reports.events.contracts import build_event_envelope


def envelope(event_type="report.status.changed"):
    return build_event_envelope(event_type=event_type, report_id=1, actor_id=2, payload={"from": "a", "to": "b"})


def test_exact_prefix_and_wildcard_subscribers():
    bus = InMemoryEventBus()
    seen = []
    bus.subscribe("report.status.changed", lambda e: seen.append("exact"))
    bus.subscribe("report.*", lambda e: seen.append("prefix"))
    bus.subscribe("message.*", lambda e: seen.append("other"))
    bus.subscribe("*", lambda e: seen.append("all"))

    bus.publish("report.status.changed", envelope())

    assert seen == ["exact", "prefix", "all"]


def test_failing_handler_does_not_block_others():
    bus = InMemoryEventBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe("*", broken)
    bus.subscribe("*", seen.append)

    bus.publish("report.status.changed", envelope())

    assert len(seen) == 1


def test_envelope_requires_known_type_and_keys():
    with pytest.raises(ValueError, match="Unsupported event type"):
        build_event_envelope(event_type="report.deleted", report_id=1, actor_id=None, payload={})
    with pytest.raises(ValueError, match="missing required keys"):
        build_event_envelope(event_type="report.status.changed", report_id=1, actor_id=None, payload={"to": "x"})
