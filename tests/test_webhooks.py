import pytest

from change_relay.exceptions import DeliveryError
from change_relay.relay import ChangeEvent
from change_relay.utils.webhooks import WebhookSink

EVENT = ChangeEvent(
    source="current-rms",
    event_name="opportunity.updated",
    occurred_at="2024-01-01T00:00:00Z",
    idempotency_key="opportunity:1:2024-01-01T00:00:00Z",
    data={"id": 1},
)


def test_no_hook_drops_event_without_calling_out(store, http):
    session = http()

    assert WebhookSink(store, session=session).deliver(EVENT) is False
    assert session.calls == []


def test_posts_envelope_to_registered_url(store, http, response):
    store.set_hook("opportunity.updated", "https://hooks.example.com/catch")
    session = http(response(200, {}))

    assert WebhookSink(store, session=session).deliver(EVENT) is True

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "https://hooks.example.com/catch")
    assert kwargs["json"] == {
        "source": "current-rms",
        "event": "opportunity.updated",
        "occurred_at": "2024-01-01T00:00:00Z",
        "idempotency_key": "opportunity:1:2024-01-01T00:00:00Z",
        "data": {"id": 1},
    }
    assert kwargs["timeout"] == 30


def test_non_success_status_raises(store, http, response):
    store.set_hook("opportunity.updated", "https://hooks.example.com/catch")

    with pytest.raises(DeliveryError):
        WebhookSink(store, session=http(response(500, text="boom"))).deliver(EVENT)


def test_unreachable_destination_raises(store, http, connection_error):
    store.set_hook("opportunity.updated", "https://hooks.example.com/catch")

    with pytest.raises(DeliveryError):
        WebhookSink(store, session=http(connection_error)).deliver(EVENT)
