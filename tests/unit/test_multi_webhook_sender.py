"""Unit tests for fanning events out to several webhooks."""

from __future__ import annotations

import asyncio
import dataclasses

import pytest

from herald.webhooks import (
    DeliveryOutcome,
    DeliveryStatus,
    HttpWebhook,
    MultiWebhookSender,
    NotificationEvent,
    RemoteRejectionError,
    WebhookEndpoint,
)
from tests.helpers.webhook_events import ENDPOINT_URL, RecordingEndpoint, apply_result


@dataclasses.dataclass(slots=True)
class _StubWebhook:
    """Webhook double returning a fixed outcome or raising an error."""

    url: str
    error: Exception | None = None
    calls: list[NotificationEvent] = dataclasses.field(default_factory=list)

    async def send(
        self,
        event: NotificationEvent,
        *,
        cancel: asyncio.Event | None = None,
    ) -> DeliveryOutcome:
        self.calls.append(event)
        if self.error is not None:
            raise self.error
        return DeliveryOutcome.delivered(self.url)


@pytest.mark.asyncio
async def test_failure_of_one_webhook_does_not_stop_others() -> None:
    """A rejected delivery is reported while the others still run."""
    rejection = RemoteRejectionError.http_error("https://a.test/", 500)
    first = _StubWebhook("https://a.test/", error=rejection)
    second = _StubWebhook("https://b.test/")
    sender = MultiWebhookSender([first, second])

    outcomes = await sender.send(apply_result())

    assert [outcome.status for outcome in outcomes] == [
        DeliveryStatus.FAILED,
        DeliveryStatus.DELIVERED,
    ]
    assert outcomes[0].error is rejection
    assert len(first.calls) == 1
    assert len(second.calls) == 1


@pytest.mark.asyncio
async def test_unexpected_errors_propagate() -> None:
    """Only delivery errors are captured; programming errors still raise."""
    sender = MultiWebhookSender([_StubWebhook("https://a.test/", error=KeyError("x"))])

    with pytest.raises(KeyError):
        await sender.send(apply_result())


@pytest.mark.asyncio
async def test_outcomes_follow_configuration_order() -> None:
    """Outcomes line up with the configured webhooks."""
    webhooks = [_StubWebhook(f"https://{name}.test/") for name in "abc"]
    sender = MultiWebhookSender(webhooks)

    outcomes = await sender.send(apply_result())

    assert [outcome.url for outcome in outcomes] == [
        "https://a.test/",
        "https://b.test/",
        "https://c.test/",
    ]


@pytest.mark.asyncio
async def test_real_webhooks_share_one_client() -> None:
    """HTTP webhooks behind the fan-out post once each on a match."""
    receiver = RecordingEndpoint(status_code=503)
    async with receiver.client() as http_client:
        sender = MultiWebhookSender(
            [
                HttpWebhook(
                    WebhookEndpoint("https://hooks.example.test/one"),
                    http_client=http_client,
                ),
                HttpWebhook(
                    WebhookEndpoint("https://hooks.example.test/two"),
                    http_client=http_client,
                ),
            ]
        )
        outcomes = await sender.send(apply_result())

    assert len(receiver.requests) == 2
    assert all(outcome.status is DeliveryStatus.FAILED for outcome in outcomes)
    assert all("sending webhook" in str(outcome.error) for outcome in outcomes)


@pytest.mark.asyncio
async def test_aclose_without_owned_client_is_noop() -> None:
    """Senders built around caller-owned clients close nothing."""
    sender = MultiWebhookSender([])

    await sender.aclose()
    assert await sender.send(apply_result()) == ()


@pytest.mark.asyncio
async def test_client_authorization_default_is_not_sent_without_token() -> None:
    """Unauthenticated fan-out never carries an inherited Authorization header."""
    receiver = RecordingEndpoint()
    async with receiver.client(headers={"Authorization": ""}) as http_client:
        sender = MultiWebhookSender(
            [HttpWebhook(WebhookEndpoint(ENDPOINT_URL), http_client=http_client)]
        )
        outcomes = await sender.send(apply_result())

    assert outcomes[0].status is DeliveryStatus.DELIVERED
    assert "Authorization" not in receiver.requests[0].headers
