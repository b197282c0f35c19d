"""Unit tests for webhook delivery log events."""

from __future__ import annotations

import pytest

from herald.webhooks import (
    HttpWebhook,
    MatchRule,
    NotificationEvent,
    RemoteRejectionError,
    WebhookDeliveryError,
    WebhookEndpoint,
    WebhookEventLogger,
    WebhookEventType,
)
from tests.helpers.femtologging_capture import capture_femto_logs
from tests.helpers.webhook_events import ENDPOINT_URL, RecordingEndpoint, apply_result

_LOGGER_NAME = "herald.webhooks.observability"


class TestWebhookEventLogger:
    """Tests for WebhookEventLogger structured events."""

    def test_log_delivery_skipped_emits_info(self) -> None:
        """Skip notices are INFO records naming the endpoint and event."""
        with capture_femto_logs(_LOGGER_NAME) as capture:
            WebhookEventLogger().log_delivery_skipped(
                url=ENDPOINT_URL, event=apply_result()
            )
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level == "INFO"
        assert WebhookEventType.DELIVERY_SKIPPED in record.message
        assert f"url={ENDPOINT_URL}" in record.message
        assert "repo=org/repo" in record.message
        assert "workspace=production" in record.message

    def test_log_delivery_failed_emits_error(self) -> None:
        """Failure notices are ERROR records with stage and cause."""
        error = RemoteRejectionError.http_error(ENDPOINT_URL, 500)

        with capture_femto_logs(_LOGGER_NAME) as capture:
            WebhookEventLogger().log_delivery_failed(event=apply_result(), error=error)
            capture.wait_for_count(1)

        record = capture.records[0]
        assert record.level == "ERROR"
        assert WebhookEventType.DELIVERY_FAILED in record.message
        assert "stage=remote_rejection" in record.message
        assert "error_type=RemoteRejectionError" in record.message
        assert "sending webhook" in record.message


class _SpyEventLogger(WebhookEventLogger):
    """Event logger that records calls instead of emitting them."""

    def __init__(self) -> None:
        self.skipped: list[str] = []
        self.failed: list[WebhookDeliveryError] = []

    def log_delivery_skipped(self, *, url: str, event: NotificationEvent) -> None:
        self.skipped.append(url)

    def log_delivery_failed(
        self, *, event: NotificationEvent, error: WebhookDeliveryError
    ) -> None:
        self.failed.append(error)


@pytest.mark.asyncio
async def test_webhook_logs_only_skips_and_failures() -> None:
    """Successful deliveries are silent; skips and failures are logged once."""
    spy = _SpyEventLogger()
    receiver = RecordingEndpoint()
    async with receiver.client() as http_client:
        matching = HttpWebhook(
            WebhookEndpoint(ENDPOINT_URL), http_client=http_client, event_logger=spy
        )
        skipping = HttpWebhook(
            WebhookEndpoint(ENDPOINT_URL),
            rule=MatchRule.compile("other", ".*"),
            http_client=http_client,
            event_logger=spy,
        )
        await matching.send(apply_result())
        await skipping.send(apply_result())

        receiver.status_code = 500
        with pytest.raises(RemoteRejectionError):
            await matching.send(apply_result())

    assert spy.skipped == [ENDPOINT_URL]
    assert len(spy.failed) == 1
    assert isinstance(spy.failed[0], RemoteRejectionError)
