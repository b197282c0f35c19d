"""Fan-out of one event to every configured webhook."""

from __future__ import annotations

import asyncio
import typing as typ

from .errors import WebhookDeliveryError
from .models import DeliveryOutcome

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import httpx

    from .models import NotificationEvent


class WebhookSender(typ.Protocol):
    """Anything that can deliver a notification event."""

    async def send(
        self,
        event: NotificationEvent,
        *,
        cancel: asyncio.Event | None = None,
    ) -> DeliveryOutcome:
        """Deliver ``event``, raising ``WebhookDeliveryError`` on failure."""
        ...


class MultiWebhookSender:
    """Send each event to all webhooks, isolating their failures.

    A failing webhook is reported in its outcome and does not prevent the
    others from being attempted. The sender performs no retries.
    """

    def __init__(
        self,
        webhooks: cabc.Sequence[WebhookSender],
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise with webhooks and the client to close on ``aclose``.

        ``http_client`` is only given when this sender owns a client shared
        by its webhooks.
        """
        self._webhooks = tuple(webhooks)
        self._owned_client = http_client

    @property
    def webhooks(self) -> tuple[WebhookSender, ...]:
        """Return the configured webhooks."""
        return self._webhooks

    async def aclose(self) -> None:
        """Close the shared HTTP client when this sender owns one."""
        if self._owned_client is not None:
            await self._owned_client.aclose()

    async def send(
        self,
        event: NotificationEvent,
        *,
        cancel: asyncio.Event | None = None,
    ) -> tuple[DeliveryOutcome, ...]:
        """Deliver ``event`` to every webhook concurrently.

        Returns one outcome per webhook, in configuration order.
        """
        return tuple(
            await asyncio.gather(
                *(self._send_one(webhook, event, cancel) for webhook in self._webhooks)
            )
        )

    @staticmethod
    async def _send_one(
        webhook: WebhookSender,
        event: NotificationEvent,
        cancel: asyncio.Event | None,
    ) -> DeliveryOutcome:
        try:
            return await webhook.send(event, cancel=cancel)
        except WebhookDeliveryError as exc:
            return DeliveryOutcome.failed(exc)
