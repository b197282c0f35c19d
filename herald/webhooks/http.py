"""HTTP webhook delivery.

``HttpWebhook`` posts a :class:`NotificationEvent` as JSON to one endpoint
when the event passes the webhook's :class:`MatchRule`. Each call makes at
most one request and never retries; failures are raised to the caller as
:class:`WebhookDeliveryError` subclasses.

Usage
-----
>>> webhook = HttpWebhook(
...     WebhookEndpoint("https://hooks.example.test/apply", token="tok"),
...     rule=MatchRule.compile("^production$", "main"),
... )
>>> outcome = await webhook.send(event)
>>> await webhook.aclose()

"""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

import httpx
import msgspec

from .errors import (
    RemoteRejectionError,
    SerializationError,
    TransportError,
    WebhookConfigError,
    WebhookDeliveryError,
)
from .matching import MATCH_ALL, MatchRule
from .models import DeliveryOutcome
from .observability import WebhookEventLogger

if typ.TYPE_CHECKING:
    from .models import NotificationEvent

DEFAULT_TIMEOUT_S = 10.0

_ALLOWED_SCHEMES = frozenset({"http", "https"})


@dataclasses.dataclass(frozen=True, slots=True)
class WebhookEndpoint:
    """Target URL and optional bearer credential for one webhook.

    ``token=None`` means no ``Authorization`` header is sent. An empty or
    blank token is rejected so there is a single way to express "no auth".
    """

    url: str
    token: str | None = None

    def __post_init__(self) -> None:
        """Validate the URL and credential."""
        try:
            parsed = httpx.URL(self.url)
        except httpx.InvalidURL as exc:
            raise WebhookConfigError.invalid_url(self.url, exc) from exc
        if parsed.scheme not in _ALLOWED_SCHEMES or not parsed.host:
            raise WebhookConfigError.invalid_url(
                self.url, "expected an absolute http(s) URL"
            )
        if self.token is None:
            return
        if not self.token.strip():
            raise WebhookConfigError.empty_token()
        if not (self.token.isascii() and self.token.isprintable()):
            raise WebhookConfigError.invalid_token()

    def request_headers(self) -> dict[str, str]:
        """Return the headers sent with every delivery."""
        headers = {"Content-Type": "application/json"}
        if self.token is not None:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


class HttpWebhook:
    """Deliver matching events to a single HTTP endpoint."""

    def __init__(
        self,
        endpoint: WebhookEndpoint,
        *,
        rule: MatchRule = MATCH_ALL,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        event_logger: WebhookEventLogger | None = None,
    ) -> None:
        """Initialise the webhook.

        Parameters
        ----------
        endpoint
            Where events are posted and which credential to present.
        rule
            Workspace and branch predicates an event must satisfy.
        http_client
            Shared client for connection pooling. When omitted the webhook
            creates its own client with ``timeout_s`` and closes it in
            :meth:`aclose`.
        timeout_s
            Timeout for an owned client; ignored when ``http_client`` is given.
        event_logger
            Sink for skip and failure notices.

        """
        self._endpoint = endpoint
        self._rule = rule
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)
        self._events = event_logger or WebhookEventLogger()

    @property
    def endpoint(self) -> WebhookEndpoint:
        """Return the configured endpoint."""
        return self._endpoint

    @property
    def rule(self) -> MatchRule:
        """Return the match rule guarding this webhook."""
        return self._rule

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def send(
        self,
        event: NotificationEvent,
        *,
        cancel: asyncio.Event | None = None,
    ) -> DeliveryOutcome:
        """Send ``event`` if it matches this webhook's rule.

        Parameters
        ----------
        event
            Apply result to deliver.
        cancel
            Optional event; setting it aborts an in-flight request.

        Returns
        -------
        DeliveryOutcome
            ``SKIPPED`` when the rule filtered the event out, otherwise
            ``DELIVERED``.

        Raises
        ------
        SerializationError
            If the event cannot be encoded.
        TransportError
            If the request fails, times out or is cancelled.
        RemoteRejectionError
            If the endpoint answers with a non-2xx status.

        """
        url = self._endpoint.url
        if not self._rule.matches(event):
            self._events.log_delivery_skipped(url=url, event=event)
            return DeliveryOutcome.skipped(url)

        try:
            await self._deliver(event, cancel)
        except WebhookDeliveryError as exc:
            self._events.log_delivery_failed(event=event, error=exc)
            raise
        return DeliveryOutcome.delivered(url)

    async def _deliver(
        self, event: NotificationEvent, cancel: asyncio.Event | None
    ) -> None:
        url = self._endpoint.url
        try:
            body = event.to_json()
        except (msgspec.EncodeError, TypeError) as exc:
            raise SerializationError.from_exception(url, exc) from exc

        request = self._client.build_request(
            "POST", url, content=body, headers=self._endpoint.request_headers()
        )
        if self._endpoint.token is None and "Authorization" in request.headers:
            # Injected clients may carry a default Authorization header.
            del request.headers["Authorization"]
        try:
            if cancel is None:
                response = await self._client.send(request)
            else:
                response = await self._send_cancellable(request, cancel)
        except httpx.HTTPError as exc:
            raise TransportError.from_exception(url, exc) from exc

        if not response.is_success:
            raise RemoteRejectionError.http_error(url, response.status_code)

    async def _send_cancellable(
        self, request: httpx.Request, cancel: asyncio.Event
    ) -> httpx.Response:
        """Race the request against ``cancel`` and abort it if cancel wins."""
        post = asyncio.ensure_future(self._client.send(request))
        cancelled = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({post, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            post.cancel()
            raise
        finally:
            cancelled.cancel()

        if post.done():
            return post.result()

        post.cancel()
        try:
            return await post
        except asyncio.CancelledError as exc:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            raise TransportError.cancelled(self._endpoint.url) from exc
