"""Build webhook senders from configuration."""

from __future__ import annotations

import typing as typ

import httpx

from .config import WebhookHttpSettings
from .errors import WebhookConfigError
from .http import HttpWebhook, WebhookEndpoint
from .matching import MatchRule
from .sender import MultiWebhookSender

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import WebhookDefinition

SUPPORTED_EVENTS = frozenset({"apply"})
SUPPORTED_KINDS = frozenset({"http"})


def build_http_client(settings: WebhookHttpSettings) -> httpx.AsyncClient:
    """Return a pooled client carrying the configured timeout and headers."""
    return httpx.AsyncClient(
        timeout=settings.timeout_s,
        headers=httpx.Headers(list(settings.headers)),
    )


def compile_definition(
    definition: WebhookDefinition, settings: WebhookHttpSettings
) -> tuple[WebhookEndpoint, MatchRule]:
    """Validate one definition and compile its endpoint and match rule.

    Raises
    ------
    WebhookConfigError
        If the event, kind, URL or patterns are invalid.

    """
    if definition.event not in SUPPORTED_EVENTS:
        raise WebhookConfigError.unsupported_event(definition.event)
    if definition.kind not in SUPPORTED_KINDS:
        raise WebhookConfigError.unsupported_kind(definition.kind)
    endpoint = WebhookEndpoint(definition.url, token=settings.token)
    rule = MatchRule.compile(
        definition.workspace_regex,
        definition.branch_regex,
        definition.pattern_syntax,
    )
    return endpoint, rule


def build_webhook_sender(
    definitions: cabc.Iterable[WebhookDefinition],
    settings: WebhookHttpSettings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> MultiWebhookSender:
    """Build a fan-out sender with one ``HttpWebhook`` per definition.

    Every definition is validated before any network resource is created.
    When ``http_client`` is omitted a client is built from ``settings`` and
    owned by the returned sender; an injected client is used as-is and its
    headers and timeout are left untouched.
    """
    resolved = settings or WebhookHttpSettings()
    compiled = [compile_definition(definition, resolved) for definition in definitions]

    owned_client = None
    if http_client is None:
        http_client = owned_client = build_http_client(resolved)

    webhooks = [
        HttpWebhook(endpoint, rule=rule, http_client=http_client)
        for endpoint, rule in compiled
    ]
    return MultiWebhookSender(webhooks, http_client=owned_client)
