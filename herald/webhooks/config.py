"""Webhook configuration: YAML definitions and HTTP settings.

Webhook definitions live in a YAML file:

.. code-block:: yaml

    webhooks:
      - event: apply
        kind: http
        url: https://hooks.example.test/apply
        workspace-regex: ^production$
        branch-regex: main

HTTP settings shared by every webhook come from the environment:

- ``HERALD_WEBHOOK_HTTP_TOKEN``: bearer credential; blank disables auth.
- ``HERALD_WEBHOOK_HTTP_HEADERS``: JSON object of extra request headers.
  Values are strings or lists of strings.
- ``HERALD_WEBHOOK_HTTP_TIMEOUT_S``: positive request timeout in seconds.

"""

from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import WebhookConfigError
from .http import DEFAULT_TIMEOUT_S

YAML_VERSION = (1, 2)

TOKEN_ENV = "HERALD_WEBHOOK_HTTP_TOKEN"
HEADERS_ENV = "HERALD_WEBHOOK_HTTP_HEADERS"
TIMEOUT_ENV = "HERALD_WEBHOOK_HTTP_TIMEOUT_S"

_RESERVED_HEADERS = frozenset({"authorization"})


class WebhookDefinition(msgspec.Struct, kw_only=True, frozen=True, rename="kebab"):
    """One webhook entry from the configuration file.

    Attributes
    ----------
    url : str
        Endpoint receiving the event.
    event : str
        Triggering event. Only ``apply`` is supported.
    kind : str
        Delivery mechanism. Only ``http`` is supported.
    workspace_regex : str
        Pattern the event's workspace must match (``workspace-regex``).
    branch_regex : str
        Pattern the event's base branch must match (``branch-regex``).
    pattern_syntax : str
        How both patterns are interpreted: ``regex``, ``glob`` or ``exact``.

    """

    url: str
    event: str = "apply"
    kind: str = "http"
    workspace_regex: str = ".*"
    branch_regex: str = ".*"
    pattern_syntax: str = "regex"


class WebhooksFile(msgspec.Struct, kw_only=True, frozen=True):
    """Top-level structure of a webhook configuration file."""

    webhooks: tuple[WebhookDefinition, ...] = ()


def load_webhooks(path: Path | str) -> tuple[WebhookDefinition, ...]:
    """Parse webhook definitions from a YAML 1.2 file.

    An empty file yields no webhooks. Semantic checks (supported events,
    URLs, patterns) happen when the definitions are built into senders.
    """
    path_obj = Path(path)
    try:
        loaded = _yaml().load(path_obj.read_text(encoding="utf-8"))
    except (OSError, YAMLError) as exc:
        raise WebhookConfigError.invalid_file(path_obj, exc) from exc

    if loaded is None:
        return ()

    try:
        parsed = msgspec.convert(loaded, type=WebhooksFile)
    except msgspec.ValidationError as exc:
        raise WebhookConfigError.invalid_file(path_obj, exc) from exc
    return parsed.webhooks


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml


@dc.dataclass(frozen=True, slots=True)
class WebhookHttpSettings:
    """HTTP settings shared by all configured webhooks.

    Attributes
    ----------
    token
        Bearer credential, or ``None`` for unauthenticated delivery.
    headers
        Extra ``(name, value)`` header pairs added to every request. A name
        may repeat.
    timeout_s
        Request timeout for the shared HTTP client.

    """

    token: str | None = None
    headers: tuple[tuple[str, str], ...] = ()
    timeout_s: float = DEFAULT_TIMEOUT_S

    def __post_init__(self) -> None:
        """Reject extra headers that would override the bearer credential."""
        for name, _ in self.headers:
            if name.lower() in _RESERVED_HEADERS:
                raise WebhookConfigError.reserved_header(name)

    @staticmethod
    def _parse_headers(raw: str) -> tuple[tuple[str, str], ...]:
        if not raw.strip():
            return ()
        try:
            decoded = msgspec.json.decode(raw, type=dict[str, str | list[str]])
        except msgspec.DecodeError as exc:
            raise WebhookConfigError.invalid_env(
                HEADERS_ENV, raw, "must be a JSON object of strings or string lists"
            ) from exc
        pairs: list[tuple[str, str]] = []
        for name, value in decoded.items():
            if name.lower() in _RESERVED_HEADERS:
                raise WebhookConfigError.invalid_env(
                    HEADERS_ENV, raw, f"must not set {name}"
                )
            values = [value] if isinstance(value, str) else value
            pairs.extend((name, item) for item in values)
        return tuple(pairs)

    @staticmethod
    def _parse_timeout(raw: str) -> float:
        if not raw.strip():
            return DEFAULT_TIMEOUT_S
        try:
            value = float(raw)
        except ValueError as exc:
            raise WebhookConfigError.invalid_env(
                TIMEOUT_ENV, raw, "must be a number"
            ) from exc
        if value <= 0:
            raise WebhookConfigError.invalid_env(TIMEOUT_ENV, raw, "must be positive")
        return value

    @classmethod
    def from_env(cls) -> WebhookHttpSettings:
        """Create settings from ``HERALD_WEBHOOK_HTTP_*`` environment variables.

        Raises
        ------
        WebhookConfigError
            If the headers or timeout variables are malformed.

        """
        token = os.environ.get(TOKEN_ENV, "").strip() or None
        return cls(
            token=token,
            headers=cls._parse_headers(os.environ.get(HEADERS_ENV, "")),
            timeout_s=cls._parse_timeout(os.environ.get(TIMEOUT_ENV, "")),
        )
