"""Webhook configuration and delivery errors."""

from __future__ import annotations

import enum


class DeliveryStage(enum.StrEnum):
    """Stage of a send at which delivery failed."""

    SERIALIZATION = "serialization"
    TRANSPORT = "transport"
    REMOTE_REJECTION = "remote_rejection"


class WebhookError(RuntimeError):
    """Base class for herald webhook errors."""


class WebhookConfigError(WebhookError):
    """Raised when webhook configuration is invalid."""

    @classmethod
    def invalid_pattern(
        cls, field: str, pattern: str, reason: object
    ) -> WebhookConfigError:
        """Return an error for a pattern that fails to compile."""
        return cls(f"error compiling {field} {pattern!r}: {reason}")

    @classmethod
    def unsupported_syntax(cls, syntax: str) -> WebhookConfigError:
        """Return an error for an unknown pattern syntax."""
        return cls(f"unsupported pattern syntax {syntax!r}")

    @classmethod
    def unsupported_event(cls, event: str) -> WebhookConfigError:
        """Return an error for a webhook bound to an unknown event."""
        return cls(f"event {event!r} is not supported; only 'apply' is")

    @classmethod
    def unsupported_kind(cls, kind: str) -> WebhookConfigError:
        """Return an error for a webhook of an unknown kind."""
        return cls(f"webhook kind {kind!r} is not supported; only 'http' is")

    @classmethod
    def invalid_url(cls, url: str, reason: object) -> WebhookConfigError:
        """Return an error for a missing or malformed endpoint URL."""
        return cls(f"invalid webhook url {url!r}: {reason}")

    @classmethod
    def empty_token(cls) -> WebhookConfigError:
        """Return an error when a credential is an empty string."""
        return cls("webhook token must be non-empty; use None for no auth")

    @classmethod
    def invalid_token(cls) -> WebhookConfigError:
        """Return an error when a credential cannot be sent in a header."""
        return cls("webhook token must contain only printable ASCII characters")

    @classmethod
    def reserved_header(cls, name: str) -> WebhookConfigError:
        """Return an error for an extra header herald manages itself."""
        return cls(f"header {name!r} cannot be set as an extra header")

    @classmethod
    def invalid_file(cls, path: object, reason: object) -> WebhookConfigError:
        """Return an error for an unreadable or malformed config file."""
        return cls(f"failed to load webhook config {path}: {reason}")

    @classmethod
    def invalid_env(cls, name: str, raw: str, reason: str) -> WebhookConfigError:
        """Return an error for a malformed environment variable."""
        return cls(f"{name} {reason}, got: {raw!r}")


class WebhookDeliveryError(WebhookError):
    """Raised when a single webhook send fails.

    Attributes
    ----------
    stage
        Step of the send that failed.
    url
        Endpoint the event was addressed to.

    """

    stage: DeliveryStage

    def __init__(self, message: str, *, url: str) -> None:
        """Initialise with a message and the target endpoint URL."""
        self.url = url
        super().__init__(message)


class SerializationError(WebhookDeliveryError):
    """Raised when an event cannot be encoded as JSON."""

    stage = DeliveryStage.SERIALIZATION

    @classmethod
    def from_exception(cls, url: str, exc: BaseException) -> SerializationError:
        """Return an error wrapping the encoder failure."""
        return cls(f"encoding webhook payload for {url} failed: {exc}", url=url)


class TransportError(WebhookDeliveryError):
    """Raised when the request fails before a response is received."""

    stage = DeliveryStage.TRANSPORT

    @classmethod
    def from_exception(cls, url: str, exc: BaseException) -> TransportError:
        """Return an error wrapping the HTTP client failure."""
        return cls(
            f"sending webhook to {url} failed: {type(exc).__name__}: {exc}", url=url
        )

    @classmethod
    def cancelled(cls, url: str) -> TransportError:
        """Return an error for a request cancelled by the caller."""
        return cls(f"sending webhook to {url} cancelled", url=url)


class RemoteRejectionError(WebhookDeliveryError):
    """Raised when the endpoint answers with a non-2xx status."""

    stage = DeliveryStage.REMOTE_REJECTION

    def __init__(self, message: str, *, url: str, status_code: int) -> None:
        """Initialise with the message, endpoint and observed status code."""
        self.status_code = status_code
        super().__init__(message, url=url)

    @classmethod
    def http_error(cls, url: str, status_code: int) -> RemoteRejectionError:
        """Return an error for a non-2xx HTTP response."""
        return cls(
            f"sending webhook to {url} failed: HTTP {status_code}",
            url=url,
            status_code=status_code,
        )
