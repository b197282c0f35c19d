"""Conditional outbound webhooks for apply results."""

from __future__ import annotations

from .config import WebhookDefinition, WebhookHttpSettings, load_webhooks
from .errors import (
    DeliveryStage,
    RemoteRejectionError,
    SerializationError,
    TransportError,
    WebhookConfigError,
    WebhookDeliveryError,
    WebhookError,
)
from .factory import build_webhook_sender
from .http import HttpWebhook, WebhookEndpoint
from .matching import (
    ExactPredicate,
    GlobPredicate,
    MatchRule,
    PatternSyntax,
    RegexPredicate,
    StringPredicate,
    compile_predicate,
)
from .models import DeliveryOutcome, DeliveryStatus, NotificationEvent
from .observability import WebhookEventLogger, WebhookEventType
from .sender import MultiWebhookSender, WebhookSender

__all__ = [
    "DeliveryOutcome",
    "DeliveryStage",
    "DeliveryStatus",
    "ExactPredicate",
    "GlobPredicate",
    "HttpWebhook",
    "MatchRule",
    "MultiWebhookSender",
    "NotificationEvent",
    "PatternSyntax",
    "RegexPredicate",
    "RemoteRejectionError",
    "SerializationError",
    "StringPredicate",
    "TransportError",
    "WebhookConfigError",
    "WebhookDefinition",
    "WebhookDeliveryError",
    "WebhookEndpoint",
    "WebhookError",
    "WebhookEventLogger",
    "WebhookEventType",
    "WebhookHttpSettings",
    "WebhookSender",
    "build_webhook_sender",
    "compile_predicate",
    "load_webhooks",
]
