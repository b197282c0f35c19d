"""Structured log events for webhook delivery.

Senders emit at most two kinds of record: an INFO notice when a webhook's
match rule filters an event out, and an ERROR notice when a send fails.
"""

from __future__ import annotations

import enum
import typing as typ

from herald.logging import get_logger, log_error, log_info

if typ.TYPE_CHECKING:
    from .errors import WebhookDeliveryError
    from .models import NotificationEvent

logger = get_logger(__name__)


class WebhookEventType(enum.StrEnum):
    """Structured log event types for webhook delivery."""

    DELIVERY_SKIPPED = "webhook.delivery.skipped"
    DELIVERY_FAILED = "webhook.delivery.failed"


class WebhookEventLogger:
    """Emit structured webhook delivery events via femtologging."""

    def log_delivery_skipped(self, *, url: str, event: NotificationEvent) -> None:
        """Log that an event did not match a webhook's rule."""
        log_info(
            logger,
            "[%s] url=%s repo=%s pull_num=%d workspace=%s base_branch=%s",
            WebhookEventType.DELIVERY_SKIPPED,
            url,
            event.repo_full_name,
            event.pull_num,
            event.workspace,
            event.base_branch,
        )

    def log_delivery_failed(
        self,
        *,
        event: NotificationEvent,
        error: WebhookDeliveryError,
    ) -> None:
        """Log a failed send with its stage and cause.

        Parameters
        ----------
        event
            Event that was being delivered.
        error
            Failure raised by the sender; attached as ``exc_info``.

        """
        log_error(
            logger,
            "[%s] url=%s repo=%s pull_num=%d stage=%s error_type=%s "
            "error_message=%s",
            WebhookEventType.DELIVERY_FAILED,
            error.url,
            event.repo_full_name,
            event.pull_num,
            error.stage,
            type(error).__name__,
            str(error),
            exc_info=error,
        )
