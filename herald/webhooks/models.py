"""Event and outcome types exchanged with webhook senders."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    from .errors import WebhookDeliveryError


class NotificationEvent(msgspec.Struct, kw_only=True, frozen=True):
    """Outcome of an apply operation on a pull request.

    Encodes to the fixed webhook wire schema: ``workspace``, ``repo``,
    ``pull_num``, ``pull_url``, ``base_branch``, ``user`` and ``success``.

    Attributes
    ----------
    workspace : str
        Workspace the operation ran in, e.g. ``production``.
    repo_full_name : str
        Repository in ``owner/name`` form; serialized as ``repo``.
    pull_num : int
        Pull request number.
    pull_url : str
        Pull request URL.
    base_branch : str
        Branch the pull request targets.
    user : str
        User who triggered the operation.
    success : bool
        Whether the operation succeeded.

    """

    workspace: str
    repo_full_name: str = msgspec.field(name="repo")
    pull_num: int
    pull_url: str
    base_branch: str
    user: str
    success: bool

    def to_json(self) -> bytes:
        """Encode the event using the webhook wire schema."""
        return msgspec.json.encode(self)

    @classmethod
    def from_json(cls, payload: bytes | str) -> NotificationEvent:
        """Decode and validate an event from its wire representation."""
        return msgspec.json.decode(payload, type=cls)


class DeliveryStatus(enum.StrEnum):
    """Result of a single webhook send."""

    DELIVERED = "delivered"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    """Outcome of sending one event to one webhook.

    ``error`` is set only for ``FAILED`` outcomes.
    """

    url: str
    status: DeliveryStatus
    error: WebhookDeliveryError | None = None

    @property
    def ok(self) -> bool:
        """Return True when the send completed without error."""
        return self.status is not DeliveryStatus.FAILED

    @classmethod
    def delivered(cls, url: str) -> DeliveryOutcome:
        """Return an outcome for an accepted delivery."""
        return cls(url=url, status=DeliveryStatus.DELIVERED)

    @classmethod
    def skipped(cls, url: str) -> DeliveryOutcome:
        """Return an outcome for an event filtered out by the match rule."""
        return cls(url=url, status=DeliveryStatus.SKIPPED)

    @classmethod
    def failed(cls, error: WebhookDeliveryError) -> DeliveryOutcome:
        """Return an outcome recording a delivery failure."""
        return cls(url=error.url, status=DeliveryStatus.FAILED, error=error)
