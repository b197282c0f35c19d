"""Validate webhook configuration and optionally deliver an event through it."""

from __future__ import annotations

import argparse
import asyncio
import os
import typing as typ
from pathlib import Path

import msgspec

from herald.logging import configure_logging, get_logger, log_warning
from herald.webhooks import (
    NotificationEvent,
    WebhookConfigError,
    WebhookHttpSettings,
    build_webhook_sender,
    load_webhooks,
)
from herald.webhooks.factory import compile_definition

if typ.TYPE_CHECKING:
    from herald.webhooks import DeliveryOutcome, MultiWebhookSender

logger = get_logger(__name__)


async def _deliver(
    sender: MultiWebhookSender, event: NotificationEvent
) -> tuple[DeliveryOutcome, ...]:
    try:
        return await sender.send(event)
    finally:
        await sender.aclose()


def _read_event(path: Path) -> NotificationEvent:
    try:
        return NotificationEvent.from_json(path.read_bytes())
    except (OSError, msgspec.DecodeError) as exc:
        msg = f"failed to read event {path}: {exc}"
        raise WebhookConfigError(msg) from exc


def main(argv: list[str] | None = None) -> int:
    """Validate a webhook config file and optionally send an event.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 when the config is valid and every webhook delivered or
        skipped the event, 1 otherwise.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="YAML webhook configuration")
    parser.add_argument(
        "--event",
        type=Path,
        default=None,
        help="Optional JSON apply-result file to send to every webhook",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("HERALD_LOG_LEVEL", "INFO"),
        help="Log level (default: $HERALD_LOG_LEVEL or INFO)",
    )
    args = parser.parse_args(argv)

    level, invalid = configure_logging(args.log_level)
    if invalid:
        log_warning(logger, "Invalid log level %r; using %s", args.log_level, level)

    config_path: Path = args.config
    try:
        definitions = load_webhooks(config_path)
        settings = WebhookHttpSettings.from_env()
        if args.event is None:
            for definition in definitions:
                compile_definition(definition, settings)
        else:
            event = _read_event(args.event)
            sender = build_webhook_sender(definitions, settings)
    except WebhookConfigError as exc:
        print(f"Webhook configuration invalid: {exc}")
        return 1

    if args.event is None:
        print(f"webhook config {config_path} is valid ({len(definitions)} webhooks)")
        return 0

    outcomes = asyncio.run(_deliver(sender, event))
    for outcome in outcomes:
        detail = f": {outcome.error}" if outcome.error is not None else ""
        print(f"{outcome.status} {outcome.url}{detail}")
    return 0 if all(outcome.ok for outcome in outcomes) else 1


if __name__ == "__main__":
    raise SystemExit(main())
