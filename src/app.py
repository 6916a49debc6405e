"""Application entry point for the notibridge decision replay tool."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import re
import sys
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from typing import Iterator, Optional, TextIO

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

import settings
from adapters.console_notifier import ConsoleNotifier
from adapters.event_mapper import EventFormatError, iter_events
from adapters.notification_formatting import format_outcome_row
from core.dedup import Deduper
from core.dispatcher import NotificationDispatcher
from core.matcher import resolve_match

NAME = "NOTIBRIDGE"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


_CONVERSATION_PATH_RE = re.compile(r"(/t/)[^/\s?#'\"]+")


class _LogRedactor:
    """Masks secret env values and, when asked, conversation ids in log lines."""

    def __init__(self, secrets: list[str], mask_conversations: bool = False) -> None:
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)
        self._mask_conversations = mask_conversations

    @classmethod
    def from_config(cls, redact_cfg: dict) -> "_LogRedactor":
        if not redact_cfg.get("enabled", False):
            return cls([])
        secrets = [os.getenv(name) or "" for name in redact_cfg.get("patterns", [])]
        return cls(secrets, mask_conversations=bool(redact_cfg.get("conversation_ids", False)))

    def apply(self, message: str) -> str:
        for secret in self._secrets:
            message = message.replace(secret, "***")
        if self._mask_conversations:
            message = _CONVERSATION_PATH_RE.sub(r"\1***", message)
        return message


class _RedactingFormatter(logging.Formatter):
    def __init__(self, redactor: _LogRedactor, fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._redactor = redactor

    def format(self, record: logging.LogRecord) -> str:
        return self._redactor.apply(super().format(record))


def _rotating_file_handler(file_cfg: dict) -> RotatingFileHandler:
    path = file_cfg.get("path", "logs/notibridge.log")
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    # .env may hold the values listed under redact.patterns.
    load_dotenv()
    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    formatter = _RedactingFormatter(
        _LogRedactor.from_config(config.get("redact", {})),
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        # stderr keeps log lines out of the rendered replay tables.
        handlers.append(logging.StreamHandler(sys.stderr))
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_rotating_file_handler(file_cfg))
    if not handlers:
        return

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)


@contextmanager
def _open_events(path: str) -> Iterator[TextIO]:
    if path == "-":
        yield sys.stdin
        return
    with open(path, "r", encoding="utf-8") as handle:
        yield handle


class _ReplayClock:
    """Clock driven by event timestamps so dedup windows replay faithfully.

    The clock never moves backwards; the deduper sweep relies on that.
    """

    def __init__(self) -> None:
        self.now_ms = 0.0

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, timestamp_ms: float) -> None:
        if timestamp_ms < self.now_ms:
            logging.getLogger(__name__).warning(
                "Event timestamp %s is earlier than %s; keeping the later time",
                timestamp_ms,
                self.now_ms,
            )
            return
        self.now_ms = timestamp_ms


async def _replay(path: str, console: Console) -> int:
    logger = logging.getLogger(__name__)
    clock = _ReplayClock()
    notifier = ConsoleNotifier(console, base_url=settings.BASE_URL)
    dispatcher = NotificationDispatcher(
        notifier=notifier,
        deduper=Deduper.from_config(settings.DEDUP_CONFIG),
        config=settings.DISPATCH_CONFIG,
        matcher_config=settings.MATCHER_CONFIG,
        clock=clock,
    )

    table = Table(title="Dispatch decisions")
    for column in ("#", "title", "decision", "reason", "confidence", "target"):
        table.add_column(column)

    with _open_events(path) as handle:
        for index, event in enumerate(iter_events(handle), start=1):
            if event.timestamp_ms is not None:
                clock.advance(event.timestamp_ms)
            try:
                outcome = await dispatcher.handle(event.payload, event.candidates)
            except Exception:
                logger.exception("Error while dispatching event %s", index)
                continue
            table.add_row(str(index), event.payload.title, *format_outcome_row(outcome))

    console.print(table)
    logger.info("Replay complete: notifications=%s", notifier.sent_count)
    return notifier.sent_count


def _match(path: str, console: Console) -> None:
    table = Table(title="Match results")
    for column in ("#", "title", "reason", "confidence", "ambiguous", "muted", "href"):
        table.add_column(column)

    with _open_events(path) as handle:
        for index, event in enumerate(iter_events(handle), start=1):
            result = resolve_match(event.payload, event.candidates, settings.MATCHER_CONFIG)
            table.add_row(
                str(index),
                event.payload.title,
                result.reason,
                f"{result.confidence:.2f}",
                "yes" if result.ambiguous else "no",
                "yes" if result.muted else "no",
                result.matched_href or "-",
            )
    console.print(table)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="notibridge")
    subparsers = parser.add_subparsers(dest="command")

    replay_parser = subparsers.add_parser("replay", help="Run recorded events through the dispatcher")
    replay_parser.add_argument("events", help="JSON lines file, or - for stdin")
    match_parser = subparsers.add_parser("match", help="Show matcher results for recorded events")
    match_parser.add_argument("events", help="JSON lines file, or - for stdin")
    parser.add_argument("--no-banner", action="store_true", help="Skip the startup banner")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    if not args.no_banner:
        _print_banner()
    _configure_logging()
    console = Console()

    try:
        if args.command == "match":
            _match(args.events, console)
            return
        asyncio.run(_replay(args.events, console))
    except EventFormatError as e:
        logging.getLogger(__name__).error("Invalid event file %s: %s", args.events, e)
        raise SystemExit(2) from e


if __name__ == "__main__":
    main()
