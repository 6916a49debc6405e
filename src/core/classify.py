"""Payload classification that runs before conversation matching."""

from __future__ import annotations

import re

from core.models import (
    CALL_REASON_NOT_CALL,
    CALL_REASON_PATTERN,
    CallClassification,
    NotificationPayload,
)
from core.text import normalize_text

CALL_BODY_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"calling you",
        r"incoming (video |audio )?call",
        r"is calling",
        r"video call from",
        r"audio call from",
        r"wants to call",
    )
]

GLOBAL_SOCIAL_BODY_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"commented on your",
        r"reacted to your",
        r"liked your",
        r"shared your",
        r"mentioned you in",
        r"tagged you",
        r"friend request",
        r"accepted your friend request",
        r"new friend suggestion",
        r"is live now",
        r"posted in",
        r"new post in",
        r"invited you",
        r"birthday",
        r"new notification",
        r"new notifications",
    )
]

SITE_SHELL_TITLES = ("facebook", "meta")


def classify_call_notification(payload: NotificationPayload) -> CallClassification:
    """Return whether the payload reads like an incoming audio/video call."""

    combined = f"{normalize_text(payload.title)} {normalize_text(payload.body)}".strip()
    if not combined:
        return CallClassification(is_incoming_call=False, reason=CALL_REASON_NOT_CALL)

    for pattern in CALL_BODY_PATTERNS:
        if pattern.search(combined):
            return CallClassification(
                is_incoming_call=True,
                reason=CALL_REASON_PATTERN,
                matched_pattern=pattern.pattern,
            )
    return CallClassification(is_incoming_call=False, reason=CALL_REASON_NOT_CALL)


def _is_site_shell_title(title: str) -> bool:
    return any(title == shell or title.startswith(f"{shell} ") for shell in SITE_SHELL_TITLES)


def is_likely_global_site_notification(payload: NotificationPayload) -> bool:
    """Detect site-wide activity alerts (likes, friend requests) that are not chats.

    Both a site-shell title and a social-activity body are required so real
    chat alerts from someone who happens to write "birthday" still get through.
    """

    title = normalize_text(payload.title)
    body = normalize_text(payload.body)
    if not title and not body:
        return False

    if classify_call_notification(payload).is_incoming_call:
        return False

    if not _is_site_shell_title(title):
        return False
    return any(pattern.search(body) for pattern in GLOBAL_SOCIAL_BODY_PATTERNS)
