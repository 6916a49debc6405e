from __future__ import annotations

from core.classify import classify_call_notification, is_likely_global_site_notification
from core.models import NotificationPayload


def test_incoming_call_patterns() -> None:
    result = classify_call_notification(NotificationPayload(title="Carol", body="Incoming video call"))
    assert result.is_incoming_call is True
    assert result.reason == "incoming-call-pattern"
    assert result.matched_pattern == "incoming (video |audio )?call"

    result = classify_call_notification(NotificationPayload(title="Carol is calling you", body=""))
    assert result.is_incoming_call is True


def test_regular_message_is_not_a_call() -> None:
    result = classify_call_notification(NotificationPayload(title="Carol", body="call me later"))
    assert result.is_incoming_call is False
    assert result.reason == "not-call"
    assert result.matched_pattern is None


def test_empty_payload_is_not_a_call() -> None:
    result = classify_call_notification(NotificationPayload(title="  ", body=""))
    assert result.is_incoming_call is False


def test_site_activity_needs_shell_title_and_social_body() -> None:
    assert is_likely_global_site_notification(
        NotificationPayload(title="Facebook", body="Dana commented on your post")
    )
    assert is_likely_global_site_notification(
        NotificationPayload(title="Meta Business", body="You have 3 new notifications")
    )
    # A friend writing about a birthday is a real chat alert.
    assert not is_likely_global_site_notification(
        NotificationPayload(title="Dana", body="Happy birthday!")
    )
    assert not is_likely_global_site_notification(
        NotificationPayload(title="Facebook Fans", body="hello")
    )
    assert not is_likely_global_site_notification(NotificationPayload(title="", body=""))


def test_calls_are_never_site_activity() -> None:
    assert not is_likely_global_site_notification(
        NotificationPayload(title="Facebook", body="Dana is calling you, invited you to join")
    )
