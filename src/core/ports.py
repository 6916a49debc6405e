"""Ports (interfaces) used by the core dispatcher.

Ports define the minimal contracts for delivery adapters so the core can be
reused with a console renderer today and a native bridge elsewhere.
"""

from __future__ import annotations

from typing import Protocol

from core.models import NativeNotification


class NotifierPort(Protocol):
    """Notification delivery required by the dispatcher."""

    async def send(self, notification: NativeNotification) -> None:
        ...
