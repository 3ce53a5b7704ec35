"""
core.domain.notifications — Advisory, self-expiring notifications.

Centralises notification emission so every app uses one consistent
entry-point rather than building notification payloads by hand.

Design decisions
----------------
* **Ephemeral** — a notification is a frozen value object with an
  ``expires_after`` duration.  Nothing is written to the database and
  nothing is retried; the client displays it and lets it lapse.
* **Broadcast via signal** — every emitted notification is sent on the
  ``notification_emitted`` Django signal with ``send_robust`` so a
  faulty receiver cannot break the caller.
* **Never blocks the trigger** — ``NotificationEmitter.emit`` logs and
  swallows every failure and returns ``None`` instead of raising.
* **Per-request collection** — views wrap a service call in
  ``collect_notifications()`` to gather what was emitted and return it
  to the client alongside the response body.

Usage::

    from core.domain.notifications import NotificationEmitter

    NotificationEmitter.emit(
        "status_changed",
        actor=request.user,
        target_id=complaint.pk,
        payload={"status": complaint.get_status_display()},
    )
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Iterator

from django.conf import settings
from django.dispatch import Signal, receiver
from django.utils import timezone

if TYPE_CHECKING:
    from accounts.models import User

logger = logging.getLogger(__name__)

#: Sent with ``notification=<Notification>`` and ``actor=<User | None>``.
notification_emitted = Signal()

# ── Event-type → human-readable templates ───────────────────────────
# Templates are interpolated with the ``payload`` dict; missing keys
# are left as-is.
_EVENT_TEMPLATES: dict[str, tuple[str, str]] = {
    # event_type: (title_template, body_template)
    "login":               ("Welcome Back",            "Signed in as {name}."),
    "registered":          ("Account Created",          "Welcome, {name}. You can now submit complaints."),
    "complaint_submitted": ("Complaint Received",       "Complaint #{complaint_id} \"{title}\" was submitted."),
    "status_changed":      ("Complaint Status Updated", "Complaint #{complaint_id} is now {status}."),
    "message_posted":      ("New Reply",                "A new message was added to complaint #{complaint_id}."),
    "team_message_posted": ("New Team Message",         "New message in {channel}."),
    "password_changed":    ("Password Changed",         "Your password was updated."),
    "staff_updated":       ("Staff Account Updated",    "The account of {name} was updated."),
}


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


@dataclass(frozen=True)
class Notification:
    """
    A single advisory notification.

    ``expires_after`` is relative to ``issued_at``; use ``is_expired``
    instead of comparing timestamps by hand.
    """

    id: str
    event_type: str
    title: str
    body: str
    target_id: str | None
    issued_at: datetime
    expires_after: timedelta

    @property
    def expires_at(self) -> datetime:
        return self.issued_at + self.expires_after

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or timezone.now()) >= self.expires_at


def notification_ttl() -> timedelta:
    """Lifetime applied to every emitted notification."""
    return timedelta(seconds=getattr(settings, "NOTIFICATION_TTL_SECONDS", 4))


class NotificationEmitter:
    """
    Stateless helper for emitting ``Notification`` values.

    All methods are classmethods — no instance state is needed.
    """

    @classmethod
    def build(
        cls,
        event_type: str,
        *,
        target_id: Any = None,
        payload: dict[str, Any] | None = None,
    ) -> Notification:
        """
        Render the templates for ``event_type`` into a ``Notification``.

        Unknown event types fall back to a title derived from the
        event name.
        """
        title, body = _EVENT_TEMPLATES.get(
            event_type,
            (event_type.replace("_", " ").title(), f"Event: {event_type}"),
        )
        context = _KeepMissing(payload or {})
        return Notification(
            id=uuid.uuid4().hex,
            event_type=event_type,
            title=title.format_map(context),
            body=body.format_map(context),
            target_id=None if target_id is None else str(target_id),
            issued_at=timezone.now(),
            expires_after=notification_ttl(),
        )

    @classmethod
    def emit(
        cls,
        event_type: str,
        *,
        actor: User | None = None,
        target_id: Any = None,
        payload: dict[str, Any] | None = None,
    ) -> Notification | None:
        """
        Build a notification and broadcast it on ``notification_emitted``.

        Args:
            event_type: Key into ``_EVENT_TEMPLATES``.
            actor:      The user whose action triggered the event.
            target_id:  Identifier of the affected object (complaint id,
                        channel address, user id).
            payload:    Values interpolated into the templates.

        Returns:
            The emitted ``Notification``, or ``None`` if anything went
            wrong.  This method never raises.
        """
        try:
            notification = cls.build(event_type, target_id=target_id, payload=payload)
            responses = notification_emitted.send_robust(
                sender=cls,
                notification=notification,
                actor=actor,
            )
            for handler, result in responses:
                if isinstance(result, Exception):
                    logger.warning(
                        "Notification receiver %r failed for [%s]: %s",
                        handler,
                        event_type,
                        result,
                    )
        except Exception:
            logger.exception("Failed to emit notification [%s]", event_type)
            return None

        logger.info(
            "Emitted notification [%s] target=%s by actor=%s",
            event_type,
            notification.target_id,
            actor,
        )
        return notification


# ── Per-request collection ──────────────────────────────────────────

_collected: ContextVar[list[Notification] | None] = ContextVar(
    "collected_notifications",
    default=None,
)


@contextmanager
def collect_notifications() -> Iterator[list[Notification]]:
    """
    Gather every notification emitted inside the ``with`` block.

    Usage::

        with collect_notifications() as emitted:
            ComplaintLifecycleService.set_status(...)
        payload["notifications"] = NotificationSerializer(emitted, many=True).data
    """
    bucket: list[Notification] = []
    token = _collected.set(bucket)
    try:
        yield bucket
    finally:
        _collected.reset(token)


@receiver(notification_emitted, dispatch_uid="core.collect_notifications")
def _collect_emitted(sender, notification: Notification, **kwargs) -> None:
    bucket = _collected.get()
    if bucket is not None:
        bucket.append(notification)
