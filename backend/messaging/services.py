"""
Messaging app Service Layer.

Routes every message read and write to the right store after checking
that the actor may use the addressed channel.

Channel addresses
-----------------
Three disjoint textual forms:

  ``<digits>``          the correspondence thread of that complaint
  ``GLOBAL``            the shared room of all staff and the supervisor
  ``PRIVATE_<staffId>`` one staff member's line to the supervisor

Access
------
  complaint thread   submitter, and staff / supervisor who can see it
  GLOBAL             every staff member and the supervisor
  PRIVATE_<id>       that staff member and the supervisor

Complaint threads are delegated to ``complaints.services``; team
channels are stored in ``TeamMessage``.  Messages never cross
addresses.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from django.db.models import QuerySet

from accounts.models import Role, User
from complaints.models import Complaint, ComplaintMessage
from complaints.services import ComplaintLifecycleService, ComplaintQueryService
from core.domain.access import ensure_exhaustive, require_role
from core.domain.exceptions import AuthorizationError, NotFoundError, ValidationError
from core.domain.notifications import NotificationEmitter

from .models import AttachmentType, TeamMessage

logger = logging.getLogger(__name__)

GLOBAL_CHANNEL = "GLOBAL"
PRIVATE_PREFIX = "PRIVATE_"

_COMPLAINT_RE = re.compile(r"[0-9]+")
_PRIVATE_RE = re.compile(r"PRIVATE_([0-9]+)")


class ChannelKind:
    COMPLAINT = "complaint"
    GLOBAL = "global"
    PRIVATE = "private"


@dataclass(frozen=True)
class ChannelAddress:
    """
    A parsed channel address.

    ``target_id`` is the complaint id for complaint threads, the staff
    member's id for private channels, and ``None`` for ``GLOBAL``.
    """

    kind: str
    target_id: int | None = None

    @classmethod
    def parse(cls, raw: Any) -> ChannelAddress:
        """
        Parse a textual address.

        Raises
        ------
        core.domain.exceptions.ValidationError
            ``raw`` matches none of the three forms.
        """
        value = str(raw or "").strip()
        if _COMPLAINT_RE.fullmatch(value):
            return cls(ChannelKind.COMPLAINT, int(value))
        if value == GLOBAL_CHANNEL:
            return cls(ChannelKind.GLOBAL)
        match = _PRIVATE_RE.fullmatch(value)
        if match:
            return cls(ChannelKind.PRIVATE, int(match.group(1)))
        raise ValidationError(f"'{value}' is not a valid channel address.")

    @classmethod
    def for_complaint(cls, complaint_id: int) -> ChannelAddress:
        return cls(ChannelKind.COMPLAINT, int(complaint_id))

    @classmethod
    def private(cls, staff_id: int) -> ChannelAddress:
        return cls(ChannelKind.PRIVATE, int(staff_id))

    @property
    def is_complaint(self) -> bool:
        return self.kind == ChannelKind.COMPLAINT

    def __str__(self) -> str:
        if self.kind == ChannelKind.GLOBAL:
            return GLOBAL_CHANNEL
        if self.kind == ChannelKind.PRIVATE:
            return f"{PRIVATE_PREFIX}{self.target_id}"
        return str(self.target_id)


GLOBAL_ADDRESS = ChannelAddress(ChannelKind.GLOBAL)


def _global_entry() -> dict[str, Any]:
    return {
        "address": GLOBAL_CHANNEL,
        "kind": ChannelKind.GLOBAL,
        "label": "Staff Room",
        "staff_id": None,
    }


def _private_entry(staff: User) -> dict[str, Any]:
    return {
        "address": str(ChannelAddress.private(staff.pk)),
        "kind": ChannelKind.PRIVATE,
        "label": staff.display_name,
        "staff_id": staff.pk,
    }


def _supervisor_channels(actor: User) -> list[dict[str, Any]]:
    staff = User.objects.filter(role=Role.STAFF, is_active=True).order_by("pk")
    return [_global_entry()] + [_private_entry(member) for member in staff]


CHANNEL_LISTING: dict[str, Callable[[User], list[dict[str, Any]]]] = {
    Role.CITIZEN:    lambda actor: [],
    Role.STAFF:      lambda actor: [_global_entry(), _private_entry(actor)],
    Role.SUPERVISOR: _supervisor_channels,
}
ensure_exhaustive(CHANNEL_LISTING, Role, name="CHANNEL_LISTING")


class ChannelRouter:
    """
    Single entry point for channel-addressed reads and writes.
    """

    @staticmethod
    def channels_for(actor: User) -> list[dict[str, Any]]:
        """
        Team channels ``actor`` may address.

        Staff get ``GLOBAL`` and their own private channel; the
        supervisor gets ``GLOBAL`` and one private channel per active
        staff member; citizens get none (they reach their complaint
        threads through the complaints API).
        """
        if not actor.is_active:
            return []
        return CHANNEL_LISTING[actor.role](actor)

    @staticmethod
    def authorize(actor: User, address: ChannelAddress) -> Complaint | None:
        """
        Raise unless ``actor`` may use ``address``.

        Returns the complaint for complaint threads, ``None`` otherwise.

        Raises
        ------
        core.domain.exceptions.AuthorizationError
            The actor may not use the channel.
        core.domain.exceptions.NotFoundError
            The complaint, or the staff member of a private channel,
            does not exist.
        """
        if address.is_complaint:
            return ComplaintQueryService.get_complaint_for(actor, address.target_id)

        require_role(
            actor,
            Role.STAFF,
            Role.SUPERVISOR,
            message="Team channels are only open to office staff.",
        )
        if address.kind == ChannelKind.PRIVATE:
            if not User.objects.filter(pk=address.target_id, role=Role.STAFF).exists():
                raise NotFoundError(f"No staff member with id {address.target_id}.")
            if actor.role != Role.SUPERVISOR and actor.pk != address.target_id:
                raise AuthorizationError("You cannot access another staff member's private channel.")
        return None

    @staticmethod
    def read(actor: User, address: ChannelAddress) -> QuerySet[ComplaintMessage] | QuerySet[TeamMessage]:
        """Messages on ``address`` in send order."""
        complaint = ChannelRouter.authorize(actor, address)
        if complaint is not None:
            return ComplaintLifecycleService.thread(complaint, actor)
        return (
            TeamMessage.objects
            .filter(channel_address=str(address))
            .select_related("sender")
            .order_by("created_at", "id")
        )

    @staticmethod
    def post(
        actor: User,
        address: ChannelAddress,
        *,
        text: str = "",
        attachment_type: str = "",
        attachment_url: str = "",
        attachment_name: str = "",
    ) -> ComplaintMessage | TeamMessage:
        """
        Append a message to ``address``.

        Complaint threads accept text only and go through
        ``ComplaintLifecycleService.append_message``.  Team messages
        need text or an attachment URL; an attachment without a type
        is stored as a generic file.

        Raises
        ------
        core.domain.exceptions.ValidationError
            Empty message, unknown attachment type, or an attachment on
            a complaint thread.
        """
        text = (text or "").strip()
        complaint = ChannelRouter.authorize(actor, address)

        if complaint is not None:
            if attachment_url:
                raise ValidationError("Attachments are only supported on team channels.")
            return ComplaintLifecycleService.append_message(complaint, actor, text)

        if not text and not attachment_url:
            raise ValidationError("A message needs text or an attachment.")
        if attachment_url and not attachment_type:
            attachment_type = AttachmentType.FILE
        if attachment_type and attachment_type not in AttachmentType.values:
            raise ValidationError(f"Unknown attachment type '{attachment_type}'.")
        if not attachment_url:
            attachment_type = ""
            attachment_name = ""

        message = TeamMessage.objects.create(
            sender=actor,
            sender_display_name=actor.display_name,
            channel_address=str(address),
            text=text,
            attachment_type=attachment_type,
            attachment_url=attachment_url,
            attachment_name=attachment_name,
        )
        logger.info("Team message #%s posted to %s by %s", message.pk, address, actor.username)
        NotificationEmitter.emit(
            "team_message_posted",
            actor=actor,
            target_id=str(address),
            payload={"channel": "the staff room" if address == GLOBAL_ADDRESS else "your private channel"},
        )
        return message
