"""
Complaints app Service Layer.

This module is the **single source of truth** for all business logic
in the ``complaints`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``ComplaintQueryService``     — role-scoped visibility and querying.
- ``ComplaintLifecycleService`` — creation, status changes,
                                  correspondence and assistant features.

Visibility
----------
  CITIZEN     → complaints they submitted
  STAFF       → complaints whose category is in ``category_scope``
                (everything when the scope is ``["all"]``)
  SUPERVISOR  → everything
  inactive    → nothing

Status Machine
--------------
Permissive: any status may be set to any other status by staff or the
supervisor, including reopening ``RESOLVED`` / ``REJECTED`` complaints.
``PENDING`` is the only initial status.  Citizens never change status.

  PENDING ⇄ IN_PROGRESS ⇄ RESOLVED
      ↘        ↕        ↙
          REJECTED

Concurrency
-----------
``set_status`` and ``append_message`` hold a row lock on the complaint
(``select_for_update``) for the duration of their write.  Calls to the
text-generation collaborator happen before any transaction is opened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from django.db import transaction
from django.db.models import Q, QuerySet, Value
from django.db.models.functions import Coalesce, NullIf, StrIndex
from django.utils import timezone

from accounts.models import Role, User
from core.constants import DEFAULT_AREA, DEFAULT_CITY, DEFAULT_PROVINCE, Area, Category
from core.domain.access import apply_role_scope, ensure_exhaustive, require_role
from core.domain.exceptions import (
    AuthorizationError,
    CollaboratorError,
    NotFoundError,
    ValidationError,
)
from core.domain.notifications import NotificationEmitter
from core.domain.transactions import lock_for_update
from core.text_generation import SUMMARY_FALLBACK, WELCOME_FALLBACK, get_text_generator

from .models import (
    Complaint,
    ComplaintMessage,
    ComplaintStatus,
    ComplaintStatusLog,
    MessageOrigin,
)

logger = logging.getLogger(__name__)

#: Sender name shown on the automatic welcome message.
RECEPTION_DISPLAY_NAME = "Smart Reception"


def _staff_scope(qs: QuerySet, user: User) -> QuerySet:
    if user.has_all_categories:
        return qs
    return qs.filter(category__in=list(user.category_scope or []))


VISIBILITY_RULES: dict[str, Callable[[QuerySet, User], QuerySet]] = {
    Role.CITIZEN:    lambda qs, u: qs.filter(submitter=u),
    Role.STAFF:      _staff_scope,
    Role.SUPERVISOR: lambda qs, u: qs,
}
ensure_exhaustive(VISIBILITY_RULES, Role, name="VISIBILITY_RULES")


@dataclass(frozen=True)
class ComplaintCriteria:
    """
    Filters applied on top of an actor's visible set.

    ``search`` is a case-sensitive substring matched against the title
    or the submitter's display name; an empty string matches everything.
    ``None`` leaves ``status`` / ``category`` unfiltered.
    """

    search: str = ""
    status: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class GeneratedText:
    """Collaborator output, flagged when the fallback was substituted."""

    text: str
    is_fallback: bool = False


# ═══════════════════════════════════════════════════════════════════
#  Complaint Query Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintQueryService:
    """
    Constructs role-scoped, filtered querysets of complaints.

    Every method is a pure function of ``(actor, stored complaints,
    criteria)`` and evaluates as a single SQL statement.
    """

    @staticmethod
    def get_visible_queryset(actor: User) -> QuerySet[Complaint]:
        """Return every complaint ``actor`` may see, unordered."""
        qs = Complaint.objects.select_related("submitter")
        return apply_role_scope(qs, actor, scope_rules=VISIBILITY_RULES)

    @staticmethod
    def search(actor: User, criteria: ComplaintCriteria | None = None) -> QuerySet[Complaint]:
        """
        Apply ``criteria`` to the actor's visible set.

        Ordered newest first; complaints created at the same instant
        keep insertion order (ascending primary key).

        Raises
        ------
        core.domain.exceptions.ValidationError
            ``status`` or ``category`` is outside the closed vocabulary.
        """
        criteria = criteria or ComplaintCriteria()
        qs = ComplaintQueryService.get_visible_queryset(actor)

        if criteria.status:
            if criteria.status not in ComplaintStatus.values:
                raise ValidationError(f"Unknown status '{criteria.status}'.")
            qs = qs.filter(status=criteria.status)

        if criteria.category:
            if criteria.category not in Category.values:
                raise ValidationError(f"Unknown category '{criteria.category}'.")
            qs = qs.filter(category=criteria.category)

        if criteria.search:
            # StrIndex is case-sensitive on every supported backend,
            # unlike ``contains`` on SQLite.
            term = Value(criteria.search)
            qs = qs.alias(
                submitter_display=Coalesce(
                    NullIf("submitter__full_name", Value("")),
                    "submitter__username",
                ),
            ).alias(
                title_hit=StrIndex("title", term),
                name_hit=StrIndex("submitter_display", term),
            ).filter(Q(title_hit__gt=0) | Q(name_hit__gt=0))

        return qs.order_by("-created_at", "pk")

    @staticmethod
    def can_see(actor: User, complaint: Complaint) -> bool:
        return ComplaintQueryService.get_visible_queryset(actor).filter(pk=complaint.pk).exists()

    @staticmethod
    def ensure_visible(actor: User, complaint: Complaint) -> None:
        """Raise ``AuthorizationError`` if ``complaint`` is outside the visible set."""
        if not ComplaintQueryService.can_see(actor, complaint):
            raise AuthorizationError("This complaint is outside your access scope.")

    @staticmethod
    def get_complaint_for(actor: User, pk: Any) -> Complaint:
        """
        Fetch one complaint on behalf of ``actor``.

        Raises
        ------
        core.domain.exceptions.NotFoundError
            No complaint has that id.
        core.domain.exceptions.AuthorizationError
            The complaint exists but ``actor`` may not see it.
        """
        try:
            complaint = Complaint.objects.select_related("submitter").get(pk=pk)
        except (Complaint.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Complaint #{pk} does not exist.")
        ComplaintQueryService.ensure_visible(actor, complaint)
        return complaint


# ═══════════════════════════════════════════════════════════════════
#  Complaint Lifecycle Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintLifecycleService:
    """
    Owns every write to complaints, their threads and their audit log.
    """

    # ── Collaborator access ─────────────────────────────────────────

    @staticmethod
    def _generate(method: str, *args: Any, fallback: str) -> GeneratedText:
        """
        Call ``method`` on the configured text generator.

        Any failure (including a timeout) yields ``fallback``; nothing
        raised by the collaborator escapes this method.
        """
        try:
            generator = get_text_generator()
            text = getattr(generator, method)(*args)
        except CollaboratorError as exc:
            logger.warning("Text generation [%s] failed, using fallback: %s", method, exc)
            return GeneratedText(fallback, is_fallback=True)
        except Exception:
            logger.exception("Text generation [%s] raised unexpectedly, using fallback", method)
            return GeneratedText(fallback, is_fallback=True)

        text = (text or "").strip()
        if not text:
            logger.warning("Text generation [%s] returned nothing, using fallback", method)
            return GeneratedText(fallback, is_fallback=True)
        return GeneratedText(text)

    # ── Creation ────────────────────────────────────────────────────

    @staticmethod
    def create_complaint(submitter: User, validated_data: dict[str, Any]) -> Complaint:
        """
        File a new complaint in ``PENDING`` status.

        Parameters
        ----------
        submitter : User
            The citizen filing the complaint.
        validated_data : dict
            ``title``, ``category``, ``description`` and optionally
            ``province``, ``city``, ``area``, ``address``.  Missing
            location fields default to the submitter's registered
            location, then to the office's home area.

        Returns
        -------
        Complaint
            The saved complaint.  Its thread holds exactly one welcome
            message from the reception assistant (or the fixed fallback
            text when the assistant is unavailable).

        Raises
        ------
        core.domain.exceptions.AuthorizationError
            ``submitter`` is not an active citizen.
        core.domain.exceptions.ValidationError
            Blank title or description, or unknown category / area.
        """
        require_role(submitter, Role.CITIZEN, message="Only citizens can submit complaints.")

        title = (validated_data.get("title") or "").strip()
        description = (validated_data.get("description") or "").strip()
        category = validated_data.get("category") or ""

        if not title:
            raise ValidationError("Title is required.")
        if not description:
            raise ValidationError("Description is required.")
        if category not in Category.values:
            raise ValidationError(f"Unknown category '{category}'.")

        area = validated_data.get("area") or ""
        if area and area not in Area.values:
            raise ValidationError(f"Unknown area '{area}'.")
        if not area:
            area = submitter.area if submitter.area in Area.values else DEFAULT_AREA

        welcome = ComplaintLifecycleService._generate(
            "welcome_message",
            submitter.display_name,
            title,
            fallback=WELCOME_FALLBACK,
        )

        with transaction.atomic():
            complaint = Complaint.objects.create(
                submitter=submitter,
                title=title,
                category=category,
                description=description,
                status=ComplaintStatus.PENDING,
                province=validated_data.get("province") or submitter.province or DEFAULT_PROVINCE,
                city=validated_data.get("city") or submitter.city or DEFAULT_CITY,
                area=area,
                address=validated_data.get("address") or submitter.address,
            )
            ComplaintMessage.objects.create(
                complaint=complaint,
                sender=None,
                sender_display_name=RECEPTION_DISPLAY_NAME,
                text=welcome.text,
                origin=MessageOrigin.AI_ASSISTED,
            )
            ComplaintStatusLog.objects.create(
                complaint=complaint,
                from_status="",
                to_status=ComplaintStatus.PENDING,
                changed_by=submitter,
            )

        logger.info(
            "Complaint #%s filed by %s in %s",
            complaint.pk,
            submitter.username,
            category,
        )
        NotificationEmitter.emit(
            "complaint_submitted",
            actor=submitter,
            target_id=complaint.pk,
            payload={"complaint_id": complaint.pk, "title": complaint.title},
        )
        return complaint

    # ── Status machine ──────────────────────────────────────────────

    @staticmethod
    def set_status(complaint: Complaint, new_status: str, actor: User) -> Complaint:
        """
        Move ``complaint`` to ``new_status``.

        Any status may follow any other.  ``resolved_at`` is stamped on
        entering ``RESOLVED`` and cleared on leaving it.  A status-log
        row is written only when the status actually changes; the
        ``status_changed`` notification is emitted either way.

        Raises
        ------
        core.domain.exceptions.AuthorizationError
            ``actor`` is a citizen, or the complaint is outside their
            visible set.
        core.domain.exceptions.ValidationError
            ``new_status`` is not a known status.
        """
        if actor.role == Role.CITIZEN:
            raise AuthorizationError("Citizens cannot change complaint status.")
        if new_status not in ComplaintStatus.values:
            raise ValidationError(f"Unknown status '{new_status}'.")
        ComplaintQueryService.ensure_visible(actor, complaint)

        with transaction.atomic():
            locked = lock_for_update(Complaint, complaint.pk)
            previous = locked.status
            if previous != new_status:
                locked.status = new_status
                locked.resolved_at = (
                    timezone.now() if new_status == ComplaintStatus.RESOLVED else None
                )
                locked.save(update_fields=["status", "resolved_at", "updated_at"])
                ComplaintStatusLog.objects.create(
                    complaint=locked,
                    from_status=previous,
                    to_status=new_status,
                    changed_by=actor,
                )
                logger.info(
                    "Complaint #%s: %s → %s by %s",
                    locked.pk,
                    previous,
                    new_status,
                    actor.username,
                )

        NotificationEmitter.emit(
            "status_changed",
            actor=actor,
            target_id=locked.pk,
            payload={"complaint_id": locked.pk, "status": locked.get_status_display()},
        )
        return locked

    # ── Correspondence ──────────────────────────────────────────────

    @staticmethod
    def thread(complaint: Complaint, actor: User) -> QuerySet[ComplaintMessage]:
        """Return the complaint's messages in send order."""
        ComplaintQueryService.ensure_visible(actor, complaint)
        return complaint.messages.select_related("sender").order_by("created_at", "id")

    @staticmethod
    def append_message(
        complaint: Complaint,
        actor: User,
        text: str,
        origin: str = MessageOrigin.HUMAN,
    ) -> ComplaintMessage:
        """
        Append a message to the complaint's thread.

        Any actor who can see the complaint may append.  Citizens always
        append with ``HUMAN`` origin; staff may flag a reply as
        ``AI_ASSISTED`` after refining it.

        Raises
        ------
        core.domain.exceptions.ValidationError
            ``text`` is blank or ``origin`` is unknown.
        core.domain.exceptions.AuthorizationError
            The complaint is outside the actor's visible set.
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError("Message text cannot be empty.")
        if actor.role == Role.CITIZEN:
            origin = MessageOrigin.HUMAN
        if origin not in MessageOrigin.values:
            raise ValidationError(f"Unknown message origin '{origin}'.")
        ComplaintQueryService.ensure_visible(actor, complaint)

        with transaction.atomic():
            locked = lock_for_update(Complaint, complaint.pk)
            message = ComplaintMessage.objects.create(
                complaint=locked,
                sender=actor,
                sender_display_name=actor.display_name,
                text=text,
                origin=origin,
            )
            Complaint.objects.filter(pk=locked.pk).update(updated_at=timezone.now())

        NotificationEmitter.emit(
            "message_posted",
            actor=actor,
            target_id=locked.pk,
            payload={"complaint_id": locked.pk},
        )
        return message

    # ── Assistant features (staff) ──────────────────────────────────

    @staticmethod
    def _require_staff_access(complaint: Complaint, actor: User) -> None:
        require_role(
            actor,
            Role.STAFF,
            Role.SUPERVISOR,
            message="Only office staff can use the assistant.",
        )
        ComplaintQueryService.ensure_visible(actor, complaint)

    @staticmethod
    def summarize(complaint: Complaint, actor: User) -> GeneratedText:
        """
        Return the complaint's one-sentence summary for staff.

        The first successful summary is stored on the complaint and
        reused; a fallback is returned but never stored, so the next
        request tries again.
        """
        ComplaintLifecycleService._require_staff_access(complaint, actor)
        if complaint.ai_summary:
            return GeneratedText(complaint.ai_summary)

        summary = ComplaintLifecycleService._generate(
            "summarize",
            complaint.description,
            fallback=SUMMARY_FALLBACK,
        )
        if not summary.is_fallback:
            Complaint.objects.filter(pk=complaint.pk, ai_summary="").update(ai_summary=summary.text)
            complaint.ai_summary = summary.text
        return summary

    @staticmethod
    def refine_reply(complaint: Complaint, actor: User, draft: str) -> GeneratedText:
        """
        Rewrite a staff draft reply into a short, formal message.

        Falls back to the draft itself.  Nothing is posted; the caller
        appends the accepted text with ``append_message``.
        """
        ComplaintLifecycleService._require_staff_access(complaint, actor)
        draft = (draft or "").strip()
        if not draft:
            raise ValidationError("Draft reply cannot be empty.")

        return ComplaintLifecycleService._generate(
            "refine",
            draft,
            {
                "citizen_name": complaint.submitter.display_name,
                "complaint_title": complaint.title,
                "complaint_description": complaint.description,
            },
            fallback=draft,
        )

    # ── Audit trail ─────────────────────────────────────────────────

    @staticmethod
    def status_history(complaint: Complaint, actor: User) -> QuerySet[ComplaintStatusLog]:
        """Return the complaint's status changes, newest first."""
        ComplaintQueryService.ensure_visible(actor, complaint)
        return complaint.status_logs.select_related("changed_by").order_by("-created_at", "-id")
