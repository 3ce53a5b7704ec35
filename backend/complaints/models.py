"""
Complaints app models.

Covers the complaint lifecycle — from a citizen's submission, through
staff triage and correspondence, to resolution or rejection — plus the
append-only correspondence thread and the status audit trail.
"""

from django.conf import settings
from django.db import models

from core.constants import Area, Category
from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class ComplaintStatus(models.TextChoices):
    """
    Complaint statuses.  ``PENDING`` is the only initial status; staff
    may move a complaint between any two statuses, so ``RESOLVED`` and
    ``REJECTED`` can be reopened.
    """

    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In Progress"
    RESOLVED = "resolved", "Resolved"
    REJECTED = "rejected", "Rejected"


class MessageOrigin(models.TextChoices):
    """Whether a thread message was typed by a person or drafted by the assistant."""

    HUMAN = "human", "Human"
    AI_ASSISTED = "ai_assisted", "AI Assisted"


# ────────────────────────────────────────────────────────────────────
# Core models
# ────────────────────────────────────────────────────────────────────

class Complaint(TimeStampedModel):
    """
    A citizen's request to the office.

    ``created_at`` never changes after creation; ``resolved_at`` is set
    while the complaint is ``RESOLVED`` and cleared when it is reopened.
    ``ai_summary`` caches the first successful automatic summary.
    """

    submitter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="complaints",
        verbose_name="Submitted By",
    )
    title = models.CharField(max_length=255, verbose_name="Title")
    category = models.CharField(
        max_length=30,
        choices=Category.choices,
        db_index=True,
        verbose_name="Category",
    )
    description = models.TextField(verbose_name="Description")
    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        default=ComplaintStatus.PENDING,
        db_index=True,
        verbose_name="Status",
    )

    # ── Location ─────────────────────────────────────────────────────
    province = models.CharField(max_length=100, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    area = models.CharField(
        max_length=50,
        choices=Area.choices,
        db_index=True,
        verbose_name="Area",
    )
    address = models.CharField(max_length=255, blank=True, default="")

    ai_summary = models.TextField(
        blank=True,
        default="",
        verbose_name="Automatic Summary",
    )
    resolved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Resolved At",
    )

    class Meta:
        verbose_name = "Complaint"
        verbose_name_plural = "Complaints"
        ordering = ["-created_at", "id"]
        indexes = [
            models.Index(fields=["category", "created_at"], name="complaint_category_created_idx"),
        ]

    def __str__(self):
        return f"Complaint #{self.pk} — {self.title} [{self.get_status_display()}]"

    @property
    def submitter_name(self) -> str:
        return self.submitter.display_name


class ComplaintMessage(models.Model):
    """
    One entry of a complaint's correspondence thread.

    Append-only: rows are never updated after creation.  ``sender`` is
    ``None`` for messages written by the office's reception assistant;
    ``sender_display_name`` is frozen at write time.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="messages",
        verbose_name="Complaint",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="complaint_messages",
        verbose_name="Sender",
    )
    sender_display_name = models.CharField(max_length=150, verbose_name="Sender Name")
    text = models.TextField(verbose_name="Text")
    origin = models.CharField(
        max_length=20,
        choices=MessageOrigin.choices,
        default=MessageOrigin.HUMAN,
        verbose_name="Origin",
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Sent At")

    class Meta:
        verbose_name = "Complaint Message"
        verbose_name_plural = "Complaint Messages"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"[#{self.complaint_id}] {self.sender_display_name}: {self.text[:40]}"

    @property
    def channel_address(self) -> str:
        return str(self.complaint_id)

    @property
    def is_ai_generated(self) -> bool:
        return self.origin == MessageOrigin.AI_ASSISTED


class ComplaintStatusLog(TimeStampedModel):
    """
    Immutable audit trail of every status change of a complaint.

    The first row of every complaint records ``"" → pending``.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="status_logs",
        verbose_name="Complaint",
    )
    from_status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        blank=True,
        default="",
        verbose_name="Previous Status",
    )
    to_status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        verbose_name="New Status",
    )
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="complaint_status_changes",
        verbose_name="Changed By",
    )

    class Meta:
        verbose_name = "Complaint Status Log"
        verbose_name_plural = "Complaint Status Logs"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"#{self.complaint_id}: {self.from_status or '∅'} → {self.to_status}"
