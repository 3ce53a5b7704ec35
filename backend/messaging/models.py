"""
Messaging app models.

Internal staff correspondence.  Each ``TeamMessage`` belongs to exactly
one team channel address: ``GLOBAL`` (the shared staff room) or
``PRIVATE_<staffId>`` (a staff member's line to the supervisor).
Complaint threads are stored in ``complaints.ComplaintMessage``.
"""

from django.conf import settings
from django.db import models


class AttachmentType(models.TextChoices):
    IMAGE = "image", "Image"
    VIDEO = "video", "Video"
    FILE = "file", "File"


class TeamMessage(models.Model):
    """
    Append-only message on a team channel.

    A message carries text, an attachment reference, or both.
    """

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="team_messages",
        verbose_name="Sender",
    )
    sender_display_name = models.CharField(max_length=150, verbose_name="Sender Name")
    channel_address = models.CharField(
        max_length=40,
        db_index=True,
        verbose_name="Channel Address",
    )
    text = models.TextField(blank=True, default="", verbose_name="Text")

    # ── Optional attachment ──────────────────────────────────────────
    attachment_type = models.CharField(
        max_length=10,
        choices=AttachmentType.choices,
        blank=True,
        default="",
        verbose_name="Attachment Type",
    )
    attachment_url = models.URLField(max_length=500, blank=True, default="", verbose_name="Attachment URL")
    attachment_name = models.CharField(max_length=255, blank=True, default="", verbose_name="Attachment Name")

    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Sent At")

    class Meta:
        verbose_name = "Team Message"
        verbose_name_plural = "Team Messages"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["channel_address", "created_at"], name="teammsg_channel_created_idx"),
        ]

    def __str__(self):
        return f"[{self.channel_address}] {self.sender_display_name}: {self.text[:40]}"

    @property
    def has_attachment(self) -> bool:
        return bool(self.attachment_url)
