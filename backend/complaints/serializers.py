"""
Complaints app serializers.

Request serializers validate shape only; the closed-vocabulary and
blank-text rules are re-checked in ``services.py`` so that service
callers outside the API get the same guarantees.
"""

from __future__ import annotations

from rest_framework import serializers

from core.constants import Area, Category

from .models import (
    Complaint,
    ComplaintMessage,
    ComplaintStatus,
    ComplaintStatusLog,
    MessageOrigin,
)


# ═══════════════════════════════════════════════════════════════════
#  Request serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintFilterSerializer(serializers.Serializer):
    """
    Validates query-parameter filters for ``GET /api/complaints/``.

    Query Parameters
    ----------------
    ``search``   : str — case-sensitive match on title or citizen name
    ``status``   : str — one of ``ComplaintStatus`` values, blank for any
    ``category`` : str — one of ``Category`` values, blank for any
    """

    search = serializers.CharField(
        required=False,
        allow_blank=True,
        trim_whitespace=False,
        default="",
    )
    status = serializers.ChoiceField(
        choices=ComplaintStatus.choices, required=False, allow_blank=True,
    )
    category = serializers.ChoiceField(
        choices=Category.choices, required=False, allow_blank=True,
    )

    # An empty value means "unfiltered".
    def validate_status(self, value):
        return value or None

    def validate_category(self, value):
        return value or None


class ComplaintCreateSerializer(serializers.Serializer):
    """Input for filing a complaint."""

    title = serializers.CharField(max_length=255)
    category = serializers.ChoiceField(choices=Category.choices)
    description = serializers.CharField()
    province = serializers.CharField(max_length=100, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    area = serializers.ChoiceField(choices=Area.choices, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ComplaintStatus.choices)


class MessageCreateSerializer(serializers.Serializer):
    """
    A new thread message.  ``origin`` is ignored for citizens.
    """

    text = serializers.CharField()
    origin = serializers.ChoiceField(
        choices=MessageOrigin.choices,
        required=False,
        default=MessageOrigin.HUMAN,
    )


class RefineReplySerializer(serializers.Serializer):
    draft = serializers.CharField()


# ═══════════════════════════════════════════════════════════════════
#  Response serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintMessageSerializer(serializers.ModelSerializer):
    """Read-only thread message."""

    is_ai_generated = serializers.BooleanField(read_only=True)
    channel_address = serializers.CharField(read_only=True)

    class Meta:
        model = ComplaintMessage
        fields = [
            "id",
            "complaint",
            "channel_address",
            "sender",
            "sender_display_name",
            "text",
            "origin",
            "is_ai_generated",
            "created_at",
        ]
        read_only_fields = fields


class ComplaintListSerializer(serializers.ModelSerializer):
    """Compact representation for list views."""

    submitter_name = serializers.CharField(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    category_display = serializers.CharField(source="get_category_display", read_only=True)
    area_display = serializers.CharField(source="get_area_display", read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "title",
            "category",
            "category_display",
            "status",
            "status_display",
            "area",
            "area_display",
            "submitter",
            "submitter_name",
            "created_at",
            "resolved_at",
        ]
        read_only_fields = fields


class ComplaintDetailSerializer(serializers.ModelSerializer):
    """Full complaint including its correspondence thread."""

    submitter_name = serializers.CharField(read_only=True)
    submitter_phone = serializers.CharField(source="submitter.phone_number", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    category_display = serializers.CharField(source="get_category_display", read_only=True)
    area_display = serializers.CharField(source="get_area_display", read_only=True)
    messages = ComplaintMessageSerializer(many=True, read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "title",
            "description",
            "category",
            "category_display",
            "status",
            "status_display",
            "province",
            "city",
            "area",
            "area_display",
            "address",
            "submitter",
            "submitter_name",
            "submitter_phone",
            "ai_summary",
            "created_at",
            "updated_at",
            "resolved_at",
            "messages",
        ]
        read_only_fields = fields


class ComplaintStatusLogSerializer(serializers.ModelSerializer):
    """Read-only serializer for the complaint audit trail."""

    changed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = ComplaintStatusLog
        fields = [
            "id",
            "from_status",
            "to_status",
            "changed_by",
            "changed_by_name",
            "created_at",
        ]
        read_only_fields = fields

    def get_changed_by_name(self, obj: ComplaintStatusLog) -> str | None:
        if obj.changed_by is None:
            return None
        return obj.changed_by.display_name


class GeneratedTextSerializer(serializers.Serializer):
    """Assistant output; ``is_fallback`` marks the substituted default."""

    text = serializers.CharField()
    is_fallback = serializers.BooleanField()
