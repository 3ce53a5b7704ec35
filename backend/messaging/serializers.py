"""
Messaging app serializers.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import AttachmentType, TeamMessage


class ChannelSerializer(serializers.Serializer):
    """A team channel the actor may address."""

    address = serializers.CharField()
    kind = serializers.CharField()
    label = serializers.CharField()
    staff_id = serializers.IntegerField(allow_null=True)


class TeamMessageSerializer(serializers.ModelSerializer):
    """Read-only team message."""

    class Meta:
        model = TeamMessage
        fields = [
            "id",
            "channel_address",
            "sender",
            "sender_display_name",
            "text",
            "attachment_type",
            "attachment_url",
            "attachment_name",
            "created_at",
        ]
        read_only_fields = fields


class ChannelPostSerializer(serializers.Serializer):
    """
    A message posted to any channel address.  Attachments are accepted
    on team channels only.
    """

    text = serializers.CharField(required=False, allow_blank=True, default="")
    attachment_type = serializers.ChoiceField(
        choices=AttachmentType.choices,
        required=False,
        allow_blank=True,
        default="",
    )
    attachment_url = serializers.URLField(required=False, allow_blank=True, default="")
    attachment_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
