"""
Core app serializers.

**Response-only** serializers for the endpoints served by the core app
and for the notification payload every app attaches to its responses.
They work exclusively with plain Python dicts / value objects produced
by the service layer; no models are imported here.
"""

from __future__ import annotations

from rest_framework import serializers

from .constants import ReportPeriod


# ════════════════════════════════════════════════════════════════════
#  Notifications
# ════════════════════════════════════════════════════════════════════

class NotificationSerializer(serializers.Serializer):
    """
    An advisory notification emitted while the request was handled.

    The client shows it and drops it once ``expires_at`` has passed.
    """

    id = serializers.CharField()
    event_type = serializers.CharField()
    title = serializers.CharField()
    body = serializers.CharField()
    target_id = serializers.CharField(allow_null=True)
    issued_at = serializers.DateTimeField()
    expires_at = serializers.DateTimeField()
    expires_after_ms = serializers.SerializerMethodField()

    def get_expires_after_ms(self, obj) -> int:
        return int(obj.expires_after.total_seconds() * 1000)


# ════════════════════════════════════════════════════════════════════
#  Complaint Statistics
# ════════════════════════════════════════════════════════════════════

class StatBucketSerializer(serializers.Serializer):
    """
    Count of complaints sharing one category or area value.

    Example::

        {"key": "healthcare", "label": "Healthcare", "count": 4, "percentage": 16.0}
    """

    key = serializers.CharField(
        help_text="Machine-readable category or area value.",
    )
    label = serializers.CharField(
        help_text="Human-readable label.",
    )
    count = serializers.IntegerField(
        help_text="Number of complaints in this bucket.",
    )
    percentage = serializers.FloatField(
        help_text="Share of the period's total (0 when the total is 0).",
    )


class ComplaintStatisticsSerializer(serializers.Serializer):
    """
    Output of ``ComplaintStatisticsService.get_stats``.
    """

    period = serializers.ChoiceField(choices=ReportPeriod.choices)
    period_start = serializers.DateTimeField()
    total = serializers.IntegerField()
    resolved_count = serializers.IntegerField()
    unresolved_count = serializers.IntegerField()
    resolution_rate = serializers.FloatField(
        help_text="Resolved share of the total, as a percentage.",
    )
    by_category = StatBucketSerializer(many=True)
    by_area = StatBucketSerializer(many=True)


class StatisticsQuerySerializer(serializers.Serializer):
    """Validates the ``period`` query parameter."""

    period = serializers.ChoiceField(
        choices=ReportPeriod.choices,
        required=False,
        default=ReportPeriod.ALL_TIME,
    )


# ════════════════════════════════════════════════════════════════════
#  System Constants
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """A single ``{value, label}`` pair."""

    value = serializers.CharField()
    label = serializers.CharField()


class SystemConstantsSerializer(serializers.Serializer):
    """Closed vocabularies used to render dropdowns and labels."""

    categories = ChoiceItemSerializer(many=True)
    areas = ChoiceItemSerializer(many=True)
    complaint_statuses = ChoiceItemSerializer(many=True)
    roles = ChoiceItemSerializer(many=True)
    report_periods = ChoiceItemSerializer(many=True)
    team_channels = ChoiceItemSerializer(many=True)
