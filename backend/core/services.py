"""
Core app Service Layer.

Contains cross-app aggregation services that don't belong to any single
domain app.  Models from other apps are imported lazily inside methods,
keeping the core app decoupled from concrete model implementations.

Services
--------
- ``ComplaintStatisticsService`` — time-windowed reporting over the
  requesting user's visible complaints.
- ``SystemConstantsService``     — closed vocabularies for the frontend.
- ``period_start``               — start instant of a report period.
"""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from typing import TYPE_CHECKING, Any

from django.db.models import Count, Q
from django.utils import timezone

from .constants import Area, Category, ReportPeriod
from .domain.exceptions import ValidationError

if TYPE_CHECKING:
    from accounts.models import User

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def _shift_months(moment: datetime, months: int) -> datetime:
    """
    Move ``moment`` by ``months`` calendar months, clamping the day to
    the length of the target month (Mar 31 − 1 month → Feb 28/29).
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: str, now: datetime | None = None) -> datetime:
    """
    Return the first instant included in ``period``.

    ================  ==================================================
    ``day``           start of the current local calendar day
    ``week``          ``now`` − 7 days
    ``month``         ``now`` − 1 calendar month (day clamped)
    ``year``          ``now`` − 1 calendar year (Feb 29 → Feb 28)
    ``all``           the Unix epoch
    ================  ==================================================

    Raises
    ------
    core.domain.exceptions.ValidationError
        ``period`` is not a ``ReportPeriod`` value.
    """
    now = now or timezone.now()
    if period == ReportPeriod.DAY:
        return timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    if period == ReportPeriod.WEEK:
        return now - timedelta(days=7)
    if period == ReportPeriod.MONTH:
        return _shift_months(now, -1)
    if period == ReportPeriod.YEAR:
        return _shift_months(now, -12)
    if period == ReportPeriod.ALL_TIME:
        return EPOCH
    raise ValidationError(f"Unknown report period '{period}'.")


def _percentage(count: int, total: int) -> float:
    if not total:
        return 0.0
    return round(100.0 * count / total, 2)


# ════════════════════════════════════════════════════════════════════
#  Complaint Statistics Service
# ════════════════════════════════════════════════════════════════════

class ComplaintStatisticsService:
    """
    Produces the statistics dict consumed by
    ``ComplaintStatisticsSerializer``.

    The statistics are **role-aware**: they are computed over the same
    visible set the complaint list shows the requesting user, restricted
    to complaints created on or after ``period_start(period)``.

    Every count comes from one aggregate query, so totals and buckets
    always describe the same snapshot.  Bucket lists contain every
    category / area in declaration order, zero counts included, hence
    the bucket counts of each list sum to ``total``.
    """

    def __init__(self, user: User, period: str = ReportPeriod.ALL_TIME) -> None:
        self.user = user
        self.period = period

    # ── Public API ──────────────────────────────────────────────────

    def get_stats(self, now: datetime | None = None) -> dict[str, Any]:
        """Return the full statistics dictionary."""
        from complaints.models import ComplaintStatus
        from complaints.services import ComplaintQueryService

        start = period_start(self.period, now)
        qs = ComplaintQueryService.get_visible_queryset(self.user).filter(created_at__gte=start)

        aggregates = qs.aggregate(
            total=Count("id"),
            resolved=Count("id", filter=Q(status=ComplaintStatus.RESOLVED)),
            **{
                f"category__{value}": Count("id", filter=Q(category=value))
                for value in Category.values
            },
            **{
                f"area__{value}": Count("id", filter=Q(area=value))
                for value in Area.values
            },
        )

        total = aggregates["total"]
        resolved = aggregates["resolved"]
        return {
            "period": self.period,
            "period_start": start,
            "total": total,
            "resolved_count": resolved,
            "unresolved_count": total - resolved,
            "resolution_rate": _percentage(resolved, total),
            "by_category": self._buckets(Category, "category", aggregates, total),
            "by_area": self._buckets(Area, "area", aggregates, total),
        }

    # ── Private helpers ─────────────────────────────────────────────

    @staticmethod
    def _buckets(
        choices_class: type,
        prefix: str,
        aggregates: dict[str, int],
        total: int,
    ) -> list[dict[str, Any]]:
        buckets = []
        for value, label in choices_class.choices:
            count = aggregates[f"{prefix}__{value}"]
            buckets.append({
                "key": value,
                "label": str(label),
                "count": count,
                "percentage": _percentage(count, total),
            })
        return buckets


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers all system-wide choice enumerations into a single dict for
    the frontend.

    This service is **stateless** — it does not depend on the requesting
    user.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import Role
        from complaints.models import ComplaintStatus
        from messaging.services import GLOBAL_CHANNEL, PRIVATE_PREFIX

        to_list = SystemConstantsService._choices_to_list

        return {
            "categories": to_list(Category),
            "areas": to_list(Area),
            "complaint_statuses": to_list(ComplaintStatus),
            "roles": to_list(Role),
            "report_periods": to_list(ReportPeriod),
            "team_channels": [
                {"value": GLOBAL_CHANNEL, "label": "Staff Room"},
                {"value": f"{PRIVATE_PREFIX}<staff_id>", "label": "Private Channel"},
            ],
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
