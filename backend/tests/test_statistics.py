"""
Integration tests for the reporting aggregator.

Scope in this file:
- ``period_start`` boundaries
- ``ComplaintStatisticsService`` totals, buckets and role scoping
- GET /api/core/statistics/
"""

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

import pytest
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Role, User
from core.constants import Area, Category, ReportPeriod
from core.domain.exceptions import ValidationError
from core.services import EPOCH, ComplaintStatisticsService, period_start


class TestPeriodStart:

    def test_week_is_seven_days(self):
        now = datetime(2024, 5, 20, 15, 30, tzinfo=dt_timezone.utc)
        assert period_start(ReportPeriod.WEEK, now) == now - timedelta(days=7)

    def test_month_clamps_day(self):
        now = datetime(2024, 3, 31, 12, 0, tzinfo=dt_timezone.utc)
        assert period_start(ReportPeriod.MONTH, now) == datetime(2024, 2, 29, 12, 0, tzinfo=dt_timezone.utc)

    def test_month_crosses_year(self):
        now = datetime(2024, 1, 15, 8, 0, tzinfo=dt_timezone.utc)
        assert period_start(ReportPeriod.MONTH, now) == datetime(2023, 12, 15, 8, 0, tzinfo=dt_timezone.utc)

    def test_year_clamps_leap_day(self):
        now = datetime(2024, 2, 29, 9, 0, tzinfo=dt_timezone.utc)
        assert period_start(ReportPeriod.YEAR, now) == datetime(2023, 2, 28, 9, 0, tzinfo=dt_timezone.utc)

    def test_day_starts_at_local_midnight(self):
        now = timezone.now()
        start = period_start(ReportPeriod.DAY, now)
        local = timezone.localtime(start)
        assert (local.hour, local.minute, local.second, local.microsecond) == (0, 0, 0, 0)
        assert local.date() == timezone.localtime(now).date()

    def test_all_time_is_epoch(self):
        assert period_start(ReportPeriod.ALL_TIME) == EPOCH

    def test_unknown_period_rejected(self):
        with pytest.raises(ValidationError):
            period_start("fortnight")


@pytest.mark.django_db
class TestComplaintStatisticsService:

    def test_no_complaints_gives_zero_buckets(self, create_user):
        boss = create_user(role=Role.SUPERVISOR)

        stats = ComplaintStatisticsService(boss, ReportPeriod.ALL_TIME).get_stats()

        assert stats["total"] == 0
        assert stats["resolution_rate"] == 0.0
        assert [b["key"] for b in stats["by_category"]] == list(Category.values)
        assert [b["key"] for b in stats["by_area"]] == list(Area.values)
        assert all(b["count"] == 0 and b["percentage"] == 0.0 for b in stats["by_category"])

    def test_buckets_sum_to_total(self, create_user, create_complaint):
        citizen = create_user()
        for i in range(11):
            create_complaint(
                citizen,
                category=Category.values[i % len(Category.values)],
                area=Area.values[i % len(Area.values)],
            )
        boss = create_user(role=Role.SUPERVISOR)

        stats = ComplaintStatisticsService(boss).get_stats()

        assert stats["total"] == 11
        assert sum(b["count"] for b in stats["by_category"]) == 11
        assert sum(b["count"] for b in stats["by_area"]) == 11

    def test_period_boundary_is_inclusive(self, create_user, create_complaint):
        citizen = create_user()
        now = timezone.now()
        create_complaint(citizen, created_at=now - timedelta(days=7))
        create_complaint(citizen, created_at=now - timedelta(days=7, seconds=1))

        stats = ComplaintStatisticsService(citizen, ReportPeriod.WEEK).get_stats(now=now)
        assert stats["total"] == 1

    def test_statistics_follow_visibility(self, create_user, create_complaint):
        citizen = create_user()
        create_complaint(citizen, category="healthcare")
        create_complaint(citizen, category="legal")
        desk = create_user(role=Role.STAFF, category_scope=["legal"])

        stats = ComplaintStatisticsService(desk).get_stats()
        assert stats["total"] == 1
        legal = next(b for b in stats["by_category"] if b["key"] == "legal")
        assert (legal["count"], legal["percentage"]) == (1, 100.0)


class TestStatisticsEndpoint(TestCase):
    @classmethod
    def setUpTestData(cls):
        call_command("setup_office", "--demo-data", verbosity=0)
        cls.supervisor = User.objects.get(phone_number="0100")

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(self.supervisor)
        self.url = reverse("core:statistics")

    def test_all_time(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.assertEqual(response.data["period"], "all")
        self.assertEqual(response.data["total"], 25)
        self.assertEqual(response.data["resolved_count"], 8)
        self.assertEqual(response.data["unresolved_count"], 17)
        self.assertEqual(response.data["resolution_rate"], 32.0)
        self.assertEqual(sum(b["count"] for b in response.data["by_category"]), 25)
        self.assertEqual(sum(b["count"] for b in response.data["by_area"]), 25)

    def test_week(self):
        response = self.client.get(self.url, {"period": "week"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        # Demo complaints are 2.5 days apart: 0, 2.5 and 5 days old.
        self.assertEqual(response.data["total"], 3)
        self.assertEqual(response.data["resolved_count"], 1)

    def test_day(self):
        response = self.client.get(self.url, {"period": "day"})
        self.assertEqual(response.data["total"], 1)

    def test_unknown_period_is_bad_request(self):
        response = self.client.get(self.url, {"period": "decade"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_authentication(self):
        response = APIClient().get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
