"""
Complaints query tests — role-scoped visibility, search and ordering.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.core.management import call_command
from django.utils import timezone

from accounts.models import Role, User
from complaints.models import ComplaintStatus
from complaints.services import ComplaintCriteria, ComplaintQueryService
from core.constants import Category
from core.domain.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.mark.django_db
class TestVisibility:

    def test_citizen_sees_only_own_complaints(self, create_user, create_complaint):
        alice = create_user(full_name="Alice")
        bob = create_user(full_name="Bob")
        own = create_complaint(alice)
        create_complaint(bob)

        visible = list(ComplaintQueryService.search(alice))
        assert visible == [own]

    def test_staff_scope_never_leaks(self, create_user, create_complaint):
        citizen = create_user()
        for category in Category.values:
            create_complaint(citizen, category=category)
        desk = create_user(role=Role.STAFF, category_scope=["healthcare", "legal"])

        categories = {c.category for c in ComplaintQueryService.search(desk)}
        assert categories == {"healthcare", "legal"}

    def test_staff_with_all_scope_sees_everything(self, create_user, create_complaint):
        citizen = create_user()
        for category in Category.values:
            create_complaint(citizen, category=category)
        desk = create_user(role=Role.STAFF, category_scope=["all"])

        assert ComplaintQueryService.search(desk).count() == len(Category.values)

    def test_supervisor_sees_everything(self, create_user, create_complaint):
        for _ in range(3):
            create_complaint(create_user())
        boss = create_user(role=Role.SUPERVISOR)

        assert ComplaintQueryService.search(boss).count() == 3

    def test_inactive_user_sees_nothing(self, create_user, create_complaint):
        create_complaint(create_user(), category="healthcare")
        desk = create_user(role=Role.STAFF, category_scope=["all"], is_active=False)

        assert ComplaintQueryService.search(desk).count() == 0

    def test_healthcare_desk_sees_four_of_the_demo_complaints(self):
        call_command("setup_office", "--demo-data", verbosity=0)
        healthcare_desk = User.objects.get(phone_number="0111")

        visible = list(ComplaintQueryService.search(healthcare_desk))
        assert len(visible) == 4
        assert {c.category for c in visible} == {"healthcare"}

    def test_get_complaint_for_distinguishes_missing_from_forbidden(self, create_user, create_complaint):
        owner = create_user()
        complaint = create_complaint(owner, category="education")
        desk = create_user(role=Role.STAFF, category_scope=["healthcare"])

        with pytest.raises(AuthorizationError):
            ComplaintQueryService.get_complaint_for(desk, complaint.pk)
        with pytest.raises(NotFoundError):
            ComplaintQueryService.get_complaint_for(owner, complaint.pk + 1000)
        with pytest.raises(NotFoundError):
            ComplaintQueryService.get_complaint_for(owner, "not-a-number")


@pytest.mark.django_db
class TestSearchAndFilters:

    def test_search_matches_title_case_sensitively(self, create_user, create_complaint):
        citizen = create_user(full_name="Someone")
        water = create_complaint(citizen, title="Water cut")
        create_complaint(citizen, title="Broken road")
        boss = create_user(role=Role.SUPERVISOR)

        assert list(ComplaintQueryService.search(boss, ComplaintCriteria(search="Water"))) == [water]
        assert list(ComplaintQueryService.search(boss, ComplaintCriteria(search="water"))) == []

    def test_search_matches_submitter_name(self, create_user, create_complaint):
        mona = create_user(full_name="Mona Ibrahim")
        other = create_user(full_name="Khaled Hassan")
        hers = create_complaint(mona, title="Clinic closed")
        create_complaint(other, title="Clinic closed")
        boss = create_user(role=Role.SUPERVISOR)

        result = list(ComplaintQueryService.search(boss, ComplaintCriteria(search="Ibrahim")))
        assert result == [hers]

    def test_empty_search_matches_everything(self, create_user, create_complaint):
        citizen = create_user()
        create_complaint(citizen)
        create_complaint(citizen)

        assert ComplaintQueryService.search(citizen, ComplaintCriteria(search="")).count() == 2

    def test_status_and_category_filters(self, create_user, create_complaint):
        citizen = create_user()
        target = create_complaint(citizen, category="security", status=ComplaintStatus.RESOLVED)
        create_complaint(citizen, category="security", status=ComplaintStatus.PENDING)
        create_complaint(citizen, category="legal", status=ComplaintStatus.RESOLVED)

        criteria = ComplaintCriteria(status=ComplaintStatus.RESOLVED, category="security")
        assert list(ComplaintQueryService.search(citizen, criteria)) == [target]

    def test_unknown_filter_values_rejected(self, create_user):
        citizen = create_user()
        with pytest.raises(ValidationError):
            list(ComplaintQueryService.search(citizen, ComplaintCriteria(status="archived")))
        with pytest.raises(ValidationError):
            list(ComplaintQueryService.search(citizen, ComplaintCriteria(category="space")))

    def test_search_results_are_a_subset_of_visible_set(self, create_user, create_complaint):
        mine = create_user(full_name="Water Carrier")
        theirs = create_user(full_name="Water Seller")
        create_complaint(mine, title="Water cut")
        create_complaint(theirs, title="Water cut")

        visible = set(ComplaintQueryService.get_visible_queryset(mine).values_list("pk", flat=True))
        found = set(ComplaintQueryService.search(mine, ComplaintCriteria(search="Water")).values_list("pk", flat=True))
        assert found <= visible
        assert len(found) == 1


@pytest.mark.django_db
class TestOrdering:

    def test_newest_first(self, create_user, create_complaint):
        citizen = create_user()
        now = timezone.now()
        old = create_complaint(citizen, created_at=now - timedelta(days=3))
        new = create_complaint(citizen, created_at=now)
        middle = create_complaint(citizen, created_at=now - timedelta(days=1))

        assert list(ComplaintQueryService.search(citizen)) == [new, middle, old]

    def test_ties_keep_insertion_order(self, create_user, create_complaint):
        citizen = create_user()
        instant = timezone.now() - timedelta(hours=1)
        first = create_complaint(citizen, created_at=instant)
        second = create_complaint(citizen, created_at=instant)

        assert list(ComplaintQueryService.search(citizen)) == [first, second]

    def test_repeated_queries_are_identical(self, create_user, create_complaint):
        citizen = create_user()
        for _ in range(4):
            create_complaint(citizen)

        first = list(ComplaintQueryService.search(citizen).values_list("pk", flat=True))
        second = list(ComplaintQueryService.search(citizen).values_list("pk", flat=True))
        assert first == second
