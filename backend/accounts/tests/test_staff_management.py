"""
Integration tests for supervisor staff management.

Scope in this file:
- GET/POST   /api/accounts/staff/
- GET/PATCH  /api/accounts/staff/{id}/
- POST       /api/accounts/staff/{id}/scope/ | activate/ | deactivate/
- ``normalize_category_scope``
"""

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Role, User
from accounts.services import normalize_category_scope
from core.domain.exceptions import ValidationError


class TestNormalizeCategoryScope(SimpleTestCase):

    def test_all_collapses_scope(self):
        self.assertEqual(normalize_category_scope(["healthcare", "all"]), ["all"])

    def test_duplicates_removed_and_declaration_order_kept(self):
        self.assertEqual(
            normalize_category_scope(["legal", "healthcare", "legal"]),
            ["healthcare", "legal"],
        )

    def test_empty_scope_rejected(self):
        with self.assertRaises(ValidationError):
            normalize_category_scope([])

    def test_unknown_category_rejected(self):
        with self.assertRaises(ValidationError):
            normalize_category_scope(["healthcare", "space"])


class TestStaffManagement(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.password = "StaffMgmtPass1"
        cls.supervisor = User.objects.create_user(
            username="0100",
            phone_number="0100",
            full_name="Office Supervisor",
            password=cls.password,
            role=Role.SUPERVISOR,
            category_scope=["all"],
        )
        cls.staff = User.objects.create_user(
            username="0111",
            phone_number="0111",
            full_name="Healthcare Desk",
            password=cls.password,
            role=Role.STAFF,
            category_scope=["healthcare"],
        )
        cls.citizen = User.objects.create_user(
            username="01011111111",
            phone_number="01011111111",
            full_name="Some Citizen",
            password=cls.password,
            role=Role.CITIZEN,
        )

    def setUp(self):
        self.client = APIClient()
        self.login_url = reverse("accounts:login")
        self.list_url = reverse("accounts:staff-list")

    def login(self, user: User) -> None:
        response = self.client.post(
            self.login_url,
            {"identifier": user.phone_number, "password": self.password},
            format="json",
        )
        self.assertEqual(
            response.status_code,
            status.HTTP_200_OK,
            msg=f"Login failed in test setup: {response.data}",
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")

    def detail_url(self, user: User) -> str:
        return reverse("accounts:staff-detail", args=[user.pk])

    # ── Access control ───────────────────────────────────────────────

    def test_staff_cannot_manage_staff(self):
        self.login(self.staff)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_citizen_cannot_manage_staff(self):
        self.login(self.citizen)
        response = self.client.post(
            self.list_url,
            {"full_name": "X", "phone_number": "0123456789", "password": "abcd", "category_scope": ["legal"]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(User.objects.filter(phone_number="0123456789").exists())

    # ── Listing & provisioning ──────────────────────────────────────

    def test_list_returns_staff_only(self):
        self.login(self.supervisor)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data], [self.staff.pk])

    def test_provision_staff(self):
        self.login(self.supervisor)
        response = self.client.post(
            self.list_url,
            {
                "full_name": "Education Desk",
                "phone_number": "0333333",
                "password": "desk",
                "category_scope": ["legal", "education"],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, msg=response.data)

        created = User.objects.get(phone_number="0333333")
        self.assertEqual(created.role, Role.STAFF)
        self.assertEqual(created.username, "0333333")
        self.assertEqual(created.category_scope, ["education", "legal"])
        self.assertTrue(created.check_password("desk"))

    def test_provision_duplicate_phone_conflicts(self):
        self.login(self.supervisor)
        response = self.client.post(
            self.list_url,
            {
                "full_name": "Duplicate",
                "phone_number": self.citizen.phone_number,
                "password": "desk",
                "category_scope": ["legal"],
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_provision_requires_scope(self):
        self.login(self.supervisor)
        response = self.client.post(
            self.list_url,
            {"full_name": "No Scope", "phone_number": "0444444", "password": "desk", "category_scope": []},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_retrieve_non_staff_is_not_found(self):
        self.login(self.supervisor)
        response = self.client.get(self.detail_url(self.citizen))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    # ── Editing ─────────────────────────────────────────────────────

    def test_update_with_blank_password_keeps_password(self):
        self.login(self.supervisor)
        response = self.client.patch(
            self.detail_url(self.staff),
            {"full_name": "Health & Clinics Desk", "password": ""},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, msg=response.data)

        self.staff.refresh_from_db()
        self.assertEqual(self.staff.full_name, "Health & Clinics Desk")
        self.assertTrue(self.staff.check_password(self.password))

    def test_update_phone_changes_username(self):
        self.login(self.supervisor)
        response = self.client.patch(
            self.detail_url(self.staff),
            {"phone_number": "0111999"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, msg=response.data)

        self.staff.refresh_from_db()
        self.assertEqual(self.staff.phone_number, "0111999")
        self.assertEqual(self.staff.username, "0111999")

    def test_update_phone_to_taken_number_conflicts(self):
        self.login(self.supervisor)
        response = self.client.patch(
            self.detail_url(self.staff),
            {"phone_number": self.citizen.phone_number},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_reassign_scope(self):
        self.login(self.supervisor)
        response = self.client.post(
            reverse("accounts:staff-scope", args=[self.staff.pk]),
            {"category_scope": ["utilities", "all"]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, msg=response.data)
        self.staff.refresh_from_db()
        self.assertEqual(self.staff.category_scope, ["all"])

    # ── Soft delete ─────────────────────────────────────────────────

    def test_deactivate_then_activate(self):
        self.login(self.supervisor)

        response = self.client.post(reverse("accounts:staff-deactivate", args=[self.staff.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.staff.refresh_from_db()
        self.assertFalse(self.staff.is_active)

        inactive_filter = self.client.get(self.list_url, {"is_active": "false"})
        self.assertEqual([row["id"] for row in inactive_filter.data], [self.staff.pk])

        response = self.client.post(reverse("accounts:staff-activate", args=[self.staff.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.staff.refresh_from_db()
        self.assertTrue(self.staff.is_active)

    def test_deactivated_staff_cannot_login(self):
        self.login(self.supervisor)
        self.client.post(reverse("accounts:staff-deactivate", args=[self.staff.pk]))

        anonymous = APIClient()
        response = anonymous.post(
            self.login_url,
            {"identifier": self.staff.phone_number, "password": self.password},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Invalid credentials.", str(response.data))
