"""
Accounts app models.

Defines the closed ``Role`` enum and a custom User model that extends
Django's ``AbstractUser`` with the office's profile fields (unique phone
number, optional national ID, registered location) and the staff
``category_scope`` used for complaint visibility.
"""

from django.contrib.auth.models import AbstractUser, UserManager as BaseUserManager
from django.db import models

from core.constants import ALL_CATEGORIES


class Role(models.TextChoices):
    """
    The three actor roles.

    * ``CITIZEN``    — submits complaints and corresponds on their own ones.
    * ``STAFF``      — triages complaints inside a category scope.
    * ``SUPERVISOR`` — unrestricted; manages staff accounts.
    """

    CITIZEN = "citizen", "Citizen"
    STAFF = "staff", "Office Staff"
    SUPERVISOR = "supervisor", "Supervisor"


class UserManager(BaseUserManager):
    """Manager that makes CLI-created superusers office supervisors."""

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("role", Role.SUPERVISOR)
        extra_fields.setdefault("category_scope", [ALL_CATEGORIES])
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    """
    Custom user model for the constituent office.

    Citizens self-register with their full name, phone number, password
    and home location; the phone number doubles as the username.  Staff
    accounts are provisioned by the supervisor.  Login is supported via
    either the username or the phone number.

    Accounts are never deleted by the application: deactivation flips
    ``is_active`` and keeps the complaint history intact.
    """

    full_name = models.CharField(
        max_length=150,
        verbose_name="Full Name",
    )
    phone_number = models.CharField(
        max_length=20,
        unique=True,
        verbose_name="Phone Number",
        db_index=True,
    )
    national_id = models.CharField(
        max_length=14,
        blank=True,
        default="",
        verbose_name="National ID",
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CITIZEN,
        db_index=True,
        verbose_name="Role",
    )
    category_scope = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Category Scope",
        help_text="Complaint categories a staff member may see, or [\"all\"].",
    )

    # ── Registered location ──────────────────────────────────────────
    province = models.CharField(max_length=100, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    area = models.CharField(max_length=50, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")

    objects = UserManager()

    # Fields required when creating a superuser via CLI
    REQUIRED_FIELDS = ["phone_number", "full_name"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return f"{self.username} ({self.display_name}) - {self.get_role_display()}"

    # ── Helper predicates for role checks ────────────────────────────

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    @property
    def is_citizen(self) -> bool:
        return self.role == Role.CITIZEN

    @property
    def is_office_staff(self) -> bool:
        return self.role == Role.STAFF

    @property
    def is_supervisor(self) -> bool:
        return self.role == Role.SUPERVISOR

    @property
    def has_all_categories(self) -> bool:
        """True for supervisors and for staff scoped to every category."""
        return self.is_supervisor or ALL_CATEGORIES in (self.category_scope or [])
