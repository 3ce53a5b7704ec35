"""
Management command: setup_office
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Seeds the database with the office's **supervisor** account and its
initial **staff members**, each scoped to one complaint category.
With ``--demo-data`` it also creates five citizens and 25 demo
complaints cycling through every category, area and open/resolved
status, spaced 2.5 days apart so every report period has data.

The command is **idempotent** — safe to run multiple times.  Existing
accounts (matched by phone number) keep their password; their role and
scope are reset to the mapping below.  Demo complaints are only created
when the demo citizens have none yet.

Usage::

    python manage.py setup_office
    python manage.py setup_office --demo-data

Prerequisites::

    python manage.py migrate
"""

from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts.models import Role, User
from complaints.models import Complaint, ComplaintMessage, ComplaintStatus, ComplaintStatusLog, MessageOrigin
from complaints.services import RECEPTION_DISPLAY_NAME
from core.constants import ALL_CATEGORIES, DEFAULT_CITY, DEFAULT_PROVINCE, Area, Category
from core.text_generation import WELCOME_FALLBACK

# ────────────────────────────────────────────────────────────────────
# Seed accounts
# ────────────────────────────────────────────────────────────────────
# Key:   phone number (doubles as the username)
# Value: (full name, role, category scope, initial password)

OFFICE_ACCOUNTS: dict[str, tuple[str, str, list[str], str]] = {
    "0100": ("Office Supervisor", Role.SUPERVISOR, [ALL_CATEGORIES], "admin"),
    "0111": ("Healthcare Desk", Role.STAFF, [Category.HEALTHCARE], "staff"),
    "0222": ("Infrastructure Desk", Role.STAFF, [Category.INFRASTRUCTURE], "staff"),
    "0555": ("Utilities Desk", Role.STAFF, [Category.UTILITIES], "staff"),
}

DEMO_CITIZENS: list[tuple[str, str]] = [
    ("01000000001", "Ahmed Mahmoud"),
    ("01000000002", "Mona Ibrahim"),
    ("01000000003", "Khaled Hassan"),
    ("01000000004", "Sara Adel"),
    ("01000000005", "Youssef Fathy"),
]

DEMO_COMPLAINT_COUNT = 25
DEMO_SPACING = timedelta(days=2, hours=12)
DEMO_STATUSES = [ComplaintStatus.PENDING, ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED]

DEMO_TITLES: dict[str, str] = {
    Category.INFRASTRUCTURE: "Road damaged near the main square",
    Category.HEALTHCARE: "Clinic closed during working hours",
    Category.EDUCATION: "School needs more teachers",
    Category.SECURITY: "Street lights out at night",
    Category.UTILITIES: "Water cut for three days",
    Category.LEGAL: "Help with a land registration dispute",
}


class Command(BaseCommand):
    help = (
        "Seeds the supervisor and initial staff accounts.  With "
        "--demo-data also seeds citizens and demo complaints.  Safe to "
        "run multiple times (idempotent)."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--demo-data",
            action="store_true",
            help="Also create demo citizens and 25 demo complaints.",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n══════════════════════════════════════════"
            "\n  Office Setup — Seeding Accounts"
            "\n══════════════════════════════════════════\n"
        ))

        with transaction.atomic():
            accounts = {
                phone: self._upsert_account(phone, full_name, role, scope, password)
                for phone, (full_name, role, scope, password) in OFFICE_ACCOUNTS.items()
            }

            if options["demo_data"]:
                citizens = [
                    self._upsert_account(phone, full_name, Role.CITIZEN, [], "citizen")
                    for phone, full_name in DEMO_CITIZENS
                ]
                self._seed_complaints(citizens, handled_by=accounts["0100"])

        self.stdout.write(self.style.MIGRATE_HEADING(
            "\n──────────────────────────────────────────"
        ))
        self.stdout.write(self.style.SUCCESS("  Done!\n"))

    # ── Helpers ──────────────────────────────────────────────────────

    def _upsert_account(self, phone, full_name, role, scope, password) -> User:
        user, created = User.objects.get_or_create(
            phone_number=phone,
            defaults={
                "username": phone,
                "full_name": full_name,
                "role": role,
                "category_scope": scope,
                "province": DEFAULT_PROVINCE,
                "city": DEFAULT_CITY,
            },
        )
        if created:
            user.set_password(password)
            user.save(update_fields=["password"])
        elif user.role != role or user.category_scope != scope:
            user.role = role
            user.category_scope = scope
            user.save(update_fields=["role", "category_scope"])

        action = "Created" if created else "Kept"
        self.stdout.write(self.style.SUCCESS(
            f"  ✔  {action} {user.get_role_display():<13s} {phone:<12s} {full_name}"
        ))
        return user

    def _seed_complaints(self, citizens: list[User], handled_by: User) -> None:
        if Complaint.objects.filter(submitter__in=citizens).exists():
            self.stdout.write(self.style.WARNING(
                "  ⚠  Demo complaints already exist — skipped."
            ))
            return

        categories = Category.values
        areas = Area.values
        now = timezone.now()

        for i in range(DEMO_COMPLAINT_COUNT):
            citizen = citizens[i % len(citizens)]
            category = categories[i % len(categories)]
            status = DEMO_STATUSES[i % len(DEMO_STATUSES)]
            created_at = now - DEMO_SPACING * i

            complaint = Complaint.objects.create(
                submitter=citizen,
                title=DEMO_TITLES[category],
                category=category,
                description=f"{DEMO_TITLES[category]}. Demo complaint #{i + 1}.",
                status=status,
                province=DEFAULT_PROVINCE,
                city=DEFAULT_CITY,
                area=areas[i % len(areas)],
                resolved_at=created_at + timedelta(days=1) if status == ComplaintStatus.RESOLVED else None,
            )
            ComplaintMessage.objects.create(
                complaint=complaint,
                sender=None,
                sender_display_name=RECEPTION_DISPLAY_NAME,
                text=WELCOME_FALLBACK,
                origin=MessageOrigin.AI_ASSISTED,
            )
            ComplaintStatusLog.objects.create(
                complaint=complaint,
                from_status="",
                to_status=ComplaintStatus.PENDING,
                changed_by=citizen,
            )
            if status != ComplaintStatus.PENDING:
                ComplaintStatusLog.objects.create(
                    complaint=complaint,
                    from_status=ComplaintStatus.PENDING,
                    to_status=status,
                    changed_by=handled_by,
                )
            # auto_now_add ignores explicit values on create
            Complaint.objects.filter(pk=complaint.pk).update(created_at=created_at, updated_at=created_at)

        self.stdout.write(self.style.SUCCESS(
            f"  ✔  Created {DEMO_COMPLAINT_COUNT} demo complaints."
        ))
