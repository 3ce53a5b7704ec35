"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``offline_text_generation`` (autouse) pins the offline backend.
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating citizens, staff and
    the supervisor.
  - ``create_complaint`` factory fixture that writes complaints straight
    to the database (no collaborator call, optional ``created_at``).
  - ``auth_client`` helper returning an ``APIClient`` authenticated
    with a JWT for a given user.
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def offline_text_generation(settings):
    """Never reach the real language model from tests."""
    settings.TEXT_GENERATION = {
        "BACKEND": "core.text_generation.OfflineTextGenerator",
        "OPTIONS": {},
        "TIMEOUT": 1,
    }


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user):
            citizen = create_user()
            nurse_desk = create_user(role=Role.STAFF, category_scope=["healthcare"])
            boss = create_user(role=Role.SUPERVISOR)
    """
    from accounts.models import Role, User

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        full_name: str | None = None,
        phone_number: str | None = None,
        role=Role.CITIZEN,
        category_scope: list[str] | None = None,
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if phone_number is None:
            phone_number = f"0100{_counter:07d}"
        if username is None:
            username = phone_number
        if full_name is None:
            full_name = f"Test User {_counter}"
        if category_scope is None:
            category_scope = ["all"] if role == Role.SUPERVISOR else []

        return User.objects.create_user(
            username=username,
            password=password,
            full_name=full_name,
            phone_number=phone_number,
            role=role,
            category_scope=category_scope,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def create_complaint(db):
    """
    Factory fixture that inserts a complaint directly.

    ``created_at`` is applied with a follow-up ``update()`` because
    ``auto_now_add`` ignores explicit values.
    """
    from complaints.models import Complaint, ComplaintStatus

    def _factory(
        submitter,
        *,
        title: str = "Broken street light",
        category: str = "infrastructure",
        area: str = "qanatar_center",
        status: str = ComplaintStatus.PENDING,
        description: str = "The light in front of the school is broken.",
        created_at=None,
        **kwargs,
    ) -> Complaint:
        complaint = Complaint.objects.create(
            submitter=submitter,
            title=title,
            category=category,
            area=area,
            status=status,
            description=description,
            **kwargs,
        )
        if created_at is not None:
            Complaint.objects.filter(pk=complaint.pk).update(created_at=created_at)
            complaint.refresh_from_db()
        return complaint

    return _factory


@pytest.fixture()
def auth_client():
    """
    Returns a helper that builds an ``APIClient`` carrying a valid JWT
    access token for ``user``.

    Usage::

        def test_protected(auth_client, create_user):
            client = auth_client(create_user())
            resp = client.get("/api/complaints/")
            assert resp.status_code == 200
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(user) -> APIClient:
        client = APIClient()
        token = AccessToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _make
