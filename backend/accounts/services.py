"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service function / method, and
return the result wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService``  — citizen self-registration.
- ``AuthenticationService``    — JWT issuance for freshly created accounts.
- ``StaffManagementService``   — supervisor-only staff provisioning,
                                 editing, scope changes and soft
                                 (de)activation.
- ``CurrentUserService``       — "Me" endpoint helpers.
- ``normalize_category_scope`` — canonical form of a staff scope.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet
from rest_framework_simplejwt.tokens import RefreshToken

from core.constants import ALL_CATEGORIES, Category
from core.domain.access import require_role
from core.domain.exceptions import Conflict, NotFoundError, ValidationError
from core.domain.notifications import NotificationEmitter

from .models import Role

User = get_user_model()
logger = logging.getLogger(__name__)


def normalize_category_scope(categories: Iterable[str]) -> list[str]:
    """
    Return the canonical form of a staff category scope.

    * ``"all"`` anywhere in the input collapses the scope to ``["all"]``.
    * Otherwise duplicates are removed and the categories are returned
      in ``Category`` declaration order.

    Raises
    ------
    core.domain.exceptions.ValidationError
        The scope is empty or names an unknown category.
    """
    values = [str(value) for value in categories]
    if not values:
        raise ValidationError("A staff member needs at least one category.")
    if ALL_CATEGORIES in values:
        return [ALL_CATEGORIES]

    unknown = sorted(set(values) - set(Category.values))
    if unknown:
        raise ValidationError(f"Unknown categories: {', '.join(unknown)}.")
    return [value for value in Category.values if value in values]


def _ensure_phone_available(phone_number: str, *, exclude_pk: int | None = None) -> None:
    qs = User.objects.filter(Q(phone_number=phone_number) | Q(username=phone_number))
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise Conflict("This phone number is already registered.")


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """
    Encapsulates the citizen self-registration flow.
    """

    @staticmethod
    def register_citizen(validated_data: dict[str, Any]) -> User:
        """
        Create a new citizen account.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``RegisterRequestSerializer`` containing
            ``full_name``, ``phone_number``, ``password`` and optionally
            ``national_id``, ``province``, ``city``, ``area``, ``address``.

        Returns
        -------
        User
            The newly created citizen.  The phone number doubles as the
            username.

        Raises
        ------
        core.domain.exceptions.Conflict
            If the phone number is already taken.
        """
        data = dict(validated_data)
        data.pop("password_confirm", None)
        password = data.pop("password")
        phone_number = data["phone_number"]

        _ensure_phone_available(phone_number)

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=phone_number,
                    password=password,
                    role=Role.CITIZEN,
                    category_scope=[],
                    **data,
                )
        except IntegrityError:
            raise Conflict("This phone number is already registered.")

        logger.info("Registered citizen %s", user.username)
        NotificationEmitter.emit(
            "registered",
            actor=user,
            target_id=user.pk,
            payload={"name": user.display_name},
        )
        return user


# ═══════════════════════════════════════════════════════════════════
#  Authentication Service
# ═══════════════════════════════════════════════════════════════════


class AuthenticationService:
    """
    Token issuance outside the login endpoint (e.g. straight after
    registration, so the citizen is signed in immediately).
    """

    @staticmethod
    def generate_tokens(user: User) -> dict[str, str]:
        """
        Issue a JWT access/refresh token pair for the given user.

        Returns
        -------
        dict
            ``{"access": "<token>", "refresh": "<token>"}``.
        """
        refresh = RefreshToken.for_user(user)
        refresh["role"] = user.role
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  Staff Management Service
# ═══════════════════════════════════════════════════════════════════


class StaffManagementService:
    """
    Supervisor-only administration of staff accounts.

    Staff are never deleted: ``deactivate_staff`` flips ``is_active`` so
    that their correspondence history stays attributable.
    """

    _FORBIDDEN = "Only the supervisor can manage staff accounts."

    @staticmethod
    def _require_supervisor(performed_by: User) -> None:
        require_role(performed_by, Role.SUPERVISOR, message=StaffManagementService._FORBIDDEN)

    @staticmethod
    def list_staff(performed_by: User, *, is_active: bool | None = None) -> QuerySet[User]:
        """
        Return every staff account, oldest first.

        Parameters
        ----------
        performed_by : User
            Must be the supervisor.
        is_active : bool, optional
            Restrict to active or deactivated accounts.
        """
        StaffManagementService._require_supervisor(performed_by)
        qs = User.objects.filter(role=Role.STAFF)
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        return qs.order_by("date_joined", "pk")

    @staticmethod
    def get_staff(user_id: int, performed_by: User) -> User:
        """
        Return one staff account.

        Raises
        ------
        core.domain.exceptions.NotFoundError
            No staff member has that id.
        """
        StaffManagementService._require_supervisor(performed_by)
        try:
            return User.objects.get(pk=user_id, role=Role.STAFF)
        except User.DoesNotExist:
            raise NotFoundError(f"Staff member with id {user_id} not found.")

    @staticmethod
    def provision_staff(validated_data: dict[str, Any], performed_by: User) -> User:
        """
        Create a staff account.

        Parameters
        ----------
        validated_data : dict
            ``full_name``, ``phone_number``, ``password`` and
            ``category_scope`` (list of categories or ``["all"]``).
        performed_by : User
            Must be the supervisor.

        Raises
        ------
        core.domain.exceptions.Conflict
            The phone number is already taken.
        core.domain.exceptions.ValidationError
            The category scope is empty or unknown.
        """
        StaffManagementService._require_supervisor(performed_by)

        scope = normalize_category_scope(validated_data.get("category_scope", []))
        phone_number = validated_data["phone_number"]
        _ensure_phone_available(phone_number)

        try:
            with transaction.atomic():
                staff = User.objects.create_user(
                    username=phone_number,
                    password=validated_data["password"],
                    full_name=validated_data["full_name"],
                    phone_number=phone_number,
                    role=Role.STAFF,
                    category_scope=scope,
                )
        except IntegrityError:
            raise Conflict("This phone number is already registered.")

        logger.info(
            "Supervisor %s provisioned staff %s with scope %s",
            performed_by.username,
            staff.username,
            scope,
        )
        return staff

    @staticmethod
    def update_staff(user_id: int, validated_data: dict[str, Any], performed_by: User) -> User:
        """
        Edit a staff member's name, phone number, password or scope.

        A blank or missing ``password`` leaves the current password
        unchanged.  Changing the phone number also changes the username.
        """
        staff = StaffManagementService.get_staff(user_id, performed_by)
        update_fields: list[str] = []

        full_name = validated_data.get("full_name")
        if full_name:
            staff.full_name = full_name
            update_fields.append("full_name")

        phone_number = validated_data.get("phone_number")
        if phone_number and phone_number != staff.phone_number:
            _ensure_phone_available(phone_number, exclude_pk=staff.pk)
            staff.phone_number = phone_number
            staff.username = phone_number
            update_fields += ["phone_number", "username"]

        if "category_scope" in validated_data:
            staff.category_scope = normalize_category_scope(validated_data["category_scope"])
            update_fields.append("category_scope")

        password = validated_data.get("password") or ""
        if password:
            staff.set_password(password)
            update_fields.append("password")

        if update_fields:
            staff.save(update_fields=update_fields)
            NotificationEmitter.emit(
                "staff_updated",
                actor=performed_by,
                target_id=staff.pk,
                payload={"name": staff.display_name},
            )
        return staff

    @staticmethod
    def reassign_scope(user_id: int, categories: Iterable[str], performed_by: User) -> User:
        """Replace a staff member's category scope."""
        staff = StaffManagementService.get_staff(user_id, performed_by)
        staff.category_scope = normalize_category_scope(categories)
        staff.save(update_fields=["category_scope"])
        logger.info("Scope of %s set to %s", staff.username, staff.category_scope)
        return staff

    @staticmethod
    def activate_staff(user_id: int, performed_by: User) -> User:
        """Set ``is_active=True`` on a staff account."""
        staff = StaffManagementService.get_staff(user_id, performed_by)
        staff.is_active = True
        staff.save(update_fields=["is_active"])
        return staff

    @staticmethod
    def deactivate_staff(user_id: int, performed_by: User) -> User:
        """
        Soft-delete a staff account.

        The account can no longer log in and its visible complaint set
        becomes empty; messages it authored keep their sender.
        """
        staff = StaffManagementService.get_staff(user_id, performed_by)
        staff.is_active = False
        staff.save(update_fields=["is_active"])
        logger.info("Supervisor %s deactivated staff %s", performed_by.username, staff.username)
        return staff


# ═══════════════════════════════════════════════════════════════════
#  Current User Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """
    Helpers for the "Me" endpoints.
    """

    @staticmethod
    def get_profile(user: User) -> User:
        """Return a fresh copy of the authenticated user."""
        return User.objects.get(pk=user.pk)

    @staticmethod
    def change_password(user: User, current_password: str, new_password: str) -> User:
        """
        Change the authenticated user's own password.

        Raises
        ------
        core.domain.exceptions.ValidationError
            ``current_password`` is wrong or ``new_password`` is blank.
        """
        if not user.check_password(current_password):
            raise ValidationError("Current password is incorrect.")
        if not new_password:
            raise ValidationError("New password cannot be blank.")

        user.set_password(new_password)
        user.save(update_fields=["password"])
        NotificationEmitter.emit("password_changed", actor=user, target_id=user.pk)
        return user
