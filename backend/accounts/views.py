"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

Responses of endpoints that emit notifications carry them under a
``notifications`` key.

View Map
--------
- ``RegisterView``       — POST /auth/register/
- ``LoginView``          — POST /auth/login/
- ``MeView``             — GET /me/
- ``ChangePasswordView`` — POST /me/password/
- ``StaffViewSet``       — /staff/  (list, create, retrieve,
                           partial_update, scope, activate, deactivate)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.notifications import NotificationEmitter, collect_notifications
from core.serializers import NotificationSerializer

from .serializers import (
    CategoryScopeSerializer,
    ChangePasswordSerializer,
    CustomTokenObtainPairSerializer,
    RegisterRequestSerializer,
    StaffCreateSerializer,
    StaffSerializer,
    StaffUpdateSerializer,
    UserDetailSerializer,
)
from .services import (
    AuthenticationService,
    CurrentUserService,
    StaffManagementService,
    UserRegistrationService,
)


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class RegisterView(generics.CreateAPIView):
    """
    POST /api/accounts/auth/register/

    Public endpoint.  Creates a new citizen account and signs it in.

    Request body  → ``RegisterRequestSerializer``
    Response body → ``{"access", "refresh", "user", "notifications"}``
                    (201 Created)
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    serializer_class = RegisterRequestSerializer

    @extend_schema(
        summary="Register a citizen",
        responses={
            201: OpenApiResponse(description="Account created; tokens and profile returned."),
            400: OpenApiResponse(description="Validation error."),
            409: OpenApiResponse(description="Phone number already registered."),
        },
        tags=["Accounts"],
    )
    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with collect_notifications() as emitted:
            user = UserRegistrationService.register_citizen(serializer.validated_data)

        payload = AuthenticationService.generate_tokens(user)
        payload["user"] = UserDetailSerializer(user).data
        payload["notifications"] = NotificationSerializer(emitted, many=True).data
        return Response(payload, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates a user by phone number or username
    plus password.  Deactivated accounts are rejected with the same
    "Invalid credentials." message as a wrong password.

    Request body  → ``CustomTokenObtainPairSerializer``
    Response body → ``{"access", "refresh", "user", "notifications"}``
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Log in",
        request=CustomTokenObtainPairSerializer,
        responses={
            200: OpenApiResponse(description="JWT pair, profile and a welcome notification."),
            400: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Accounts"],
    )
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)
        user = serializer.user

        payload = dict(serializer.validated_data)
        payload["user"] = UserDetailSerializer(user).data

        with collect_notifications() as emitted:
            NotificationEmitter.emit(
                "login",
                actor=user,
                target_id=user.pk,
                payload={"name": user.display_name},
            )
        payload["notifications"] = NotificationSerializer(emitted, many=True).data
        return Response(payload, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Current User ("Me") Views
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """
    GET /api/accounts/me/ → Retrieve the current user's profile.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user profile",
        responses={200: UserDetailSerializer},
        tags=["Accounts"],
    )
    def get(self, request: Request) -> Response:
        user = CurrentUserService.get_profile(request.user)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)


class ChangePasswordView(APIView):
    """
    POST /api/accounts/me/password/ → Change the current user's password.

    Available to every role.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Change own password",
        request=ChangePasswordSerializer,
        responses={
            200: OpenApiResponse(description="Password changed."),
            400: OpenApiResponse(description="Current password is incorrect."),
        },
        tags=["Accounts"],
    )
    def post(self, request: Request) -> Response:
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with collect_notifications() as emitted:
            CurrentUserService.change_password(
                request.user,
                serializer.validated_data["current_password"],
                serializer.validated_data["new_password"],
            )
        return Response(
            {
                "detail": "Password changed.",
                "notifications": NotificationSerializer(emitted, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


# ═══════════════════════════════════════════════════════════════════
#  Staff Management ViewSet
# ═══════════════════════════════════════════════════════════════════


class StaffViewSet(viewsets.ViewSet):
    """
    /api/accounts/staff/

    Supervisor-only staff administration.  Authorization is enforced in
    ``StaffManagementService``; every other role receives 403.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List staff",
        parameters=[
            OpenApiParameter(name="is_active", type=bool, location=OpenApiParameter.QUERY, description="Filter by activation state."),
        ],
        responses={200: StaffSerializer(many=True)},
        tags=["Staff"],
    )
    def list(self, request: Request) -> Response:
        raw = request.query_params.get("is_active")
        is_active = None if raw is None else raw.lower() in {"1", "true", "yes"}
        qs = StaffManagementService.list_staff(request.user, is_active=is_active)
        return Response(StaffSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Provision a staff member",
        request=StaffCreateSerializer,
        responses={
            201: StaffSerializer,
            403: OpenApiResponse(description="Only the supervisor may provision staff."),
            409: OpenApiResponse(description="Phone number already registered."),
        },
        tags=["Staff"],
    )
    def create(self, request: Request) -> Response:
        serializer = StaffCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        staff = StaffManagementService.provision_staff(serializer.validated_data, request.user)
        return Response(StaffSerializer(staff).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Retrieve a staff member", responses={200: StaffSerializer}, tags=["Staff"])
    def retrieve(self, request: Request, pk: str = None) -> Response:
        staff = StaffManagementService.get_staff(int(pk), request.user)
        return Response(StaffSerializer(staff).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Edit a staff member",
        description="A blank password leaves the current password unchanged.",
        request=StaffUpdateSerializer,
        responses={200: StaffSerializer},
        tags=["Staff"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = StaffUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        staff = StaffManagementService.update_staff(int(pk), serializer.validated_data, request.user)
        return Response(StaffSerializer(staff).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="scope")
    @extend_schema(
        summary="Reassign category scope",
        request=CategoryScopeSerializer,
        responses={200: StaffSerializer},
        tags=["Staff"],
    )
    def scope(self, request: Request, pk: str = None) -> Response:
        serializer = CategoryScopeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        staff = StaffManagementService.reassign_scope(
            int(pk),
            serializer.validated_data["category_scope"],
            request.user,
        )
        return Response(StaffSerializer(staff).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="activate")
    @extend_schema(summary="Activate a staff member", request=None, responses={200: StaffSerializer}, tags=["Staff"])
    def activate(self, request: Request, pk: str = None) -> Response:
        staff = StaffManagementService.activate_staff(int(pk), request.user)
        return Response(StaffSerializer(staff).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="deactivate")
    @extend_schema(summary="Deactivate a staff member", request=None, responses={200: StaffSerializer}, tags=["Staff"])
    def deactivate(self, request: Request, pk: str = None) -> Response:
        staff = StaffManagementService.deactivate_staff(int(pk), request.user)
        return Response(StaffSerializer(staff).data, status=status.HTTP_200_OK)
