"""
Complaints app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

Write endpoints attach the notifications emitted while handling the
request under a ``notifications`` key.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.domain.notifications import collect_notifications
from core.serializers import NotificationSerializer

from .models import Complaint
from .serializers import (
    ComplaintCreateSerializer,
    ComplaintDetailSerializer,
    ComplaintFilterSerializer,
    ComplaintListSerializer,
    ComplaintMessageSerializer,
    ComplaintStatusLogSerializer,
    GeneratedTextSerializer,
    MessageCreateSerializer,
    RefineReplySerializer,
    StatusChangeSerializer,
)
from .services import ComplaintCriteria, ComplaintLifecycleService, ComplaintQueryService

logger = logging.getLogger(__name__)


class ComplaintViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the complaints app.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined.  The base permission is ``IsAuthenticated``;
    role and scope checks are enforced exclusively inside the service
    layer and surface as 403 / 404 through the domain exception handler.
    """

    permission_classes = [IsAuthenticated]

    # ── Helpers ──────────────────────────────────────────────────────

    def _get_complaint(self, request: Request, pk) -> Complaint:
        return ComplaintQueryService.get_complaint_for(request.user, pk)

    @staticmethod
    def _with_notifications(data, emitted) -> dict:
        payload = dict(data)
        payload["notifications"] = NotificationSerializer(emitted, many=True).data
        return payload

    # ── Standard actions ─────────────────────────────────────────────

    @extend_schema(
        summary="List complaints",
        description=(
            "Complaints visible to the authenticated user, newest first. "
            "Citizens see their own; staff see their categories; the "
            "supervisor sees everything."
        ),
        parameters=[
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Case-sensitive match on title or citizen name."),
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, description="Filter by status."),
            OpenApiParameter(name="category", type=str, location=OpenApiParameter.QUERY, description="Filter by category."),
        ],
        responses={200: ComplaintListSerializer(many=True)},
        tags=["Complaints"],
    )
    def list(self, request: Request) -> Response:
        filter_serializer = ComplaintFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        criteria = ComplaintCriteria(**filter_serializer.validated_data)

        qs = ComplaintQueryService.search(request.user, criteria)
        serializer = ComplaintListSerializer(qs, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="File a complaint",
        request=ComplaintCreateSerializer,
        responses={
            201: OpenApiResponse(response=ComplaintDetailSerializer, description="Complaint filed with its welcome message."),
            400: OpenApiResponse(description="Validation error."),
            403: OpenApiResponse(description="Only citizens can file complaints."),
        },
        tags=["Complaints"],
    )
    def create(self, request: Request) -> Response:
        serializer = ComplaintCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with collect_notifications() as emitted:
            complaint = ComplaintLifecycleService.create_complaint(
                request.user,
                serializer.validated_data,
            )
        out = ComplaintDetailSerializer(complaint)
        return Response(self._with_notifications(out.data, emitted), status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve a complaint",
        description=(
            "Complaint with its correspondence thread.  When staff open a "
            "complaint that has no summary yet, one is generated."
        ),
        responses={
            200: ComplaintDetailSerializer,
            403: OpenApiResponse(description="Outside your access scope."),
            404: OpenApiResponse(description="Complaint not found."),
        },
        tags=["Complaints"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        complaint = self._get_complaint(request, pk)
        if not request.user.is_citizen and not complaint.ai_summary:
            ComplaintLifecycleService.summarize(complaint, request.user)
        return Response(ComplaintDetailSerializer(complaint).data, status=status.HTTP_200_OK)

    # ── Workflow @actions ────────────────────────────────────────────

    @action(detail=True, methods=["post"], url_path="status")
    @extend_schema(
        summary="Change complaint status",
        request=StatusChangeSerializer,
        responses={
            200: ComplaintDetailSerializer,
            403: OpenApiResponse(description="Citizens cannot change status, or outside scope."),
        },
        tags=["Complaints – Workflow"],
    )
    def change_status(self, request: Request, pk: str = None) -> Response:
        complaint = self._get_complaint(request, pk)
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with collect_notifications() as emitted:
            complaint = ComplaintLifecycleService.set_status(
                complaint,
                serializer.validated_data["status"],
                request.user,
            )
        out = ComplaintDetailSerializer(complaint)
        return Response(self._with_notifications(out.data, emitted), status=status.HTTP_200_OK)

    @action(detail=True, methods=["get", "post"], url_path="messages")
    @extend_schema(
        summary="Read or append correspondence",
        request=MessageCreateSerializer,
        responses={
            200: ComplaintMessageSerializer(many=True),
            201: ComplaintMessageSerializer,
        },
        tags=["Complaints – Messages"],
    )
    def messages(self, request: Request, pk: str = None) -> Response:
        complaint = self._get_complaint(request, pk)
        if request.method == "GET":
            thread = ComplaintLifecycleService.thread(complaint, request.user)
            return Response(ComplaintMessageSerializer(thread, many=True).data, status=status.HTTP_200_OK)

        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with collect_notifications() as emitted:
            message = ComplaintLifecycleService.append_message(
                complaint,
                request.user,
                serializer.validated_data["text"],
                origin=serializer.validated_data["origin"],
            )
        out = ComplaintMessageSerializer(message)
        return Response(self._with_notifications(out.data, emitted), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="status-log")
    @extend_schema(
        summary="Status audit trail",
        responses={200: ComplaintStatusLogSerializer(many=True)},
        tags=["Complaints – Workflow"],
    )
    def status_log(self, request: Request, pk: str = None) -> Response:
        complaint = self._get_complaint(request, pk)
        logs = ComplaintLifecycleService.status_history(complaint, request.user)
        return Response(ComplaintStatusLogSerializer(logs, many=True).data, status=status.HTTP_200_OK)

    # ── Assistant @actions ───────────────────────────────────────────

    @action(detail=True, methods=["post"], url_path="summary")
    @extend_schema(
        summary="Summarise a complaint",
        request=None,
        responses={
            200: GeneratedTextSerializer,
            403: OpenApiResponse(description="Staff only."),
        },
        tags=["Complaints – Assistant"],
    )
    def summary(self, request: Request, pk: str = None) -> Response:
        complaint = self._get_complaint(request, pk)
        result = ComplaintLifecycleService.summarize(complaint, request.user)
        return Response(GeneratedTextSerializer(result).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="refine-reply")
    @extend_schema(
        summary="Refine a draft reply",
        description="Rewrites a staff draft formally. Falls back to the draft unchanged.",
        request=RefineReplySerializer,
        responses={
            200: GeneratedTextSerializer,
            403: OpenApiResponse(description="Staff only."),
        },
        tags=["Complaints – Assistant"],
    )
    def refine_reply(self, request: Request, pk: str = None) -> Response:
        complaint = self._get_complaint(request, pk)
        serializer = RefineReplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = ComplaintLifecycleService.refine_reply(
            complaint,
            request.user,
            serializer.validated_data["draft"],
        )
        return Response(GeneratedTextSerializer(result).data, status=status.HTTP_200_OK)
