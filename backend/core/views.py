"""
Core app views — **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.  Views are responsible only for:

1. Extracting and validating query parameters from the request.
2. Calling the service with the authenticated user and parameters.
3. Serialising the result and returning an HTTP ``Response``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)

from .serializers import (
    ComplaintStatisticsSerializer,
    StatisticsQuerySerializer,
    SystemConstantsSerializer,
)
from .services import ComplaintStatisticsService, SystemConstantsService


class StatisticsView(APIView):
    """
    **GET /api/core/statistics/?period=<day|week|month|year|all>**

    Complaint statistics over the complaints the authenticated user can
    see, restricted to the requested period.

    **Authentication**: Required (``IsAuthenticated``).

    **Response** (``200 OK``):
        Serialised by ``ComplaintStatisticsSerializer``.

    **Error Responses**:
        - ``400 Bad Request``: Unknown ``period``.
        - ``401 Unauthorized``: Missing or invalid credentials.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Complaint statistics",
        description=(
            "Totals, resolution rate and per-category / per-area buckets "
            "for the complaints visible to the requesting user."
        ),
        parameters=[
            OpenApiParameter(
                name="period",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                description="One of day, week, month, year, all. Defaults to all.",
            ),
        ],
        responses={
            200: OpenApiResponse(response=ComplaintStatisticsSerializer, description="Statistics."),
            400: OpenApiResponse(description="Unknown period."),
        },
        tags=["Statistics"],
    )
    def get(self, request: Request) -> Response:
        query = StatisticsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        service = ComplaintStatisticsService(
            user=request.user,
            period=query.validated_data["period"],
        )
        serializer = ComplaintStatisticsSerializer(service.get_stats())
        return Response(serializer.data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Return the system's closed vocabularies (categories, areas, statuses,
    roles, report periods, team channel forms) for frontend dropdowns.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="System constants",
        responses={200: SystemConstantsSerializer},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)
