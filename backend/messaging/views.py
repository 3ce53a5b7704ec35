"""
Messaging app views.

Thin views over ``ChannelRouter``.  The channel address is part of the
URL, so one pair of endpoints serves complaint threads and team
channels alike:

- ``ChannelListView``     — GET  /channels/
- ``ChannelMessagesView`` — GET / POST /channels/{address}/messages/
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from complaints.serializers import ComplaintMessageSerializer
from core.domain.notifications import collect_notifications
from core.serializers import NotificationSerializer

from .serializers import ChannelPostSerializer, ChannelSerializer, TeamMessageSerializer
from .services import ChannelAddress, ChannelRouter


def _message_serializer(address: ChannelAddress):
    return ComplaintMessageSerializer if address.is_complaint else TeamMessageSerializer


class ChannelListView(APIView):
    """
    GET /api/messaging/channels/

    Team channels the authenticated user may address.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List team channels",
        responses={200: ChannelSerializer(many=True)},
        tags=["Messaging"],
    )
    def get(self, request: Request) -> Response:
        channels = ChannelRouter.channels_for(request.user)
        return Response(ChannelSerializer(channels, many=True).data, status=status.HTTP_200_OK)


class ChannelMessagesView(APIView):
    """
    GET  /api/messaging/channels/{address}/messages/ → messages in send order
    POST /api/messaging/channels/{address}/messages/ → append one message

    ``address`` is a complaint id, ``GLOBAL`` or ``PRIVATE_<staffId>``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Read a channel",
        responses={
            200: OpenApiResponse(description="Messages in send order."),
            400: OpenApiResponse(description="Malformed address."),
            403: OpenApiResponse(description="Channel not open to you."),
            404: OpenApiResponse(description="Complaint or staff member not found."),
        },
        tags=["Messaging"],
    )
    def get(self, request: Request, address: str) -> Response:
        channel = ChannelAddress.parse(address)
        messages = ChannelRouter.read(request.user, channel)
        serializer = _message_serializer(channel)(messages, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Post to a channel",
        request=ChannelPostSerializer,
        responses={
            201: OpenApiResponse(description="Message stored."),
            400: OpenApiResponse(description="Empty message or malformed address."),
            403: OpenApiResponse(description="Channel not open to you."),
        },
        tags=["Messaging"],
    )
    def post(self, request: Request, address: str) -> Response:
        channel = ChannelAddress.parse(address)
        serializer = ChannelPostSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with collect_notifications() as emitted:
            message = ChannelRouter.post(request.user, channel, **serializer.validated_data)

        payload = dict(_message_serializer(channel)(message).data)
        payload["notifications"] = NotificationSerializer(emitted, many=True).data
        return Response(payload, status=status.HTTP_201_CREATED)
