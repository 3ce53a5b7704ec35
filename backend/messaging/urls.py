"""
Messaging app URL configuration.

    GET        /api/messaging/channels/                     → ChannelListView
    GET, POST  /api/messaging/channels/{address}/messages/  → ChannelMessagesView
"""

from django.urls import path

from .views import ChannelListView, ChannelMessagesView

app_name = "messaging"

urlpatterns = [
    path("channels/", ChannelListView.as_view(), name="channel-list"),
    path(
        "channels/<str:address>/messages/",
        ChannelMessagesView.as_view(),
        name="channel-messages",
    ),
]
