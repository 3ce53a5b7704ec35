from django.contrib import admin

from .models import TeamMessage


@admin.register(TeamMessage)
class TeamMessageAdmin(admin.ModelAdmin):
    list_display = ("id", "channel_address", "sender", "attachment_type", "created_at")
    list_filter = ("channel_address", "attachment_type")
    search_fields = ("text", "sender_display_name")
