from django.contrib import admin

from .models import Complaint, ComplaintMessage, ComplaintStatusLog


class ComplaintMessageInline(admin.TabularInline):
    model = ComplaintMessage
    extra = 0
    readonly_fields = ("sender", "sender_display_name", "text", "origin", "created_at")


class ComplaintStatusLogInline(admin.TabularInline):
    model = ComplaintStatusLog
    extra = 0
    readonly_fields = ("from_status", "to_status", "changed_by", "created_at")


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "area", "status", "submitter", "created_at")
    list_filter = ("status", "category", "area")
    search_fields = ("title", "description", "submitter__full_name")
    inlines = [ComplaintMessageInline, ComplaintStatusLogInline]
