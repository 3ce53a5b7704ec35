from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "full_name", "phone_number", "role", "is_active")
    search_fields = ("username", "full_name", "phone_number", "national_id")
    list_filter = ("is_active", "role")
    ordering = ("username",)
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Office Profile", {"fields": ("full_name", "phone_number", "national_id",
                                       "role", "category_scope")}),
        ("Location", {"fields": ("province", "city", "area", "address")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Office Profile", {"fields": ("full_name", "phone_number", "role",
                                       "category_scope")}),
    )
