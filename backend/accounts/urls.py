"""
Accounts app URL configuration.

All routes are namespaced under ``accounts`` and designed to be included
in the project-level ``urls.py`` as::

    path('api/accounts/', include('accounts.urls')),

Endpoint Map
------------
Authentication
    POST   /auth/register/              → RegisterView
    POST   /auth/login/                 → LoginView
    POST   /auth/token/refresh/         → TokenRefreshView (SimpleJWT)

Current User ("Me")
    GET    /me/                         → MeView
    POST   /me/password/                → ChangePasswordView

Staff Management (Supervisor)
    GET    /staff/                      → StaffViewSet.list
    POST   /staff/                      → StaffViewSet.create
    GET    /staff/{id}/                 → StaffViewSet.retrieve
    PATCH  /staff/{id}/                 → StaffViewSet.partial_update
    POST   /staff/{id}/scope/           → StaffViewSet.scope
    POST   /staff/{id}/activate/        → StaffViewSet.activate
    POST   /staff/{id}/deactivate/      → StaffViewSet.deactivate
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    ChangePasswordView,
    LoginView,
    MeView,
    RegisterView,
    StaffViewSet,
)

app_name = "accounts"

router = DefaultRouter()
router.register(r"staff", StaffViewSet, basename="staff")

urlpatterns = [
    # ── Authentication ───────────────────────────────────────────────
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path(
        "auth/token/refresh/",
        TokenRefreshView.as_view(),
        name="token-refresh",
    ),

    # ── Current User (Me) ───────────────────────────────────────────
    path("me/", MeView.as_view(), name="me"),
    path("me/password/", ChangePasswordView.as_view(), name="change-password"),

    # ── Router-registered viewsets (staff/) ──────────────────────────
    path("", include(router.urls)),
]
