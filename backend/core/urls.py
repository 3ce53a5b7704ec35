"""
Core app URL configuration.

URL prefix (registered in ``backend/urls.py``)::

    path('api/core/', include('core.urls'))

Endpoint summary
----------------
GET  /api/core/statistics/   — Complaint statistics for a period (role-aware).
GET  /api/core/constants/    — System choice enumerations for frontend dropdowns.
"""

from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    path(
        "statistics/",
        views.StatisticsView.as_view(),
        name="statistics",
    ),
    path(
        "constants/",
        views.SystemConstantsView.as_view(),
        name="system-constants",
    ),
]
