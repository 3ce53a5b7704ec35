"""
Complaints app URL configuration.

All routes are registered under the ``/api/complaints/`` prefix.

Route Hierarchy
---------------
  /api/complaints/                          → list / create
  /api/complaints/{id}/                     → retrieve

  ── Workflow @actions ───────────────────────────────────────────
  POST /api/complaints/{id}/status/         → set status (staff / supervisor)
  GET  /api/complaints/{id}/status-log/     → audit trail

  ── Correspondence ──────────────────────────────────────────────
  GET  /api/complaints/{id}/messages/       → thread
  POST /api/complaints/{id}/messages/       → append

  ── Assistant @actions (staff / supervisor) ─────────────────────
  POST /api/complaints/{id}/summary/
  POST /api/complaints/{id}/refine-reply/
"""

from rest_framework.routers import DefaultRouter

from .views import ComplaintViewSet

router = DefaultRouter()
router.register(
    prefix=r"complaints",
    viewset=ComplaintViewSet,
    basename="complaint",
)

urlpatterns = router.urls
