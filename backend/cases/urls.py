"""
Cases app URL configuration.

All routes are registered under the ``/api/casa_cases/`` prefix.

Route Hierarchy
---------------
  /api/casa_cases/                        → list / create
  /api/casa_cases/new/                    → new-case form metadata
  /api/casa_cases/{id}/                   → retrieve / update / partial_update
  /api/casa_cases/{id}/?format=csv|xlsx   → case contacts export
  /api/casa_cases/{id}/edit/              → edit form metadata

  ── Lifecycle @actions ──────────────────────────────────────────
  PATCH /api/casa_cases/{id}/deactivate/
  PATCH /api/casa_cases/{id}/reactivate/
"""

from rest_framework.routers import DefaultRouter

from .views import CaseViewSet

router = DefaultRouter()
router.register(
    prefix=r"casa_cases",
    viewset=CaseViewSet,
    basename="casa-case",
)

urlpatterns = router.urls
