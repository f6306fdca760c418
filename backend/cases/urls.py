"""
Cases app URL configuration.

All routes are registered under the ``/api/cases/`` prefix.

Route Hierarchy
---------------
  /api/cases/                             → list / create
  /api/cases/{id}/                        → retrieve / partial_update / destroy

  ── Workflow @actions ───────────────────────────────────────────
  POST /api/cases/{id}/submit/            → reporting officer submits / resubmits
  POST /api/cases/{id}/start-review/      → admin picks the case up
  POST /api/cases/{id}/assign/            → admin approves + assigns the lead
  POST /api/cases/{id}/return/            → admin returns with a reason
  POST /api/cases/{id}/start-work/        → lead starts the investigation
  POST /api/cases/{id}/complete/          → lead requests closure
  POST /api/cases/{id}/reopen/            → admin sends it back to work
  POST /api/cases/{id}/close/             → admin closes
  POST /api/cases/{id}/transition/        → generic centralized transition
  GET  /api/cases/{id}/status-log/
"""

from rest_framework.routers import DefaultRouter

from .views import CaseViewSet

router = DefaultRouter()
router.register(
    prefix=r"cases",
    viewset=CaseViewSet,
    basename="case",
)

urlpatterns = router.urls
