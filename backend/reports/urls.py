"""
Reports app URL configuration.

  /api/reports/                           → list / create
  /api/reports/{id}/                      → retrieve / partial_update / destroy
  GET  /api/reports/drafts/search/?q=     → draft picker
  POST /api/reports/{id}/submit/
  POST /api/reports/{id}/start-review/
  POST /api/reports/{id}/review/          → approve | reject
  GET  /api/reports/{id}/status-log/
  POST /api/reports/{id}/attachments/
  GET  /api/reports/{id}/pdf/
"""

from rest_framework.routers import DefaultRouter

from .views import ReportViewSet

router = DefaultRouter()
router.register(prefix=r"reports", viewset=ReportViewSet, basename="report")

urlpatterns = router.urls
