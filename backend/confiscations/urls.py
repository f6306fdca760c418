"""
Confiscations app URL configuration.

  /api/confiscations/                     → list / create
  /api/confiscations/{id}/                → retrieve / destroy
  GET  /api/confiscations/unlinked/?q=    → picker for report linking
  POST /api/confiscations/{id}/unlink/
  GET  /api/confiscations/stats/
"""

from rest_framework.routers import DefaultRouter

from .views import ConfiscationViewSet

router = DefaultRouter()
router.register(prefix=r"confiscations", viewset=ConfiscationViewSet, basename="confiscation")

urlpatterns = router.urls
