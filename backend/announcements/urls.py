"""
Announcements app URL configuration.

  /api/announcements/                     → list / create
  /api/announcements/{id}/                → retrieve / destroy
  POST /api/announcements/{id}/read/
  GET  /api/announcements/{id}/receipts/
  GET  /api/announcements/unread-count/
"""

from rest_framework.routers import DefaultRouter

from .views import AnnouncementViewSet

router = DefaultRouter()
router.register(prefix=r"announcements", viewset=AnnouncementViewSet, basename="announcement")

urlpatterns = router.urls
