from rest_framework.routers import DefaultRouter

from .views import KompendiumViewSet

router = DefaultRouter()
router.register(prefix=r"kompendium", viewset=KompendiumViewSet, basename="kompendium")

urlpatterns = router.urls
