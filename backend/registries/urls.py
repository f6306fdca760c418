"""
Registries app URL configuration.

  /api/registries/drug-types/             → list / create
  /api/registries/drug-types/{id}/        → destroy
  /api/registries/templates/?type=        → list / create
  /api/registries/templates/{id}/         → retrieve / partial_update / destroy
"""

from rest_framework.routers import DefaultRouter

from .views import DrugTypeViewSet, TemplateViewSet

router = DefaultRouter()
router.register(prefix=r"drug-types", viewset=DrugTypeViewSet, basename="drug-type")
router.register(prefix=r"templates", viewset=TemplateViewSet, basename="template")

urlpatterns = router.urls
