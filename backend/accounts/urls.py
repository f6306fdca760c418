"""
Accounts app URL configuration.

Included in the project-level ``urls.py`` as::

    path('api/accounts/', include('accounts.urls')),

Endpoint Map
------------
Authentication
    POST   /auth/login/                 → LoginView
    POST   /auth/token/refresh/         → TokenRefreshView (SimpleJWT)
    GET    /me/                         → MeView

Officers
    GET    /officers/                   → OfficerViewSet.list
    POST   /officers/                   → OfficerViewSet.create
    GET    /officers/{id}/              → OfficerViewSet.retrieve
    PATCH  /officers/{id}/              → OfficerViewSet.partial_update
    GET    /ranks/                      → RankListView
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, MeView, OfficerViewSet, RankListView

app_name = "accounts"

router = DefaultRouter()
router.register(r"officers", OfficerViewSet, basename="officer")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="login"),
    path(
        "auth/token/refresh/",
        TokenRefreshView.as_view(),
        name="token-refresh",
    ),
    path("me/", MeView.as_view(), name="me"),
    path("ranks/", RankListView.as_view(), name="rank-list"),
    path("", include(router.urls)),
]
