"""
Core app URL configuration.

Cross-app aggregation endpoints.

URL prefix (registered in ``backend/urls.py``)::

    path('api/core/', include('core.urls'))

Endpoint summary
----------------
GET  /api/core/dashboard/    — Dashboard payload.
GET  /api/core/search/       — Global search across reports, cases, confiscations, kompendium.
GET  /api/core/constants/    — System choice enumerations for frontend dropdowns.
GET  /api/core/activity/     — Latest activity-feed entries.
"""

from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    path("dashboard/", views.DashboardView.as_view(), name="dashboard"),
    path("search/", views.GlobalSearchView.as_view(), name="global-search"),
    path("constants/", views.SystemConstantsView.as_view(), name="system-constants"),
    path("activity/", views.ActivityFeedView.as_view(), name="activity"),
]
