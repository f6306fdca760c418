"""
Core app views — **Thin Views**.

Each view delegates all business logic to the corresponding service in
``core.services``.  Views are responsible only for:

1. Extracting and validating query parameters from the request.
2. Calling the service with the authenticated user and parameters.
3. Serialising the result and returning an HTTP ``Response``.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.activity import ActivityService

from .serializers import (
    ActivityEntrySerializer,
    DashboardSerializer,
    GlobalSearchResponseSerializer,
    SearchQuerySerializer,
    SystemConstantsSerializer,
)
from .services import DashboardAggregationService, GlobalSearchService, SystemConstantsService


class DashboardView(APIView):
    """
    **GET /api/core/dashboard/**

    Department counters, seizure totals, the officer's own latest cases
    and reports, the latest announcements and the activity feed.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Dashboard",
        responses={200: OpenApiResponse(response=DashboardSerializer, description="Dashboard payload.")},
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        data = DashboardAggregationService(user=request.user).get_dashboard()
        return Response(DashboardSerializer(data).data, status=status.HTTP_200_OK)


class GlobalSearchView(APIView):
    """
    **GET /api/core/search/?q=<term>[&category=<cat>][&limit=<n>]**

    Unified search across reports, cases, confiscations and the
    kompendium.  ``q`` needs at least two characters; ``limit`` is capped
    at 50 per category.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Global search",
        parameters=[
            OpenApiParameter(name="q", type=str, required=True, description="Search term (min 2 chars)."),
            OpenApiParameter(
                name="category", type=str, required=False,
                description="Restrict to: reports, cases, confiscations or kompendium.",
            ),
            OpenApiParameter(name="limit", type=int, required=False, description="Max results per category (default 10, max 50)."),
        ],
        responses={
            200: OpenApiResponse(response=GlobalSearchResponseSerializer, description="Search results."),
            400: OpenApiResponse(description="Missing or invalid query parameter."),
        },
        tags=["Search"],
    )
    def get(self, request: Request) -> Response:
        params = SearchQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        service = GlobalSearchService(
            query=params.validated_data["q"],
            user=request.user,
            category=params.validated_data.get("category"),
            limit=params.validated_data["limit"],
        )
        return Response(GlobalSearchResponseSerializer(service.search()).data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    Every choice enumeration, the map palette and the rank ladder, so the
    frontend never hardcodes them.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="System constants",
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="System constants.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        return Response(SystemConstantsSerializer(data).data, status=status.HTTP_200_OK)


class ActivityFeedView(APIView):
    """**GET /api/core/activity/** — the latest activity entries."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Activity feed",
        responses={200: ActivityEntrySerializer(many=True)},
        tags=["Dashboard"],
    )
    def get(self, request: Request) -> Response:
        return Response(ActivityEntrySerializer(ActivityService.latest(), many=True).data)
