"""
Confiscations app views.

- ``ConfiscationViewSet`` — list / create / retrieve / destroy, plus the
  unlinked search, unlink and seizure stats ``@action`` endpoints.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import (
    ConfiscationCreateSerializer,
    ConfiscationFilterSerializer,
    ConfiscationSerializer,
    SeizureStatsSerializer,
    UnlinkedSearchSerializer,
)
from .services import ConfiscationService, SeizureStatsService


class ConfiscationViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List confiscations",
        parameters=[
            OpenApiParameter(name="officer", type=int, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="drug_type", type=str, location=OpenApiParameter.QUERY),
        ],
        responses={200: ConfiscationSerializer(many=True)},
        tags=["Confiscations"],
    )
    def list(self, request: Request) -> Response:
        filters = ConfiscationFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = ConfiscationService.list_confiscations(filters.validated_data)
        return Response(ConfiscationSerializer(qs, many=True).data)

    @extend_schema(
        summary="Log a confiscation",
        description="Quantity is converted from the given unit (g, kg, oz, lbs) to grams.",
        request=ConfiscationCreateSerializer,
        responses={201: ConfiscationSerializer, 400: OpenApiResponse(description="Validation error.")},
        tags=["Confiscations"],
    )
    def create(self, request: Request) -> Response:
        serializer = ConfiscationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        confiscation = ConfiscationService.create_confiscation(serializer.validated_data, request.user)
        return Response(ConfiscationSerializer(confiscation).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Retrieve a confiscation", responses={200: ConfiscationSerializer}, tags=["Confiscations"])
    def retrieve(self, request: Request, pk: int = None) -> Response:
        return Response(ConfiscationSerializer(ConfiscationService.get_confiscation(pk)).data)

    @extend_schema(
        summary="Delete a confiscation",
        responses={204: None, 403: OpenApiResponse(description="Logging officer or admin only.")},
        tags=["Confiscations"],
    )
    def destroy(self, request: Request, pk: int = None) -> Response:
        ConfiscationService.delete_confiscation(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Search confiscations not linked to a report",
        parameters=[OpenApiParameter(name="q", type=str, location=OpenApiParameter.QUERY)],
        responses={200: ConfiscationSerializer(many=True)},
        tags=["Confiscations"],
    )
    @action(detail=False, methods=["get"], url_path="unlinked")
    def unlinked(self, request: Request) -> Response:
        serializer = UnlinkedSearchSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        qs = ConfiscationService.search_unlinked(serializer.validated_data["q"])
        return Response(ConfiscationSerializer(qs, many=True).data)

    @extend_schema(summary="Detach from its report", request=None, responses={200: ConfiscationSerializer}, tags=["Confiscations"])
    @action(detail=True, methods=["post"], url_path="unlink")
    def unlink(self, request: Request, pk: int = None) -> Response:
        confiscation = ConfiscationService.unlink(pk, request.user)
        return Response(ConfiscationSerializer(confiscation).data)

    @extend_schema(summary="Seizure totals in kilograms", responses={200: SeizureStatsSerializer}, tags=["Confiscations"])
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request: Request) -> Response:
        return Response(SeizureStatsService.seizure_stats(request.user))
