from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import CompendiumDocSerializer, KompendiumFilterSerializer
from .services import KompendiumService


class KompendiumViewSet(viewsets.ViewSet):
    """Knowledge-base articles; writes are admin only (checked in the service)."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List kompendium articles",
        parameters=[
            OpenApiParameter(name="category", type=str, location=OpenApiParameter.QUERY, description="Category path prefix."),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY),
        ],
        responses={200: CompendiumDocSerializer(many=True)},
        tags=["Kompendium"],
    )
    def list(self, request: Request) -> Response:
        filters = KompendiumFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        return Response(CompendiumDocSerializer(KompendiumService.list_docs(filters.validated_data), many=True).data)

    @extend_schema(summary="Retrieve an article", responses={200: CompendiumDocSerializer}, tags=["Kompendium"])
    def retrieve(self, request: Request, pk: int = None) -> Response:
        return Response(CompendiumDocSerializer(KompendiumService.get_doc(pk)).data)

    @extend_schema(
        summary="Write an article",
        request=CompendiumDocSerializer,
        responses={201: CompendiumDocSerializer, 403: OpenApiResponse(description="Admin only.")},
        tags=["Kompendium"],
    )
    def create(self, request: Request) -> Response:
        serializer = CompendiumDocSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        doc = KompendiumService.create_doc(serializer.validated_data, request.user)
        return Response(CompendiumDocSerializer(doc).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Edit an article", request=CompendiumDocSerializer, responses={200: CompendiumDocSerializer}, tags=["Kompendium"])
    def partial_update(self, request: Request, pk: int = None) -> Response:
        serializer = CompendiumDocSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        doc = KompendiumService.update_doc(pk, serializer.validated_data, request.user)
        return Response(CompendiumDocSerializer(doc).data)

    @extend_schema(summary="Delete an article", responses={204: None}, tags=["Kompendium"])
    def destroy(self, request: Request, pk: int = None) -> Response:
        KompendiumService.delete_doc(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(summary="Distinct category paths", responses={200: {"type": "array", "items": {"type": "string"}}}, tags=["Kompendium"])
    @action(detail=False, methods=["get"], url_path="categories")
    def categories(self, request: Request) -> Response:
        return Response(KompendiumService.list_categories())
