"""
Registries app views.

- ``DrugTypeViewSet``  — list / create / destroy.
- ``TemplateViewSet``  — list (optional ``type`` filter) / CRUD.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import DocumentTemplateSerializer, DrugTypeSerializer, TemplateFilterSerializer
from .services import DrugTypeService, TemplateService


class DrugTypeViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="List drug types", responses={200: DrugTypeSerializer(many=True)}, tags=["Registries"])
    def list(self, request: Request) -> Response:
        return Response(DrugTypeSerializer(DrugTypeService.list_drug_types(), many=True).data)

    @extend_schema(
        summary="Add a drug type",
        request=DrugTypeSerializer,
        responses={201: DrugTypeSerializer, 409: OpenApiResponse(description="Name already exists.")},
        tags=["Registries"],
    )
    def create(self, request: Request) -> Response:
        serializer = DrugTypeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        drug_type = DrugTypeService.create_drug_type(serializer.validated_data["name"], request.user)
        return Response(DrugTypeSerializer(drug_type).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Remove a drug type", responses={204: None}, tags=["Registries"])
    def destroy(self, request: Request, pk: int = None) -> Response:
        DrugTypeService.delete_drug_type(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TemplateViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List document templates",
        parameters=[OpenApiParameter(name="type", type=str, location=OpenApiParameter.QUERY)],
        responses={200: DocumentTemplateSerializer(many=True)},
        tags=["Registries"],
    )
    def list(self, request: Request) -> Response:
        filters = TemplateFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = TemplateService.list_templates(filters.validated_data.get("type"))
        return Response(DocumentTemplateSerializer(qs, many=True).data)

    @extend_schema(summary="Retrieve a template", responses={200: DocumentTemplateSerializer}, tags=["Registries"])
    def retrieve(self, request: Request, pk: int = None) -> Response:
        return Response(DocumentTemplateSerializer(TemplateService.get_template(pk)).data)

    @extend_schema(summary="Create a template", request=DocumentTemplateSerializer, responses={201: DocumentTemplateSerializer}, tags=["Registries"])
    def create(self, request: Request) -> Response:
        serializer = DocumentTemplateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        template = TemplateService.create_template(serializer.validated_data, request.user)
        return Response(DocumentTemplateSerializer(template).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Update a template", request=DocumentTemplateSerializer, responses={200: DocumentTemplateSerializer}, tags=["Registries"])
    def partial_update(self, request: Request, pk: int = None) -> Response:
        serializer = DocumentTemplateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        template = TemplateService.update_template(pk, serializer.validated_data, request.user)
        return Response(DocumentTemplateSerializer(template).data)

    @extend_schema(summary="Delete a template", responses={204: None}, tags=["Registries"])
    def destroy(self, request: Request, pk: int = None) -> Response:
        TemplateService.delete_template(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)
