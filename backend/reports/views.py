"""
Reports app ViewSets.

Views are intentionally thin: validate with a serializer, delegate to
``services.py``, serialize the result.

ViewSets
--------
- ``ReportViewSet`` — CRUD, workflow ``@action`` commands, draft search,
  attachments and PDF export.
"""

from __future__ import annotations

from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import (
    AttachmentUploadSerializer,
    DraftSearchResultSerializer,
    DraftSearchSerializer,
    ReportAttachmentSerializer,
    ReportCreateSerializer,
    ReportDetailSerializer,
    ReportFilterSerializer,
    ReportListSerializer,
    ReportReviewSerializer,
    ReportStatusLogSerializer,
    ReportUpdateSerializer,
)
from .services import ReportExportService, ReportQueryService, ReportService, ReportWorkflowService


_WORKFLOW_RESPONSES = {
    200: OpenApiResponse(response=ReportDetailSerializer, description="Report after the transition."),
    400: OpenApiResponse(description="Missing revision reason."),
    403: OpenApiResponse(description="Not permitted for this officer."),
    404: OpenApiResponse(description="Report not found."),
    409: OpenApiResponse(description="Transition not allowed from the current status."),
}


class ReportViewSet(viewsets.ViewSet):
    """
    Incident reports.  Visibility (drafts only for their authors and
    admins) is enforced in ``ReportQueryService``.
    """

    permission_classes = [IsAuthenticated]

    def _detail(self, request: Request, report_id, status_code=status.HTTP_200_OK) -> Response:
        report = ReportQueryService.get_report_detail(request.user, report_id)
        return Response(ReportDetailSerializer(report).data, status=status_code)

    @extend_schema(
        summary="List reports",
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="author", type=int, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Title or report number."),
        ],
        responses={200: ReportListSerializer(many=True)},
        tags=["Reports"],
    )
    def list(self, request: Request) -> Response:
        filters = ReportFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = ReportQueryService.get_filtered_queryset(request.user, filters.validated_data)
        return Response(ReportListSerializer(qs, many=True).data)

    @extend_schema(
        summary="Create a draft report",
        request=ReportCreateSerializer,
        responses={201: ReportDetailSerializer, 400: OpenApiResponse(description="Validation error.")},
        tags=["Reports"],
    )
    def create(self, request: Request) -> Response:
        serializer = ReportCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = ReportService.create_report(serializer.validated_data, request.user)
        return self._detail(request, report.pk, status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve a report",
        responses={200: ReportDetailSerializer, 404: OpenApiResponse(description="Report not found.")},
        tags=["Reports"],
    )
    def retrieve(self, request: Request, pk: int = None) -> Response:
        return self._detail(request, pk)

    @extend_schema(
        summary="Partially update a report",
        request=ReportUpdateSerializer,
        responses={200: ReportDetailSerializer, 403: OpenApiResponse(description="Not editable.")},
        tags=["Reports"],
    )
    def partial_update(self, request: Request, pk: int = None) -> Response:
        serializer = ReportUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ReportService.update_report(pk, serializer.validated_data, request.user)
        return self._detail(request, pk)

    @extend_schema(
        summary="Delete a report",
        responses={204: None, 403: OpenApiResponse(description="Admin only.")},
        tags=["Reports"],
    )
    def destroy(self, request: Request, pk: int = None) -> Response:
        ReportService.delete_report(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ── Workflow ─────────────────────────────────────────────────────

    @extend_schema(summary="Submit (or resubmit) a report", request=None, responses=_WORKFLOW_RESPONSES, tags=["Reports – Workflow"])
    @action(detail=True, methods=["post"], url_path="submit")
    def submit(self, request: Request, pk: int = None) -> Response:
        ReportWorkflowService.submit_report(pk, request.user)
        return self._detail(request, pk)

    @extend_schema(summary="Start reviewing a report", request=None, responses=_WORKFLOW_RESPONSES, tags=["Reports – Workflow"])
    @action(detail=True, methods=["post"], url_path="start-review")
    def start_review(self, request: Request, pk: int = None) -> Response:
        ReportWorkflowService.start_review(pk, request.user)
        return self._detail(request, pk)

    @extend_schema(
        summary="Approve or request revisions",
        request=ReportReviewSerializer,
        responses=_WORKFLOW_RESPONSES,
        tags=["Reports – Workflow"],
    )
    @action(detail=True, methods=["post"], url_path="review")
    def review(self, request: Request, pk: int = None) -> Response:
        serializer = ReportReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ReportWorkflowService.review_report(
            pk,
            serializer.validated_data["action"],
            request.user,
            serializer.validated_data["reason"],
        )
        return self._detail(request, pk)

    @extend_schema(summary="Report audit trail", responses={200: ReportStatusLogSerializer(many=True)}, tags=["Reports"])
    @action(detail=True, methods=["get"], url_path="status-log")
    def status_log(self, request: Request, pk: int = None) -> Response:
        report = ReportQueryService.get_report_detail(request.user, pk)
        return Response(ReportStatusLogSerializer(report.status_logs.all(), many=True).data)

    # ── Search / attachments / export ───────────────────────────────

    @extend_schema(
        summary="Search drafts for linking",
        description="Queries shorter than two characters return an empty list.",
        parameters=[OpenApiParameter(name="q", type=str, location=OpenApiParameter.QUERY)],
        responses={200: DraftSearchResultSerializer(many=True)},
        tags=["Reports"],
    )
    @action(detail=False, methods=["get"], url_path="drafts/search")
    def search_drafts(self, request: Request) -> Response:
        serializer = DraftSearchSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        results = ReportQueryService.search_draft_reports(request.user, serializer.validated_data["q"])
        return Response(DraftSearchResultSerializer(results, many=True).data)

    @extend_schema(
        summary="Upload an attachment",
        request={"multipart/form-data": AttachmentUploadSerializer},
        responses={201: ReportAttachmentSerializer},
        tags=["Reports"],
    )
    @action(
        detail=True,
        methods=["post"],
        url_path="attachments",
        parser_classes=[MultiPartParser, FormParser],
    )
    def attachments(self, request: Request, pk: int = None) -> Response:
        serializer = AttachmentUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attachment = ReportService.upload_attachment(pk, serializer.validated_data, request.user)
        return Response(ReportAttachmentSerializer(attachment).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Export the report as PDF",
        responses={(200, "application/pdf"): OpenApiTypes.BINARY},
        tags=["Reports"],
    )
    @action(detail=True, methods=["get"], url_path="pdf")
    def pdf(self, request: Request, pk: int = None) -> HttpResponse:
        filename, content = ReportExportService.export_pdf(request.user, pk)
        response = HttpResponse(content, content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response
