"""
Cases app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

ViewSets
--------
- ``CaseViewSet`` — the single ViewSet for all case endpoints.  Workflow
  commands are ``@action`` methods so the URL structure stays flat.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import (
    CaseAssignSerializer,
    CaseCreateSerializer,
    CaseDetailSerializer,
    CaseFilterSerializer,
    CaseListSerializer,
    CaseMessageSerializer,
    CaseReturnSerializer,
    CaseStatusLogSerializer,
    CaseTransitionSerializer,
    CaseUpdateSerializer,
)
from .services import CaseCreationService, CaseQueryService, CaseWorkflowService

_TRANSITION_RESPONSES = {
    200: OpenApiResponse(response=CaseDetailSerializer, description="Case after the transition."),
    400: OpenApiResponse(description="Missing reason or lead investigator."),
    403: OpenApiResponse(description="Actor may not perform this transition."),
    404: OpenApiResponse(description="Case not found."),
    409: OpenApiResponse(description="Transition not allowed from the current status."),
}


class CaseViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the cases app.

    The base permission is ``IsAuthenticated``.  Visibility and actor
    checks are enforced exclusively inside the service layer.
    """

    permission_classes = [IsAuthenticated]

    def _detail(self, request: Request, case_id) -> Response:
        case = CaseQueryService.get_case_detail(request.user, case_id)
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_200_OK)

    # ── Standard CRUD ────────────────────────────────────────────────

    @extend_schema(
        summary="List cases",
        description="Admins see every case; other officers see the cases they are involved in.",
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, description="Filter by case status."),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Title or case number."),
        ],
        responses={200: CaseListSerializer(many=True)},
        tags=["Cases"],
    )
    def list(self, request: Request) -> Response:
        filter_serializer = CaseFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        qs = CaseQueryService.get_filtered_queryset(request.user, filter_serializer.validated_data)
        return Response(CaseListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Open a new case",
        request=CaseCreateSerializer,
        responses={201: CaseDetailSerializer, 400: OpenApiResponse(description="Validation error.")},
        tags=["Cases"],
    )
    def create(self, request: Request) -> Response:
        serializer = CaseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        case = CaseCreationService.create_case(serializer.validated_data, request.user)
        case = CaseQueryService.get_case_detail(request.user, case.pk)
        return Response(CaseDetailSerializer(case).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve case details",
        responses={200: CaseDetailSerializer, 404: OpenApiResponse(description="Case not found.")},
        tags=["Cases"],
    )
    def retrieve(self, request: Request, pk: int = None) -> Response:
        return self._detail(request, pk)

    @extend_schema(
        summary="Partially update case",
        request=CaseUpdateSerializer,
        responses={
            200: CaseDetailSerializer,
            403: OpenApiResponse(description="Not editable by this officer in the current status."),
        },
        tags=["Cases"],
    )
    def partial_update(self, request: Request, pk: int = None) -> Response:
        serializer = CaseUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CaseCreationService.update_case(pk, serializer.validated_data, request.user)
        return self._detail(request, pk)

    @extend_schema(
        summary="Delete a case",
        responses={204: None, 403: OpenApiResponse(description="Admin only.")},
        tags=["Cases"],
    )
    def destroy(self, request: Request, pk: int = None) -> Response:
        CaseCreationService.delete_case(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ── Workflow ─────────────────────────────────────────────────────

    @extend_schema(summary="Submit (or resubmit) a case", request=None, responses=_TRANSITION_RESPONSES, tags=["Cases – Workflow"])
    @action(detail=True, methods=["post"], url_path="submit")
    def submit(self, request: Request, pk: int = None) -> Response:
        CaseWorkflowService.submit_case(pk, request.user)
        return self._detail(request, pk)

    @extend_schema(summary="Start command review", request=None, responses=_TRANSITION_RESPONSES, tags=["Cases – Workflow"])
    @action(detail=True, methods=["post"], url_path="start-review")
    def start_review(self, request: Request, pk: int = None) -> Response:
        CaseWorkflowService.start_review(pk, request.user)
        return self._detail(request, pk)

    @extend_schema(summary="Approve and assign to the lead", request=CaseAssignSerializer, responses=_TRANSITION_RESPONSES, tags=["Cases – Workflow"])
    @action(detail=True, methods=["post"], url_path="assign")
    def assign(self, request: Request, pk: int = None) -> Response:
        serializer = CaseAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CaseWorkflowService.assign_lead(
            pk,
            request.user,
            lead_investigator=serializer.validated_data.get("lead_investigator"),
            message=serializer.validated_data["message"],
        )
        return self._detail(request, pk)

    @extend_schema(summary="Return to the reporting officer", request=CaseReturnSerializer, responses=_TRANSITION_RESPONSES, tags=["Cases – Workflow"])
    @action(detail=True, methods=["post"], url_path="return", url_name="return")
    def return_case(self, request: Request, pk: int = None) -> Response:
        serializer = CaseReturnSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CaseWorkflowService.return_case(pk, request.user, serializer.validated_data["reason"])
        return self._detail(request, pk)

    @extend_schema(summary="Start the investigation", request=None, responses=_TRANSITION_RESPONSES, tags=["Cases – Workflow"])
    @action(detail=True, methods=["post"], url_path="start-work")
    def start_work(self, request: Request, pk: int = None) -> Response:
        CaseWorkflowService.start_work(pk, request.user)
        return self._detail(request, pk)

    @extend_schema(summary="Request closure", request=CaseMessageSerializer, responses=_TRANSITION_RESPONSES, tags=["Cases – Workflow"])
    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request: Request, pk: int = None) -> Response:
        serializer = CaseMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CaseWorkflowService.complete_case(pk, request.user, serializer.validated_data["message"])
        return self._detail(request, pk)

    @extend_schema(summary="Reopen a case pending closure", request=CaseMessageSerializer, responses=_TRANSITION_RESPONSES, tags=["Cases – Workflow"])
    @action(detail=True, methods=["post"], url_path="reopen")
    def reopen(self, request: Request, pk: int = None) -> Response:
        serializer = CaseMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CaseWorkflowService.reopen_case(pk, request.user, serializer.validated_data["message"])
        return self._detail(request, pk)

    @extend_schema(summary="Close a case", request=CaseMessageSerializer, responses=_TRANSITION_RESPONSES, tags=["Cases – Workflow"])
    @action(detail=True, methods=["post"], url_path="close")
    def close(self, request: Request, pk: int = None) -> Response:
        serializer = CaseMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CaseWorkflowService.close_case(pk, request.user, serializer.validated_data["message"])
        return self._detail(request, pk)

    @extend_schema(
        summary="Generic status transition",
        description="Validated against the case state machine and the caller's role on the case.",
        request=CaseTransitionSerializer,
        responses=_TRANSITION_RESPONSES,
        tags=["Cases – Workflow"],
    )
    @action(detail=True, methods=["post"], url_path="transition")
    def transition(self, request: Request, pk: int = None) -> Response:
        serializer = CaseTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        CaseWorkflowService.transition_state(
            pk,
            serializer.validated_data["target_status"],
            request.user,
            serializer.validated_data["message"],
        )
        return self._detail(request, pk)

    @extend_schema(summary="Case audit trail", responses={200: CaseStatusLogSerializer(many=True)}, tags=["Cases"])
    @action(detail=True, methods=["get"], url_path="status-log")
    def status_log(self, request: Request, pk: int = None) -> Response:
        case = CaseQueryService.get_case_detail(request.user, pk)
        return Response(CaseStatusLogSerializer(case.status_logs.all(), many=True).data)
