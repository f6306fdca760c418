from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import AnnouncementCreateSerializer, AnnouncementSerializer, ReadReceiptSerializer
from .services import AnnouncementService


class AnnouncementViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="List announcements", responses={200: AnnouncementSerializer(many=True)}, tags=["Announcements"])
    def list(self, request: Request) -> Response:
        qs = AnnouncementService.list_for_user(request.user)
        return Response(AnnouncementSerializer(qs, many=True).data)

    @extend_schema(
        summary="Publish an announcement",
        request=AnnouncementCreateSerializer,
        responses={201: AnnouncementSerializer, 403: OpenApiResponse(description="Admin only.")},
        tags=["Announcements"],
    )
    def create(self, request: Request) -> Response:
        serializer = AnnouncementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        announcement = AnnouncementService.create_announcement(serializer.validated_data, request.user)
        announcement = AnnouncementService.get_for_user(request.user, announcement.pk)
        return Response(AnnouncementSerializer(announcement).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Retrieve an announcement", responses={200: AnnouncementSerializer}, tags=["Announcements"])
    def retrieve(self, request: Request, pk: int = None) -> Response:
        return Response(AnnouncementSerializer(AnnouncementService.get_for_user(request.user, pk)).data)

    @extend_schema(summary="Delete an announcement", responses={204: None}, tags=["Announcements"])
    def destroy(self, request: Request, pk: int = None) -> Response:
        AnnouncementService.delete_announcement(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(summary="Mark as read", request=None, responses={200: AnnouncementSerializer}, tags=["Announcements"])
    @action(detail=True, methods=["post"], url_path="read")
    def read(self, request: Request, pk: int = None) -> Response:
        AnnouncementService.mark_as_read(pk, request.user)
        return Response(AnnouncementSerializer(AnnouncementService.get_for_user(request.user, pk)).data)

    @extend_schema(summary="Who has read it", responses={200: ReadReceiptSerializer(many=True)}, tags=["Announcements"])
    @action(detail=True, methods=["get"], url_path="receipts")
    def receipts(self, request: Request, pk: int = None) -> Response:
        return Response(ReadReceiptSerializer(AnnouncementService.read_receipts(pk, request.user), many=True).data)

    @extend_schema(
        summary="Unread announcement count",
        responses={200: {"type": "object", "properties": {"unread": {"type": "integer"}}}},
        tags=["Announcements"],
    )
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request: Request) -> Response:
        return Response({"unread": AnnouncementService.unread_count(request.user)})
