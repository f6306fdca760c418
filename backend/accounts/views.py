"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``LoginView``      — POST /auth/login/
- ``MeView``         — GET /me/
- ``OfficerViewSet`` — /officers/ (roster, create, profile, update)
- ``RankListView``   — GET /ranks/
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    CustomTokenObtainPairSerializer,
    OfficerCreateSerializer,
    OfficerListSerializer,
    OfficerProfileSerializer,
    OfficerUpdateSerializer,
    RankSerializer,
    RosterFilterSerializer,
    UserDetailSerializer,
)
from .services import OfficerService, RankService


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates an officer by email, badge number or
    username plus password and returns a JWT pair with the profile.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        summary="Log in",
        request=CustomTokenObtainPairSerializer,
        responses={
            200: OpenApiResponse(description="Token pair and officer profile."),
            400: OpenApiResponse(description="Invalid credentials or disabled account."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = dict(serializer.validated_data)
        payload["user"] = UserDetailSerializer(serializer.user).data
        return Response(payload, status=status.HTTP_200_OK)


class MeView(APIView):
    """GET /api/accounts/me/ — the authenticated officer's profile."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current officer",
        responses={200: UserDetailSerializer},
        tags=["Auth"],
    )
    def get(self, request: Request) -> Response:
        return Response(UserDetailSerializer(request.user).data)


# ═══════════════════════════════════════════════════════════════════
#  Officer ViewSet
# ═══════════════════════════════════════════════════════════════════


class OfficerViewSet(viewsets.ViewSet):
    """
    /api/accounts/officers/

    Roster listing for every officer; creation is admin-only and profile
    edits are admin-or-self.  Rules are enforced in ``OfficerService``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Officer roster",
        parameters=[
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Match on display name or badge number."),
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, description="Duty status filter."),
            OpenApiParameter(name="sort", type=str, location=OpenApiParameter.QUERY, description="rank (default), name or badge."),
            OpenApiParameter(name="order", type=str, location=OpenApiParameter.QUERY, description="asc or desc."),
        ],
        responses={200: OfficerListSerializer(many=True)},
        tags=["Officers"],
    )
    def list(self, request: Request) -> Response:
        filter_serializer = RosterFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        qs = OfficerService.list_roster(**filter_serializer.validated_data)
        return Response(OfficerListSerializer(qs, many=True).data)

    @extend_schema(
        summary="Create officer",
        request=OfficerCreateSerializer,
        responses={
            201: UserDetailSerializer,
            403: OpenApiResponse(description="Admin only."),
            409: OpenApiResponse(description="Email or badge already in use."),
        },
        tags=["Officers"],
    )
    def create(self, request: Request) -> Response:
        serializer = OfficerCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        officer = OfficerService.create_officer(request.user, serializer.validated_data)
        return Response(UserDetailSerializer(officer).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Officer profile with stats",
        responses={200: OfficerProfileSerializer, 404: OpenApiResponse(description="Not found.")},
        tags=["Officers"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        profile = OfficerService.get_profile(int(pk))
        return Response(OfficerProfileSerializer(profile).data)

    @extend_schema(
        summary="Update officer profile",
        request=OfficerUpdateSerializer,
        responses={200: UserDetailSerializer, 403: OpenApiResponse(description="Not permitted.")},
        tags=["Officers"],
    )
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = OfficerUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        officer = OfficerService.update_profile(
            request.user, int(pk), dict(serializer.validated_data),
        )
        return Response(UserDetailSerializer(officer).data)


class RankListView(APIView):
    """GET /api/accounts/ranks/ — ranks, most senior first."""

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="List ranks", responses={200: RankSerializer(many=True)}, tags=["Officers"])
    def get(self, request: Request) -> Response:
        return Response(RankSerializer(RankService.list_ranks(), many=True).data)
