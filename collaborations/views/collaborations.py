from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework import status

from ..serializers import (
    CollaborationCreateSerializer,
    CollaborationSerializer,
    CollaborationUpdateSerializer,
    RequirementInputSerializer,
    RequirementSerializer,
)
from ..policies import MatchingPolicy
from .. import services
from .pagination import CollaborationPagination

BROWSE_FILTERS = ("status", "q", "role", "skill", "creator")


class CollaborationListCreateView(APIView):
    """
    GET  /api/collaborations/?status=&q=&role=&skill=&creator=&limit=&offset=
    POST /api/collaborations/
    """
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request):
        filters = {key: request.query_params.get(key) for key in BROWSE_FILTERS}
        qs = services.list_collaborations(filters)

        paginator = CollaborationPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        serializer = CollaborationSerializer(page, many=True, context={"request": request})
        return paginator.get_paginated_response(serializer.data)

    def post(self, request):
        serializer = CollaborationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        collaboration = services.create_collaboration(
            creator=request.user,
            title=data["title"],
            description=data.get("description", ""),
            requirements=data["requirements"],
        )
        return Response(
            CollaborationSerializer(collaboration, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )


class UserCollaborationsView(APIView):
    """
    GET /api/collaborations/user/<creator_id>/

    Applications are included only when the caller is that creator.
    """
    permission_classes = [AllowAny]

    def get(self, request, creator_id):
        qs = services.list_user_collaborations(creator_id)
        is_owner = request.user.is_authenticated and request.user.pk == creator_id
        if is_owner:
            qs = qs.prefetch_related("requirements__applications")

        serializer = CollaborationSerializer(
            qs,
            many=True,
            context={"request": request, "include_applications": is_owner},
        )
        return Response(serializer.data)


class MyCollaborationsView(APIView):
    """
    GET /api/collaborations/mine/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = (
            services.list_user_collaborations(request.user.pk)
            .prefetch_related("requirements__applications")
        )
        serializer = CollaborationSerializer(
            qs,
            many=True,
            context={"request": request, "include_applications": True},
        )
        return Response(serializer.data)


class CollaborationDetailView(APIView):
    """
    GET   /api/collaborations/<id>/
    PATCH /api/collaborations/<id>/   (creator only: title, description)
    """
    permission_classes = [IsAuthenticatedOrReadOnly]

    def _render(self, request, collaboration):
        context = {
            "request": request,
            "include_applications": MatchingPolicy.is_creator(request.user, collaboration),
        }
        return CollaborationSerializer(collaboration, context=context).data

    def get(self, request, collaboration_id):
        collaboration = services.get_collaboration(collaboration_id)
        return Response(self._render(request, collaboration))

    def patch(self, request, collaboration_id):
        serializer = CollaborationUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        collaboration = services.update_collaboration(
            collaboration_id, request.user, serializer.validated_data
        )
        return Response(self._render(request, collaboration))


class CollaborationCancelView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, collaboration_id):
        collaboration = services.cancel_collaboration(collaboration_id, request.user)
        return Response(CollaborationSerializer(collaboration, context={"request": request}).data)


class CollaborationCompleteView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, collaboration_id):
        collaboration = services.complete_collaboration(collaboration_id, request.user)
        return Response(CollaborationSerializer(collaboration, context={"request": request}).data)


class RequirementCreateView(APIView):
    """
    POST /api/collaborations/<id>/requirements/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, collaboration_id):
        serializer = RequirementInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        requirement = services.add_requirement(collaboration_id, request.user, serializer.validated_data)
        return Response(RequirementSerializer(requirement).data, status=status.HTTP_201_CREATED)
