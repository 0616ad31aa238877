from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from ..exceptions import NotFoundError
from ..models import Application, Requirement
from ..policies import REASON_MESSAGES, MatchingPolicy
from ..serializers import ApplicationSerializer, ApplySerializer, RequirementSerializer
from .. import services


class RequirementCloseView(APIView):
    """
    POST /api/collaborations/requirements/<id>/close/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, requirement_id):
        requirement = services.force_close_requirement(requirement_id, request.user)
        return Response(RequirementSerializer(requirement).data)


class RequirementEligibilityView(APIView):
    """
    GET /api/collaborations/requirements/<id>/eligibility/

    UI gate only; the apply endpoint re-checks everything at write time.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, requirement_id):
        requirement = Requirement.objects.filter(pk=requirement_id).first()
        if requirement is None:
            raise NotFoundError("Requirement not found.")

        existing = Application.objects.active().filter(
            requirement=requirement,
            applicant_id=request.user.pk,
        )
        can_apply, reason = MatchingPolicy.check_apply(requirement, request.user, existing)

        return Response({
            "can_apply": can_apply,
            "reason": reason or None,
            "message": REASON_MESSAGES.get(reason, ""),
        })


class ApplyToRequirementView(APIView):
    """
    POST /api/collaborations/requirements/<id>/apply/
    Body: { "message": "..." }
    """
    permission_classes = [IsAuthenticated]
    throttle_scope = "collab-apply"

    def post(self, request, requirement_id):
        serializer = ApplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        application = services.submit_application(
            requirement_id,
            request.user,
            serializer.validated_data["message"],
        )
        return Response(ApplicationSerializer(application).data, status=status.HTTP_201_CREATED)


class RequirementApplicationsView(APIView):
    """
    GET /api/collaborations/requirements/<id>/applications/   (creator only)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, requirement_id):
        qs = services.list_applications_for_requirement(requirement_id, request.user)

        status_filter = request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)

        return Response(ApplicationSerializer(qs, many=True).data)
