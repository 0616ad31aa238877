from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from ..serializers import ApplicationSerializer, DecisionSerializer, MyApplicationSerializer
from .. import services


class DecideApplicationView(APIView):
    """
    POST /api/collaborations/applications/<id>/decide/
    Body: { "decision": "accept" | "reject" }
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, application_id):
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        application = services.decide(
            application_id,
            serializer.validated_data["decision"],
            request.user,
        )
        return Response(ApplicationSerializer(application).data)


class MyApplicationsView(APIView):
    """
    GET /api/collaborations/applications/mine/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = services.list_applications_for_applicant(request.user)
        return Response(MyApplicationSerializer(qs, many=True).data)
