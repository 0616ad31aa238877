from rest_framework import serializers

from users.serializers import PublicUserSerializer
from .models import Application, Collaboration, Requirement
from .services import derive_progress, is_fully_staffed
from .services.applications import DECISIONS
from .state_machine import get_allowed_transitions


class ApplicationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Application
        fields = [
            'id',
            'requirement',
            'applicant',
            'applicant_name',
            'applicant_avatar',
            'message',
            'status',
            'applied_at',
            'decided_at',
        ]
        read_only_fields = fields


class RequirementSerializer(serializers.ModelSerializer):
    collaboration_id = serializers.IntegerField(read_only=True)
    remaining = serializers.IntegerField(read_only=True)
    progress = serializers.SerializerMethodField()

    class Meta:
        model = Requirement
        fields = [
            'id',
            'collaboration_id',
            'role',
            'quantity_needed',
            'quantity_filled',
            'remaining',
            'progress',
            'budget',
            'timing',
            'location',
            'skills',
            'description',
            'status',
            'position',
        ]
        read_only_fields = fields

    def get_progress(self, obj):
        return derive_progress(obj)


class RequirementWithApplicationsSerializer(RequirementSerializer):
    """Creator's view of a requirement: includes everyone who applied."""
    applications = ApplicationSerializer(many=True, read_only=True)

    class Meta(RequirementSerializer.Meta):
        fields = RequirementSerializer.Meta.fields + ['applications']
        read_only_fields = fields


class CollaborationSerializer(serializers.ModelSerializer):
    creator = PublicUserSerializer(read_only=True)
    requirements = serializers.SerializerMethodField()
    is_fully_staffed = serializers.SerializerMethodField()
    allowed_transitions = serializers.SerializerMethodField()

    class Meta:
        model = Collaboration
        fields = [
            'id',
            'title',
            'description',
            'creator',
            'status',
            'created_at',
            'updated_at',
            'is_fully_staffed',
            'allowed_transitions',
            'requirements',
        ]
        read_only_fields = fields

    def get_requirements(self, obj):
        if self.context.get("include_applications"):
            serializer_class = RequirementWithApplicationsSerializer
        else:
            serializer_class = RequirementSerializer
        return serializer_class(obj.requirements.all(), many=True, context=self.context).data

    def get_is_fully_staffed(self, obj):
        return is_fully_staffed(obj)

    def get_allowed_transitions(self, obj):
        return get_allowed_transitions(obj)


class RequirementInputSerializer(serializers.Serializer):
    role = serializers.CharField(max_length=120)
    quantity_needed = serializers.IntegerField(min_value=1)
    budget = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    timing = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    skills = serializers.ListField(
        child=serializers.CharField(max_length=80),
        required=False,
        default=list,
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")


class CollaborationCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    # Emptiness is checked by the service so the error carries its domain code
    requirements = RequirementInputSerializer(many=True, allow_empty=True)


class CollaborationUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)


class ApplySerializer(serializers.Serializer):
    # Blank is allowed here; the ledger raises EmptyMessageError for it
    message = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, default="")


class DecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=DECISIONS)


class CollaborationSummarySerializer(serializers.ModelSerializer):
    creator = PublicUserSerializer(read_only=True)

    class Meta:
        model = Collaboration
        fields = ['id', 'title', 'status', 'creator']
        read_only_fields = fields


class MyApplicationSerializer(ApplicationSerializer):
    """Applicant's own application, with the role and project it targets."""
    requirement = RequirementSerializer(read_only=True)
    collaboration = CollaborationSummarySerializer(source='requirement.collaboration', read_only=True)

    class Meta(ApplicationSerializer.Meta):
        fields = ApplicationSerializer.Meta.fields + ['collaboration']
        read_only_fields = fields
