"""
Serializers for installations app.
"""
from rest_framework import serializers
from .models import InstallStep


class InstallStepSerializer(serializers.ModelSerializer):
    """Serializer for InstallStep model. step_data is never exposed."""
    class Meta:
        model = InstallStep
        fields = [
            'id', 'step_type', 'status', 'error_msg', 'step_order',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class StepStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = InstallStep
        fields = ['id', 'step_type', 'status', 'error_msg', 'created_at', 'updated_at']
        read_only_fields = fields


class CompleteInstallationSerializer(serializers.Serializer):
    """Fallback credentials supplied by the caller when completing."""
    domain = serializers.CharField(required=False, allow_blank=True, default='')
    adminEmail = serializers.CharField(required=False, allow_blank=True, default='')
    adminPassword = serializers.CharField(required=False, allow_blank=True, default='', trim_whitespace=False)


class StartStepSerializer(serializers.Serializer):
    step_type = serializers.ChoiceField(choices=InstallStep.REGULAR_TYPES)


class StepResultSerializer(serializers.Serializer):
    step_type = serializers.ChoiceField(choices=InstallStep.REGULAR_TYPES)
    status = serializers.ChoiceField(choices=[InstallStep.STATUS_SUCCESS, InstallStep.STATUS_FAILED])
    error_msg = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class InstallationCreateSerializer(serializers.Serializer):
    client_id = serializers.IntegerField()
    project_id = serializers.IntegerField()
    domain = serializers.CharField(max_length=255)
    session_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_domain(self, value):
        return value.strip().lower()


class SessionDataSerializer(serializers.Serializer):
    """
    Wizard data staged on the PRE_INSTALLATION step, in the wizard's own
    key format. Only the declared keys are staged; any others are dropped.
    """
    projectId = serializers.IntegerField()
    clientId = serializers.IntegerField(required=False, allow_null=True)
    domain = serializers.CharField(required=False, allow_blank=True)
    adminEmail = serializers.EmailField(required=False, allow_blank=True)
    adminPassword = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    currentStep = serializers.CharField(required=False, allow_blank=True)


class InstallationSessionSerializer(serializers.Serializer):
    step_data = SessionDataSerializer()
