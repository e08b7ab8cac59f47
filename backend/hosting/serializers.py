"""
Serializers for hosting app.
"""
import re
from rest_framework import serializers
from clients.models import Client
from clients.serializers import ClientSummarySerializer
from installations.serializers import InstallStepSerializer
from projects.models import Project
from projects.serializers import ProjectSerializer
from .models import Site

DOMAIN_REGEX = re.compile(r'^([a-z0-9]+(-[a-z0-9]+)*\.)+[a-z]{2,}$', re.IGNORECASE)


def validate_domain_format(value):
    if value and not DOMAIN_REGEX.match(value):
        raise serializers.ValidationError(
            'Invalid domain format. Please enter a valid domain name (e.g., example.com)'
        )
    return value


class SiteSerializer(serializers.ModelSerializer):
    """Serializer for Site model with its relations."""
    client = ClientSummarySerializer(read_only=True)
    project = ProjectSerializer(read_only=True)
    steps = InstallStepSerializer(many=True, read_only=True)

    class Meta:
        model = Site
        fields = [
            'id', 'domain', 'status', 'installer_site_id', 'client', 'project',
            'steps', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class SiteWriteSerializer(serializers.ModelSerializer):
    """Input for creating or editing a site."""
    client_id = serializers.PrimaryKeyRelatedField(source='client', queryset=Client.objects.all())
    project_id = serializers.PrimaryKeyRelatedField(source='project', queryset=Project.objects.all())
    domain = serializers.CharField(
        max_length=255, required=False, allow_blank=True, allow_null=True,
        validators=[validate_domain_format]
    )

    class Meta:
        model = Site
        fields = ['client_id', 'project_id', 'domain']

    def validate_domain(self, value):
        return value.strip().lower() if value else None


class SiteStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Site.STATUS_CHOICES)


class CheckDomainSerializer(serializers.Serializer):
    domain = serializers.CharField(max_length=255)
    exclude_site_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_domain(self, value):
        return value.strip().lower()
