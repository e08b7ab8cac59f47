"""
Serializers for clients app.
"""
from rest_framework import serializers
from .models import Client


class ClientSerializer(serializers.ModelSerializer):
    """Serializer for Client model."""
    class Meta:
        model = Client
        fields = [
            'id', 'name', 'type', 'address', 'apartment', 'city', 'state',
            'zip_code', 'country', 'active', 'central_crm_client_id',
            'last_synced_at', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'last_synced_at', 'created_at', 'updated_at']


class ContactNameSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    is_primary = serializers.BooleanField(default=False)


class ClientUpdateSerializer(ClientSerializer):
    """
    Full update of a client.

    A PERSON client sent with contacts is named after its primary contact
    (the first contact when none is marked primary).
    """
    name = serializers.CharField(max_length=255, required=False)
    contacts = ContactNameSerializer(many=True, required=False, write_only=True)

    class Meta(ClientSerializer.Meta):
        fields = ClientSerializer.Meta.fields + ['contacts']

    def validate(self, attrs):
        contacts = attrs.pop('contacts', [])
        if attrs.get('type') == Client.TYPE_PERSON and contacts:
            primary = next((c for c in contacts if c['is_primary']), contacts[0])
            attrs['name'] = f"{primary['first_name']} {primary['last_name']}"
        if not attrs.get('name'):
            raise serializers.ValidationError({'name': 'This field is required.'})
        return attrs


class ClientSummarySerializer(serializers.ModelSerializer):
    """Id and name only, for embedding in site payloads."""
    class Meta:
        model = Client
        fields = ['id', 'name']
