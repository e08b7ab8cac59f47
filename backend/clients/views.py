"""
Views for clients app.
"""
import logging
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
from .models import Client
from .serializers import ClientSerializer, ClientUpdateSerializer
from .utils import get_client_stats

logger = logging.getLogger(__name__)


def _invalid(serializer) -> Response:
    return Response(
        {'error': 'Invalid request data', 'details': serializer.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


@api_view(['GET', 'POST'])
def clients_list(request):
    """List clients or create a new one."""
    if request.method == 'GET':
        clients = Client.objects.all()
        active = request.query_params.get('active')
        if active in ('true', 'false'):
            clients = clients.filter(active=active == 'true')
        serializer = ClientSerializer(clients, many=True)
        return Response(serializer.data)

    serializer = ClientSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return _invalid(serializer)


@api_view(['GET', 'PUT', 'PATCH'])
def client_detail(request, client_id: int):
    """Get a client, update it (PUT), or switch it on or off (PATCH)."""
    try:
        client = Client.objects.get(id=client_id)
    except Client.DoesNotExist:
        return Response({'error': 'Client not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(ClientSerializer(client).data)

    if request.method == 'PUT':
        serializer = ClientUpdateSerializer(client, data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)
        client = serializer.save()
        return Response(ClientSerializer(client).data)

    active = request.data.get('active') if isinstance(request.data, dict) else None
    if not isinstance(active, bool):
        return Response(
            {'error': 'Active status must be a boolean'},
            status=status.HTTP_400_BAD_REQUEST
        )
    client.active = active
    client.save(update_fields=['active', 'updated_at'])
    logger.info(f"Client {client.id} {'activated' if active else 'deactivated'}")
    return Response(ClientSerializer(client).data)


@api_view(['GET'])
def client_stats(request):
    """Client counts for the clients dashboard."""
    return Response(get_client_stats())
