"""
Views for installations app.
"""
import logging
from django.db import DatabaseError
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status
from accounts.permissions import IsAdminForDelete, IsStaffOrAdmin
from clients.models import Client
from hosting.models import Site
from hosting.serializers import SiteSerializer
from hosting.utils import delete_site
from projects.models import Project
from .models import InstallStep
from .serializers import (
    CompleteInstallationSerializer,
    InstallationCreateSerializer,
    InstallationSessionSerializer,
    InstallStepSerializer,
    StartStepSerializer,
    StepResultSerializer,
)
from .utils import (
    StepStateConflict,
    aggregate_status,
    complete_installation,
    create_installation,
    create_installation_session,
    delete_installation_session,
    get_installation_session,
    get_site_with_relations,
    regular_steps,
    report_step_result,
    start_step,
    update_installation_session,
)

logger = logging.getLogger(__name__)


def _invalid(serializer) -> Response:
    return Response(
        {'error': 'Invalid request data', 'details': serializer.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


def _server_error() -> Response:
    return Response(
        {'error': 'Internal server error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _session_id(request):
    try:
        return int(request.query_params.get('session_id', ''))
    except ValueError:
        return None


@api_view(['POST'])
def installations_list(request):
    """Start the installation of a site."""
    serializer = InstallationCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    data = serializer.validated_data
    try:
        site = create_installation(
            client_id=data['client_id'],
            project_id=data['project_id'],
            domain=data['domain'],
            session_id=data.get('session_id'),
        )
    except Client.DoesNotExist:
        return Response({'error': 'Client not found'}, status=status.HTTP_400_BAD_REQUEST)
    except Project.DoesNotExist:
        return Response({'error': 'Project not found'}, status=status.HTTP_400_BAD_REQUEST)
    except Site.DoesNotExist:
        return Response({'error': 'Session site not found'}, status=status.HTTP_404_NOT_FOUND)

    return Response(SiteSerializer(site).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsStaffOrAdmin, IsAdminForDelete])
def installation_detail(request, site_id: int):
    """Get an installation, or delete it (admin only)."""
    if request.method == 'DELETE':
        try:
            delete_site(site_id)
        except Site.DoesNotExist:
            return Response({'error': 'Installation not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'message': 'Installation deleted successfully'})

    try:
        site = get_site_with_relations(site_id)
    except Site.DoesNotExist:
        return Response({'error': 'Installation not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(SiteSerializer(site).data)


@api_view(['POST'])
def installation_complete(request, site_id: int):
    """Mark an installation as completed and keep its admin credentials."""
    serializer = CompleteInstallationSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    try:
        site = complete_installation(site_id, serializer.validated_data)
    except Site.DoesNotExist:
        return Response({'error': 'Installation not found'}, status=status.HTTP_404_NOT_FOUND)
    except DatabaseError as e:
        logger.error(f"Completing installation {site_id} failed: {e}")
        return _server_error()

    return Response({
        'message': 'Installation completed successfully',
        'site': SiteSerializer(site).data,
    })


@api_view(['GET', 'POST'])
def installation_steps(request, site_id: int):
    """List the regular steps of an installation, or start one of them."""
    if request.method == 'GET':
        serializer = InstallStepSerializer(regular_steps(site_id), many=True)
        return Response(serializer.data)

    if not isinstance(request.data, dict) or not request.data.get('step_type'):
        return Response({'error': 'Step type is required'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = StartStepSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    try:
        step = start_step(site_id, serializer.validated_data['step_type'])
    except InstallStep.DoesNotExist:
        return Response({'error': 'Step not found'}, status=status.HTTP_404_NOT_FOUND)
    except StepStateConflict as e:
        return Response(
            {'error': str(e), 'step': InstallStepSerializer(e.step).data},
            status=status.HTTP_409_CONFLICT
        )

    return Response(InstallStepSerializer(step).data)


@api_view(['POST'])
def installation_step_report(request, site_id: int):
    """Record the outcome of a running step (called by the provisioning worker)."""
    serializer = StepResultSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    data = serializer.validated_data
    try:
        step = report_step_result(site_id, data['step_type'], data['status'], data.get('error_msg'))
    except InstallStep.DoesNotExist:
        return Response({'error': 'Step not found'}, status=status.HTTP_404_NOT_FOUND)
    except StepStateConflict as e:
        return Response(
            {'error': str(e), 'step': InstallStepSerializer(e.step).data},
            status=status.HTTP_409_CONFLICT
        )

    return Response(InstallStepSerializer(step).data)


@api_view(['GET'])
def installation_steps_status(request, site_id: int):
    """Aggregated progress of an installation, polled by the tracker."""
    try:
        report = aggregate_status(site_id)
    except Site.DoesNotExist:
        return Response({'error': 'Installation not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response({'success': True, **report})


@api_view(['GET', 'POST', 'PUT', 'DELETE'])
def installation_session(request):
    """Create, read, update or discard an installation wizard session."""
    if request.method == 'POST':
        serializer = InstallationSessionSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)
        try:
            site, step = create_installation_session(serializer.validated_data['step_data'])
        except (Project.DoesNotExist, Client.DoesNotExist):
            return Response(
                {'error': 'Project or client not found'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return Response({
            'session_id': site.id,
            'step_id': step.id,
            'message': 'Installation session created successfully',
        }, status=status.HTTP_201_CREATED)

    session_id = _session_id(request)
    if session_id is None:
        return Response({'error': 'Session ID is required'}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'GET':
        try:
            step = get_installation_session(session_id)
        except InstallStep.DoesNotExist:
            return Response(
                {'error': 'Installation session not found'},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response({
            'session_id': step.site_id,
            'step_id': step.id,
            'step_data': step.step_data,
            'site': SiteSerializer(step.site).data,
        })

    if request.method == 'PUT':
        serializer = InstallationSessionSerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid(serializer)
        try:
            update_installation_session(session_id, serializer.validated_data['step_data'])
        except InstallStep.DoesNotExist:
            return Response(
                {'error': 'Installation session not found'},
                status=status.HTTP_404_NOT_FOUND
            )
        except Client.DoesNotExist:
            return Response({'error': 'Client not found'}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'message': 'Installation session updated successfully'})

    try:
        delete_installation_session(session_id)
    except (Site.DoesNotExist, InstallStep.DoesNotExist):
        return Response({'error': 'Installation session not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response({'message': 'Installation session deleted successfully'})
