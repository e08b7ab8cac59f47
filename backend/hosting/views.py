"""
Views for hosting app.
"""
import logging
from django.conf import settings
from django.db import DatabaseError
from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status
from accounts.permissions import IsAdminForDelete, IsStaffOrAdmin
from entity_meta.site_settings import (
    CredentialsNotFound,
    InvalidCredentialsFormat,
    get_installation_credentials,
)
from installations.utils import update_site_status
from .models import Site
from .serializers import (
    CheckDomainSerializer,
    SiteSerializer,
    SiteStatusSerializer,
    SiteWriteSerializer,
)
from .utils import delete_site, describe_conflict, find_conflicting_site, get_site_stats

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ['id', 'domain', 'status', 'created_at', 'updated_at']


def _int_param(value, default: int) -> int:
    try:
        return max(int(value), 1)
    except (TypeError, ValueError):
        return default


def _invalid(serializer) -> Response:
    return Response(
        {'error': 'Invalid request data', 'details': serializer.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


@api_view(['GET', 'POST'])
def sites_list(request):
    """List sites (paginated, filtered) or register a new one."""
    if request.method == 'GET':
        params = request.query_params
        page = _int_param(params.get('page'), 1)
        limit = min(
            _int_param(params.get('limit'), settings.INSTALLDESK_DEFAULT_PAGE_SIZE),
            settings.INSTALLDESK_MAX_PAGE_SIZE
        )

        sites = Site.objects.select_related('client', 'project').prefetch_related('steps')

        search = params.get('search', '').strip()
        if search:
            sites = sites.filter(
                Q(domain__icontains=search)
                | Q(client__name__icontains=search)
                | Q(project__name__icontains=search)
            )

        status_filter = params.get('status', 'all')
        if status_filter != 'all':
            sites = sites.filter(status=status_filter)

        client_filter = params.get('client', 'all')
        if client_filter != 'all':
            sites = sites.filter(client_id=_int_param(client_filter, 0))

        sort_by = params.get('sort_by', 'created_at')
        if sort_by not in SORTABLE_FIELDS:
            sort_by = 'created_at'
        if params.get('sort_order', 'desc') == 'desc':
            sort_by = f'-{sort_by}'
        sites = sites.order_by(sort_by, '-id')

        total_count = sites.count()
        total_pages = (total_count + limit - 1) // limit
        offset = (page - 1) * limit
        serializer = SiteSerializer(sites[offset:offset + limit], many=True)

        return Response({
            'data': serializer.data,
            'pagination': {
                'page': page,
                'limit': limit,
                'total_count': total_count,
                'total_pages': total_pages,
                'has_next': page < total_pages,
                'has_prev': page > 1,
            },
        })

    serializer = SiteWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    conflict = find_conflicting_site(serializer.validated_data.get('domain'))
    if conflict:
        payload = describe_conflict(conflict)
        payload['error'] = payload.pop('message')
        return Response(payload, status=status.HTTP_409_CONFLICT)

    site = serializer.save(status=Site.STATUS_PENDING)
    logger.info(f"Registered site {site.id} ({site.domain})")
    return Response(SiteSerializer(site).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsStaffOrAdmin, IsAdminForDelete])
def site_detail(request, site_id: int):
    """Get, update, or delete (admin only) a site."""
    if request.method == 'DELETE':
        try:
            delete_site(site_id)
        except Site.DoesNotExist:
            return Response({'error': 'Site not found'}, status=status.HTTP_404_NOT_FOUND)
        except DatabaseError as e:
            logger.error(f"Failed to delete site {site_id}: {e}")
            return Response(
                {'error': 'Internal server error'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        return Response({'message': 'Site deleted successfully'})

    try:
        site = Site.objects.select_related('client', 'project').get(id=site_id)
    except Site.DoesNotExist:
        return Response({'error': 'Site not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(SiteSerializer(site).data)

    serializer = SiteWriteSerializer(site, data=request.data, partial=True)
    if not serializer.is_valid():
        return _invalid(serializer)

    domain = serializer.validated_data.get('domain')
    conflict = find_conflicting_site(domain, exclude_site_id=site.id)
    if conflict:
        payload = describe_conflict(conflict)
        payload['error'] = payload.pop('message')
        return Response(payload, status=status.HTTP_409_CONFLICT)

    site = serializer.save()
    return Response(SiteSerializer(site).data)


@api_view(['PATCH'])
def site_status(request, site_id: int):
    """Set a site's status explicitly."""
    serializer = SiteStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    try:
        site = update_site_status(site_id, serializer.validated_data['status'])
    except Site.DoesNotExist:
        return Response({'error': 'Site not found'}, status=status.HTTP_404_NOT_FOUND)

    return Response({
        'success': True,
        'site': {'id': site.id, 'status': site.status, 'domain': site.domain},
    })


@api_view(['POST'])
def check_domain(request):
    """Check whether a domain is free to use."""
    serializer = CheckDomainSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid(serializer)

    conflict = find_conflicting_site(
        serializer.validated_data['domain'],
        exclude_site_id=serializer.validated_data.get('exclude_site_id')
    )
    if conflict:
        return Response(describe_conflict(conflict))
    return Response({'available': True, 'message': 'Domain is available'})


@api_view(['GET'])
def site_stats(request):
    """Count sites per status."""
    return Response(get_site_stats())


@api_view(['GET'])
def site_credentials(request, site_id: int):
    """Get the admin credentials captured when the site was installed."""
    try:
        credentials = get_installation_credentials(site_id)
    except CredentialsNotFound:
        return Response(
            {'error': 'No credentials found for this site'},
            status=status.HTTP_404_NOT_FOUND
        )
    except InvalidCredentialsFormat as e:
        logger.error(str(e))
        return Response(
            {'error': 'Invalid credentials format'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    return Response(credentials)
