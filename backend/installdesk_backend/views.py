"""
Project level views for InstallDesk.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response
from clients.models import Client
from hosting.models import Site

RECENT_LIMIT = 5


@api_view(['GET'])
def dashboard_stats(request):
    """Headline counts plus the most recent sites and active clients."""
    recent_sites = Site.objects.select_related('client', 'project').order_by('-created_at', '-id')[:RECENT_LIMIT]
    recent_clients = Client.objects.filter(active=True).order_by('-created_at', '-id')[:RECENT_LIMIT]

    return Response({
        'active_clients': Client.objects.filter(active=True).count(),
        'active_sites': Site.objects.filter(status__in=Site.ACTIVE_STATUSES).count(),
        'recent_sites': [
            {
                'id': site.id,
                'domain': site.domain,
                'status': site.status,
                'client': {'id': site.client.id, 'name': site.client.name} if site.client else None,
                'project': {'name': site.project.name},
                'created_at': site.created_at,
            }
            for site in recent_sites
        ],
        'recent_clients': [
            {'id': client.id, 'name': client.name, 'created_at': client.created_at}
            for client in recent_clients
        ],
    })
