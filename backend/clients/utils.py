"""
Utilities for clients app.
"""
from typing import Dict
from hosting.models import Site
from .models import Client


def get_client_stats() -> Dict[str, int]:
    """Count clients by active flag, and the active sites of active clients."""
    total_clients = Client.objects.count()
    active_clients = Client.objects.filter(active=True).count()
    active_sites = Site.objects.filter(
        client__active=True,
        status__in=Site.ACTIVE_STATUSES
    ).count()
    return {
        'total_clients': total_clients,
        'active_clients': active_clients,
        'inactive_clients': total_clients - active_clients,
        'active_sites': active_sites,
    }
