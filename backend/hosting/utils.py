"""
Utilities for site management (domain checks, deletion, statistics).
"""
import logging
from typing import Dict, Optional
from django.db import transaction
from django.db.models import Count
from entity_meta.site_settings import delete_all_site_settings
from installations.models import InstallStep
from .models import Site

logger = logging.getLogger(__name__)


def find_conflicting_site(domain: str, exclude_site_id: Optional[int] = None) -> Optional[Site]:
    """
    Find a site that already uses a domain.

    Args:
        domain: Domain to look up
        exclude_site_id: Site to ignore, when checking a site's own update

    Returns:
        The conflicting site (with its client loaded) or None
    """
    if not domain:
        return None
    sites = Site.objects.select_related('client').filter(domain=domain)
    if exclude_site_id:
        sites = sites.exclude(id=exclude_site_id)
    return sites.order_by('id').first()


def describe_conflict(site: Site) -> Dict:
    """Build the response payload describing a domain conflict."""
    client = None
    if site.client:
        client = {'id': site.client.id, 'name': site.client.name}
    owner = site.client.name if site.client else 'another client'
    return {
        'available': False,
        'message': f'Domain is already in use by {owner}',
        'existing_site': {
            'id': site.id,
            'domain': site.domain,
            'client': client,
        },
    }


def delete_site_records(site: Site) -> int:
    """
    Delete a site and its install steps. Must run inside a transaction.

    Returns:
        Number of install steps deleted
    """
    steps_deleted, _ = InstallStep.objects.filter(site=site).delete()
    site.delete()
    return steps_deleted


def purge_site_settings(site_id: int) -> None:
    """Drop the settings of a deleted site; failures are logged only."""
    try:
        delete_all_site_settings(site_id)
    except Exception as e:
        logger.warning(f"Failed to delete settings of deleted site {site_id}: {e}")


def delete_site(site_id: int) -> None:
    """
    Delete a site together with its install steps and settings.

    Steps and site go in one transaction; the settings cleanup runs after it
    and never fails the deletion.

    Raises:
        Site.DoesNotExist: if the site does not exist
    """
    with transaction.atomic():
        site = Site.objects.select_for_update().get(id=site_id)
        steps_deleted = delete_site_records(site)

    logger.info(f"Deleted site {site_id} and {steps_deleted} install steps")
    purge_site_settings(site_id)

def get_site_stats() -> Dict[str, int]:
    """Count sites per status."""
    counts = dict(Site.objects.values_list('status').annotate(total=Count('id')).order_by())
    return {
        'total_sites': sum(counts.values()),
        'pending_sites': counts.get(Site.STATUS_PENDING, 0),
        'in_progress_sites': counts.get(Site.STATUS_IN_PROGRESS, 0),
        'completed_sites': counts.get(Site.STATUS_COMPLETED, 0),
        'failed_sites': counts.get(Site.STATUS_FAILED, 0),
    }
