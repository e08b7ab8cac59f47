"""
Installation lifecycle: sessions, step transitions, completion and the
aggregated installation status of a site.
"""
import json
import logging
from typing import Dict, List, Optional, Tuple
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from clients.models import Client
from entity_meta.site_settings import CREDENTIAL_FIELDS, store_installation_credentials
from hosting.models import Site
from hosting.utils import delete_site_records, purge_site_settings
from projects.models import Project
from .models import InstallStep
from .serializers import StepStatusSerializer

logger = logging.getLogger(__name__)


class StepStateConflict(Exception):
    """The requested step transition is not allowed from the step's current status."""

    def __init__(self, message: str, step: InstallStep):
        super().__init__(message)
        self.step = step


def get_site_with_relations(site_id: int) -> Site:
    """Load a site with client, project and steps."""
    return (
        Site.objects
        .select_related('client', 'project')
        .prefetch_related('steps')
        .get(id=site_id)
    )


def regular_steps(site_id: int):
    """Steps that count towards user visible progress, in creation order."""
    return (
        InstallStep.objects
        .filter(site_id=site_id)
        .exclude(step_type=InstallStep.TYPE_PRE_INSTALLATION)
        .order_by('id')
    )


# Status aggregation

def compute_overall_status(total: int, completed: int, failed: int, in_progress: int) -> str:
    """Overall step status; the first matching rule wins."""
    if failed > 0:
        return InstallStep.STATUS_FAILED
    if in_progress > 0:
        return InstallStep.STATUS_IN_PROGRESS
    if total > 0 and completed == total:
        return InstallStep.STATUS_SUCCESS
    return InstallStep.STATUS_PENDING


def progress_percentage(completed: int, total: int) -> int:
    """Completed share of total as a whole percent, halves rounded up."""
    if total <= 0:
        return 0
    return (completed * 200 + total) // (total * 2)


def aggregate_status(site_id: int) -> Dict:
    """
    Roll up the regular install steps of a site.

    Returns:
        Dict with overallStatus, isComplete, progress counts and the steps

    Raises:
        Site.DoesNotExist: if the site does not exist
    """
    if not Site.objects.filter(id=site_id).exists():
        raise Site.DoesNotExist(f"Site {site_id} does not exist")

    steps = list(regular_steps(site_id))
    statuses = [step.status for step in steps]
    total = len(statuses)
    completed = statuses.count(InstallStep.STATUS_SUCCESS)
    failed = statuses.count(InstallStep.STATUS_FAILED)
    in_progress = statuses.count(InstallStep.STATUS_IN_PROGRESS)
    pending = statuses.count(InstallStep.STATUS_PENDING)

    overall_status = compute_overall_status(total, completed, failed, in_progress)

    return {
        'siteId': site_id,
        'overallStatus': overall_status,
        'isComplete': overall_status == InstallStep.STATUS_SUCCESS,
        'progress': {
            'total': total,
            'completed': completed,
            'failed': failed,
            'inProgress': in_progress,
            'pending': pending,
            'percentage': progress_percentage(completed, total),
        },
        'steps': StepStatusSerializer(steps, many=True).data,
    }


# Completion

def parse_step_data(step_data) -> Dict:
    """
    Read a step payload that may be stored as JSON text or as an object.

    Raises:
        ValueError: if the payload is not a JSON object
    """
    data = json.loads(step_data) if isinstance(step_data, str) else step_data
    if not isinstance(data, dict):
        raise ValueError(f"Step payload is a {type(data).__name__}, expected an object")
    return data


def resolve_credentials(pre_step: Optional[InstallStep], supplied: Dict) -> Dict[str, str]:
    """
    Pick the admin credentials to keep for a completed site.

    Values staged on the PRE_INSTALLATION step win; anything missing there,
    or an unreadable payload, falls back to the values supplied by the caller.
    """
    fallback = {field: supplied.get(field) or '' for field in CREDENTIAL_FIELDS}
    if pre_step is None or not pre_step.step_data:
        return fallback

    try:
        data = parse_step_data(pre_step.step_data)
    except ValueError as e:
        logger.warning(f"Unreadable PRE_INSTALLATION payload for site {pre_step.site_id}: {e}")
        return fallback

    return {
        field: str(data[field]) if data.get(field) else fallback[field]
        for field in CREDENTIAL_FIELDS
    }


def complete_installation(site_id: int, supplied_credentials: Optional[Dict] = None) -> Site:
    """
    Mark a site's installation as completed.

    The status change and the removal of the PRE_INSTALLATION step are one
    transaction. Saving the admin credentials happens after it has committed
    and cannot fail the completion.

    Args:
        site_id: The site ID
        supplied_credentials: domain/adminEmail/adminPassword sent by the caller

    Returns:
        The completed site with its relations

    Raises:
        Site.DoesNotExist: if the site does not exist
    """
    with transaction.atomic():
        site = Site.objects.select_for_update().get(id=site_id)
        pre_step = InstallStep.objects.filter(
            site=site,
            step_type=InstallStep.TYPE_PRE_INSTALLATION
        ).first()

        site.status = Site.STATUS_COMPLETED
        site.save(update_fields=['status', 'updated_at'])

        InstallStep.objects.filter(
            site=site,
            step_type=InstallStep.TYPE_PRE_INSTALLATION
        ).delete()

    logger.info(f"Installation of site {site_id} completed")

    credentials = resolve_credentials(pre_step, supplied_credentials or {})
    if all(credentials.values()):
        try:
            store_installation_credentials(site_id, credentials)
        except Exception as e:
            logger.error(f"Could not store installation credentials for site {site_id}: {e}")
    else:
        logger.info(f"No complete credentials to store for site {site_id}")

    return get_site_with_relations(site_id)


def update_site_status(site_id: int, status: str) -> Site:
    """Set a site's status explicitly."""
    site = Site.objects.get(id=site_id)
    site.status = status
    site.save(update_fields=['status', 'updated_at'])
    logger.info(f"Site {site_id} status set to {status}")
    return site


# Installation creation

def create_missing_steps(site: Site, existing_types: List[str]) -> int:
    """Create the default steps a site does not have yet."""
    missing = [
        InstallStep(site=site, step_type=step_type, status=InstallStep.STATUS_PENDING, step_order=order)
        for order, step_type in enumerate(settings.INSTALLDESK_DEFAULT_STEPS, start=1)
        if step_type not in existing_types
    ]
    InstallStep.objects.bulk_create(missing)
    return len(missing)


def reset_steps(site: Site) -> int:
    """Put every unfinished regular step of a site back to PENDING."""
    return (
        InstallStep.objects
        .filter(site=site)
        .exclude(step_type=InstallStep.TYPE_PRE_INSTALLATION)
        .exclude(status=InstallStep.STATUS_SUCCESS)
        .update(status=InstallStep.STATUS_PENDING, error_msg=None, updated_at=timezone.now())
    )


def create_installation(client_id: int, project_id: int, domain: str,
                        session_id: Optional[int] = None) -> Site:
    """
    Start (or restart) the installation of a site.

    With a session id the wizard's temporary site becomes the installation.
    Otherwise a site already using the domain is reused, and a new site is
    created only when there is none.

    Raises:
        Client.DoesNotExist, Project.DoesNotExist: for unknown references
        Site.DoesNotExist: if the session site does not exist
    """
    with transaction.atomic():
        client = Client.objects.get(id=client_id)
        project = Project.objects.get(id=project_id)

        if session_id:
            site = Site.objects.select_for_update().get(id=session_id)
            site.client = client
            site.project = project
            site.domain = domain
            site.status = Site.STATUS_IN_PROGRESS
            site.save()
            reset_steps(site)
            existing_types = list(regular_steps(site.id).values_list('step_type', flat=True))
            created = create_missing_steps(site, existing_types)
            logger.info(f"Installation session {site.id} promoted, {created} steps created")
        else:
            site = Site.objects.filter(domain=domain).order_by('id').first()
            if site:
                steps = list(site.steps.all())
                statuses = {step.status for step in steps}
                if not statuses & {InstallStep.STATUS_SUCCESS, InstallStep.STATUS_IN_PROGRESS}:
                    reset_steps(site)
                created = create_missing_steps(site, [step.step_type for step in steps])
                logger.info(f"Reusing site {site.id} for {domain}, {created} steps created")
            else:
                site = Site.objects.create(
                    client=client,
                    project=project,
                    domain=domain,
                    status=Site.STATUS_IN_PROGRESS,
                )
                create_missing_steps(site, [])
                logger.info(f"Created site {site.id} for {domain}")

    return get_site_with_relations(site.id)


# Installation sessions (wizard staging)

def create_installation_session(step_data: Dict) -> Tuple[Site, InstallStep]:
    """
    Create a temporary site and its PRE_INSTALLATION step holding the wizard data.

    Raises:
        Project.DoesNotExist, Client.DoesNotExist: for unknown references
    """
    with transaction.atomic():
        project = Project.objects.get(id=step_data['projectId'])
        client = None
        if step_data.get('clientId'):
            client = Client.objects.get(id=step_data['clientId'])

        site = Site.objects.create(
            client=client,
            project=project,
            domain=step_data.get('domain') or None,
            status=Site.STATUS_PENDING,
        )
        step = InstallStep.objects.create(
            site=site,
            step_type=InstallStep.TYPE_PRE_INSTALLATION,
            status=InstallStep.STATUS_IN_PROGRESS,
            step_data=step_data,
        )
    logger.info(f"Installation session {site.id} created")
    return site, step


def get_installation_session(session_id: int) -> InstallStep:
    """
    Raises:
        InstallStep.DoesNotExist: if the session has no PRE_INSTALLATION step
    """
    return (
        InstallStep.objects
        .select_related('site__client', 'site__project')
        .get(site_id=session_id, step_type=InstallStep.TYPE_PRE_INSTALLATION)
    )


def update_installation_session(session_id: int, step_data: Dict) -> None:
    """
    Replace the wizard data of a session, moving the site to a new client if one is given.

    Raises:
        InstallStep.DoesNotExist: if the session has no PRE_INSTALLATION step
        Client.DoesNotExist: for an unknown client
    """
    with transaction.atomic():
        if step_data.get('clientId'):
            client = Client.objects.get(id=step_data['clientId'])
            Site.objects.filter(id=session_id).update(client=client, updated_at=timezone.now())

        updated = InstallStep.objects.filter(
            site_id=session_id,
            step_type=InstallStep.TYPE_PRE_INSTALLATION
        ).update(step_data=step_data, updated_at=timezone.now())
        if updated == 0:
            raise InstallStep.DoesNotExist(f"Installation session {session_id} not found")


def delete_installation_session(session_id: int) -> None:
    """
    Discard a session's temporary site and steps.

    Only a site still staged by the wizard qualifies: it must hold a
    PRE_INSTALLATION step and must not be COMPLETED.

    Raises:
        Site.DoesNotExist: if the site does not exist
        InstallStep.DoesNotExist: if the site is not an open session
    """
    with transaction.atomic():
        site = Site.objects.select_for_update().get(id=session_id)
        staged = InstallStep.objects.filter(
            site=site,
            step_type=InstallStep.TYPE_PRE_INSTALLATION
        ).exists()
        if not staged or site.status == Site.STATUS_COMPLETED:
            raise InstallStep.DoesNotExist(f"Installation session {session_id} not found")
        steps_deleted = delete_site_records(site)

    logger.info(f"Installation session {session_id} discarded with {steps_deleted} steps")
    purge_site_settings(session_id)


# Step transitions

def start_step(site_id: int, step_type: str) -> InstallStep:
    """
    Move a regular step to IN_PROGRESS so a worker can pick it up.

    Raises:
        InstallStep.DoesNotExist: if the site has no such step
        StepStateConflict: if the step is already running or done
    """
    with transaction.atomic():
        step = InstallStep.objects.select_for_update().get(site_id=site_id, step_type=step_type)
        if step.status == InstallStep.STATUS_IN_PROGRESS:
            raise StepStateConflict('Step is already in progress', step)
        if step.status == InstallStep.STATUS_SUCCESS:
            raise StepStateConflict('Step is already completed', step)

        step.status = InstallStep.STATUS_IN_PROGRESS
        step.error_msg = None
        step.save(update_fields=['status', 'error_msg', 'updated_at'])

    logger.info(f"Started {step_type} for site {site_id}")
    return step


def report_step_result(site_id: int, step_type: str, status: str,
                       error_msg: Optional[str] = None) -> InstallStep:
    """
    Record the outcome of a running step, as reported by the worker.

    Raises:
        InstallStep.DoesNotExist: if the site has no such step
        StepStateConflict: if the step is not running
    """
    with transaction.atomic():
        step = InstallStep.objects.select_for_update().get(site_id=site_id, step_type=step_type)
        if step.status != InstallStep.STATUS_IN_PROGRESS:
            raise StepStateConflict('Step is not in progress', step)

        step.status = status
        step.error_msg = (error_msg or 'Step failed') if status == InstallStep.STATUS_FAILED else None
        step.save(update_fields=['status', 'error_msg', 'updated_at'])

    if status == InstallStep.STATUS_FAILED:
        logger.warning(f"{step_type} failed for site {site_id}: {step.error_msg}")
    else:
        logger.info(f"{step_type} succeeded for site {site_id}")
    return step
