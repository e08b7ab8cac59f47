"""
Tests for installations app.
"""
import json
from unittest.mock import patch
from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient
from clients.models import Client
from entity_meta.site_settings import get_installation_credentials, store_installation_credentials
from hosting.models import Site
from projects.models import Project
from .models import InstallStep
from .utils import compute_overall_status, progress_percentage, resolve_credentials

User = get_user_model()


class InstallationTestMixin:
    """Shared fixtures for installation tests."""

    def setUp(self):
        self.staff = User.objects.create_user(username='staff', password='testpass123', role=User.ROLE_STAFF)
        self.admin = User.objects.create_user(username='admin', password='testpass123', role=User.ROLE_ADMIN)
        self.client_record = Client.objects.create(name='Acme Corp')
        self.project = Project.objects.create(name='Shop', key='shop', domain='shop.example.com')
        self.site = Site.objects.create(
            client=self.client_record,
            project=self.project,
            domain='acme.example.com',
            status=Site.STATUS_IN_PROGRESS
        )
        self.api = APIClient()
        self.api.force_authenticate(user=self.staff)

    def add_step(self, step_type, status=InstallStep.STATUS_PENDING, step_data=None, site=None):
        return InstallStep.objects.create(
            site=site or self.site,
            step_type=step_type,
            status=status,
            step_data=step_data
        )

    def add_pre_installation(self, step_data):
        return self.add_step(
            InstallStep.TYPE_PRE_INSTALLATION,
            status=InstallStep.STATUS_IN_PROGRESS,
            step_data=step_data
        )


class InstallStepModelTest(InstallationTestMixin, TestCase):
    """Test InstallStep model."""

    def test_one_step_per_site_and_type(self):
        self.add_step(InstallStep.TYPE_DB_CREATION)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                self.add_step(InstallStep.TYPE_DB_CREATION)

    def test_same_type_allowed_on_other_site(self):
        other = Site.objects.create(project=self.project, domain='other.example.com')
        self.add_step(InstallStep.TYPE_DB_CREATION)
        step = self.add_step(InstallStep.TYPE_DB_CREATION, site=other)
        self.assertEqual(step.site, other)


class OverallStatusTest(TestCase):
    """Test the status precedence and percentage rules."""

    def test_failed_wins_over_everything(self):
        self.assertEqual(compute_overall_status(4, 2, 1, 1), InstallStep.STATUS_FAILED)

    def test_in_progress_before_success(self):
        self.assertEqual(compute_overall_status(3, 2, 0, 1), InstallStep.STATUS_IN_PROGRESS)

    def test_all_completed_is_success(self):
        self.assertEqual(compute_overall_status(3, 3, 0, 0), InstallStep.STATUS_SUCCESS)

    def test_no_steps_is_pending(self):
        self.assertEqual(compute_overall_status(0, 0, 0, 0), InstallStep.STATUS_PENDING)

    def test_partially_completed_is_pending(self):
        self.assertEqual(compute_overall_status(3, 2, 0, 0), InstallStep.STATUS_PENDING)

    def test_percentage(self):
        self.assertEqual(progress_percentage(2, 3), 67)
        self.assertEqual(progress_percentage(1, 3), 33)
        self.assertEqual(progress_percentage(1, 8), 13)
        self.assertEqual(progress_percentage(4, 4), 100)
        self.assertEqual(progress_percentage(0, 0), 0)


class AggregateStatusViewTest(InstallationTestMixin, TestCase):
    """Test GET /api/installations/<id>/steps/status-all/."""

    def url(self, site_id=None):
        return f'/api/installations/{site_id or self.site.id}/steps/status-all/'

    def test_zero_steps_is_pending(self):
        self.add_pre_installation({'domain': 'acme.example.com'})
        data = self.api.get(self.url()).json()

        self.assertEqual(data['overallStatus'], 'PENDING')
        self.assertFalse(data['isComplete'])
        self.assertEqual(data['progress']['total'], 0)
        self.assertEqual(data['progress']['percentage'], 0)
        self.assertEqual(data['steps'], [])

    def test_failed_step_makes_installation_failed(self):
        self.add_step(InstallStep.TYPE_DB_CREATION, InstallStep.STATUS_SUCCESS)
        self.add_step(InstallStep.TYPE_CPANEL_ENTRY, InstallStep.STATUS_IN_PROGRESS)
        self.add_step(InstallStep.TYPE_CLOUDFLARE_ENTRY, InstallStep.STATUS_FAILED)

        data = self.api.get(self.url()).json()
        self.assertEqual(data['overallStatus'], 'FAILED')
        self.assertFalse(data['isComplete'])
        self.assertEqual(data['progress']['failed'], 1)
        self.assertEqual(data['progress']['inProgress'], 1)

    def test_all_success_is_complete(self):
        for step_type in InstallStep.REGULAR_TYPES:
            self.add_step(step_type, InstallStep.STATUS_SUCCESS)
        # The staging step does not count towards progress
        self.add_pre_installation({})

        data = self.api.get(self.url()).json()
        self.assertEqual(data['overallStatus'], 'SUCCESS')
        self.assertTrue(data['isComplete'])
        self.assertEqual(data['progress']['total'], 4)
        self.assertEqual(data['progress']['percentage'], 100)

    def test_two_of_three_completed(self):
        self.add_step(InstallStep.TYPE_DB_CREATION, InstallStep.STATUS_SUCCESS)
        self.add_step(InstallStep.TYPE_CPANEL_ENTRY, InstallStep.STATUS_SUCCESS)
        self.add_step(InstallStep.TYPE_CLOUDFLARE_ENTRY, InstallStep.STATUS_PENDING)

        data = self.api.get(self.url()).json()
        self.assertEqual(data['overallStatus'], 'PENDING')
        self.assertEqual(data['progress']['completed'], 2)
        self.assertEqual(data['progress']['pending'], 1)
        self.assertEqual(data['progress']['percentage'], 67)
        self.assertEqual(
            [step['step_type'] for step in data['steps']],
            ['DB_CREATION', 'CPANEL_ENTRY', 'CLOUDFLARE_ENTRY']
        )

    def test_unknown_site(self):
        response = self.api.get(self.url(site_id=999999))
        self.assertEqual(response.status_code, 404)

    def test_requires_authentication(self):
        response = APIClient().get(self.url())
        self.assertEqual(response.status_code, 401)

    def test_database_error_is_json_500(self):
        with patch('installations.views.aggregate_status', side_effect=DatabaseError('connection lost')):
            response = self.api.get(self.url())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Internal server error'})


class ResolveCredentialsTest(InstallationTestMixin, TestCase):
    """Test credential resolution from the staging step."""

    supplied = {'domain': 'req.com', 'adminEmail': 'req@req.com', 'adminPassword': 'reqpass'}

    def test_without_staging_step_uses_supplied_values(self):
        self.assertEqual(resolve_credentials(None, self.supplied), self.supplied)

    def test_missing_fields_fall_back_one_by_one(self):
        step = self.add_pre_installation({'domain': 'a.com', 'adminEmail': ''})
        self.assertEqual(
            resolve_credentials(step, self.supplied),
            {'domain': 'a.com', 'adminEmail': 'req@req.com', 'adminPassword': 'reqpass'}
        )

    def test_non_object_payload_falls_back(self):
        step = self.add_pre_installation('[1, 2, 3]')
        self.assertEqual(resolve_credentials(step, self.supplied), self.supplied)


class CompleteInstallationViewTest(InstallationTestMixin, TestCase):
    """Test POST /api/installations/<id>/complete/."""

    credentials = {'domain': 'a.com', 'adminEmail': 'x@a.com', 'adminPassword': 'p'}

    def url(self, site_id=None):
        return f'/api/installations/{site_id or self.site.id}/complete/'

    def complete(self, body=None, site_id=None):
        return self.api.post(self.url(site_id), body or {}, format='json')

    def assert_completed_without_staging_step(self):
        self.site.refresh_from_db()
        self.assertEqual(self.site.status, Site.STATUS_COMPLETED)
        self.assertFalse(
            InstallStep.objects.filter(site=self.site, step_type=InstallStep.TYPE_PRE_INSTALLATION).exists()
        )

    def test_payload_credentials_are_stored(self):
        self.add_pre_installation(self.credentials)
        response = self.complete()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['message'], 'Installation completed successfully')
        self.assertEqual(response.json()['site']['status'], 'COMPLETED')
        self.assert_completed_without_staging_step()

        response = self.api.get(f'/api/sites/{self.site.id}/credentials/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), self.credentials)

    def test_payload_stored_as_json_text(self):
        self.add_pre_installation(json.dumps(self.credentials))
        self.complete()
        self.assertEqual(get_installation_credentials(self.site.id), self.credentials)

    def test_unparsable_payload_falls_back_to_request(self):
        self.add_pre_installation('{not json')
        supplied = {'domain': 'req.com', 'adminEmail': 'req@req.com', 'adminPassword': 'reqpass'}

        response = self.complete(supplied)
        self.assertEqual(response.status_code, 200)
        self.assert_completed_without_staging_step()
        self.assertEqual(get_installation_credentials(self.site.id), supplied)

    def test_without_staging_step_uses_request_values(self):
        response = self.complete(self.credentials)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(get_installation_credentials(self.site.id), self.credentials)

    def test_incomplete_credentials_are_not_stored(self):
        response = self.complete({'domain': 'a.com', 'adminEmail': 'x@a.com'})
        self.assertEqual(response.status_code, 200)
        response = self.api.get(f'/api/sites/{self.site.id}/credentials/')
        self.assertEqual(response.status_code, 404)

    def test_completing_twice_is_a_no_op(self):
        self.add_pre_installation(self.credentials)
        first = self.complete()
        second = self.complete()

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(second.json()['site']['status'], 'COMPLETED')
        self.assert_completed_without_staging_step()
        self.assertEqual(get_installation_credentials(self.site.id), self.credentials)

    def test_failed_transaction_leaves_no_partial_state(self):
        self.add_pre_installation(self.credentials)
        with patch('django.db.models.query.QuerySet.delete', side_effect=DatabaseError('boom')):
            response = self.complete()

        self.assertEqual(response.status_code, 500)
        self.site.refresh_from_db()
        self.assertEqual(self.site.status, Site.STATUS_IN_PROGRESS)
        self.assertTrue(
            InstallStep.objects.filter(site=self.site, step_type=InstallStep.TYPE_PRE_INSTALLATION).exists()
        )

    def test_credential_capture_failure_is_not_fatal(self):
        self.add_pre_installation(self.credentials)
        with patch('installations.utils.store_installation_credentials', side_effect=DatabaseError('meta down')):
            response = self.complete()

        self.assertEqual(response.status_code, 200)
        self.assert_completed_without_staging_step()

    def test_existing_credentials_are_overwritten(self):
        store_installation_credentials(self.site.id, {'domain': 'old.com', 'adminEmail': 'o@old.com', 'adminPassword': 'old'})
        self.complete(self.credentials)
        self.assertEqual(get_installation_credentials(self.site.id), self.credentials)

    def test_unknown_site(self):
        response = self.complete(site_id=999999)
        self.assertEqual(response.status_code, 404)

    def test_requires_panel_role(self):
        response = APIClient().post(self.url(), {}, format='json')
        self.assertEqual(response.status_code, 401)


class InstallationStepsViewTest(InstallationTestMixin, TestCase):
    """Test listing, starting and reporting steps."""

    def url(self, suffix=''):
        return f'/api/installations/{self.site.id}/steps/{suffix}'

    def test_list_excludes_staging_step(self):
        self.add_pre_installation({})
        self.add_step(InstallStep.TYPE_DB_CREATION)
        self.add_step(InstallStep.TYPE_CPANEL_ENTRY)

        data = self.api.get(self.url()).json()
        self.assertEqual([step['step_type'] for step in data], ['DB_CREATION', 'CPANEL_ENTRY'])
        self.assertNotIn('step_data', data[0])

    def test_start_step(self):
        step = self.add_step(InstallStep.TYPE_DB_CREATION, InstallStep.STATUS_FAILED)
        step.error_msg = 'previous failure'
        step.save()

        response = self.api.post(self.url(), {'step_type': 'DB_CREATION'}, format='json')
        self.assertEqual(response.status_code, 200)
        step.refresh_from_db()
        self.assertEqual(step.status, InstallStep.STATUS_IN_PROGRESS)
        self.assertIsNone(step.error_msg)

    def test_start_requires_step_type(self):
        response = self.api.post(self.url(), {}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Step type is required'})

    def test_start_unknown_step(self):
        response = self.api.post(self.url(), {'step_type': 'DB_CREATION'}, format='json')
        self.assertEqual(response.status_code, 404)

    def test_start_running_step_conflicts(self):
        self.add_step(InstallStep.TYPE_DB_CREATION, InstallStep.STATUS_IN_PROGRESS)
        response = self.api.post(self.url(), {'step_type': 'DB_CREATION'}, format='json')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error'], 'Step is already in progress')

    def test_start_completed_step_conflicts(self):
        self.add_step(InstallStep.TYPE_DB_CREATION, InstallStep.STATUS_SUCCESS)
        response = self.api.post(self.url(), {'step_type': 'DB_CREATION'}, format='json')
        self.assertEqual(response.status_code, 409)

    def test_report_success(self):
        step = self.add_step(InstallStep.TYPE_CPANEL_ENTRY, InstallStep.STATUS_IN_PROGRESS)
        response = self.api.post(
            self.url('report/'),
            {'step_type': 'CPANEL_ENTRY', 'status': 'SUCCESS'},
            format='json'
        )
        self.assertEqual(response.status_code, 200)
        step.refresh_from_db()
        self.assertEqual(step.status, InstallStep.STATUS_SUCCESS)

    def test_report_failure_keeps_error(self):
        step = self.add_step(InstallStep.TYPE_CPANEL_ENTRY, InstallStep.STATUS_IN_PROGRESS)
        self.api.post(
            self.url('report/'),
            {'step_type': 'CPANEL_ENTRY', 'status': 'FAILED', 'error_msg': 'quota exceeded'},
            format='json'
        )
        step.refresh_from_db()
        self.assertEqual(step.status, InstallStep.STATUS_FAILED)
        self.assertEqual(step.error_msg, 'quota exceeded')

        data = self.api.get(self.url('status-all/')).json()
        self.assertEqual(data['overallStatus'], 'FAILED')

    def test_report_on_idle_step_conflicts(self):
        self.add_step(InstallStep.TYPE_CPANEL_ENTRY, InstallStep.STATUS_PENDING)
        response = self.api.post(
            self.url('report/'),
            {'step_type': 'CPANEL_ENTRY', 'status': 'SUCCESS'},
            format='json'
        )
        self.assertEqual(response.status_code, 409)

    def test_report_rejects_non_final_status(self):
        self.add_step(InstallStep.TYPE_CPANEL_ENTRY, InstallStep.STATUS_IN_PROGRESS)
        response = self.api.post(
            self.url('report/'),
            {'step_type': 'CPANEL_ENTRY', 'status': 'PENDING'},
            format='json'
        )
        self.assertEqual(response.status_code, 400)


class CreateInstallationViewTest(InstallationTestMixin, TestCase):
    """Test POST /api/installations/."""

    def create(self, **overrides):
        body = {
            'client_id': self.client_record.id,
            'project_id': self.project.id,
            'domain': 'new.example.com',
        }
        body.update(overrides)
        return self.api.post('/api/installations/', body, format='json')

    def test_new_site_gets_default_steps(self):
        response = self.create()
        self.assertEqual(response.status_code, 201)

        site = Site.objects.get(domain='new.example.com')
        self.assertEqual(site.status, Site.STATUS_IN_PROGRESS)
        self.assertEqual(
            list(site.steps.values_list('step_type', flat=True)),
            ['DB_CREATION', 'CPANEL_ENTRY', 'CLOUDFLARE_ENTRY', 'DIRECTORY_SETUP']
        )

    def test_existing_domain_is_reused_and_reset(self):
        self.add_step(InstallStep.TYPE_DB_CREATION, InstallStep.STATUS_FAILED)
        response = self.create(domain='acme.example.com')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['id'], self.site.id)

        statuses = dict(self.site.steps.values_list('step_type', 'status'))
        self.assertEqual(len(statuses), 4)
        self.assertEqual(statuses['DB_CREATION'], InstallStep.STATUS_PENDING)

    def test_existing_domain_with_progress_is_not_reset(self):
        self.add_step(InstallStep.TYPE_DB_CREATION, InstallStep.STATUS_SUCCESS)
        self.add_step(InstallStep.TYPE_CPANEL_ENTRY, InstallStep.STATUS_FAILED)
        self.create(domain='acme.example.com')

        statuses = dict(self.site.steps.values_list('step_type', 'status'))
        self.assertEqual(statuses['CPANEL_ENTRY'], InstallStep.STATUS_FAILED)

    def test_session_site_is_promoted(self):
        session = Site.objects.create(project=self.project, status=Site.STATUS_PENDING)
        pre =self.add_step(
            InstallStep.TYPE_PRE_INSTALLATION, InstallStep.STATUS_IN_PROGRESS, {'projectId': self.project.id},
            site=session
        )

        response = self.create(session_id=session.id, domain='session.example.com')
        self.assertEqual(response.status_code, 201)
        session.refresh_from_db()
        self.assertEqual(session.domain, 'session.example.com')
        self.assertEqual(session.client, self.client_record)
        self.assertEqual(session.status, Site.STATUS_IN_PROGRESS)
        self.assertEqual(session.steps.count(), 5)
        self.assertTrue(InstallStep.objects.filter(id=pre.id).exists())

    def test_unknown_client(self):
        response = self.create(client_id=999999)
        self.assertEqual(response.status_code, 400)

    def test_missing_domain(self):
        response = self.api.post(
            '/api/installations/',
            {'client_id': self.client_record.id, 'project_id': self.project.id},
            format='json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('domain', response.json()['details'])


class InstallationSessionViewTest(InstallationTestMixin, TestCase):
    """Test the installation wizard session endpoints."""

    url = '/api/installations/session/'

    def test_session_lifecycle(self):
        response = self.api.post(self.url, {
            'step_data': {
                'projectId': self.project.id,
                'domain': 'wizard.example.com',
                'adminEmail': 'admin@wizard.example.com',
                'adminPassword': 'secret',
            }
        }, format='json')
        self.assertEqual(response.status_code, 201)
        session_id = response.json()['session_id']

        data = self.api.get(f'{self.url}?session_id={session_id}').json()
        self.assertEqual(data['step_data']['domain'], 'wizard.example.com')
        self.assertEqual(data['site']['status'], 'PENDING')

        response = self.api.put(f'{self.url}?session_id={session_id}', {
            'step_data': {'projectId': self.project.id, 'clientId': self.client_record.id, 'currentStep': 'review'}
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Site.objects.get(id=session_id).client, self.client_record)

        response = self.api.delete(f'{self.url}?session_id={session_id}')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Site.objects.filter(id=session_id).exists())
        self.assertFalse(InstallStep.objects.filter(site_id=session_id).exists())

    def test_session_then_complete_keeps_staged_credentials(self):
        response = self.api.post(self.url, {
            'step_data': {
                'projectId': self.project.id,
                'domain': 'wizard.example.com',
                'adminEmail': 'admin@wizard.example.com',
                'adminPassword': 'secret',
            }
        }, format='json')
        session_id = response.json()['session_id']

        self.api.post(f'/api/installations/{session_id}/complete/', {}, format='json')
        self.assertEqual(get_installation_credentials(session_id), {
            'domain': 'wizard.example.com',
            'adminEmail': 'admin@wizard.example.com',
            'adminPassword': 'secret',
        })

    def test_invalid_admin_email(self):
        response = self.api.post(self.url, {
            'step_data': {'projectId': self.project.id, 'adminEmail': 'not-an-email'}
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_session_id_required(self):
        response = self.api.get(self.url)
        self.assertEqual(response.status_code, 400)

    def test_update_unknown_session(self):
        response = self.api.put(f'{self.url}?session_id={self.site.id}', {
            'step_data': {'projectId': self.project.id}
        }, format='json')
        self.assertEqual(response.status_code, 404)

    def test_unknown_wizard_keys_are_not_stored(self):
        response = self.api.post(self.url, {
            'step_data': {'projectId': self.project.id, 'domain': 'w.example.com', 'theme': 'dark'}
        }, format='json')
        step = InstallStep.objects.get(id=response.json()['step_id'])
        self.assertEqual(step.step_data, {'projectId': self.project.id, 'domain': 'w.example.com'})

    def test_delete_refuses_completed_site(self):
        self.site.status = Site.STATUS_COMPLETED
        self.site.save()
        self.add_step(InstallStep.TYPE_DB_CREATION, InstallStep.STATUS_SUCCESS)
        store_installation_credentials(self.site.id, {
            'domain': 'acme.example.com', 'adminEmail': 'x@acme.example.com', 'adminPassword': 'p'
        })

        response = self.api.delete(f'{self.url}?session_id={self.site.id}')
        self.assertEqual(response.status_code, 404)
        self.assertTrue(Site.objects.filter(id=self.site.id).exists())
        self.assertEqual(self.site.steps.count(), 1)
        self.assertEqual(get_installation_credentials(self.site.id)['adminPassword'], 'p')

    def test_delete_refuses_site_without_staging_step(self):
        self.add_step(InstallStep.TYPE_DB_CREATION, InstallStep.STATUS_IN_PROGRESS)
        response = self.api.delete(f'{self.url}?session_id={self.site.id}')
        self.assertEqual(response.status_code, 404)
        self.assertTrue(Site.objects.filter(id=self.site.id).exists())

    def test_delete_refuses_completed_site_even_with_staging_step(self):
        self.site.status = Site.STATUS_COMPLETED
        self.site.save()
        self.add_pre_installation({'projectId': self.project.id})
        response = self.api.delete(f'{self.url}?session_id={self.site.id}')
        self.assertEqual(response.status_code, 404)
        self.assertTrue(Site.objects.filter(id=self.site.id).exists())


class InstallationDetailViewTest(InstallationTestMixin, TestCase):
    """Test GET/DELETE /api/installations/<id>/."""

    def test_detail_orders_steps(self):
        InstallStep.objects.create(site=self.site, step_type=InstallStep.TYPE_CPANEL_ENTRY, step_order=2)
        InstallStep.objects.create(site=self.site, step_type=InstallStep.TYPE_DB_CREATION, step_order=1)

        data = self.api.get(f'/api/installations/{self.site.id}/').json()
        self.assertEqual([step['step_type'] for step in data['steps']], ['DB_CREATION', 'CPANEL_ENTRY'])
        self.assertEqual(data['client'], {'id': self.client_record.id, 'name': 'Acme Corp'})

    def test_delete_requires_admin(self):
        response = self.api.delete(f'/api/installations/{self.site.id}/')
        self.assertEqual(response.status_code, 401)

        self.api.force_authenticate(user=self.admin)
        response = self.api.delete(f'/api/installations/{self.site.id}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Site.objects.filter(id=self.site.id).exists())
