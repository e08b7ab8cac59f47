"""
Tests for hosting app.
"""
from unittest.mock import patch
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient
from clients.models import Client
from entity_meta.models import EntityMeta
from entity_meta.site_settings import (
    CREDENTIALS_META_NAME,
    SITE_REL_TYPE,
    store_installation_credentials,
)
from entity_meta.utils import upsert_entity_meta
from installations.models import InstallStep
from projects.models import Project
from .models import Site
from .utils import delete_site, find_conflicting_site, get_site_stats

User = get_user_model()


class SiteModelTest(TestCase):
    """Test Site model."""

    def test_create_site(self):
        project = Project.objects.create(name='Shop', key='shop', domain='shop.example.com')
        site = Site.objects.create(project=project, domain='example.com')
        self.assertEqual(site.status, Site.STATUS_PENDING)
        self.assertIsNone(site.client)
        self.assertEqual(str(site), 'example.com (PENDING)')


class SiteTestMixin:

    def setUp(self):
        self.staff = User.objects.create_user(username='staff', password='testpass123', role=User.ROLE_STAFF)
        self.admin = User.objects.create_user(username='admin', password='testpass123', role=User.ROLE_ADMIN)
        self.acme = Client.objects.create(name='Acme Corp')
        self.globex = Client.objects.create(name='Globex')
        self.project = Project.objects.create(name='Shop', key='shop', domain='shop.example.com')
        self.site = Site.objects.create(client=self.acme, project=self.project, domain='acme.example.com')
        self.api = APIClient()
        self.api.force_authenticate(user=self.staff)


class DomainConflictTest(SiteTestMixin, TestCase):
    """Test domain uniqueness across sites."""

    def test_find_conflicting_site(self):
        self.assertEqual(find_conflicting_site('acme.example.com'), self.site)
        self.assertIsNone(find_conflicting_site('acme.example.com', exclude_site_id=self.site.id))
        self.assertIsNone(find_conflicting_site('free.example.com'))
        self.assertIsNone(find_conflicting_site(None))

    def test_create_with_used_domain_names_the_owner(self):
        response = self.api.post('/api/sites/', {
            'client_id': self.globex.id,
            'project_id': self.project.id,
            'domain': 'ACME.example.com',
        }, format='json')

        self.assertEqual(response.status_code, 409)
        data = response.json()
        self.assertEqual(data['existing_site']['id'], self.site.id)
        self.assertEqual(data['existing_site']['client'], {'id': self.acme.id, 'name': 'Acme Corp'})
        self.assertIn('Acme Corp', data['error'])
        self.assertEqual(Site.objects.count(), 1)

    def test_create_site(self):
        response = self.api.post('/api/sites/', {
            'client_id': self.globex.id,
            'project_id': self.project.id,
            'domain': 'Globex.example.com',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['domain'], 'globex.example.com')
        self.assertEqual(response.json()['status'], 'PENDING')

    def test_create_rejects_invalid_domain(self):
        response = self.api.post('/api/sites/', {
            'client_id': self.globex.id,
            'project_id': self.project.id,
            'domain': 'not a domain',
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_check_domain(self):
        response = self.api.post('/api/sites/check-domain/', {'domain': 'acme.example.com'}, format='json')
        self.assertFalse(response.json()['available'])
        self.assertEqual(response.json()['existing_site']['client']['name'], 'Acme Corp')

        response = self.api.post('/api/sites/check-domain/', {
            'domain': 'acme.example.com',
            'exclude_site_id': self.site.id,
        }, format='json')
        self.assertTrue(response.json()['available'])

    def test_update_keeps_own_domain_but_not_others(self):
        other = Site.objects.create(client=self.globex, project=self.project, domain='globex.example.com')

        response = self.api.put(f'/api/sites/{self.site.id}/', {'domain': 'acme.example.com'}, format='json')
        self.assertEqual(response.status_code, 200)

        response = self.api.put(f'/api/sites/{other.id}/', {'domain': 'acme.example.com'}, format='json')
        self.assertEqual(response.status_code, 409)
        other.refresh_from_db()
        self.assertEqual(other.domain, 'globex.example.com')


class SiteDeletionTest(SiteTestMixin, TestCase):
    """Test site deletion and the cleanup of dependent records."""

    def setUp(self):
        super().setUp()
        InstallStep.objects.create(site=self.site, step_type=InstallStep.TYPE_DB_CREATION)
        InstallStep.objects.create(site=self.site, step_type=InstallStep.TYPE_CPANEL_ENTRY)
        store_installation_credentials(self.site.id, {
            'domain': 'acme.example.com',
            'adminEmail': 'admin@acme.example.com',
            'adminPassword': 'secret',
        })

    def test_admin_delete_removes_steps_and_settings(self):
        site_id = self.site.id
        self.api.force_authenticate(user=self.admin)

        response = self.api.delete(f'/api/sites/{site_id}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'message': 'Site deleted successfully'})

        self.assertFalse(Site.objects.filter(id=site_id).exists())
        self.assertFalse(InstallStep.objects.filter(site_id=site_id).exists())
        self.assertFalse(EntityMeta.objects.filter(rel_id=site_id, rel_type=SITE_REL_TYPE).exists())

        response = self.api.get(f'/api/sites/{site_id}/credentials/')
        self.assertEqual(response.status_code, 404)
        response = self.api.post(
            f'/api/installations/{site_id}/steps/', {'step_type': 'DB_CREATION'}, format='json'
        )
        self.assertEqual(response.status_code, 404)

    def test_staff_cannot_delete(self):
        response = self.api.delete(f'/api/sites/{self.site.id}/')
        self.assertEqual(response.status_code, 401)
        self.assertTrue(Site.objects.filter(id=self.site.id).exists())

    def test_delete_unknown_site(self):
        self.api.force_authenticate(user=self.admin)
        response = self.api.delete('/api/sites/999999/')
        self.assertEqual(response.status_code, 404)

    def test_settings_cleanup_failure_does_not_block_deletion(self):
        with patch('hosting.utils.delete_all_site_settings', side_effect=RuntimeError('meta store down')):
            delete_site(self.site.id)
        self.assertFalse(Site.objects.filter(id=self.site.id).exists())


class SiteCredentialsViewTest(SiteTestMixin, TestCase):
    """Test GET /api/sites/<id>/credentials/."""

    def url(self):
        return f'/api/sites/{self.site.id}/credentials/'

    def test_no_credentials(self):
        response = self.api.get(self.url())
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'No credentials found for this site'})

    def test_corrupt_credentials(self):
        upsert_entity_meta(self.site.id, SITE_REL_TYPE, CREDENTIALS_META_NAME, '{"domain": "plain"}')
        response = self.api.get(self.url())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Invalid credentials format'})

    def test_requires_authentication(self):
        response = APIClient().get(self.url())
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'error': 'Unauthorized'})


class SiteListViewTest(SiteTestMixin, TestCase):
    """Test listing, status changes and statistics."""

    def setUp(self):
        super().setUp()
        for index in range(4):
            Site.objects.create(
                client=self.globex,
                project=self.project,
                domain=f'site{index}.globex.com',
                status=Site.STATUS_COMPLETED
            )

    def test_pagination(self):
        data = self.api.get('/api/sites/?page=2&limit=2').json()
        self.assertEqual(len(data['data']), 2)
        self.assertEqual(data['pagination'], {
            'page': 2,
            'limit': 2,
            'total_count': 5,
            'total_pages': 3,
            'has_next': True,
            'has_prev': True,
        })

    def test_filters(self):
        data = self.api.get('/api/sites/?search=acme').json()
        self.assertEqual([site['id'] for site in data['data']], [self.site.id])

        data = self.api.get(f'/api/sites/?client={self.globex.id}&status=COMPLETED').json()
        self.assertEqual(data['pagination']['total_count'], 4)

    def test_set_status(self):
        response = self.api.patch(f'/api/sites/{self.site.id}/status/', {'status': 'FAILED'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['site']['status'], 'FAILED')

        response = self.api.patch(f'/api/sites/{self.site.id}/status/', {'status': 'BROKEN'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_stats(self):
        self.assertEqual(get_site_stats(), {
            'total_sites': 5,
            'pending_sites': 1,
            'in_progress_sites': 0,
            'completed_sites': 4,
            'failed_sites': 0,
        })
        response = self.api.get('/api/sites/stats/')
        self.assertEqual(response.json()['completed_sites'], 4)
