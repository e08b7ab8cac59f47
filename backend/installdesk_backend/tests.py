"""
Tests for project level views.
"""
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient
from clients.models import Client
from hosting.models import Site
from projects.models import Project

User = get_user_model()


class DashboardStatsTest(TestCase):
    """Test GET /api/dashboard/stats/."""

    def setUp(self):
        self.api = APIClient()
        self.api.force_authenticate(user=User.objects.create_user(username='staff', password='testpass123'))
        self.project = Project.objects.create(name='Shop', key='shop', domain='shop.example.com')

    def test_counts_and_recent_items(self):
        acme = Client.objects.create(name='Acme Corp')
        Client.objects.create(name='Initech', active=False)
        Site.objects.create(client=acme, project=self.project, domain='a.example.com')
        Site.objects.create(project=self.project, domain='b.example.com', status=Site.STATUS_FAILED)

        data = self.api.get('/api/dashboard/stats/').json()
        self.assertEqual(data['active_clients'], 1)
        self.assertEqual(data['active_sites'], 1)
        self.assertEqual([client['name'] for client in data['recent_clients']], ['Acme Corp'])

        sites = {site['domain']: site for site in data['recent_sites']}
        self.assertEqual(sites['a.example.com']['client'], {'id': acme.id, 'name': 'Acme Corp'})
        self.assertIsNone(sites['b.example.com']['client'])
        self.assertEqual(sites['b.example.com']['project'], {'name': 'Shop'})

    def test_recent_sites_are_capped(self):
        for index in range(7):
            Site.objects.create(project=self.project, domain=f'site{index}.example.com')
        data = self.api.get('/api/dashboard/stats/').json()
        self.assertEqual(len(data['recent_sites']), 5)

    def test_requires_authentication(self):
        response = APIClient().get('/api/dashboard/stats/')
        self.assertEqual(response.status_code, 401)
