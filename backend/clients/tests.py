"""
Tests for clients app.
"""
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient
from hosting.models import Site
from projects.models import Project
from .models import Client

User = get_user_model()


class ClientViewsTest(TestCase):
    """Test client endpoints."""

    def setUp(self):
        self.api = APIClient()
        self.api.force_authenticate(
            user=User.objects.create_user(username='staff', password='testpass123')
        )
        self.acme = Client.objects.create(name='Acme Corp')
        self.retired = Client.objects.create(name='Initech', active=False)

    def test_list_active_filter(self):
        data = self.api.get('/api/clients/?active=true').json()
        self.assertEqual([client['name'] for client in data], ['Acme Corp'])

        data = self.api.get('/api/clients/').json()
        self.assertEqual(len(data), 2)

    def test_create(self):
        response = self.api.post('/api/clients/', {'name': 'Jane Doe', 'type': 'PERSON'}, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['type'], Client.TYPE_PERSON)
        self.assertTrue(response.json()['active'])

    def test_create_requires_name(self):
        response = self.api.post('/api/clients/', {'type': 'PERSON'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('name', response.json()['details'])

    def test_detail(self):
        response = self.api.get(f'/api/clients/{self.acme.id}/')
        self.assertEqual(response.json()['name'], 'Acme Corp')

        response = self.api.get('/api/clients/999999/')
        self.assertEqual(response.status_code, 404)

    def test_update_names_person_after_primary_contact(self):
        response = self.api.put(f'/api/clients/{self.acme.id}/', {
            'type': 'PERSON',
            'city': 'Springfield',
            'contacts': [
                {'first_name': 'Bob', 'last_name': 'Stone'},
                {'first_name': 'Jane', 'last_name': 'Doe', 'is_primary': True},
            ],
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['name'], 'Jane Doe')
        self.assertNotIn('contacts', response.json())
        self.acme.refresh_from_db()
        self.assertEqual(self.acme.city, 'Springfield')

    def test_update_organization_keeps_given_name(self):
        response = self.api.put(f'/api/clients/{self.acme.id}/', {
            'name': 'Acme Holdings',
            'type': 'ORGANIZATION',
            'contacts': [{'first_name': 'Jane', 'last_name': 'Doe', 'is_primary': True}],
        }, format='json')
        self.assertEqual(response.json()['name'], 'Acme Holdings')

    def test_update_requires_name(self):
        response = self.api.put(f'/api/clients/{self.acme.id}/', {'type': 'ORGANIZATION'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('name', response.json()['details'])

    def test_toggle_active(self):
        response = self.api.patch(f'/api/clients/{self.acme.id}/', {'active': False}, format='json')
        self.assertEqual(response.status_code, 200)
        self.acme.refresh_from_db()
        self.assertFalse(self.acme.active)

    def test_toggle_active_requires_boolean(self):
        response = self.api.patch(f'/api/clients/{self.acme.id}/', {'active': 'no'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Active status must be a boolean'})
        self.acme.refresh_from_db()
        self.assertTrue(self.acme.active)


class ClientStatsTest(TestCase):
    """Test GET /api/clients/stats/."""

    def test_stats(self):
        api = APIClient()
        api.force_authenticate(user=User.objects.create_user(username='staff', password='testpass123'))
        acme = Client.objects.create(name='Acme Corp')
        retired = Client.objects.create(name='Initech', active=False)
        project = Project.objects.create(name='Shop', key='shop', domain='shop.example.com')
        Site.objects.create(client=acme, project=project, domain='a.example.com')
        Site.objects.create(client=acme, project=project, domain='b.example.com', status=Site.STATUS_FAILED)
        Site.objects.create(client=retired, project=project, domain='c.example.com')

        self.assertEqual(api.get('/api/clients/stats/').json(), {
            'total_clients': 2,
            'active_clients': 1,
            'inactive_clients': 1,
            'active_sites': 1,
        })
