"""
Tests for projects app.
"""
from django.contrib.auth import get_user_model
from django.db.models import ProtectedError
from django.test import TestCase
from rest_framework.test import APIClient
from hosting.models import Site
from .models import Project

User = get_user_model()


class ProjectModelTest(TestCase):
    """Test Project model."""

    def test_project_with_sites_cannot_be_deleted(self):
        project = Project.objects.create(name='Shop', key='shop', domain='shop.example.com')
        Site.objects.create(project=project, domain='a.example.com')
        with self.assertRaises(ProtectedError):
            project.delete()


class ProjectViewsTest(TestCase):
    """Test project endpoints."""

    def setUp(self):
        self.api = APIClient()
        self.api.force_authenticate(
            user=User.objects.create_user(username='staff', password='testpass123')
        )
        self.project = Project.objects.create(name='Shop', key='shop', domain='shop.example.com')

    def test_create_rejects_duplicate_key(self):
        response = self.api.post('/api/projects/', {
            'name': 'Shop 2',
            'key': 'shop',
            'domain': 'shop2.example.com',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('key', response.json()['details'])

    def test_detail_counts_sites(self):
        Site.objects.create(project=self.project, domain='a.example.com')
        Site.objects.create(project=self.project, domain='b.example.com')

        data = self.api.get(f'/api/projects/{self.project.id}/').json()
        self.assertEqual(data['key'], 'shop')
        self.assertEqual(data['site_count'], 2)

    def test_list(self):
        data = self.api.get('/api/projects/').json()
        self.assertEqual([project['name'] for project in data], ['Shop'])
