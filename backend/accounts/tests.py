"""
Tests for accounts app.
"""
from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient, APIRequestFactory
from .permissions import IsAdmin, IsAdminForDelete, IsStaffOrAdmin

User = get_user_model()


class UserModelTest(TestCase):
    """Test User model."""

    def test_create_user_defaults_to_staff(self):
        """Test user creation."""
        user = User.objects.create_user(
            email='test@example.com',
            username='testuser',
            password='testpass123'
        )
        self.assertEqual(user.role, User.ROLE_STAFF)
        self.assertTrue(user.is_panel_user)
        self.assertFalse(user.is_admin)

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(username='root', password='rootpass123')
        self.assertTrue(user.is_admin)


class AuthViewsTest(TestCase):
    """Test session login endpoints."""

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username='staffer',
            password='testpass123',
            role=User.ROLE_STAFF
        )

    def test_login_and_current_user(self):
        response = self.client.post(
            '/api/auth/login/',
            {'username': 'staffer', 'password': 'testpass123'},
            format='json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['user']['role'], 'STAFF')

        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['user']['username'], 'staffer')

    def test_login_with_wrong_password(self):
        response = self.client.post(
            '/api/auth/login/',
            {'username': 'staffer', 'password': 'nope'},
            format='json'
        )
        self.assertEqual(response.status_code, 401)

    def test_login_requires_fields(self):
        response = self.client.post('/api/auth/login/', {'username': 'staffer'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_anonymous_current_user_is_unauthorized(self):
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'error': 'Unauthorized'})


class PermissionTest(TestCase):
    """Test role permissions."""

    def setUp(self):
        self.factory = APIRequestFactory()
        self.staff = User.objects.create_user(username='staff', password='testpass123')
        self.admin = User.objects.create_user(username='admin', password='testpass123', role=User.ROLE_ADMIN)

    def check(self, permission, method, user):
        request = getattr(self.factory, method)('/api/sites/1/')
        request.user = user
        return permission().has_permission(request, None)

    def test_delete_needs_admin(self):
        self.assertFalse(self.check(IsAdminForDelete, 'delete', self.staff))
        self.assertTrue(self.check(IsAdminForDelete, 'delete', self.admin))

    def test_other_methods_pass_through(self):
        self.assertTrue(self.check(IsAdminForDelete, 'get', self.staff))
        self.assertTrue(self.check(IsAdminForDelete, 'put', self.staff))

    def test_staff_or_admin(self):
        self.assertTrue(self.check(IsStaffOrAdmin, 'get', self.staff))
        self.assertFalse(self.check(IsAdmin, 'get', self.staff))
