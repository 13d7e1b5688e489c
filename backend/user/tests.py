from django.test import TestCase
from django.urls import reverse
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase
from .models import Role, UserProfile, role_of

User = get_user_model()


class UserProfileTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='amina@example.com', password='password123')
        self.profile = UserProfile.objects.create(user=self.user, display_name='Amina', role=Role.IMAM)

    def test_role_helpers(self):
        """Imams are not admins, admins pass every role check."""
        self.assertTrue(self.profile.is_imam)
        self.assertFalse(self.profile.is_admin)
        self.assertFalse(self.profile.is_business)

        self.profile.role = Role.ADMIN
        self.assertTrue(self.profile.is_admin)
        self.assertTrue(self.profile.is_imam)
        self.assertTrue(self.profile.is_business)
        self.assertTrue(self.profile.is_volunteer)

    def test_redirect_url_per_role(self):
        self.assertEqual(self.profile.get_redirect_url(), '/dashboard/imam')
        self.profile.role = Role.SUPERADMIN
        self.assertEqual(self.profile.get_redirect_url(), '/admin/dashboard')
        self.profile.role = Role.USER
        self.assertEqual(self.profile.get_redirect_url(), '/profile')

    def test_for_user_creates_missing_profile(self):
        """Superusers without a profile start as superadmins."""
        root = User.objects.create_superuser(username='root', password='password123', email='root@example.com')
        profile = UserProfile.for_user(root)
        self.assertEqual(profile.role, Role.SUPERADMIN)
        self.assertEqual(role_of(root), Role.SUPERADMIN)

    def test_name_falls_back_to_username(self):
        self.profile.display_name = ''
        self.assertEqual(self.profile.name, 'amina@example.com')


class AuthAPITests(APITestCase):
    def setUp(self):
        self.register_url = reverse('register')
        self.login_url = reverse('login')
        self.me_url = reverse('me')

    def test_register_returns_profile_and_token(self):
        response = self.client.post(self.register_url, {
            'name': 'Yusuf',
            'email': 'Yusuf@Example.com',
            'password': 'secret1',
            'role': 'business',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['email'], 'yusuf@example.com')
        self.assertEqual(response.data['user']['role'], 'business')
        self.assertTrue(Token.objects.filter(key=response.data['token']).exists())

    def test_register_rejects_duplicate_email(self):
        User.objects.create_user(username='dup@example.com', email='dup@example.com', password='secret1')
        response = self.client.post(self.register_url, {
            'name': 'Dup',
            'email': 'DUP@example.com',
            'password': 'secret1',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_register_rejects_admin_role(self):
        """Admin roles can only be granted by another admin."""
        response = self.client.post(self.register_url, {
            'name': 'Sneaky',
            'email': 'sneaky@example.com',
            'password': 'secret1',
            'role': 'admin',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_rejects_short_password(self):
        response = self.client.post(self.register_url, {
            'name': 'Short',
            'email': 'short@example.com',
            'password': '123',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_and_me(self):
        self.client.post(self.register_url, {
            'name': 'Khadija',
            'email': 'khadija@example.com',
            'password': 'secret1',
            'role': 'imam',
        })
        response = self.client.post(self.login_url, {'email': 'KHADIJA@example.com', 'password': 'secret1'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION='Token ' + response.data['token'])
        me = self.client.get(self.me_url)
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['name'], 'Khadija')
        self.assertEqual(me.data['redirect_url'], '/dashboard/imam')

    def test_login_bad_credentials(self):
        response = self.client.post(self.login_url, {'email': 'nobody@example.com', 'password': 'wrong'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid email or password')

    def test_me_requires_authentication(self):
        response = self.client.get(self.me_url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_patch_me(self):
        user = User.objects.create_user(username='omar@example.com', password='secret1')
        self.client.force_authenticate(user=user)
        response = self.client.patch(self.me_url, {'city': 'Chicago', 'name': 'Omar'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['city'], 'Chicago')
        self.assertEqual(response.data['name'], 'Omar')

    def test_public_profile(self):
        user = User.objects.create_user(username='public@example.com', password='secret1')
        profile = UserProfile.objects.create(user=user, display_name='Public')
        response = self.client.get(reverse('profile', kwargs={'id': profile.id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Public')
