"""Accounts app tests."""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.serializers import tokens_for_user


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class RegistrationAndLoginTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(
			email='john@example.com',
			password='12345678',
			name='John Doe',
		)

	def test_register_returns_profile_and_tokens(self):
		res = APIClient().post('/api/users/', data={
			'name': 'Jane Doe',
			'email': 'Jane@Example.com',
			'password': '123456',
			'phone_number': '+1 650 253 0000',
		}, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['email'], 'jane@example.com')
		self.assertEqual(res.data['phone_number'], '+16502530000')
		self.assertFalse(res.data['is_admin'])
		self.assertIn('access', res.data)
		self.assertIn('refresh', res.data)

		user = get_user_model().objects.get(email='jane@example.com')
		self.assertTrue(user.check_password('123456'))
		self.assertFalse(user.is_staff)

	def test_register_duplicate_email_rejected(self):
		res = APIClient().post('/api/users/', data={
			'name': 'John Again',
			'email': 'john@example.com',
			'password': '123456',
		}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('email', res.data)

	def test_register_short_password_rejected(self):
		res = APIClient().post('/api/users/', data={
			'name': 'Shorty',
			'email': 'short@example.com',
			'password': '123',
		}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('password', res.data)

	def test_register_invalid_phone_rejected(self):
		res = APIClient().post('/api/users/', data={
			'name': 'Bad Phone',
			'email': 'phone@example.com',
			'password': '123456',
			'phone_number': '12',
		}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('phone_number', res.data)

	def test_login_returns_tokens_and_profile(self):
		res = APIClient().post('/api/users/auth/', data={
			'email': 'john@example.com',
			'password': '12345678',
		}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertIn('access', res.data)
		self.assertEqual(res.data['name'], 'John Doe')
		self.assertEqual(res.data['id'], self.customer.pk)

	def test_login_wrong_password_returns_401(self):
		res = APIClient().post('/api/users/auth/', data={
			'email': 'john@example.com',
			'password': 'wrong-password',
		}, format='json')
		self.assertEqual(res.status_code, 401)

	def test_logout_blacklists_refresh_token(self):
		client = APIClient()
		client.force_authenticate(user=self.customer)
		refresh = tokens_for_user(self.customer)['refresh']

		res = client.post('/api/users/logout/', data={'refresh': refresh}, format='json')
		self.assertEqual(res.status_code, 200)

		res = APIClient().post('/api/users/token/refresh/', data={'refresh': refresh}, format='json')
		self.assertEqual(res.status_code, 401)

	def test_logout_without_token_returns_400(self):
		client = APIClient()
		client.force_authenticate(user=self.customer)
		res = client.post('/api/users/logout/', data={}, format='json')
		self.assertEqual(res.status_code, 400)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ProfileTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(
			email='john@example.com',
			password='12345678',
			name='John Doe',
		)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.customer)

	def test_get_profile(self):
		res = self.client.get('/api/users/profile/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['email'], 'john@example.com')
		self.assertNotIn('password', res.data)

	def test_update_profile_name_and_password(self):
		res = self.client.put('/api/users/profile/', data={
			'name': 'Johnny',
			'password': 'new-secret',
		}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['name'], 'Johnny')
		self.assertIn('access', res.data)

		self.customer.refresh_from_db()
		self.assertTrue(self.customer.check_password('new-secret'))

	def test_update_profile_keeps_password_when_blank(self):
		res = self.client.put('/api/users/profile/', data={'name': 'Johnny', 'password': ''}, format='json')
		self.assertEqual(res.status_code, 200)
		self.customer.refresh_from_db()
		self.assertTrue(self.customer.check_password('12345678'))

	def test_profile_requires_authentication(self):
		self.assertEqual(APIClient().get('/api/users/profile/').status_code, 401)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class UserAdminTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(
			email='admin@example.com',
			password='12345678',
			name='Admin User',
			is_staff=True,
		)
		cls.customer = User.objects.create_user(
			email='john@example.com',
			password='12345678',
			name='John Doe',
		)

	def client_for(self, user):
		client = APIClient()
		client.force_authenticate(user=user)
		return client

	def test_list_users_admin_only(self):
		self.assertEqual(self.client_for(self.customer).get('/api/users/').status_code, 403)

		res = self.client_for(self.admin).get('/api/users/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['count'], 2)

	def test_admin_can_grant_admin_flag(self):
		res = self.client_for(self.admin).put(f'/api/users/{self.customer.pk}/', data={'is_admin': True}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.data['is_admin'])
		self.customer.refresh_from_db()
		self.assertTrue(self.customer.is_staff)

	def test_admin_cannot_be_deleted(self):
		res = self.client_for(self.admin).delete(f'/api/users/{self.admin.pk}/')
		self.assertEqual(res.status_code, 400)
		self.assertTrue(get_user_model().objects.filter(pk=self.admin.pk).exists())

	def test_delete_customer(self):
		res = self.client_for(self.admin).delete(f'/api/users/{self.customer.pk}/')
		self.assertEqual(res.status_code, 200)
		self.assertFalse(get_user_model().objects.filter(pk=self.customer.pk).exists())
