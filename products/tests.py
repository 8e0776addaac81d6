"""Products app tests."""

from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from products.catalog import find_product, find_products
from products.models import Product


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ProductApiTests(TestCase):
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
		cls.phone = Product.objects.create(
			user=cls.admin,
			name='Phone',
			image='/images/phone.jpg',
			brand='Apple',
			category='Electronics',
			description='Test',
			price=Decimal('599.99'),
			count_in_stock=7,
		)
		cls.shirt = Product.objects.create(
			user=cls.admin,
			name='Shirt',
			brand='Acme',
			category='Fashion',
			description='Test',
			price=Decimal('19.99'),
			count_in_stock=3,
		)

	def client_for(self, user):
		client = APIClient()
		client.force_authenticate(user=user)
		return client

	def test_catalog_is_public(self):
		res = APIClient().get('/api/products/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['count'], 2)

	def test_filter_by_category(self):
		res = APIClient().get('/api/products/', {'category': 'Fashion'})
		self.assertEqual(res.status_code, 200)
		self.assertEqual([p['name'] for p in res.data['results']], ['Shirt'])

	def test_search_by_name(self):
		res = APIClient().get('/api/products/', {'search': 'phone'})
		self.assertEqual([p['id'] for p in res.data['results']], [self.phone.pk])

	def test_detail_keeps_static_image_path(self):
		res = APIClient().get(f'/api/products/{self.phone.pk}/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['price'], '599.99')
		self.assertEqual(res.data['image_url'], '/images/phone.jpg')

	def test_missing_product_returns_404(self):
		self.assertEqual(APIClient().get('/api/products/999999/').status_code, 404)

	def test_writes_need_admin(self):
		self.assertEqual(APIClient().post('/api/products/', data={}, format='json').status_code, 401)
		self.assertEqual(self.client_for(self.customer).post('/api/products/', data={}, format='json').status_code, 403)
		res = self.client_for(self.customer).delete(f'/api/products/{self.phone.pk}/')
		self.assertEqual(res.status_code, 403)

	def test_admin_creates_sample_product(self):
		res = self.client_for(self.admin).post('/api/products/', data={}, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['name'], 'Sample name')
		self.assertEqual(res.data['price'], '0.00')
		self.assertEqual(res.data['image_url'], '/images/sample.jpg')
		self.assertEqual(res.data['user'], self.admin.pk)

	def test_admin_updates_product(self):
		res = self.client_for(self.admin).put(f'/api/products/{self.shirt.pk}/', data={
			'price': '24.50',
			'count_in_stock': 5,
		}, format='json')
		self.assertEqual(res.status_code, 200)
		self.shirt.refresh_from_db()
		self.assertEqual(self.shirt.price, Decimal('24.50'))
		self.assertEqual(self.shirt.count_in_stock, 5)
		self.assertEqual(self.shirt.name, 'Shirt')

	def test_negative_price_rejected(self):
		res = self.client_for(self.admin).put(f'/api/products/{self.shirt.pk}/', data={'price': '-1.00'}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_admin_deletes_product(self):
		res = self.client_for(self.admin).delete(f'/api/products/{self.shirt.pk}/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['detail'], 'Product deleted.')
		self.assertFalse(Product.objects.filter(pk=self.shirt.pk).exists())


class CatalogLookupTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		cls.product = Product.objects.create(
			name='Mouse',
			brand='Logitech',
			category='Electronics',
			description='Test',
			price=Decimal('49.99'),
		)

	def test_missing_ids_are_absent(self):
		found = find_products([self.product.pk, self.product.pk, 999999])
		self.assertEqual(list(found), [self.product.pk])

	def test_no_ids(self):
		self.assertEqual(find_products([]), {})

	def test_single_lookup(self):
		self.assertEqual(find_product(self.product.pk), self.product)
		self.assertIsNone(find_product(999999))


class SeedDataCommandTests(TestCase):
	def test_seed_creates_users_and_products(self):
		call_command('seed_data', stdout=StringIO())
		User = get_user_model()
		admin = User.objects.get(email='admin@email.com')
		self.assertTrue(admin.is_admin)
		self.assertTrue(admin.check_password('123456'))
		self.assertEqual(User.objects.count(), 3)
		self.assertEqual(Product.objects.count(), 6)
		self.assertEqual(Product.objects.filter(user=admin).count(), 6)

	def test_destroy_removes_data(self):
		call_command('seed_data', stdout=StringIO())
		call_command('seed_data', '--destroy', stdout=StringIO())
		self.assertEqual(Product.objects.count(), 0)
		self.assertEqual(get_user_model().objects.count(), 0)
