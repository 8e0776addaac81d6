"""Orders app tests."""

from dataclasses import replace
from decimal import Decimal
from types import SimpleNamespace
from unittest import mock
from urllib.parse import unquote

import requests
from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from orders import services
from orders.exceptions import (
	AmountMismatchError,
	ConflictError,
	NotFoundError,
	PaymentNotVerifiedError,
	TransactionReusedError,
	ValidationError,
)
from orders.models import Order, OrderItem
from orders.paypal import GatewayVerification, PaymentGatewayError, PayPalClient, get_gateway
from orders.pricing import calculate_prices, round2
from products.models import Product


SHIPPING = {
	'address': '1 Main Street',
	'city': 'Springfield',
	'postal_code': '12345',
	'country': 'US',
}


def line(price, qty):
	return SimpleNamespace(price=Decimal(price), qty=qty)


class StubGateway:
	"""Records lookups and answers with a fixed verification (or error)."""

	def __init__(self, verification=None, error=None):
		self.verification = verification
		self.error = error
		self.calls = []

	def verify_transaction(self, transaction_id):
		self.calls.append(transaction_id)
		if self.error is not None:
			raise self.error
		if self.verification.transaction_id:
			return self.verification
		# PayPal echoes the id of the order it found.
		return replace(self.verification, transaction_id=transaction_id)


def completed(amount):
	return StubGateway(GatewayVerification(verified=True, amount=Decimal(amount), status='COMPLETED'))


class PriceCalculationTests(SimpleTestCase):
	def test_order_over_threshold_ships_free(self):
		prices = calculate_prices([line('60.00', 1), line('45.00', 1)])
		self.assertEqual(prices.items_price, Decimal('105.00'))
		self.assertEqual(prices.shipping_price, Decimal('0.00'))
		self.assertEqual(prices.tax_price, Decimal('15.75'))
		self.assertEqual(prices.total_price, Decimal('120.75'))

	def test_small_order_pays_flat_shipping(self):
		prices = calculate_prices([line('10.00', 2)])
		self.assertEqual(prices.items_price, Decimal('20.00'))
		self.assertEqual(prices.shipping_price, Decimal('10.00'))
		self.assertEqual(prices.tax_price, Decimal('3.00'))
		self.assertEqual(prices.total_price, Decimal('33.00'))

	def test_exactly_one_hundred_still_pays_shipping(self):
		prices = calculate_prices([line('50.00', 2)])
		self.assertEqual(prices.shipping_price, Decimal('10.00'))
		self.assertEqual(prices.tax_price, Decimal('15.00'))
		self.assertEqual(prices.total_price, Decimal('125.00'))

	def test_one_cent_over_threshold_ships_free(self):
		prices = calculate_prices([line('100.01', 1)])
		self.assertEqual(prices.shipping_price, Decimal('0.00'))
		self.assertEqual(prices.tax_price, Decimal('15.00'))
		self.assertEqual(prices.total_price, Decimal('115.01'))

	def test_tax_rounds_half_up(self):
		prices = calculate_prices([line('0.10', 1)])
		self.assertEqual(prices.tax_price, Decimal('0.02'))
		self.assertEqual(prices.total_price, Decimal('10.12'))

	def test_round2_halves_go_away_from_zero(self):
		self.assertEqual(round2(Decimal('2.675')), Decimal('2.68'))
		self.assertEqual(round2('1.005'), Decimal('1.01'))
		self.assertEqual(round2(0.125), Decimal('0.13'))

	def test_every_figure_has_two_decimal_places(self):
		prices = calculate_prices([line('19.99', 3)])
		for value in (prices.items_price, prices.shipping_price, prices.tax_price, prices.total_price):
			self.assertEqual(value.as_tuple().exponent, -2)
		self.assertEqual(prices.total_price, prices.items_price + prices.shipping_price + prices.tax_price)

	def test_negative_price_rejected(self):
		with self.assertRaises(ValidationError):
			calculate_prices([line('-1.00', 1)])

	def test_non_positive_quantity_rejected(self):
		with self.assertRaises(ValidationError):
			calculate_prices([line('5.00', 0)])
		with self.assertRaises(ValidationError):
			calculate_prices([SimpleNamespace(price=Decimal('5.00'), qty=True)])


class OrderServiceTestBase(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(
			email='customer@example.com',
			password='12345678',
			name='Test Customer',
		)
		cls.other_customer = User.objects.create_user(
			email='other@example.com',
			password='12345678',
			name='Other Customer',
		)
		cls.admin = User.objects.create_user(
			email='admin@example.com',
			password='12345678',
			name='Admin User',
			is_staff=True,
		)
		cls.headphones = Product.objects.create(
			user=cls.admin,
			name='Headphones',
			image='/images/airpods.jpg',
			brand='Apple',
			category='Electronics',
			description='Test',
			price=Decimal('60.00'),
			count_in_stock=10,
		)
		cls.mouse = Product.objects.create(
			user=cls.admin,
			name='Mouse',
			brand='Logitech',
			category='Electronics',
			description='Test',
			price=Decimal('45.00'),
			count_in_stock=10,
		)
		cls.cable = Product.objects.create(
			user=cls.admin,
			name='Cable',
			brand='Generic',
			category='Electronics',
			description='Test',
			price=Decimal('10.00'),
			count_in_stock=10,
		)

	def place_order(self, user=None, items=None):
		items = items or [
			{'product': self.headphones.pk, 'qty': 1},
			{'product': self.mouse.pk, 'qty': 1},
		]
		return services.create_order(user or self.customer, items, SHIPPING)


class CreateOrderTests(OrderServiceTestBase):
	def test_prices_come_from_catalog(self):
		order = self.place_order(items=[
			{'product': self.headphones.pk, 'qty': 1, 'price': '0.01'},
			{'product': self.mouse.pk, 'qty': 1, 'price': '0.01'},
		])
		order.refresh_from_db()
		self.assertEqual(order.items_price, Decimal('105.00'))
		self.assertEqual(order.shipping_price, Decimal('0.00'))
		self.assertEqual(order.tax_price, Decimal('15.75'))
		self.assertEqual(order.total_price, Decimal('120.75'))
		self.assertEqual(
			sorted(order.order_items.values_list('price', flat=True)),
			[Decimal('45.00'), Decimal('60.00')],
		)

	def test_new_order_is_unpaid_and_undelivered(self):
		order = self.place_order()
		self.assertFalse(order.is_paid)
		self.assertIsNone(order.paid_at)
		self.assertIsNone(order.payment_result)
		self.assertFalse(order.is_delivered)
		self.assertIsNone(order.delivered_at)
		self.assertEqual(order.user_id, self.customer.pk)
		self.assertEqual(order.shipping_city, 'Springfield')
		self.assertEqual(order.payment_method, 'PayPal')

	def test_line_items_snapshot_product(self):
		order = self.place_order(items=[{'product': self.headphones.pk, 'qty': 2}])
		item = order.order_items.get()
		self.assertEqual(item.name, 'Headphones')
		self.assertEqual(item.image, '/images/airpods.jpg')
		self.assertEqual(item.qty, 2)
		self.assertEqual(item.price, Decimal('60.00'))

	def test_repeated_product_lines_are_merged(self):
		order = self.place_order(items=[
			{'product': self.cable.pk, 'qty': 1},
			{'product': self.cable.pk, 'qty': 1},
		])
		self.assertEqual(order.order_items.count(), 1)
		self.assertEqual(order.order_items.get().qty, 2)
		self.assertEqual(order.total_price, Decimal('33.00'))

	def test_empty_order_rejected_and_nothing_saved(self):
		with self.assertRaises(ValidationError):
			services.create_order(self.customer, [], SHIPPING)
		self.assertEqual(Order.objects.count(), 0)
		self.assertEqual(OrderItem.objects.count(), 0)

	def test_unknown_product_rejected_and_nothing_saved(self):
		with self.assertRaises(NotFoundError):
			self.place_order(items=[
				{'product': self.cable.pk, 'qty': 1},
				{'product': 999999, 'qty': 1},
			])
		self.assertEqual(Order.objects.count(), 0)

	def test_get_order_missing(self):
		with self.assertRaises(NotFoundError):
			services.get_order(999999)


class MarkPaidTests(OrderServiceTestBase):
	def pay(self, order, transaction_id='TX-1', amount='120.75', gateway=None, paid_amount=None):
		return services.mark_paid(
			order.pk,
			transaction_id=transaction_id,
			paid_amount=Decimal(amount) if paid_amount is None else paid_amount,
			payer_email='payer@example.com',
			status='COMPLETED',
			update_time='2024-01-01T10:00:00Z',
			gateway=gateway or completed('120.75'),
		)

	def test_verified_payment_marks_order_paid(self):
		order = self.place_order()
		paid = self.pay(order)
		paid.refresh_from_db()
		self.assertTrue(paid.is_paid)
		self.assertIsNotNone(paid.paid_at)
		self.assertEqual(paid.payment_result, {
			'id': 'TX-1',
			'status': 'COMPLETED',
			'update_time': '2024-01-01T10:00:00Z',
			'email_address': 'payer@example.com',
		})

	def test_missing_asserted_amount_uses_gateway_amount(self):
		order = self.place_order()
		services.mark_paid(
			order.pk, 'TX-1', None, 'payer@example.com', 'COMPLETED', gateway=completed('120.75'),
		)
		order.refresh_from_db()
		self.assertTrue(order.is_paid)

	def test_gateway_is_asked_on_every_call(self):
		order = self.place_order()
		gateway = completed('120.75')
		self.pay(order, gateway=gateway)
		with self.assertRaises(TransactionReusedError):
			self.pay(order, gateway=gateway)
		self.assertEqual(gateway.calls, ['TX-1', 'TX-1'])

	def test_unverified_payment_rejected(self):
		order = self.place_order()
		gateway = StubGateway(GatewayVerification(verified=False, amount=None, status='NOT_FOUND'))
		with self.assertRaises(PaymentNotVerifiedError):
			self.pay(order, gateway=gateway)
		order.refresh_from_db()
		self.assertFalse(order.is_paid)

	def test_gateway_failure_reported_as_not_verified(self):
		order = self.place_order()
		gateway = StubGateway(error=PaymentGatewayError('timeout'))
		with self.assertRaises(PaymentNotVerifiedError):
			self.pay(order, gateway=gateway)
		order.refresh_from_db()
		self.assertFalse(order.is_paid)

	def test_transaction_cannot_settle_two_orders(self):
		first = self.place_order()
		second = self.place_order(user=self.other_customer)
		self.pay(first)
		with self.assertRaises(TransactionReusedError):
			self.pay(second)
		first.refresh_from_db()
		second.refresh_from_db()
		self.assertTrue(first.is_paid)
		self.assertFalse(second.is_paid)
		self.assertIsNone(second.payment_result)

	def test_reuse_checked_before_amount(self):
		first = self.place_order()
		second = self.place_order(items=[{'product': self.cable.pk, 'qty': 1}])
		self.pay(first)
		with self.assertRaises(TransactionReusedError):
			self.pay(second, amount='1.00')

	def test_asserted_amount_must_match_total(self):
		order = self.place_order()
		with self.assertRaises(AmountMismatchError):
			self.pay(order, amount='100.00')
		order.refresh_from_db()
		self.assertFalse(order.is_paid)
		self.assertIsNone(order.payment_result_id)

	def test_gateway_amount_must_match_total(self):
		order = self.place_order()
		with self.assertRaises(AmountMismatchError):
			self.pay(order, gateway=completed('1.00'))
		order.refresh_from_db()
		self.assertFalse(order.is_paid)

	def test_paying_a_paid_order_is_a_conflict(self):
		order = self.place_order()
		self.pay(order)
		with self.assertRaises(ConflictError):
			self.pay(order, transaction_id='TX-2', gateway=completed('120.75'))
		order.refresh_from_db()
		self.assertEqual(order.payment_result['id'], 'TX-1')

	def test_missing_order(self):
		with self.assertRaises(NotFoundError):
			services.mark_paid(999999, 'TX-1', Decimal('1.00'), '', 'COMPLETED', gateway=completed('1.00'))

	def test_transaction_id_must_look_like_a_gateway_id(self):
		order = self.place_order()
		gateway = completed('120.75')
		for bad_id in ('TX-1?replay=1', 'TX-1/', 'tx-1', 'TX 1', ''):
			with self.assertRaises(ValidationError):
				self.pay(order, transaction_id=bad_id, gateway=gateway)
		self.assertEqual(gateway.calls, [])
		order.refresh_from_db()
		self.assertFalse(order.is_paid)

	@mock.patch('orders.paypal.requests.get')
	@mock.patch('orders.paypal.requests.post')
	def test_one_gateway_order_settles_one_order(self, mock_post, mock_get):
		token = mock.Mock(status_code=200)
		token.json.return_value = {'access_token': 'token-abc'}
		mock_post.return_value = token

		def lookup(url, **kwargs):
			# PayPal ignores a query string or trailing slash after the id.
			paypal_id = unquote(url.split('/v2/checkout/orders/', 1)[1]).split('?')[0].rstrip('/')
			res = mock.Mock(status_code=200)
			res.json.return_value = {
				'id': paypal_id,
				'status': 'COMPLETED',
				'purchase_units': [{'amount': {'value': '120.75'}}],
			}
			return res
		mock_get.side_effect = lookup

		paypal = PayPalClient('client-id', 'secret', 'https://api.example.test')
		first = self.place_order()
		second = self.place_order(user=self.other_customer)
		self.pay(first, transaction_id='PAYPALORDER1', gateway=paypal)

		with self.assertRaises(ValidationError):
			self.pay(second, transaction_id='PAYPALORDER1?replay=1', gateway=paypal)
		with self.assertRaises(TransactionReusedError):
			self.pay(second, transaction_id='PAYPALORDER1', gateway=paypal)

		first.refresh_from_db()
		second.refresh_from_db()
		self.assertEqual(first.payment_result_id, 'PAYPALORDER1')
		self.assertFalse(second.is_paid)
		self.assertEqual(Order.objects.filter(is_paid=True).count(), 1)

	def test_gateway_reporting_another_id_is_not_verified(self):
		order = self.place_order()
		gateway = StubGateway(GatewayVerification(
			verified=True, amount=Decimal('120.75'), status='COMPLETED', transaction_id='TX-OTHER',
		))
		with self.assertRaises(PaymentNotVerifiedError):
			self.pay(order, gateway=gateway)
		order.refresh_from_db()
		self.assertFalse(order.is_paid)

	def test_unknown_gateway_amount_rejected(self):
		order = self.place_order()
		gateway = StubGateway(GatewayVerification(verified=True, amount=None, status='COMPLETED'))
		with self.assertRaises(AmountMismatchError):
			self.pay(order, amount='120.75', gateway=gateway)
		order.refresh_from_db()
		self.assertFalse(order.is_paid)

	def test_unique_transaction_id_catches_concurrent_reuse(self):
		other = self.place_order(user=self.other_customer)
		Order.objects.filter(pk=other.pk).update(is_paid=True, payment_result_id='TX-1')
		order = self.place_order()

		# The settled order appears only after the reuse check has run.
		with mock.patch('orders.services._transaction_already_settled', return_value=False):
			with self.assertRaises(TransactionReusedError):
				self.pay(order)

		order.refresh_from_db()
		self.assertFalse(order.is_paid)
		self.assertIsNone(order.payment_result_id)


class MarkDeliveredTests(OrderServiceTestBase):
	def paid_order(self, transaction_id='TX-D'):
		order = self.place_order()
		return services.mark_paid(order.pk, transaction_id, None, '', 'COMPLETED', gateway=completed('120.75'))

	def test_paid_order_delivered(self):
		order = services.mark_delivered(self.paid_order().pk)
		order.refresh_from_db()
		self.assertTrue(order.is_delivered)
		self.assertIsNotNone(order.delivered_at)
		self.assertTrue(order.is_paid)

	def test_unpaid_order_cannot_be_delivered(self):
		order = self.place_order()
		with self.assertRaises(ConflictError):
			services.mark_delivered(order.pk)
		order.refresh_from_db()
		self.assertFalse(order.is_delivered)

	@override_settings(ORDERS={'REQUIRE_PAYMENT_BEFORE_DELIVERY': False})
	def test_unpaid_delivery_allowed_when_configured(self):
		order = services.mark_delivered(self.place_order().pk)
		self.assertTrue(order.is_delivered)
		self.assertFalse(order.is_paid)

	def test_second_delivery_is_a_conflict(self):
		order = services.mark_delivered(self.paid_order().pk)
		delivered_at = order.delivered_at
		with self.assertRaises(ConflictError):
			services.mark_delivered(order.pk)
		order.refresh_from_db()
		self.assertEqual(order.delivered_at, delivered_at)

	def test_missing_order(self):
		with self.assertRaises(NotFoundError):
			services.mark_delivered(999999)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class OrderApiTests(OrderServiceTestBase):
	def client_for(self, user):
		client = APIClient()
		client.force_authenticate(user=user)
		return client

	def test_create_order_returns_201_with_server_prices(self):
		res = self.client_for(self.customer).post('/api/orders/', data={
			'order_items': [
				{'product': self.headphones.pk, 'qty': 1, 'price': '1.00'},
				{'product': self.mouse.pk, 'qty': 1},
			],
			'shipping_address': SHIPPING,
			'payment_method': 'PayPal',
		}, format='json')
		self.assertEqual(res.status_code, 201)
		self.assertEqual(res.data['total_price'], '120.75')
		self.assertEqual(res.data['shipping_address']['postal_code'], '12345')
		self.assertEqual(res.data['user']['email'], 'customer@example.com')
		self.assertEqual(len(res.data['order_items']), 2)
		self.assertFalse(res.data['is_paid'])
		self.assertIsNone(res.data['payment_result'])

	def test_create_empty_order_returns_400(self):
		res = self.client_for(self.customer).post('/api/orders/', data={
			'order_items': [],
			'shipping_address': SHIPPING,
		}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.data['code'], 'invalid')
		self.assertEqual(Order.objects.count(), 0)

	def test_create_with_unknown_product_returns_404(self):
		res = self.client_for(self.customer).post('/api/orders/', data={
			'order_items': [{'product': 999999, 'qty': 1}],
			'shipping_address': SHIPPING,
		}, format='json')
		self.assertEqual(res.status_code, 404)

	def test_create_requires_authentication(self):
		res = APIClient().post('/api/orders/', data={}, format='json')
		self.assertEqual(res.status_code, 401)

	def test_mine_lists_only_own_orders(self):
		own = self.place_order()
		self.place_order(user=self.other_customer)
		res = self.client_for(self.customer).get('/api/orders/mine/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['count'], 1)
		self.assertEqual(res.data['results'][0]['id'], own.pk)

	def test_order_detail_hidden_from_other_users(self):
		order = self.place_order()
		self.assertEqual(self.client_for(self.customer).get(f'/api/orders/{order.pk}/').status_code, 200)
		self.assertEqual(self.client_for(self.other_customer).get(f'/api/orders/{order.pk}/').status_code, 404)
		self.assertEqual(self.client_for(self.admin).get(f'/api/orders/{order.pk}/').status_code, 200)

	def test_all_orders_admin_only(self):
		self.place_order()
		self.place_order(user=self.other_customer)
		self.assertEqual(self.client_for(self.customer).get('/api/orders/').status_code, 403)
		res = self.client_for(self.admin).get('/api/orders/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['count'], 2)

	def test_pay_marks_order_paid(self):
		order = self.place_order()
		with mock.patch('orders.services.get_gateway', return_value=completed('120.75')):
			res = self.client_for(self.customer).put(f'/api/orders/{order.pk}/pay/', data={
				'id': 'TX-API-1',
				'status': 'COMPLETED',
				'update_time': '2024-01-01T10:00:00Z',
				'payer': {'email_address': 'payer@example.com'},
			}, format='json')
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.data['is_paid'])
		self.assertEqual(res.data['payment_result']['id'], 'TX-API-1')
		self.assertEqual(res.data['payment_result']['email_address'], 'payer@example.com')

	def test_pay_with_wrong_amount_returns_402(self):
		order = self.place_order()
		with mock.patch('orders.services.get_gateway', return_value=completed('120.75')):
			res = self.client_for(self.customer).put(f'/api/orders/{order.pk}/pay/', data={
				'id': 'TX-API-2',
				'status': 'COMPLETED',
				'amount': '99.99',
			}, format='json')
		self.assertEqual(res.status_code, 402)
		self.assertEqual(res.data['code'], 'amount_mismatch')
		order.refresh_from_db()
		self.assertFalse(order.is_paid)

	def test_pay_with_reused_transaction_returns_402(self):
		first = self.place_order()
		second = self.place_order()
		with mock.patch('orders.services.get_gateway', return_value=completed('120.75')):
			client = self.client_for(self.customer)
			self.assertEqual(client.put(f'/api/orders/{first.pk}/pay/', data={'id': 'TX-API-3'}, format='json').status_code, 200)
			res = client.put(f'/api/orders/{second.pk}/pay/', data={'id': 'TX-API-3'}, format='json')
		self.assertEqual(res.status_code, 402)
		self.assertEqual(res.data['code'], 'transaction_reused')

	def test_pay_with_malformed_transaction_id_returns_400(self):
		order = self.place_order()
		with mock.patch('orders.services.get_gateway') as get_gateway_mock:
			res = self.client_for(self.customer).put(f'/api/orders/{order.pk}/pay/', data={
				'id': 'TX-API-7?replay=1',
			}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertIn('id', res.data)
		get_gateway_mock.assert_not_called()

	def test_pay_for_foreign_order_returns_404_before_gateway(self):
		order = self.place_order(user=self.other_customer)
		with mock.patch('orders.services.get_gateway') as get_gateway_mock:
			res = self.client_for(self.customer).put(f'/api/orders/{order.pk}/pay/', data={'id': 'TX-API-8'}, format='json')
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.data['code'], 'not_found')
		get_gateway_mock.assert_not_called()

	def test_pay_for_paid_order_returns_409(self):
		order = self.place_order()
		with mock.patch('orders.services.get_gateway', return_value=completed('120.75')):
			client = self.client_for(self.customer)
			client.put(f'/api/orders/{order.pk}/pay/', data={'id': 'TX-API-4'}, format='json')
			res = client.put(f'/api/orders/{order.pk}/pay/', data={'id': 'TX-API-5'}, format='json')
		self.assertEqual(res.status_code, 409)
		self.assertEqual(res.data['code'], 'conflict')

	def test_deliver_admin_only(self):
		order = self.place_order()
		services.mark_paid(order.pk, 'TX-API-6', None, '', 'COMPLETED', gateway=completed('120.75'))

		res = self.client_for(self.customer).put(f'/api/orders/{order.pk}/deliver/')
		self.assertEqual(res.status_code, 403)

		res = self.client_for(self.admin).put(f'/api/orders/{order.pk}/deliver/')
		self.assertEqual(res.status_code, 200)
		self.assertTrue(res.data['is_delivered'])
		self.assertIsNotNone(res.data['delivered_at'])

	def test_deliver_unpaid_returns_409(self):
		order = self.place_order()
		res = self.client_for(self.admin).put(f'/api/orders/{order.pk}/deliver/')
		self.assertEqual(res.status_code, 409)

	@override_settings(PAYPAL={'CLIENT_ID': 'client-123', 'APP_SECRET': 'secret', 'API_URL': 'https://api.example.test', 'TIMEOUT': 5})
	def test_paypal_config_is_public(self):
		res = APIClient().get('/api/config/paypal/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data, {'client_id': 'client-123'})


class PayPalClientTests(SimpleTestCase):
	def setUp(self):
		self.paypal = PayPalClient('client-id', 'secret', 'https://api.example.test/', timeout=5)

	def token_response(self):
		res = mock.Mock(status_code=200)
		res.json.return_value = {'access_token': 'token-abc'}
		return res

	def order_response(self, status_code=200, payload=None):
		res = mock.Mock(status_code=status_code)
		res.json.return_value = payload or {}
		return res

	@mock.patch('orders.paypal.requests.get')
	@mock.patch('orders.paypal.requests.post')
	def test_completed_order_is_verified(self, mock_post, mock_get):
		mock_post.return_value = self.token_response()
		mock_get.return_value = self.order_response(payload={
			'id': 'TX-9',
			'status': 'COMPLETED',
			'purchase_units': [{'amount': {'currency_code': 'USD', 'value': '120.75'}}],
		})

		result = self.paypal.verify_transaction('TX-9')

		self.assertTrue(result.verified)
		self.assertEqual(result.amount, Decimal('120.75'))
		self.assertEqual(result.status, 'COMPLETED')
		self.assertEqual(result.transaction_id, 'TX-9')
		self.assertEqual(mock_post.call_args[0][0], 'https://api.example.test/v1/oauth2/token')
		self.assertEqual(mock_post.call_args[1]['auth'], ('client-id', 'secret'))
		self.assertEqual(mock_get.call_args[0][0], 'https://api.example.test/v2/checkout/orders/TX-9')
		self.assertEqual(mock_get.call_args[1]['headers']['Authorization'], 'Bearer token-abc')

	@mock.patch('orders.paypal.requests.get')
	@mock.patch('orders.paypal.requests.post')
	def test_incomplete_order_is_not_verified(self, mock_post, mock_get):
		mock_post.return_value = self.token_response()
		mock_get.return_value = self.order_response(payload={
			'status': 'APPROVED',
			'purchase_units': [{'amount': {'value': '120.75'}}],
		})
		self.assertFalse(self.paypal.verify_transaction('TX-9').verified)

	@mock.patch('orders.paypal.requests.get')
	@mock.patch('orders.paypal.requests.post')
	def test_unknown_order_is_not_verified(self, mock_post, mock_get):
		mock_post.return_value = self.token_response()
		mock_get.return_value = self.order_response(status_code=404)
		result = self.paypal.verify_transaction('missing')
		self.assertFalse(result.verified)
		self.assertIsNone(result.amount)

	@mock.patch('orders.paypal.requests.get')
	@mock.patch('orders.paypal.requests.post')
	def test_server_error_raises_gateway_error(self, mock_post, mock_get):
		mock_post.return_value = self.token_response()
		res = self.order_response(status_code=500)
		res.raise_for_status.side_effect = requests.HTTPError('500 Server Error')
		mock_get.return_value = res
		with self.assertRaises(PaymentGatewayError):
			self.paypal.verify_transaction('TX-9')

	@mock.patch('orders.paypal.requests.post')
	def test_token_failure_raises_gateway_error(self, mock_post):
		mock_post.side_effect = requests.ConnectionError('unreachable')
		with self.assertRaises(PaymentGatewayError):
			self.paypal.verify_transaction('TX-9')

	@override_settings(PAYPAL={'CLIENT_ID': 'cid', 'APP_SECRET': 'sec', 'API_URL': 'https://api.example.test', 'TIMEOUT': 3})
	def test_gateway_built_from_settings(self):
		gateway = get_gateway()
		self.assertEqual(gateway.client_id, 'cid')
		self.assertEqual(gateway.app_secret, 'sec')
		self.assertEqual(gateway.api_url, 'https://api.example.test')
		self.assertEqual(gateway.timeout, 3)

	@mock.patch('orders.paypal.requests.get')
	@mock.patch('orders.paypal.requests.post')
	def test_order_id_is_escaped_in_lookup_path(self, mock_post, mock_get):
		mock_post.return_value = self.token_response()
		mock_get.return_value = self.order_response(status_code=404)
		self.paypal.verify_transaction('TX-9/../x?y=1')
		self.assertEqual(
			mock_get.call_args[0][0],
			'https://api.example.test/v2/checkout/orders/TX-9%2F..%2Fx%3Fy%3D1',
		)
