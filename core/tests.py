"""Exception handler tests."""

from django.test import SimpleTestCase
from rest_framework.exceptions import PermissionDenied, ValidationError

from core.exceptions import api_exception_handler
from orders.exceptions import AmountMismatchError, NotFoundError


class ApiExceptionHandlerTests(SimpleTestCase):
	def test_order_errors_carry_status_and_code(self):
		res = api_exception_handler(AmountMismatchError(), {})
		self.assertEqual(res.status_code, 402)
		self.assertEqual(res.data['code'], 'amount_mismatch')

		res = api_exception_handler(NotFoundError('Order not found.'), {})
		self.assertEqual(res.status_code, 404)
		self.assertEqual(res.data, {'detail': 'Order not found.', 'code': 'not_found'})

	def test_drf_errors_get_a_code(self):
		res = api_exception_handler(PermissionDenied(), {})
		self.assertEqual(res.status_code, 403)
		self.assertEqual(res.data['code'], 'permission_denied')

	def test_field_errors_left_alone(self):
		res = api_exception_handler(ValidationError({'qty': ['Too small.']}), {})
		self.assertEqual(res.status_code, 400)
		self.assertNotIn('code', res.data)

	def test_unexpected_errors_become_generic_500(self):
		with self.assertLogs('core.exceptions', level='ERROR'):
			res = api_exception_handler(RuntimeError('database exploded'), {'view': None})
		self.assertEqual(res.status_code, 500)
		self.assertEqual(res.data, {'detail': 'Internal server error.'})
