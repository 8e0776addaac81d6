"""Database models for orders and order items."""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Order(models.Model):
    """A customer's order.

    Prices are computed server-side at creation. ``is_paid`` and
    ``is_delivered`` only ever go from False to True, each stamping its
    timestamp once; see :mod:`orders.services`.
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='orders')

    shipping_address = models.CharField(max_length=255)
    shipping_city = models.CharField(max_length=100)
    shipping_postal_code = models.CharField(max_length=20)
    shipping_country = models.CharField(max_length=100)

    payment_method = models.CharField(max_length=100, default='PayPal')

    items_price = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    tax_price = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    shipping_price = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    total_price = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])

    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    # Gateway payment result, set together with is_paid.
    # A transaction id may settle one order only.
    payment_result_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    payment_result_status = models.CharField(max_length=50, blank=True)
    payment_result_update_time = models.CharField(max_length=50, blank=True)
    payment_result_email_address = models.EmailField(blank=True)

    is_delivered = models.BooleanField(default=False)
    delivered_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='orders_orde_user_id_7a1c3e_idx'),
            models.Index(fields=['is_paid', 'is_delivered'], name='orders_orde_is_paid_4f2b9d_idx'),
        ]

    def __str__(self):
        return f"Order #{self.pk} - {self.user}"

    @property
    def payment_result(self):
        if not self.is_paid:
            return None
        return {
            'id': self.payment_result_id,
            'status': self.payment_result_status,
            'update_time': self.payment_result_update_time,
            'email_address': self.payment_result_email_address,
        }


class OrderItem(models.Model):
    """Line item inside an order. Name, image and price are copied from the catalog."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='order_items')
    product = models.ForeignKey('products.Product', on_delete=models.SET_NULL, null=True, related_name='order_items')
    name = models.CharField(max_length=255)
    qty = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    image = models.CharField(max_length=500, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.qty} x {self.name} (Order #{self.order_id})"
