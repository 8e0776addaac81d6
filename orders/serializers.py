"""DRF serializers for orders APIs.

Request serializers only describe what a client may assert: product
references and quantities at checkout, the gateway transaction on payment.
Prices are never read from a request.
"""

from rest_framework import serializers

from products.serializers import _image_value_to_url

from .models import Order, OrderItem
from .paypal import TRANSACTION_ID_PATTERN


class OrderItemSerializer(serializers.ModelSerializer):
    """Line item as stored on the order."""

    image = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'name', 'qty', 'image', 'price']

    def get_image(self, obj):
        return _image_value_to_url(obj.image)


class ShippingAddressSerializer(serializers.Serializer):
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100)


class OrderSerializer(serializers.ModelSerializer):
    """Full order representation returned by every order endpoint."""

    user = serializers.SerializerMethodField()
    order_items = OrderItemSerializer(many=True, read_only=True)
    shipping_address = serializers.SerializerMethodField()
    payment_result = serializers.ReadOnlyField()

    class Meta:
        model = Order
        fields = [
            'id',
            'user',
            'order_items',
            'shipping_address',
            'payment_method',
            'items_price',
            'tax_price',
            'shipping_price',
            'total_price',
            'is_paid',
            'paid_at',
            'payment_result',
            'is_delivered',
            'delivered_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_user(self, obj):
        user = obj.user
        return {'id': user.pk, 'name': user.name, 'email': user.email}

    def get_shipping_address(self, obj):
        return {
            'address': obj.shipping_address,
            'city': obj.shipping_city,
            'postal_code': obj.shipping_postal_code,
            'country': obj.shipping_country,
        }


class OrderItemRequestSerializer(serializers.Serializer):
    """One cart line: which product and how many.

    A ``price`` sent by older clients is accepted and dropped.
    """

    product = serializers.IntegerField(min_value=1)
    qty = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, write_only=True)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        value.pop('price', None)
        return value


class OrderCreateSerializer(serializers.Serializer):
    order_items = OrderItemRequestSerializer(many=True, allow_empty=True)
    shipping_address = ShippingAddressSerializer()
    payment_method = serializers.CharField(max_length=100, required=False, default='PayPal')


class PayerSerializer(serializers.Serializer):
    email_address = serializers.EmailField(required=False, allow_blank=True, default='')


class OrderPaySerializer(serializers.Serializer):
    """Gateway capture details as posted by the checkout page.

    ``amount`` is what the client claims was paid; when omitted the
    gateway-reported amount is used.
    """

    id = serializers.RegexField(
        TRANSACTION_ID_PATTERN,
        max_length=255,
        error_messages={'invalid': 'Enter a valid PayPal order id.'},
    )
    status = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    update_time = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    payer = PayerSerializer(required=False)
    amount = serializers.DecimalField(max_digits=None, decimal_places=None, required=False, allow_null=True, default=None)
