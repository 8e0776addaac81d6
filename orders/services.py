"""Order workflow: checkout, payment verification and delivery.

Views call these functions after authentication/authorization; nothing here
looks at the request. Every operation either commits one consistent write or
raises an :mod:`orders.exceptions` error with the order untouched.

Known gap: the transaction-reuse check reads all orders and the write happens
later, so two concurrent payments with the same gateway transaction against
two different orders can both pass the check. The unique constraint on
``Order.payment_result_id`` rejects the second write, which is reported as
:class:`TransactionReusedError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from products.catalog import find_products

from .exceptions import (
    AmountMismatchError,
    ConflictError,
    NotFoundError,
    PaymentNotVerifiedError,
    TransactionReusedError,
    ValidationError,
)
from .models import Order, OrderItem
from .paypal import TRANSACTION_ID_RE, PaymentGatewayError, get_gateway
from .pricing import calculate_prices, to_decimal


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricedLine:
    product: object
    qty: int

    @property
    def price(self):
        return self.product.price


def _merge_requested_lines(order_items):
    """Collapse ``[{'product': id, 'qty': n}, ...]`` into ``{id: total_qty}``.

    Any other keys (a client-side ``price``, ``name``...) are ignored.
    """
    quantities = {}
    for entry in order_items:
        product_id = entry.get('product')
        qty = entry.get('qty')
        if product_id is None:
            raise ValidationError('Each order item needs a product.')
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise ValidationError(f'Invalid quantity for product {product_id}.')
        quantities[product_id] = quantities.get(product_id, 0) + qty
    return quantities


def create_order(user, order_items, shipping_address, payment_method='PayPal'):
    """Create an unpaid, undelivered order from product references and quantities.

    Unit prices always come from the catalog.
    """
    if not order_items:
        raise ValidationError('No order items.')

    quantities = _merge_requested_lines(order_items)
    products = find_products(quantities.keys())
    missing = [pid for pid in quantities if pid not in products]
    if missing:
        raise NotFoundError(f"Product not found: {', '.join(str(pid) for pid in missing)}.")

    lines = [PricedLine(product=products[pid], qty=qty) for pid, qty in quantities.items()]
    prices = calculate_prices(lines)

    with transaction.atomic():
        order = Order.objects.create(
            user=user,
            shipping_address=shipping_address['address'],
            shipping_city=shipping_address['city'],
            shipping_postal_code=shipping_address['postal_code'],
            shipping_country=shipping_address['country'],
            payment_method=payment_method or 'PayPal',
            items_price=prices.items_price,
            tax_price=prices.tax_price,
            shipping_price=prices.shipping_price,
            total_price=prices.total_price,
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=line.product,
                name=line.product.name,
                qty=line.qty,
                image=str(line.product.image or ''),
                price=line.product.price,
            )
            for line in lines
        ])

    logger.info("Order %s created for user %s, total %s", order.pk, user.pk, order.total_price)
    return order


def get_order(order_id):
    order = (
        Order.objects.select_related('user')
        .prefetch_related('order_items')
        .filter(pk=order_id)
        .first()
    )
    if order is None:
        raise NotFoundError('Order not found.')
    return order


def list_orders_for_user(user):
    return Order.objects.filter(user=user).prefetch_related('order_items').order_by('-created_at', '-id')


def list_all_orders():
    return Order.objects.select_related('user').prefetch_related('order_items').order_by('-created_at', '-id')


def _lock_order(order_id):
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFoundError('Order not found.')
    return order


def _transaction_already_settled(transaction_id):
    return Order.objects.filter(payment_result_id=transaction_id).exists()


def mark_paid(order_id, transaction_id, paid_amount, payer_email, status, update_time=None, gateway=None):
    """Mark an order paid after verifying the gateway transaction.

    ``transaction_id`` must look like a PayPal order id; anything else is a
    :class:`ValidationError` before the gateway is asked. Checks then run in
    this order and the first failure wins:

    1. the gateway confirms ``transaction_id`` is a completed payment and
       reports the same id back;
    2. no order has already been settled with that gateway id;
    3. the order exists;
    4. the order is not already paid;
    5. the gateway reported an amount, and both it and the asserted
       ``paid_amount`` (falling back to the gateway amount) equal the stored
       total.

    The gateway is asked again on every call. The id stored on the order is
    the one the gateway reported.
    """
    if not isinstance(transaction_id, str) or not TRANSACTION_ID_RE.match(transaction_id):
        raise ValidationError('Invalid payment transaction id.')

    gateway = gateway or get_gateway()
    try:
        verification = gateway.verify_transaction(transaction_id)
    except PaymentGatewayError as exc:
        logger.warning("Payment %s for order %s not verified: %s", transaction_id, order_id, exc)
        raise PaymentNotVerifiedError() from exc
    if not verification.verified:
        logger.warning(
            "Payment %s for order %s not verified: gateway status %r",
            transaction_id, order_id, verification.status,
        )
        raise PaymentNotVerifiedError()
    settled_id = verification.transaction_id
    if settled_id != transaction_id:
        logger.warning(
            "Payment %s for order %s not verified: gateway reported id %r",
            transaction_id, order_id, settled_id,
        )
        raise PaymentNotVerifiedError()

    if _transaction_already_settled(settled_id):
        logger.warning("Payment %s reused for order %s", settled_id, order_id)
        raise TransactionReusedError()

    asserted = paid_amount if paid_amount is not None else verification.amount

    with transaction.atomic():
        order = _lock_order(order_id)
        if order.is_paid:
            raise ConflictError('Order is already paid.')

        if verification.amount is None or verification.amount != order.total_price:
            logger.warning(
                "Payment %s for order %s: gateway amount %s does not match total %s",
                settled_id, order_id, verification.amount, order.total_price,
            )
            raise AmountMismatchError()
        if asserted is None or to_decimal(asserted) != order.total_price:
            logger.warning(
                "Payment %s for order %s: amount %s does not match total %s",
                settled_id, order_id, asserted, order.total_price,
            )
            raise AmountMismatchError()

        order.is_paid = True
        order.paid_at = timezone.now()
        order.payment_result_id = settled_id
        order.payment_result_status = status or verification.status
        order.payment_result_update_time = update_time or ''
        order.payment_result_email_address = payer_email or ''
        try:
            with transaction.atomic():
                order.save()
        except IntegrityError as exc:
            logger.warning("Payment %s reused concurrently for order %s", settled_id, order_id)
            raise TransactionReusedError() from exc

    logger.info("Order %s paid with transaction %s", order.pk, settled_id)
    return order


def mark_delivered(order_id):
    """Flag an order delivered.

    Delivering twice is a :class:`ConflictError`. Unpaid orders are refused
    unless ``ORDERS['REQUIRE_PAYMENT_BEFORE_DELIVERY']`` is False
    (cash on delivery).
    """
    require_payment = settings.ORDERS.get('REQUIRE_PAYMENT_BEFORE_DELIVERY', True)

    with transaction.atomic():
        order = _lock_order(order_id)
        if order.is_delivered:
            raise ConflictError('Order is already delivered.')
        if require_payment and not order.is_paid:
            raise ConflictError('Order has not been paid.')

        order.is_delivered = True
        order.delivered_at = timezone.now()
        order.save(update_fields=['is_delivered', 'delivered_at', 'updated_at'])

    logger.info("Order %s delivered", order.pk)
    return order
