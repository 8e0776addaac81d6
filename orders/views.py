"""Orders API views.

Checkout, order lookups, payment confirmation and delivery. The business
rules live in :mod:`orders.services`; views authenticate, check who may see
an order and translate request bodies.
"""

from django.conf import settings
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from accounts.permissions import IsAdmin
from products.views import StandardResultsSetPagination

from . import services
from .exceptions import NotFoundError
from .serializers import OrderCreateSerializer, OrderPaySerializer, OrderSerializer


class OrderViewSet(viewsets.GenericViewSet):
    """Order API endpoints.

    - Customers create orders, list their own and pay for them.
    - Admins list every order and mark orders delivered.
    """

    permission_classes = [permissions.IsAuthenticated]
    serializer_class = OrderSerializer
    pagination_class = StandardResultsSetPagination
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        if self.action in ('list', 'deliver'):
            return [permissions.IsAuthenticated(), IsAdmin()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action == 'create':
            return OrderCreateSerializer
        if self.action == 'pay':
            return OrderPaySerializer
        return OrderSerializer

    def _get_visible_order(self, pk):
        """Load an order the caller owns (or any order, for admins).

        Other users' orders are reported as missing.
        """
        order = services.get_order(pk)
        user = self.request.user
        if not user.is_admin and order.user_id != user.id:
            raise NotFoundError('Order not found.')
        return order

    def _paginated(self, queryset):
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = OrderSerializer(page, many=True, context=self.get_serializer_context())
            return self.get_paginated_response(serializer.data)
        serializer = OrderSerializer(queryset, many=True, context=self.get_serializer_context())
        return Response(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = services.create_order(
            user=request.user,
            order_items=data['order_items'],
            shipping_address=data['shipping_address'],
            payment_method=data.get('payment_method'),
        )
        order = services.get_order(order.pk)
        return Response(OrderSerializer(order, context=self.get_serializer_context()).data, status=status.HTTP_201_CREATED)

    def list(self, request, *args, **kwargs):
        """Admin-only: every order, newest first."""
        return self._paginated(services.list_all_orders())

    @action(detail=False, methods=['get'])
    def mine(self, request):
        """The authenticated user's orders, newest first."""
        return self._paginated(services.list_orders_for_user(request.user))

    def retrieve(self, request, pk=None):
        order = self._get_visible_order(pk)
        return Response(OrderSerializer(order, context=self.get_serializer_context()).data)

    @action(detail=True, methods=['put'])
    def pay(self, request, pk=None):
        """Confirm payment with the gateway capture details.

        Payload: ``{id, status, update_time, payer: {email_address}, amount?}``
        """
        order = self._get_visible_order(pk)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = services.mark_paid(
            order.pk,
            transaction_id=data['id'],
            paid_amount=data.get('amount'),
            payer_email=(data.get('payer') or {}).get('email_address', ''),
            status=data.get('status', ''),
            update_time=data.get('update_time', ''),
        )
        order = services.get_order(order.pk)
        return Response(OrderSerializer(order, context=self.get_serializer_context()).data)

    @action(detail=True, methods=['put'])
    def deliver(self, request, pk=None):
        """Admin-only: mark an order delivered."""
        services.mark_delivered(pk)
        order = services.get_order(pk)
        return Response(OrderSerializer(order, context=self.get_serializer_context()).data)


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def paypal_config(request):
    """Return the PayPal client id the checkout page loads the SDK with."""
    return Response({'client_id': settings.PAYPAL['CLIENT_ID']})
