"""Django admin configuration for orders."""

from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    """Inline display of order line items."""

    model = OrderItem
    extra = 0
    # Prices are locked at checkout.
    readonly_fields = ('product', 'name', 'qty', 'price', 'image')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin configuration for customer orders.

    Payment and delivery state are read-only here; they change through the
    API so the gateway checks always run.
    """

    list_display = ('id', 'user', 'total_price', 'is_paid', 'is_delivered', 'created_at')
    list_filter = ('is_paid', 'is_delivered', 'created_at')
    search_fields = ('id', 'user__email', 'payment_result_id')
    readonly_fields = (
        'items_price', 'tax_price', 'shipping_price', 'total_price',
        'is_paid', 'paid_at', 'payment_result_id', 'payment_result_status',
        'payment_result_update_time', 'payment_result_email_address',
        'is_delivered', 'delivered_at', 'created_at', 'updated_at',
    )
    inlines = [OrderItemInline]
