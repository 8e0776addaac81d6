"""Django admin configuration for the product catalog."""

import csv
from django.contrib import admin
from django.utils.html import format_html
from django.http import HttpResponse
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin configuration for products and inventory."""

    list_display = ('name', 'brand', 'category', 'price', 'colored_stock')
    list_filter = ('category', 'brand')
    search_fields = ('name', 'brand', 'description')
    actions = ['export_to_csv']

    @admin.action(description="Export selected products to CSV")
    def export_to_csv(self, request, queryset):
        """Export selected products as a CSV inventory report."""
        response = HttpResponse(content_type='text/csv; charset=utf-8-sig')
        response['Content-Disposition'] = 'attachment; filename="inventory_report.csv"'

        writer = csv.writer(response)
        writer.writerow(['ID', 'Name', 'Brand', 'Price', 'In stock'])
        for product in queryset:
            writer.writerow([product.pk, product.name, product.brand, product.price, product.count_in_stock])

        return response

    @admin.display(description='In stock', ordering='count_in_stock')
    def colored_stock(self, obj):
        """Render stock in color to highlight low inventory."""
        stock = obj.count_in_stock
        if stock <= 3:
            color = 'red'
        elif stock <= 10:
            color = 'orange'
        else:
            color = 'green'
        return format_html('<b style="color: {};">{}</b>', color, stock)
