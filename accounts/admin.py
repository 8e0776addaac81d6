"""Django admin configuration for storefront users."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class StorefrontUserAdmin(UserAdmin):
    """Admin configuration for users; staff status is the admin capability."""

    model = User
    list_display = ['email', 'name', 'is_staff', 'phone_number', 'date_joined']
    search_fields = ('email', 'name', 'username')
    ordering = ('id',)

    fieldsets = UserAdmin.fieldsets + (
        ('Storefront', {'fields': ('name', 'phone_number')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Storefront', {'fields': ('email', 'name')}),
    )
