"""Seed the storefront with sample users and products.

Existing orders, products and non-superuser accounts are removed first.

Usage:
  python manage.py seed_data
  python manage.py seed_data --destroy
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from orders.models import Order
from products.models import Product


SAMPLE_PASSWORD = '123456'

SAMPLE_USERS = [
    {'name': 'Admin User', 'email': 'admin@email.com', 'is_admin': True},
    {'name': 'John Doe', 'email': 'john@email.com'},
    {'name': 'Jane Doe', 'email': 'jane@email.com'},
]

SAMPLE_PRODUCTS = [
    {
        'name': 'Airpods Wireless Bluetooth Headphones',
        'image': '/images/airpods.jpg',
        'description': 'Bluetooth technology lets you connect it with compatible devices wirelessly.',
        'brand': 'Apple',
        'category': 'Electronics',
        'price': 89.99,
        'count_in_stock': 10,
    },
    {
        'name': 'iPhone 13 Pro 256GB Memory',
        'image': '/images/phone.jpg',
        'description': 'Introducing the iPhone 13 Pro. A transformative triple-camera system.',
        'brand': 'Apple',
        'category': 'Electronics',
        'price': 599.99,
        'count_in_stock': 7,
    },
    {
        'name': 'Cannon EOS 80D DSLR Camera',
        'image': '/images/camera.jpg',
        'description': 'Characterized by versatile imaging specs, the Canon EOS 80D clarifies itself.',
        'brand': 'Cannon',
        'category': 'Electronics',
        'price': 929.99,
        'count_in_stock': 5,
    },
    {
        'name': 'Sony Playstation 5',
        'image': '/images/playstation.jpg',
        'description': 'The ultimate home entertainment center starts with PlayStation.',
        'brand': 'Sony',
        'category': 'Electronics',
        'price': 399.99,
        'count_in_stock': 11,
    },
    {
        'name': 'Logitech G-Series Gaming Mouse',
        'image': '/images/mouse.jpg',
        'description': 'Get a better handle on your games with this Logitech LIGHTSYNC gaming mouse.',
        'brand': 'Logitech',
        'category': 'Electronics',
        'price': 49.99,
        'count_in_stock': 7,
    },
    {
        'name': 'Amazon Echo Dot 3rd Generation',
        'image': '/images/alexa.jpg',
        'description': 'Meet Echo Dot - Our most popular smart speaker with a fabric design.',
        'brand': 'Amazon',
        'category': 'Electronics',
        'price': 29.99,
        'count_in_stock': 0,
    },
]


def _money(value: float | Decimal) -> Decimal:
    return Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


class Command(BaseCommand):
    help = 'Reset the database and seed sample users and products.'

    def add_arguments(self, parser):
        parser.add_argument(
            '-d', '--destroy',
            action='store_true',
            help='Only delete existing data; do not seed.',
        )

    def handle(self, *args, **options):
        with transaction.atomic():
            self._reset()
            if options['destroy']:
                self.stdout.write(self.style.WARNING('Data destroyed.'))
                return
            admin = self._seed_users()
            created = self._seed_products(owner=admin)

        self.stdout.write(self.style.NOTICE(f'Seeded {len(SAMPLE_USERS)} users and {created} products.'))
        self.stdout.write(self.style.NOTICE(f'Login with any seeded email | password={SAMPLE_PASSWORD}'))
        self.stdout.write(self.style.SUCCESS('Data imported.'))

    def _reset(self):
        User = get_user_model()
        self.stdout.write(self.style.WARNING('Resetting existing data (preserving superusers only)...'))
        self.stdout.write('Deleting orders...')
        Order.objects.all().delete()
        self.stdout.write('Deleting products...')
        Product.objects.all().delete()
        self.stdout.write('Deleting users...')
        User.objects.filter(is_superuser=False).delete()

    def _seed_users(self):
        User = get_user_model()
        admin = None
        for entry in SAMPLE_USERS:
            is_admin = bool(entry.get('is_admin'))
            user = User.objects.filter(email=entry['email']).first()
            if user is None:
                user = User.objects.create_user(
                    username=entry['email'],
                    email=entry['email'],
                    password=SAMPLE_PASSWORD,
                    name=entry['name'],
                    is_staff=is_admin,
                )
            if is_admin and admin is None:
                admin = user
        return admin

    def _seed_products(self, *, owner):
        products = []
        for entry in SAMPLE_PRODUCTS:
            product = Product(
                user=owner,
                name=entry['name'],
                brand=entry['brand'],
                category=entry['category'],
                description=entry['description'],
                price=_money(entry['price']),
                count_in_stock=entry['count_in_stock'],
            )
            product.image.name = entry['image']
            products.append(product)
        Product.objects.bulk_create(products)
        return len(products)
