"""Database models for storefront users."""

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class StorefrontUserManager(UserManager):
    """User manager that logs people in by email.

    ``username`` is kept for Django admin compatibility and defaults to the
    email address when not given.
    """

    def _create_user(self, username, email, password, **extra_fields):
        email = self.normalize_email(email)
        if not username:
            username = email
        return super()._create_user(username, email, password, **extra_fields)

    def create_user(self, username=None, email=None, password=None, **extra_fields):
        return super().create_user(username, email, password, **extra_fields)

    def create_superuser(self, username=None, email=None, password=None, **extra_fields):
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    """Custom user model.

    Extends Django's :class:`~django.contrib.auth.models.AbstractUser` with:
    - a unique ``email`` used as the login identifier
    - a display ``name``
    - optional ``phone_number``

    Administrative capability is Django's ``is_staff`` flag, exposed as
    :attr:`is_admin`.
    """

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=20, null=True, blank=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username', 'name']

    objects = StorefrontUserManager()

    class Meta:
        ordering = ['id']

    @property
    def is_admin(self):
        return bool(self.is_staff)

    def __str__(self):
        return self.email
