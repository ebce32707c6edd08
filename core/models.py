from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom User model for the Waqti platform."""

    class Role(models.TextChoices):
        FREELANCER = 'freelancer', 'Freelancer'
        CLIENT = 'client', 'Client'

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        SUSPENDED = 'suspended', 'Suspended'
        PENDING = 'pending', 'Pending'

    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    balance = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal('2'),
        help_text='Time credits in hours; new accounts start with 2 free hours',
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        blank=True,
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    email_verified = models.BooleanField(default=False)
    verification_email_sent_at = models.DateTimeField(null=True, blank=True)
    walkthrough_completed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'core_user'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.username} ({self.display_name})"

    @property
    def display_name(self):
        return self.full_name or self.get_full_name() or self.username

    @property
    def is_suspended(self):
        return self.status == self.Status.SUSPENDED
