from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Service(models.Model):
    """A service listing offered by a freelancer, priced in hours."""

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        SUSPENDED = 'suspended', 'Suspended'
        DRAFT = 'draft', 'Draft'

    provider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='services',
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    hourly_rate = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        default=Decimal('1'),
        validators=[MinValueValidator(Decimal('0.25'))],
        help_text='Time credits charged per hour of work',
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Service'
        verbose_name_plural = 'Services'

    def __str__(self):
        return self.title


class Project(models.Model):
    """A client request that freelancers can apply to."""

    class Status(models.TextChoices):
        OPEN = 'open', 'Open'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='projects',
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    budget_hours = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('1'))
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.OPEN,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Project'
        verbose_name_plural = 'Projects'

    def __str__(self):
        return self.title


class Booking(models.Model):
    """A client booking hours of a service."""

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        CONFIRMED = 'confirmed', 'Confirmed'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    service = models.ForeignKey(
        Service,
        on_delete=models.CASCADE,
        related_name='bookings',
    )
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='bookings',
    )
    hours = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('1'))
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'

    def __str__(self):
        return f"{self.client} → {self.service} ({self.hours}h)"


class EscrowItem(models.Model):
    """Funds held between a client and a freelancer until release."""

    class Status(models.TextChoices):
        HELD = 'held', 'Held'
        RELEASED = 'released', 'Released'
        DISPUTED = 'disputed', 'Disputed'
        REFUNDED = 'refunded', 'Refunded'

    class Currency(models.TextChoices):
        HOURS = 'hours', 'Hours'
        AED = 'AED', 'AED'

    project = models.ForeignKey(
        Project,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='escrow_items',
    )
    project_title = models.CharField(max_length=255)
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='escrow_as_client',
    )
    freelancer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='escrow_as_freelancer',
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(
        max_length=10,
        choices=Currency.choices,
        default=Currency.HOURS,
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.HELD,
    )
    description = models.TextField(blank=True)
    due_date = models.DateTimeField(null=True, blank=True)
    auto_release_date = models.DateTimeField(null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='resolved_escrow',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Escrow Item'
        verbose_name_plural = 'Escrow Items'

    def __str__(self):
        return f"{self.project_title}: {self.amount} {self.currency} ({self.status})"

    @property
    def client_name(self):
        return self.client.display_name

    @property
    def freelancer_name(self):
        return self.freelancer.display_name


class SavedSearch(models.Model):
    """A named marketplace query a user can re-run."""

    class Category(models.TextChoices):
        SERVICES = 'services', 'Services'
        PROJECTS = 'projects', 'Projects'
        FREELANCERS = 'freelancers', 'Freelancers'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='saved_searches',
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    query = models.CharField(max_length=255, blank=True)
    filters = models.JSONField(default=dict, blank=True)
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.SERVICES,
    )
    notifications = models.BooleanField(default=False)
    is_public = models.BooleanField(default=False)
    result_count = models.PositiveIntegerField(default=0)
    last_run = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Saved Search'
        verbose_name_plural = 'Saved Searches'

    def __str__(self):
        return self.name
