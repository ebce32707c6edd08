"""
Admin dashboard data loading and row actions.

Every dashboard section is loaded by its own query.  A failing query is
logged and recorded in ``DashboardData.errors`` while the other sections
still render with what they loaded.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from marketplace.models import Booking, EscrowItem, Service
from verification.models import FreelancerVerification

from .exceptions import AdminActionError

logger = logging.getLogger(__name__)

TABS = ('overview', 'users', 'services', 'analytics')
RECENT_PER_KIND = 5


@dataclass
class DashboardStats:
    total_users: int = 0
    total_services: int = 0
    total_bookings: int = 0
    revenue: Decimal = Decimal('0')
    active_users: int = 0
    pending_verifications: int = 0
    open_disputes: int = 0
    monthly_growth: float = 0.0


@dataclass
class ActivityEntry:
    kind: str  # 'user' | 'service'
    title: str
    subtitle: str
    timestamp: object
    object_id: int


@dataclass
class DashboardData:
    tab: str = 'overview'
    stats: DashboardStats = field(default_factory=DashboardStats)
    recent_activity: List[ActivityEntry] = field(default_factory=list)
    users: list = field(default_factory=list)
    services: list = field(default_factory=list)
    analytics: Dict[str, Dict[str, int]] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


def growth_percent(current: int, previous: int) -> float:
    if previous == 0:
        return 100.0 if current else 0.0
    return round((current - previous) / previous * 100, 1)


class AdminDashboardService:
    """Loads the admin dashboard sections and applies row actions."""

    def __init__(self, now=None, config: Optional[dict] = None):
        self.now = now or timezone.now()
        self.config = config or settings.WAQTI_CONFIG
        self.User = get_user_model()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _guard(self, data: DashboardData, section: str, loader: Callable, default):
        try:
            return loader()
        except DatabaseError as exc:
            logger.exception("Admin dashboard section %s failed to load", section)
            data.errors[section] = f"Could not load {section.replace('_', ' ')}: {exc}"
            return default

    def load(self, tab: str = 'overview', search: str = '', status: str = '') -> DashboardData:
        if tab not in TABS:
            tab = 'overview'
        data = DashboardData(tab=tab)
        data.stats = self._guard(data, 'stats', self.load_stats, DashboardStats())

        recent_users = self._guard(data, 'recent_users', self.recent_users, [])
        recent_services = self._guard(data, 'recent_services', self.recent_services, [])
        data.recent_activity = self.merge_activity(recent_users, recent_services)

        if tab == 'users':
            data.users = self._guard(data, 'users', lambda: self.users(search, status), [])
        elif tab == 'services':
            data.services = self._guard(data, 'services', lambda: self.services(search, status), [])
        elif tab == 'analytics':
            data.analytics = self._guard(data, 'analytics', self.analytics, {})
        return data

    def load_stats(self) -> DashboardStats:
        window = timedelta(days=self.config.get('active_user_window_days', 30))
        since = self.now - window
        previous_since = since - window

        users = self.User.objects.all()
        new_users = users.filter(created_at__gte=since).count()
        previous_users = users.filter(created_at__gte=previous_since, created_at__lt=since).count()
        revenue = EscrowItem.objects.filter(
            status=EscrowItem.Status.RELEASED,
            currency=EscrowItem.Currency.AED,
        ).aggregate(total=Sum('amount'))['total']

        return DashboardStats(
            total_users=users.count(),
            total_services=Service.objects.count(),
            total_bookings=Booking.objects.count(),
            revenue=revenue or Decimal('0'),
            active_users=new_users,
            pending_verifications=FreelancerVerification.objects.filter(
                status=FreelancerVerification.Status.UNDER_REVIEW,
            ).count(),
            open_disputes=EscrowItem.objects.filter(status=EscrowItem.Status.DISPUTED).count(),
            monthly_growth=growth_percent(new_users, previous_users),
        )

    def recent_users(self) -> List[ActivityEntry]:
        return [
            ActivityEntry(
                kind='user',
                title=f"New user registered: {user.display_name}",
                subtitle=user.email,
                timestamp=user.created_at,
                object_id=user.pk,
            )
            for user in self.User.objects.order_by('-created_at')[:RECENT_PER_KIND]
        ]

    def recent_services(self) -> List[ActivityEntry]:
        return [
            ActivityEntry(
                kind='service',
                title=f"New service created: {service.title}",
                subtitle=service.provider.display_name,
                timestamp=service.created_at,
                object_id=service.pk,
            )
            for service in Service.objects.select_related('provider').order_by('-created_at')[:RECENT_PER_KIND]
        ]

    def merge_activity(self, *groups) -> List[ActivityEntry]:
        """Newest first across all groups, capped at the configured limit."""
        merged = [entry for group in groups for entry in group]
        merged.sort(key=lambda entry: entry.timestamp, reverse=True)
        return merged[:self.config.get('recent_activity_limit', 10)]

    def users(self, search: str = '', status: str = ''):
        qs = self.User.objects.all()
        if search:
            qs = qs.filter(
                Q(full_name__icontains=search)
                | Q(username__icontains=search)
                | Q(email__icontains=search)
            )
        if status:
            qs = qs.filter(status=status)
        return list(qs.order_by('-created_at'))

    def services(self, search: str = '', status: str = ''):
        qs = Service.objects.select_related('provider')
        if search:
            qs = qs.filter(
                Q(title__icontains=search)
                | Q(category__icontains=search)
                | Q(provider__full_name__icontains=search)
            )
        if status:
            qs = qs.filter(status=status)
        return list(qs.order_by('-created_at'))

    def analytics(self) -> Dict[str, Dict[str, int]]:
        def breakdown(qs):
            return {row['status']: row['n'] for row in qs.values('status').annotate(n=Count('id'))}

        return {
            'verifications': breakdown(FreelancerVerification.objects.all()),
            'bookings': breakdown(Booking.objects.all()),
            'escrow': breakdown(EscrowItem.objects.all()),
        }

    # -------------------------------------------------------------------------
    # Row actions
    # -------------------------------------------------------------------------

    def set_user_status(self, user_id, status, acting_user=None):
        if status not in self.User.Status.values:
            raise AdminActionError(f"Unknown user status: {status}")
        with transaction.atomic():
            user = self._locked(self.User, user_id, 'User')
            if acting_user is not None and user.pk == acting_user.pk:
                raise AdminActionError('You cannot change your own account status.')
            user.status = status
            user.is_active = status != self.User.Status.SUSPENDED
            user.save(update_fields=['status', 'is_active', 'updated_at'])
        logger.info("User %s set to %s by %s", user.pk, status, acting_user)
        return user

    def delete_user(self, user_id, acting_user=None):
        with transaction.atomic():
            user = self._locked(self.User, user_id, 'User')
            if acting_user is not None and user.pk == acting_user.pk:
                raise AdminActionError('You cannot delete your own account.')
            label = str(user)
            user.delete()
        logger.info("User %s deleted by %s", label, acting_user)

    def set_service_status(self, service_id, status, acting_user=None):
        if status not in Service.Status.values:
            raise AdminActionError(f"Unknown service status: {status}")
        with transaction.atomic():
            service = self._locked(Service, service_id, 'Service')
            service.status = status
            service.save(update_fields=['status', 'updated_at'])
        logger.info("Service %s set to %s by %s", service.pk, status, acting_user)
        return service

    def delete_service(self, service_id, acting_user=None):
        with transaction.atomic():
            service = self._locked(Service, service_id, 'Service')
            label = str(service)
            service.delete()
        logger.info("Service %s deleted by %s", label, acting_user)

    def _locked(self, model, pk, label):
        try:
            return model.objects.select_for_update().get(pk=pk)
        except (model.DoesNotExist, ValueError):
            raise AdminActionError(f"{label} {pk} not found") from None
