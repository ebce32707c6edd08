"""
Tests for adminpanel/services.py: admin dashboard loading and row actions.

Covers:
- growth_percent()
- Stats: totals, 30-day active users, AED revenue, pending verifications
- Section isolation: one failing query does not blank the others
- Recent activity merge and limit
- User/service row actions and their guards
"""

import os
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from adminpanel.exceptions import AdminActionError
from adminpanel.services import ActivityEntry, AdminDashboardService, growth_percent
from core.models import User
from marketplace.models import Booking, EscrowItem, Service
from verification.models import FreelancerVerification

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def client_user(db):
    return User.objects.create_user(
        username='mona', email='mona@example.com', password='pass12345',
        full_name='Mona Khalil', role=User.Role.CLIENT,
    )


@pytest.fixture
def service(user):
    return Service.objects.create(provider=user, title='Logo design', category='Design')


class TestGrowthPercent:

    def test_growth(self):
        assert growth_percent(15, 10) == 50.0

    def test_decline(self):
        assert growth_percent(5, 10) == -50.0

    def test_from_zero(self):
        assert growth_percent(3, 0) == 100.0
        assert growth_percent(0, 0) == 0.0


# =============================================================================
# Loading
# =============================================================================

@pytest.mark.django_db
class TestLoadStats:

    def test_counts(self, user, client_user, admin_user, service):
        Booking.objects.create(service=service, client=client_user, hours=Decimal('2'))
        EscrowItem.objects.create(
            project_title='Logo', client=client_user, freelancer=user,
            amount=Decimal('150'), currency=EscrowItem.Currency.AED, status=EscrowItem.Status.RELEASED,
        )
        EscrowItem.objects.create(
            project_title='Copy', client=client_user, freelancer=user,
            amount=Decimal('4'), status=EscrowItem.Status.RELEASED,
        )
        EscrowItem.objects.create(
            project_title='Site', client=client_user, freelancer=user,
            amount=Decimal('10'), status=EscrowItem.Status.DISPUTED,
        )
        with patch('verification.signals.send_alert'):
            FreelancerVerification.objects.create(user=user, status=FreelancerVerification.Status.UNDER_REVIEW)

        stats = AdminDashboardService().load_stats()

        assert stats.total_users == 3
        assert stats.total_services == 1
        assert stats.total_bookings == 1
        assert stats.revenue == Decimal('150')
        assert stats.pending_verifications == 1
        assert stats.open_disputes == 1

    def test_active_users_window(self, user, client_user, admin_user):
        User.objects.filter(pk=user.pk).update(created_at=NOW - timedelta(days=45))
        User.objects.filter(pk=client_user.pk).update(created_at=NOW - timedelta(days=5))
        User.objects.filter(pk=admin_user.pk).update(created_at=NOW - timedelta(days=2))

        stats = AdminDashboardService(now=NOW).load_stats()

        assert stats.active_users == 2
        # 2 joined this window, 1 the window before
        assert stats.monthly_growth == 100.0


@pytest.mark.django_db
class TestLoad:

    def test_unknown_tab_falls_back(self, user):
        data = AdminDashboardService().load(tab='settings')
        assert data.tab == 'overview'

    def test_failing_section_is_isolated(self, user, service):
        with patch.object(AdminDashboardService, 'recent_users', side_effect=DatabaseError('timeout')):
            data = AdminDashboardService().load()

        assert 'recent_users' in data.errors
        assert data.has_errors
        assert data.stats.total_users == 1
        assert [entry.kind for entry in data.recent_activity] == ['service']

    def test_users_tab_search(self, user, client_user):
        data = AdminDashboardService().load(tab='users', search='khalil')
        assert data.users == [client_user]

    def test_services_tab_status(self, service):
        Service.objects.create(provider=service.provider, title='Old', status=Service.Status.SUSPENDED)
        data = AdminDashboardService().load(tab='services', status='active')
        assert data.services == [service]

    def test_analytics_breakdown(self, user, client_user, service):
        Booking.objects.create(service=service, client=client_user)
        data = AdminDashboardService().load(tab='analytics')
        assert data.analytics['bookings'] == {'pending': 1}


class TestMergeActivity:

    def _entries(self, kind, count):
        return [
            ActivityEntry(kind, f"{kind} {i}", '', NOW - timedelta(hours=i * 2 + (kind == 'service')), i)
            for i in range(count)
        ]

    def test_newest_first_and_capped(self):
        service = AdminDashboardService(now=NOW, config={'recent_activity_limit': 4})
        merged = service.merge_activity(self._entries('user', 5), self._entries('service', 5))
        assert [entry.title for entry in merged] == ['user 0', 'service 0', 'user 1', 'service 1']


# =============================================================================
# Row actions
# =============================================================================

@pytest.mark.django_db
class TestRowActions:

    def test_suspend_user(self, user, admin_user):
        AdminDashboardService().set_user_status(user.pk, 'suspended', acting_user=admin_user)
        user.refresh_from_db()
        assert user.status == User.Status.SUSPENDED
        assert not user.is_active

    def test_cannot_target_self(self, admin_user):
        service = AdminDashboardService()
        with pytest.raises(AdminActionError):
            service.set_user_status(admin_user.pk, 'suspended', acting_user=admin_user)
        with pytest.raises(AdminActionError):
            service.delete_user(admin_user.pk, acting_user=admin_user)

    def test_unknown_status(self, user):
        with pytest.raises(AdminActionError):
            AdminDashboardService().set_user_status(user.pk, 'banned')

    def test_missing_user(self):
        with pytest.raises(AdminActionError):
            AdminDashboardService().delete_user(98765)

    def test_service_status_and_delete(self, service, admin_user):
        actions = AdminDashboardService()
        actions.set_service_status(service.pk, Service.Status.SUSPENDED, acting_user=admin_user)
        service.refresh_from_db()
        assert service.status == Service.Status.SUSPENDED

        actions.delete_service(service.pk, acting_user=admin_user)
        assert not Service.objects.filter(pk=service.pk).exists()
