"""
Tests for adminpanel/escrow.py.

Covers:
- filter_escrow(): name search across project/client/freelancer, status filter
- escrow_totals(): held counts split by currency
- days_until_auto_release(): rounded up, negative once overdue
- apply_action(): only held items move; resolution is stamped
- write_csv()
"""

import os
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')

import csv
import io
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from adminpanel.escrow import (
    CSV_HEADER,
    apply_action,
    days_until_auto_release,
    escrow_totals,
    filter_escrow,
    write_csv,
)
from adminpanel.exceptions import EscrowActionError
from core.models import User
from marketplace.models import EscrowItem

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def client_user(db):
    return User.objects.create_user(
        username='mona', email='mona@example.com', password='pass12345',
        full_name='Mona Khalil', role=User.Role.CLIENT,
    )


@pytest.fixture
def items(user, client_user):
    make = EscrowItem.objects.create
    return {
        'held_hours': make(project_title='Logo design', client=client_user, freelancer=user,
                           amount=Decimal('3'), auto_release_date=NOW + timedelta(days=2, hours=1)),
        'held_aed': make(project_title='Landing page', client=client_user, freelancer=user,
                         amount=Decimal('250'), currency=EscrowItem.Currency.AED),
        'disputed': make(project_title='Translation', client=client_user, freelancer=user,
                         amount=Decimal('5'), status=EscrowItem.Status.DISPUTED),
        'released': make(project_title='Video edit', client=client_user, freelancer=user,
                         amount=Decimal('2'), status=EscrowItem.Status.RELEASED),
    }


@pytest.mark.django_db
class TestFilterAndTotals:

    def test_search_by_project(self, items):
        assert list(filter_escrow(search='LOGO')) == [items['held_hours']]

    def test_search_by_party_name(self, items):
        assert filter_escrow(search='khalil').count() == 4
        assert filter_escrow(search='Al Amiri').count() == 4
        assert filter_escrow(search='nobody').count() == 0

    def test_status_filter(self, items):
        assert list(filter_escrow(status='disputed')) == [items['disputed']]
        assert filter_escrow(status='all').count() == 4

    def test_totals(self, items):
        totals = escrow_totals()
        assert totals.held_count == 2
        assert totals.held_hours == Decimal('3')
        assert totals.held_aed == Decimal('250')
        assert totals.disputed_count == 1


class TestDaysUntilAutoRelease:

    def test_rounds_up(self):
        item = EscrowItem(auto_release_date=NOW + timedelta(days=2, hours=1))
        assert days_until_auto_release(item, NOW) == 3

    def test_overdue(self):
        item = EscrowItem(auto_release_date=NOW - timedelta(days=2))
        assert days_until_auto_release(item, NOW) == -2

    def test_no_date(self):
        assert days_until_auto_release(EscrowItem(), NOW) is None


# =============================================================================
# Actions
# =============================================================================

@pytest.mark.django_db
class TestApplyAction:

    def test_release_held(self, items, admin_user):
        item = apply_action(items['held_hours'].pk, 'release', acting_user=admin_user, now=NOW)
        item.refresh_from_db()
        assert item.status == EscrowItem.Status.RELEASED
        assert item.resolved_by == admin_user
        assert item.resolved_at == NOW

    def test_refund_held(self, items):
        item = apply_action(items['held_aed'].pk, 'refund')
        assert item.status == EscrowItem.Status.REFUNDED

    @pytest.mark.parametrize('key', ['disputed', 'released'])
    def test_only_held_items(self, items, key):
        with pytest.raises(EscrowActionError):
            apply_action(items[key].pk, 'release')
        items[key].refresh_from_db()
        assert items[key].resolved_at is None

    def test_unknown_action(self, items):
        with pytest.raises(EscrowActionError):
            apply_action(items['held_hours'].pk, 'dispute')

    def test_missing_item(self, db):
        with pytest.raises(EscrowActionError):
            apply_action(424242, 'refund')


@pytest.mark.django_db
class TestCsv:

    def test_rows(self, items):
        stream = write_csv(filter_escrow(status='held').order_by('pk'), io.StringIO())
        rows = list(csv.reader(io.StringIO(stream.getvalue())))
        assert rows[0] == CSV_HEADER
        assert len(rows) == 3
        first = dict(zip(CSV_HEADER, rows[1]))
        assert first['project_title'] == 'Logo design'
        assert first['client'] == 'Mona Khalil'
        assert first['freelancer'] == 'Sara Al Amiri'
        assert first['currency'] == 'hours'
        assert first['due_date'] == ''
