"""
Tests for the seed_demo management command.
"""

import os
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')

import io

import pytest
from django.core.management import call_command

from core.auth import is_admin
from core.models import User
from marketplace import demo_data
from marketplace.models import EscrowItem, SavedSearch, Service


def _seed(*args):
    out = io.StringIO()
    call_command('seed_demo', *args, stdout=out)
    return out.getvalue()


@pytest.mark.django_db
class TestSeedDemo:

    def test_creates_rows(self):
        output = _seed()

        assert User.objects.count() == len(demo_data.DEMO_USERS)
        assert Service.objects.count() == len(demo_data.DEMO_SERVICES)
        assert EscrowItem.objects.count() == len(demo_data.DEMO_ESCROW)
        assert SavedSearch.objects.count() == len(demo_data.DEMO_SAVED_SEARCHES)
        assert 'Demo data ready' in output

    def test_is_idempotent(self):
        _seed()
        _seed()
        assert User.objects.count() == len(demo_data.DEMO_USERS)
        assert EscrowItem.objects.count() == len(demo_data.DEMO_ESCROW)

    def test_demo_admin_passes_admin_rule(self):
        _seed()
        admin = User.objects.get(username='admin')
        assert is_admin(admin)
        assert admin.check_password(demo_data.DEMO_PASSWORD)

    def test_reset(self):
        _seed()
        output = _seed('--reset')
        assert 'Deleted' in output
        assert User.objects.count() == len(demo_data.DEMO_USERS)
