"""
Tests for core/auth.py and core/navigation.py.

Covers:
- is_admin(): verified exact admin email or admin pk; usernames never count
- CurrentUser snapshot
- page_url() / RedirectNavigator, including htmx client redirects
"""

import os
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')

from unittest.mock import MagicMock

import pytest
from django.contrib.auth.models import AnonymousUser

from core.auth import CurrentUser, is_admin
from core.navigation import RedirectNavigator, page_url


class TestIsAdmin:

    def test_admin_email(self):
        assert is_admin(CurrentUser(id='7', email='admin@waqti.com', email_verified=True))

    def test_admin_email_requires_verification(self):
        assert not is_admin(CurrentUser(id='7', email='admin@waqti.com'))

    def test_admin_email_is_exact(self):
        assert not is_admin(CurrentUser(id='7', email='Admin@Waqti.com', email_verified=True))

    def test_admin_id(self, settings):
        settings.WAQTI_CONFIG = {**settings.WAQTI_CONFIG, 'admin_user_id': '42'}
        assert is_admin(CurrentUser(id='42', email='someone@example.com'))
        assert not is_admin(CurrentUser(id='43', email='someone@example.com'))

    def test_username_never_grants_admin(self, settings):
        settings.WAQTI_CONFIG = {**settings.WAQTI_CONFIG, 'admin_user_id': 'admin'}
        assert not is_admin(CurrentUser(id='12', email='x@example.com', username='admin'))

    def test_no_admin_id_by_default(self, settings):
        assert settings.WAQTI_CONFIG['admin_user_id'] == ''
        assert not is_admin(CurrentUser(id='', email='x@example.com'))

    def test_regular_user(self):
        assert not is_admin(CurrentUser(id='12', email='sara@example.com', username='sara'))

    def test_anonymous(self):
        assert not is_admin(AnonymousUser())
        assert not is_admin(None)

    def test_configured_values(self, settings):
        settings.WAQTI_CONFIG = {**settings.WAQTI_CONFIG, 'admin_email': 'ops@waqti.com', 'admin_user_id': ''}
        assert is_admin(CurrentUser(id='1', email='ops@waqti.com', email_verified=True))
        assert not is_admin(CurrentUser(id='admin', email='admin@waqti.com', email_verified=True))

    @pytest.mark.django_db
    def test_model_users(self, user, admin_user):
        assert is_admin(admin_user)
        assert not is_admin(user)

    @pytest.mark.django_db
    def test_unverified_model_user_with_admin_email(self, django_user_model):
        squatter = django_user_model.objects.create_user(
            username='early_bird', email='admin@waqti.com', password='pass12345',
        )
        assert not is_admin(squatter)


@pytest.mark.django_db
class TestCurrentUser:

    def test_from_user(self, user):
        current = CurrentUser.from_user(user)
        assert current.id == str(user.pk)
        assert current.email == 'sara@example.com'
        assert current.full_name == 'Sara Al Amiri'


# =============================================================================
# Navigation
# =============================================================================

class TestPageUrl:

    def test_known_page(self):
        assert page_url('dashboard') == '/dashboard/'

    def test_query_is_encoded(self):
        assert page_url('services', 'logo design') == '/marketplace/services/?q=logo+design'

    def test_unknown_page(self):
        with pytest.raises(ValueError):
            page_url('settings')


class TestRedirectNavigator:

    def test_plain_redirect(self):
        navigator = RedirectNavigator()
        assert not navigator.navigated
        navigator.set_active_page('freelancer-verification')
        response = navigator.response(MagicMock(htmx=False))
        assert response.status_code == 302
        assert response.url == '/verification/'

    def test_htmx_client_redirect(self):
        navigator = RedirectNavigator()
        navigator.set_active_page('dashboard')
        response = navigator.response(MagicMock(htmx=True))
        assert response['HX-Redirect'] == '/dashboard/'
