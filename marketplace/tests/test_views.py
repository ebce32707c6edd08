"""
Tests for marketplace/views.py.

Covers:
- Browse pages and their htmx partial
- Saved search create / edit / delete / run, owner only
"""

import os
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')

import pytest
from django.urls import reverse

from core.models import User
from marketplace.models import SavedSearch, Service


@pytest.fixture
def logged_in(client, user):
    client.force_login(user)
    return client


@pytest.fixture
def saved(user):
    return SavedSearch.objects.create(user=user, name='Logos', query='logo', category='services')


@pytest.fixture
def stranger(db):
    return User.objects.create_user(username='khalid', email='khalid@example.com', password='pass12345')


@pytest.mark.django_db
class TestBrowse:

    def test_services_page(self, logged_in, user):
        Service.objects.create(provider=user, title='Logo design')
        response = logged_in.get(reverse('marketplace:services'), {'q': 'logo'})
        assert response.status_code == 200
        assert response.context['query'] == 'logo'
        assert [s.title for s in response.context['results']] == ['Logo design']

    def test_htmx_partial(self, logged_in):
        response = logged_in.get(reverse('marketplace:projects'), HTTP_HX_REQUEST='true')
        assert '<html' not in response.content.decode()

    def test_login_required(self, client):
        response = client.get(reverse('marketplace:freelancers'))
        assert response.status_code == 302


@pytest.mark.django_db
class TestSavedSearchViews:

    def test_create(self, logged_in, user):
        response = logged_in.post(reverse('marketplace:saved_search_create'), {
            'name': 'Translators',
            'query': 'arabic',
            'category': 'freelancers',
            'filters_text': 'category=translation',
        })
        assert response.url == reverse('marketplace:saved_searches')
        saved = SavedSearch.objects.get(user=user)
        assert saved.filters == {'category': 'translation'}

    def test_create_invalid(self, logged_in):
        response = logged_in.post(reverse('marketplace:saved_search_create'), {'name': '', 'category': 'services'})
        assert response.status_code == 400

    def test_list_stats(self, logged_in, saved):
        SavedSearch.objects.filter(pk=saved.pk).update(result_count=7, notifications=True)
        response = logged_in.get(reverse('marketplace:saved_searches'))
        assert response.context['stats'] == {'total': 1, 'with_notifications': 1, 'total_results': 7}

    def test_edit(self, logged_in, saved):
        response = logged_in.post(reverse('marketplace:saved_search_edit', args=[saved.pk]), {
            'name': 'Logo designers', 'query': 'logo', 'category': 'services',
        })
        assert response.status_code == 302
        saved.refresh_from_db()
        assert saved.name == 'Logo designers'

    def test_delete_htmx(self, logged_in, saved):
        response = logged_in.post(reverse('marketplace:saved_search_delete', args=[saved.pk]), HTTP_HX_REQUEST='true')
        assert response.status_code == 200
        assert not SavedSearch.objects.exists()

    def test_run_redirects_to_category(self, logged_in, saved, user):
        Service.objects.create(provider=user, title='Logo design')
        response = logged_in.post(reverse('marketplace:saved_search_run', args=[saved.pk]))
        assert response.url == '/marketplace/services/?q=logo'
        saved.refresh_from_db()
        assert saved.result_count == 1
        assert saved.last_run is not None

    @pytest.mark.parametrize('name', ['saved_search_edit', 'saved_search_delete', 'saved_search_run'])
    def test_other_users_search_is_404(self, client, stranger, saved, name):
        client.force_login(stranger)
        response = client.post(reverse(f'marketplace:{name}', args=[saved.pk]), {'name': 'x', 'category': 'services'})
        assert response.status_code == 404
        assert SavedSearch.objects.filter(pk=saved.pk, name='Logos').exists()
