"""
Tests for marketplace/search.py and marketplace/forms.py.

Covers:
- search() per category: only active services, open projects, active freelancers
- Category filter and unknown categories
- run_saved_search(): result_count and last_run are refreshed
- SavedSearchForm filters parsing
"""

import os
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')

from datetime import datetime, timezone as dt_timezone
from unittest.mock import patch

import pytest

from core.models import User
from marketplace.forms import SavedSearchForm
from marketplace.models import Project, SavedSearch, Service
from marketplace.search import run_saved_search, search
from verification.models import FreelancerVerification

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def catalog(user):
    client = User.objects.create_user(
        username='mona', email='mona@example.com', password='pass12345',
        full_name='Mona Khalil', role=User.Role.CLIENT,
    )
    Service.objects.create(provider=user, title='Logo design', category='Graphic Design')
    Service.objects.create(provider=user, title='Brand guide', description='Full logo system', category='Graphic Design')
    Service.objects.create(provider=user, title='Logo sketch', status=Service.Status.SUSPENDED)
    Project.objects.create(client=client, title='Translate website', category='Translation')
    Project.objects.create(client=client, title='Translate menu', status=Project.Status.COMPLETED)
    with patch('verification.signals.send_alert'):
        FreelancerVerification.objects.create(
            user=user, job_title='UI/UX Designer', specialization='UI/UX Design',
            status=FreelancerVerification.Status.APPROVED,
        )
    return client


@pytest.mark.django_db
class TestSearch:

    def test_services_match_title_or_description(self, catalog):
        titles = sorted(search('services', 'logo').values_list('title', flat=True))
        assert titles == ['Brand guide', 'Logo design']

    def test_services_category_filter(self, catalog):
        assert search('services', '', {'category': 'graphic'}).count() == 2
        assert search('services', '', {'category': 'video'}).count() == 0

    def test_projects_open_only(self, catalog):
        assert list(search('projects', 'translate').values_list('title', flat=True)) == ['Translate website']

    def test_freelancers_by_job_title(self, catalog, user):
        assert list(search('freelancers', 'designer')) == [user]
        assert list(search('freelancers', 'mona')) == []

    def test_suspended_freelancer_hidden(self, catalog, user):
        User.objects.filter(pk=user.pk).update(status=User.Status.SUSPENDED)
        assert search('freelancers', '').count() == 0

    def test_blank_query_returns_everything_active(self, catalog):
        assert search('services', '   ').count() == 2

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            search('gigs', 'logo')


@pytest.mark.django_db
class TestRunSavedSearch:

    def test_refreshes_count_and_timestamp(self, catalog, user):
        saved = SavedSearch.objects.create(user=user, name='Logos', query='logo', category='services')

        assert run_saved_search(saved, now=NOW) == 2

        saved.refresh_from_db()
        assert saved.result_count == 2
        assert saved.last_run == NOW

    def test_uses_stored_filters(self, catalog, user):
        saved = SavedSearch.objects.create(
            user=user, name='Translation', category='projects', filters={'category': 'translation'},
        )
        assert run_saved_search(saved) == 1


class TestSavedSearchForm:

    def _form(self, **overrides):
        data = {'name': 'Designers', 'query': 'design', 'category': 'freelancers', 'filters_text': ''}
        data.update(overrides)
        return SavedSearchForm(data)

    def test_filters_parsed(self):
        form = self._form(filters_text='category = design\n\nrating=4+')
        assert form.is_valid(), form.errors
        assert form.cleaned_data['filters_text'] == {'category': 'design', 'rating': '4+'}

    def test_bad_filter_line(self):
        form = self._form(filters_text='just words')
        assert not form.is_valid()
        assert 'filters_text' in form.errors

    def test_blank_name(self):
        form = self._form(name='   ')
        assert not form.is_valid()
        assert 'name' in form.errors
