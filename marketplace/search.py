"""
Marketplace search used by the browse pages and saved searches.
"""

import logging

from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone

from .models import Project, SavedSearch, Service

logger = logging.getLogger(__name__)


def _services(query, filters):
    qs = Service.objects.filter(status=Service.Status.ACTIVE).select_related('provider')
    if query:
        qs = qs.filter(
            Q(title__icontains=query)
            | Q(description__icontains=query)
            | Q(category__icontains=query)
        )
    if filters.get('category'):
        qs = qs.filter(category__icontains=filters['category'])
    return qs


def _projects(query, filters):
    qs = Project.objects.filter(status=Project.Status.OPEN).select_related('client')
    if query:
        qs = qs.filter(
            Q(title__icontains=query)
            | Q(description__icontains=query)
            | Q(category__icontains=query)
        )
    if filters.get('category'):
        qs = qs.filter(category__icontains=filters['category'])
    return qs


def _freelancers(query, filters):
    User = get_user_model()
    qs = User.objects.filter(role=User.Role.FREELANCER, status=User.Status.ACTIVE)
    if query:
        qs = qs.filter(
            Q(full_name__icontains=query)
            | Q(username__icontains=query)
            | Q(freelancer_verification__job_title__icontains=query)
            | Q(freelancer_verification__specialization__icontains=query)
        )
    if filters.get('category'):
        qs = qs.filter(freelancer_verification__specialization__icontains=filters['category'])
    return qs.distinct()


SEARCHERS = {
    SavedSearch.Category.SERVICES: _services,
    SavedSearch.Category.PROJECTS: _projects,
    SavedSearch.Category.FREELANCERS: _freelancers,
}


def search(category, query='', filters=None):
    """Queryset of marketplace objects in ``category`` matching ``query``."""
    try:
        searcher = SEARCHERS[SavedSearch.Category(category)]
    except ValueError:
        raise ValueError(f"Unknown search category: {category}") from None
    return searcher((query or '').strip(), filters or {})


def run_saved_search(saved_search, now=None):
    """Refresh result_count and stamp last_run.  Returns the result count."""
    count = search(saved_search.category, saved_search.query, saved_search.filters).count()
    saved_search.result_count = count
    saved_search.last_run = now or timezone.now()
    saved_search.save(update_fields=['result_count', 'last_run', 'updated_at'])
    logger.info("Ran saved search %s (%s): %d results", saved_search.pk, saved_search.category, count)
    return count
