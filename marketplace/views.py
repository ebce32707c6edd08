"""
Marketplace views: browse pages and saved-search management.
"""

import logging

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.db.models import Count, Q, Sum
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse_lazy
from django.views import View
from django.views.generic import ListView

from core.navigation import RedirectNavigator

from .forms import SavedSearchForm
from .models import SavedSearch
from .search import run_saved_search, search

logger = logging.getLogger(__name__)


# =============================================================================
# Browse pages
# =============================================================================

class BrowseView(LoginRequiredMixin, ListView):
    """Text search over one marketplace category."""
    login_url = reverse_lazy('core:login')
    template_name = 'marketplace/browse.html'
    context_object_name = 'results'
    paginate_by = 20
    category = None

    def get_queryset(self):
        self.query = self.request.GET.get('q', '').strip()
        return search(self.category, self.query)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['category'] = self.category
        context['category_label'] = SavedSearch.Category(self.category).label
        context['query'] = self.query
        return context

    def render_to_response(self, context, **response_kwargs):
        """Return partial template for HTMX requests."""
        if self.request.htmx:
            self.template_name = 'marketplace/partials/results.html'
        return super().render_to_response(context, **response_kwargs)


class ServiceBrowseView(BrowseView):
    category = SavedSearch.Category.SERVICES


class ProjectBrowseView(BrowseView):
    category = SavedSearch.Category.PROJECTS


class FreelancerBrowseView(BrowseView):
    category = SavedSearch.Category.FREELANCERS


# =============================================================================
# Saved searches
# =============================================================================

class SavedSearchListView(LoginRequiredMixin, ListView):
    """The user's saved searches with summary stats."""
    login_url = reverse_lazy('core:login')
    template_name = 'marketplace/saved_searches.html'
    context_object_name = 'saved_searches'

    def get_queryset(self):
        return SavedSearch.objects.filter(user=self.request.user)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['stats'] = self.get_queryset().aggregate(
            total=Count('id'),
            with_notifications=Count('id', filter=Q(notifications=True)),
            total_results=Sum('result_count'),
        )
        context['stats']['total_results'] = context['stats']['total_results'] or 0
        context['form'] = SavedSearchForm()
        return context


class SavedSearchCreateView(LoginRequiredMixin, View):
    login_url = reverse_lazy('core:login')
    template_name = 'marketplace/saved_search_form.html'

    def get(self, request):
        return render(request, self.template_name, {'form': SavedSearchForm()})

    def post(self, request):
        form = SavedSearchForm(request.POST)
        if form.is_valid():
            saved = form.save(commit=False)
            saved.user = request.user
            saved.save()
            logger.info("User %s saved search %s", request.user.pk, saved.pk)
            messages.success(request, f'Saved search "{saved.name}" created.')
            return redirect('marketplace:saved_searches')
        return render(request, self.template_name, {'form': form}, status=400)


class SavedSearchUpdateView(LoginRequiredMixin, View):
    login_url = reverse_lazy('core:login')
    template_name = 'marketplace/saved_search_form.html'

    def get(self, request, pk):
        saved = get_object_or_404(SavedSearch, pk=pk, user=request.user)
        return render(request, self.template_name, {'form': SavedSearchForm(instance=saved), 'saved_search': saved})

    def post(self, request, pk):
        saved = get_object_or_404(SavedSearch, pk=pk, user=request.user)
        form = SavedSearchForm(request.POST, instance=saved)
        if form.is_valid():
            form.save()
            messages.success(request, f'Saved search "{saved.name}" updated.')
            return redirect('marketplace:saved_searches')
        return render(request, self.template_name, {'form': form, 'saved_search': saved}, status=400)


class SavedSearchDeleteView(LoginRequiredMixin, View):
    login_url = reverse_lazy('core:login')

    def post(self, request, pk):
        saved = get_object_or_404(SavedSearch, pk=pk, user=request.user)
        name = saved.name
        saved.delete()
        logger.info("User %s deleted saved search %s", request.user.pk, pk)

        if request.htmx:
            return render(request, 'marketplace/partials/empty.html')

        messages.success(request, f'Saved search "{name}" deleted.')
        return redirect('marketplace:saved_searches')


class SavedSearchRunView(LoginRequiredMixin, View):
    """Re-run a saved search and jump to its category's browse page."""
    login_url = reverse_lazy('core:login')

    def post(self, request, pk):
        saved = get_object_or_404(SavedSearch, pk=pk, user=request.user)
        count = run_saved_search(saved)
        messages.info(request, f'"{saved.name}" found {count} results.')

        navigator = RedirectNavigator()
        navigator.set_active_page(saved.category, query=saved.query)
        return navigator.response(request)
