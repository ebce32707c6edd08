"""
Page navigation collaborator.

Controllers ask for a page by name (``set_active_page('dashboard')``); the
``RedirectNavigator`` turns that request into the HTTP redirect the view
returns.
"""

from typing import Optional, Protocol
from urllib.parse import urlencode

from django.shortcuts import redirect
from django.urls import reverse
from django_htmx.http import HttpResponseClientRedirect

PAGE_ROUTES = {
    'home': 'core:home',
    'login': 'core:login',
    'dashboard': 'core:dashboard',
    'role-selection': 'core:role_selection',
    'welcome-walkthrough': 'core:walkthrough',
    'email-verification': 'core:email_verification',
    'freelancer-verification': 'verification:wizard',
    'services': 'marketplace:services',
    'projects': 'marketplace:projects',
    'freelancers': 'marketplace:freelancers',
    'saved-searches': 'marketplace:saved_searches',
    'admin-dashboard': 'adminpanel:dashboard',
    'escrow-management': 'adminpanel:escrow',
}


class Navigator(Protocol):
    def set_active_page(self, page: str, query: Optional[str] = None) -> None:
        ...


def page_url(page: str, query: Optional[str] = None) -> str:
    try:
        url = reverse(PAGE_ROUTES[page])
    except KeyError:
        raise ValueError(f"Unknown page: {page}") from None
    if query:
        url = f"{url}?{urlencode({'q': query})}"
    return url


class RedirectNavigator:
    """Records the last requested page; ``response()`` redirects there."""

    def __init__(self):
        self.page: Optional[str] = None
        self.url: Optional[str] = None

    def set_active_page(self, page: str, query: Optional[str] = None) -> None:
        self.url = page_url(page, query)
        self.page = page

    @property
    def navigated(self) -> bool:
        return self.url is not None

    def response(self, request=None):
        """Redirect to the requested page; htmx requests get a client-side redirect."""
        if request is not None and getattr(request, 'htmx', False):
            return HttpResponseClientRedirect(self.url)
        return redirect(self.url)
