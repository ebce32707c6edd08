"""
Current-user snapshot and the admin rule.

Views build a ``CurrentUser`` from the request and pass it on explicitly;
nothing below reads the request globally.
"""

from dataclasses import dataclass

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.shortcuts import redirect
from django.urls import reverse_lazy


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: str
    full_name: str = ''
    username: str = ''
    email_verified: bool = False

    @classmethod
    def from_user(cls, user) -> 'CurrentUser':
        return cls(
            id=str(user.pk),
            email=user.email or '',
            full_name=getattr(user, 'full_name', '') or user.get_full_name(),
            username=user.username,
            email_verified=bool(getattr(user, 'email_verified', False)),
        )


def is_admin(user) -> bool:
    """
    Admin rule: verified exact match on the configured admin email, or the
    configured admin id matching the user's primary key.

    Usernames never grant admin; anyone can pick one at signup.
    """
    if user is None or not getattr(user, 'is_authenticated', True):
        return False
    if not isinstance(user, CurrentUser):
        user = CurrentUser.from_user(user)
    config = settings.WAQTI_CONFIG
    admin_email = config.get('admin_email') or ''
    admin_id = str(config.get('admin_user_id') or '')
    if admin_email and user.email_verified and user.email == admin_email:
        return True
    return bool(admin_id) and admin_id == user.id


class AdminRequiredMixin(LoginRequiredMixin):
    """Redirect anyone failing the admin rule back to the dashboard."""
    login_url = reverse_lazy('core:login')
    denied_redirect = 'core:dashboard'

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.handle_no_permission()
        if not is_admin(request.user):
            messages.error(request, 'You do not have access to the admin area.')
            return redirect(self.denied_redirect)
        return super().dispatch(request, *args, **kwargs)
