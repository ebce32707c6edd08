"""
Core views for the Waqti platform.
Handles authentication, onboarding, dashboard, and home page.
"""

import logging

from django.contrib import messages
from django.contrib.auth import login, logout
from django.contrib.auth.mixins import LoginRequiredMixin
from django.contrib.auth.views import LoginView as DjangoLoginView
from django.shortcuts import redirect, render
from django.urls import reverse_lazy
from django.views import View
from django.views.generic import TemplateView

from marketplace.models import EscrowItem, SavedSearch, Service

from .auth import is_admin
from .forms import RoleSelectionForm, SignupForm
from .models import User
from .navigation import RedirectNavigator
from .onboarding import (
    WALKTHROUGH_SLIDES,
    Walkthrough,
    complete_walkthrough,
    cooldown_remaining,
    destination_for_role,
    request_verification_email,
)

logger = logging.getLogger(__name__)


class HomeView(TemplateView):
    """Landing page for non-authenticated users."""
    template_name = 'core/home.html'

    def dispatch(self, request, *args, **kwargs):
        # Redirect authenticated users to dashboard
        if request.user.is_authenticated:
            return redirect('core:dashboard')
        return super().dispatch(request, *args, **kwargs)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['services_count'] = Service.objects.filter(status=Service.Status.ACTIVE).count()
        context['freelancers_count'] = User.objects.filter(role=User.Role.FREELANCER).count()
        return context


class DashboardView(LoginRequiredMixin, TemplateView):
    """Main dashboard for authenticated users showing balance and next steps."""
    template_name = 'core/dashboard.html'
    login_url = reverse_lazy('core:login')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        user = self.request.user

        context['balance'] = user.balance
        context['role'] = user.get_role_display() if user.role else ''
        context['needs_role'] = not user.role
        context['walkthrough_completed'] = user.walkthrough_completed
        context['email_verified'] = user.email_verified
        context['is_admin_user'] = is_admin(user)
        context['services'] = Service.objects.filter(provider=user)[:5]
        context['saved_search_count'] = SavedSearch.objects.filter(user=user).count()
        context['escrow_held'] = EscrowItem.objects.filter(
            client=user, status=EscrowItem.Status.HELD,
        ).count()

        verification = getattr(user, 'freelancer_verification', None)
        context['verification'] = verification
        context['show_verification_cta'] = (
            user.role == User.Role.FREELANCER
            and (verification is None or verification.status in ('pending', 'in_progress', 'rejected'))
        )
        return context


class CustomLoginView(DjangoLoginView):
    """Custom login view using Django's built-in authentication."""
    template_name = 'core/login.html'
    redirect_authenticated_user = True

    def get_success_url(self):
        return reverse_lazy('core:dashboard')

    def form_valid(self, form):
        user = form.get_user()
        if user.is_suspended:
            messages.error(self.request, 'Your account is suspended. Please contact support.')
            return redirect('core:login')
        messages.success(self.request, f'Welcome back, {user.display_name}!')
        return super().form_valid(form)


class CustomLogoutView(View):
    """Logs out on GET or POST and returns to the login page."""

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            logout(request)
            messages.info(request, 'You have been logged out successfully.')
        return redirect('core:login')


class SignupView(View):
    """Registration view; new users continue to email verification."""
    template_name = 'core/signup.html'

    def dispatch(self, request, *args, **kwargs):
        # Redirect authenticated users to dashboard
        if request.user.is_authenticated:
            return redirect('core:dashboard')
        return super().dispatch(request, *args, **kwargs)

    def get(self, request):
        form = SignupForm()
        return render(request, self.template_name, {'form': form})

    def post(self, request):
        form = SignupForm(request.POST)
        if form.is_valid():
            user = form.save()
            login(request, user, backend='django.contrib.auth.backends.ModelBackend')
            request_verification_email(user)
            logger.info("New account %s registered", user.pk)
            messages.success(request, f'Welcome to Waqti, {user.display_name}! You have {user.balance:g} free hours.')
            return redirect('core:email_verification')
        return render(request, self.template_name, {'form': form})


# =============================================================================
# Onboarding
# =============================================================================

class RoleSelectionView(LoginRequiredMixin, View):
    template_name = 'core/role_selection.html'
    login_url = reverse_lazy('core:login')

    def get(self, request):
        form = RoleSelectionForm(initial={'role': request.user.role or None})
        return render(request, self.template_name, {'form': form})

    def post(self, request):
        form = RoleSelectionForm(request.POST)
        if not form.is_valid():
            return render(request, self.template_name, {'form': form}, status=400)

        user = request.user
        user.role = form.cleaned_data['role']
        user.save(update_fields=['role', 'updated_at'])
        logger.info("User %s selected role %s", user.pk, user.role)

        navigator = RedirectNavigator()
        navigator.set_active_page(destination_for_role(user.role))
        return navigator.response(request)


WALKTHROUGH_SESSION_KEY = 'walkthrough_slide'


class WalkthroughView(LoginRequiredMixin, View):
    """Six-slide welcome tour.  Finishing or skipping lands on the dashboard."""
    template_name = 'core/walkthrough.html'
    login_url = reverse_lazy('core:login')

    def _state(self, request):
        return Walkthrough(index=request.session.get(WALKTHROUGH_SESSION_KEY, 0))

    def _render(self, request, state):
        request.session[WALKTHROUGH_SESSION_KEY] = state.index
        template = 'core/partials/walkthrough_slide.html' if request.htmx else self.template_name
        return render(request, template, {
            'walkthrough': state,
            'slide': state.slide,
            'slides': WALKTHROUGH_SLIDES,
        })

    def get(self, request):
        return self._render(request, self._state(request))

    def post(self, request):
        state = self._state(request)
        action = request.POST.get('action', 'next')
        if action == 'next':
            state.next()
        elif action == 'previous':
            state.previous()
        elif action == 'goto':
            try:
                state.go_to(int(request.POST.get('index', '')))
            except (ValueError, IndexError):
                messages.error(request, 'That slide does not exist.')
        elif action == 'skip':
            state.skip()

        if state.completed:
            complete_walkthrough(request.user)
            request.session.pop(WALKTHROUGH_SESSION_KEY, None)
            navigator = RedirectNavigator()
            navigator.set_active_page('dashboard')
            return navigator.response(request)
        return self._render(request, state)


class EmailVerificationView(LoginRequiredMixin, View):
    """Waiting page after signup: resend (with cooldown) or confirm."""
    template_name = 'core/email_verification.html'
    login_url = reverse_lazy('core:login')

    def _render(self, request, status=200):
        user = request.user
        return render(request, self.template_name, {
            'email': user.email,
            'cooldown': cooldown_remaining(user.verification_email_sent_at),
        }, status=status)

    def get(self, request):
        if request.user.email_verified:
            return redirect('core:dashboard')
        return self._render(request)

    def post(self, request):
        user = request.user
        action = request.POST.get('action')

        if action == 'resend':
            remaining = request_verification_email(user)
            if remaining:
                messages.warning(request, f'Please wait {remaining} seconds before requesting another email.')
            else:
                messages.success(request, f'Verification email sent to {user.email}.')
            return self._render(request)

        if action == 'check':
            user.refresh_from_db(fields=['email_verified'])
            if user.email_verified:
                messages.success(request, 'Your email is verified.')
                navigator = RedirectNavigator()
                navigator.set_active_page('dashboard')
                return navigator.response(request)
            messages.info(request, 'We have not seen your confirmation yet. Check your inbox and try again.')
            return self._render(request)

        if action == 'back_to_login':
            logout(request)
            return redirect('core:login')

        messages.error(request, 'Invalid action.')
        return self._render(request, status=400)
