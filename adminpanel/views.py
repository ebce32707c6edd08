"""
Admin panel views: dashboard tabs, row actions, escrow oversight and the
verification review queue.  Every view requires the admin rule; anyone else
is redirected to their dashboard.
"""

import io
import logging

from django.contrib import messages
from django.http import HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views import View

from core.auth import AdminRequiredMixin
from marketplace.models import EscrowItem, Service
from verification.exceptions import ReviewError
from verification.models import FreelancerVerification
from verification.review import review_verification
from verification.scoring import verdict

from .escrow import (
    ACTIONS,
    STATUS_FILTERS,
    apply_action,
    days_until_auto_release,
    escrow_totals,
    filter_escrow,
    write_csv,
)
from .exceptions import AdminActionError
from .forms import VerificationReviewForm
from .services import TABS, AdminDashboardService

logger = logging.getLogger(__name__)


# =============================================================================
# Dashboard
# =============================================================================

class AdminDashboardView(AdminRequiredMixin, View):
    template_name = 'adminpanel/dashboard.html'

    def get(self, request):
        tab = request.GET.get('tab', 'overview')
        search = request.GET.get('q', '').strip()
        status = request.GET.get('status', '').strip()

        data = AdminDashboardService().load(tab=tab, search=search, status=status)
        for section, error in data.errors.items():
            messages.warning(request, error)

        context = {
            'data': data,
            'tabs': TABS,
            'tab': data.tab,
            'search': search,
            'status': status,
        }
        if request.htmx and data.tab in ('users', 'services'):
            return render(request, f'adminpanel/partials/{data.tab}_table.html', context)
        return render(request, self.template_name, context)


class UserActionView(AdminRequiredMixin, View):
    def post(self, request, pk):
        action = request.POST.get('action')
        service = AdminDashboardService()
        try:
            if action == 'delete':
                service.delete_user(pk, acting_user=request.user)
                messages.success(request, 'User deleted.')
            elif action == 'suspend':
                service.set_user_status(pk, 'suspended', acting_user=request.user)
                messages.success(request, 'User suspended.')
            elif action == 'activate':
                service.set_user_status(pk, 'active', acting_user=request.user)
                messages.success(request, 'User activated.')
            else:
                messages.error(request, 'Invalid action.')
        except AdminActionError as exc:
            messages.error(request, str(exc))
        return redirect(f"{reverse('adminpanel:dashboard')}?tab=users")


class ServiceActionView(AdminRequiredMixin, View):
    def post(self, request, pk):
        action = request.POST.get('action')
        service = AdminDashboardService()
        try:
            if action == 'delete':
                service.delete_service(pk, acting_user=request.user)
                messages.success(request, 'Service deleted.')
            elif action == 'suspend':
                service.set_service_status(pk, Service.Status.SUSPENDED, acting_user=request.user)
                messages.success(request, 'Service suspended.')
            elif action == 'activate':
                service.set_service_status(pk, Service.Status.ACTIVE, acting_user=request.user)
                messages.success(request, 'Service activated.')
            else:
                messages.error(request, 'Invalid action.')
        except AdminActionError as exc:
            messages.error(request, str(exc))
        return redirect(f"{reverse('adminpanel:dashboard')}?tab=services")


# =============================================================================
# Escrow
# =============================================================================

def _escrow_filters(request):
    search = request.GET.get('q', '').strip()
    status = request.GET.get('status', 'all')
    if status not in STATUS_FILTERS:
        status = 'all'
    return search, status


class EscrowListView(AdminRequiredMixin, View):
    template_name = 'adminpanel/escrow_list.html'

    def get(self, request):
        search, status = _escrow_filters(request)
        now = timezone.now()
        items = list(filter_escrow(search=search, status=status))
        for item in items:
            item.days_until_release = days_until_auto_release(item, now)
        context = {
            'items': items,
            'totals': escrow_totals(),
            'search': search,
            'status': status,
            'status_filters': STATUS_FILTERS,
        }
        if request.htmx:
            return render(request, 'adminpanel/partials/escrow_table.html', context)
        return render(request, self.template_name, context)


class EscrowDetailView(AdminRequiredMixin, View):
    template_name = 'adminpanel/escrow_detail.html'

    def get(self, request, pk):
        item = get_object_or_404(EscrowItem.objects.select_related('client', 'freelancer'), pk=pk)
        item.days_until_release = days_until_auto_release(item)
        return render(request, self.template_name, {'item': item})


class EscrowActionView(AdminRequiredMixin, View):
    """GET shows the confirmation step; POST releases or refunds."""
    template_name = 'adminpanel/escrow_confirm.html'

    def get(self, request, pk, action):
        item = get_object_or_404(EscrowItem, pk=pk)
        if action not in ACTIONS:
            messages.error(request, 'Invalid action.')
            return redirect('adminpanel:escrow')
        if item.status != EscrowItem.Status.HELD:
            messages.error(request, 'Only held escrow can be released or refunded.')
            return redirect('adminpanel:escrow_detail', pk=pk)
        return render(request, self.template_name, {'item': item, 'action': action})

    def post(self, request, pk, action):
        try:
            item = apply_action(pk, action, acting_user=request.user)
        except AdminActionError as exc:
            messages.error(request, str(exc))
            return redirect('adminpanel:escrow')
        verb = 'released to the freelancer' if action == 'release' else 'refunded to the client'
        messages.success(request, f'{item.amount} {item.currency} {verb}.')
        return redirect('adminpanel:escrow')


class EscrowExportView(AdminRequiredMixin, View):
    def get(self, request):
        search, status = _escrow_filters(request)
        buffer = write_csv(filter_escrow(search=search, status=status), io.StringIO())
        response = HttpResponse(buffer.getvalue(), content_type='text/csv')
        stamp = timezone.now().strftime('%Y%m%d')
        response['Content-Disposition'] = f'attachment; filename="escrow-{stamp}.csv"'
        logger.info("Escrow export by %s (search=%r status=%s)", request.user.pk, search, status)
        return response


# =============================================================================
# Verification review queue
# =============================================================================

class VerificationQueueView(AdminRequiredMixin, View):
    template_name = 'adminpanel/verification_queue.html'

    def get(self, request):
        status = request.GET.get('status', FreelancerVerification.Status.UNDER_REVIEW)
        verifications = FreelancerVerification.objects.select_related('user')
        if status != 'all':
            verifications = verifications.filter(status=status)
        return render(request, self.template_name, {
            'verifications': verifications,
            'status': status,
            'statuses': FreelancerVerification.Status.choices,
        })


class VerificationReviewView(AdminRequiredMixin, View):
    template_name = 'adminpanel/verification_review.html'

    def _context(self, verification, form):
        return {
            'verification': verification,
            'steps': verification.steps or {},
            'attachments': verification.attachments.all(),
            'reviews': verification.reviews.select_related('reviewer'),
            'score_verdict': verdict(verification.admission_score) if verification.admission_score is not None else '',
            'form': form,
        }

    def get(self, request, pk):
        verification = get_object_or_404(FreelancerVerification.objects.select_related('user'), pk=pk)
        return render(request, self.template_name, self._context(verification, VerificationReviewForm()))

    def post(self, request, pk):
        verification = get_object_or_404(FreelancerVerification, pk=pk)
        form = VerificationReviewForm(request.POST)
        if not form.is_valid():
            return render(request, self.template_name, self._context(verification, form), status=400)
        try:
            review_verification(
                verification,
                request.user,
                form.cleaned_data['decision'],
                comments=form.cleaned_data.get('comments', ''),
                checklist=form.checklist(),
            )
        except ReviewError as exc:
            messages.error(request, str(exc))
            return redirect('adminpanel:verification_review', pk=pk)
        messages.success(request, 'Review recorded.')
        return redirect('adminpanel:verifications')
