"""
Freelancer verification wizard views.

The wizard is one URL.  GET renders the active step from the record held in
the session; POST binds the active step's form, merges it into the record
through ``StepController`` and then performs the requested ``action``:

    save | next | back | goto | add_skill | remove_skill | remove_image |
    remove_certificate | remove_testimonial | complete_test | discard

Successful moves redirect (PRG); blocked moves and failed submissions
re-render with the inline error or banner.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import Http404, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse_lazy
from django.views import View
from django.views.generic import TemplateView

from core.navigation import RedirectNavigator

from .attachments import AttachmentHandle, release_all
from .controller import OutcomeKind, StepController
from .exceptions import AttachmentStagingError, VerificationError
from .forms import STEP_FORMS, initial_for
from .gate import SubmissionGate
from .models import FreelancerVerification
from .records import SPECIALIZATIONS, SUGGESTED_SKILLS
from .scoring import ADMISSION_QUESTIONS, PASS_THRESHOLD, verdict
from .session import clear_record, load_record, save_record
from .steps import WizardStep, progress, progress_percent
from .submission import OrmVerificationSubmitter

logger = logging.getLogger(__name__)

LOCKED_STATUSES = (
    FreelancerVerification.Status.UNDER_REVIEW,
    FreelancerVerification.Status.APPROVED,
)

UPLOAD_FAILED_MESSAGE = "We could not save your upload. Please try again."


def _staging_dir():
    return settings.WAQTI_CONFIG['staging_dir']


class VerificationWizardView(LoginRequiredMixin, View):
    """The 4-step freelancer verification wizard."""
    template_name = 'verification/wizard.html'
    partial_template_name = 'verification/partials/step.html'
    login_url = reverse_lazy('core:login')

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            existing = FreelancerVerification.objects.filter(user=request.user).first()
            if existing and existing.status in LOCKED_STATUSES:
                return redirect('verification:status')
        return super().dispatch(request, *args, **kwargs)

    def build_controller(self, request, record, navigator):
        return StepController(
            record=record,
            submitter=OrmVerificationSubmitter(request.user),
            navigator=navigator,
        )

    # -------------------------------------------------------------------------

    def get(self, request):
        record = load_record(request)
        controller = self.build_controller(request, record, RedirectNavigator())
        return self.render_step(request, controller)

    def post(self, request):
        record = load_record(request)
        navigator = RedirectNavigator()
        controller = self.build_controller(request, record, navigator)
        action, _, argument = request.POST.get('action', 'save').partition(':')

        if action == 'discard':
            released = controller.discard()
            clear_record(request)
            logger.info("User %s discarded verification draft (%d files)", request.user.pk, released)
            messages.info(request, 'Your verification draft was discarded.')
            return redirect('core:dashboard')

        form = self.bind_form(request, record)
        if form is not None and not form.is_valid():
            return self.render_step(request, controller, form=form, status=400)

        try:
            if form is not None:
                self.apply_form(controller, form)
            outcome = self.perform(controller, action, argument, request.POST)
        except (VerificationError, ValueError) as exc:
            logger.info("Wizard action %s rejected for user %s: %s", action, request.user.pk, exc)
            save_record(request, record)
            messages.error(request, str(exc))
            return self.render_step(request, controller, status=400)

        if outcome is not None and outcome.kind == OutcomeKind.SUBMITTED:
            clear_record(request)
            messages.success(request, 'Your verification was submitted and is now under review.')
            return navigator.response(request)

        save_record(request, record)

        if outcome is not None and outcome.kind == OutcomeKind.EXITED:
            return navigator.response(request)
        if outcome is not None and outcome.kind in (OutcomeKind.BLOCKED, OutcomeKind.SUBMIT_FAILED):
            return self.render_step(request, controller, issues=outcome.issues)
        if request.htmx:
            return self.render_step(request, controller)
        return redirect('verification:wizard')

    # -------------------------------------------------------------------------

    def bind_form(self, request, record):
        step = record.current_step
        form_class = STEP_FORMS[step]
        kwargs = {'data': request.POST, 'files': request.FILES, 'initial': initial_for(record, step)}
        if step == WizardStep.ACCOUNT:
            kwargs['username_locked'] = record.account_data.username_locked
        elif step == WizardStep.ADMISSION:
            if record.admission_test.completed:
                return None
        return form_class(**kwargs)

    def apply_form(self, controller, form):
        record = controller.record
        step = WizardStep(record.current_step)
        controller.update_step(step.key, form.patch())

        if step == WizardStep.GALLERY:
            uploads = form.uploads()
            staged = []
            try:
                for _slot, _kind, upload in uploads:
                    staged.append(AttachmentHandle.stage(upload, _staging_dir(), upload.name, upload.content_type))
            except OSError as exc:
                released = release_all(staged)
                logger.exception("Staging upload failed for user %s (%d staged files released)",
                                 self.request.user.pk, released)
                raise AttachmentStagingError(UPLOAD_FAILED_MESSAGE) from exc

            for (slot, kind, _upload), handle in zip(uploads, staged):
                if kind == 'thumbnail':
                    controller.set_thumbnail(slot, handle)
                elif kind == 'image':
                    controller.add_image(slot, handle)
                else:
                    controller.add_certificate(handle)
            testimonial = form.testimonial()
            if testimonial:
                controller.add_testimonial(**testimonial)

    def perform(self, controller, action, argument, data):
        """Run ``action``.  Row buttons carry their target as ``action:argument``."""
        if action == 'next':
            return controller.advance()
        if action == 'back':
            return controller.retreat()
        if action == 'goto':
            return controller.go_to_step(int(argument or data.get('step', 0)))
        if action == 'add_skill':
            controller.add_skill(argument or data.get('skill', ''))
        elif action == 'remove_skill':
            controller.remove_skill(argument or data.get('skill', ''))
        elif action == 'remove_image':
            slot, _, handle_id = argument.partition(':')
            controller.remove_image(int(slot or data.get('slot', -1)), handle_id or data.get('handle_id', ''))
        elif action == 'remove_certificate':
            controller.remove_certificate(argument or data.get('handle_id', ''))
        elif action == 'remove_testimonial':
            controller.remove_testimonial(int(argument or data.get('index', -1)))
        elif action == 'complete_test':
            score = controller.complete_admission_test()
            messages.info(self.request, f'Admission test scored {score}% ({verdict(score)}).')
        elif action != 'save':
            raise ValueError(f"Unknown action: {action}")
        return None

    # -------------------------------------------------------------------------

    def render_step(self, request, controller, form=None, issues=None, status=200):
        record = controller.record
        step = WizardStep(record.current_step)
        edited = record.consume_dirty()
        save_record(request, record)
        if form is None:
            form = self.build_unbound_form(record)
        test = record.admission_test
        context = {
            'record': record,
            'step': step,
            'steps': progress(step, edited),
            'progress_percent': progress_percent(step),
            'form': form,
            'issues': issues or [],
            'last_error': controller.last_error,
            'gate': SubmissionGate().check(record, step),
            'specializations': SPECIALIZATIONS,
            'suggested_skills': [s for s in SUGGESTED_SKILLS if s not in record.profile.skills],
            'questions': ADMISSION_QUESTIONS,
            'pass_threshold': PASS_THRESHOLD,
            'score_verdict': verdict(test.score) if test.completed else '',
            'back_label': 'Cancel' if step == WizardStep.first() else 'Back',
            'next_label': 'Submit' if step == WizardStep.last() else 'Next',
        }
        template = self.partial_template_name if request.htmx else self.template_name
        return render(request, template, context, status=status)

    def build_unbound_form(self, record):
        step = record.current_step
        kwargs = {'initial': initial_for(record, step)}
        if step == WizardStep.ACCOUNT:
            kwargs['username_locked'] = record.account_data.username_locked
        elif step == WizardStep.ADMISSION:
            kwargs['locked'] = record.admission_test.completed
        return STEP_FORMS[step](**kwargs)


class VerificationStatusView(LoginRequiredMixin, TemplateView):
    """Shows the persisted verification once it left the wizard."""
    template_name = 'verification/status.html'
    login_url = reverse_lazy('core:login')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        verification = FreelancerVerification.objects.filter(user=self.request.user).first()
        context['verification'] = verification
        if verification and verification.admission_score is not None:
            context['score_verdict'] = verdict(verification.admission_score)
        return context


class AttachmentPreviewView(LoginRequiredMixin, View):
    """Inline preview of a staged attachment from the current draft."""
    login_url = reverse_lazy('core:login')

    def get(self, request, handle_id):
        record = load_record(request)
        for handle in record.attachments():
            if handle.id == handle_id:
                try:
                    return HttpResponse(handle.read(), content_type=handle.content_type)
                except (OSError, VerificationError):
                    logger.warning("Staged attachment %s is gone", handle_id)
                    break
        raise Http404('Attachment not found.')
