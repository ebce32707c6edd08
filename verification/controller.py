"""
Step controller for the freelancer verification wizard.

The controller owns one ``VerificationRecord`` and mediates every change to
it.  Collaborators are injected: the submitter persists the finished record,
the navigator switches pages, the gate decides step completeness and the
clock stamps ``submitted_at``.  Nothing here touches the request or a
process-wide singleton, so the whole wizard can be driven from a test.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from django.utils import timezone

from config.alerting import send_alert

from .attachments import AttachmentHandle, release_all
from .exceptions import (
    AdmissionTestLockedError,
    FieldLockedError,
    IncompleteAnswersError,
    InvalidStepError,
    RecordLockedError,
    UnknownFieldError,
)
from .gate import INCOMPLETE_STEP_MESSAGE, SubmissionGate
from .records import (
    PORTFOLIO_SLOTS,
    AccountData,
    AccountType,
    AdmissionTest,
    Availability,
    BusinessGallery,
    LanguageEntry,
    ProfileData,
    Testimonial,
    VerificationRecord,
    VerificationStatus,
    normalize_skills,
)
from .scoring import QUESTIONS_BY_ID, QuestionKind, answers_complete, score_answers
from .steps import Action, Editing, Outcome, WizardStep, transition

if TYPE_CHECKING:
    from core.navigation import Navigator

    from .submission import VerificationSubmitter

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = 'Failed to submit verification. Please try again.'
EXIT_PAGE = 'dashboard'
SUBMITTED_PAGE = 'dashboard'

# Portfolio fields editable through update_step; attachments use helpers.
PORTFOLIO_TEXT_FIELDS = ('title', 'description', 'project_url', 'skills')


class OutcomeKind(str, Enum):
    MOVED = 'moved'
    BLOCKED = 'blocked'
    SUBMITTED = 'submitted'
    SUBMIT_FAILED = 'submit_failed'
    EXITED = 'exited'


@dataclass
class StepOutcome:
    kind: OutcomeKind
    step: int
    message: Optional[str] = None
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.kind in (OutcomeKind.MOVED, OutcomeKind.SUBMITTED, OutcomeKind.EXITED)


def _field_names(sub_record) -> set:
    return {f.name for f in fields(sub_record)}


class StepController:
    """Drives a single verification record through the four wizard steps."""

    def __init__(
        self,
        record: VerificationRecord,
        submitter: 'VerificationSubmitter',
        navigator: 'Navigator',
        gate: Optional[SubmissionGate] = None,
        clock: Optional[Callable] = None,
    ):
        self.record = record
        self.submitter = submitter
        self.navigator = navigator
        self.gate = gate or SubmissionGate()
        self.clock = clock or timezone.now
        self.last_error: Optional[str] = None
        self.receipt = None

    # -------------------------------------------------------------------------
    # State helpers
    # -------------------------------------------------------------------------

    @property
    def current_step(self) -> WizardStep:
        return WizardStep(self.record.current_step)

    def _ensure_editable(self):
        if not self.record.is_editable:
            raise RecordLockedError(
                f"Verification is {self.record.status.value} and can no longer be edited"
            )

    def _touch(self, key: str):
        self.record.dirty_steps.add(key)
        if self.record.status == VerificationStatus.PENDING:
            self.record.status = VerificationStatus.IN_PROGRESS

    def dismiss_error(self):
        self.last_error = None

    # -------------------------------------------------------------------------
    # Field updates
    # -------------------------------------------------------------------------

    def update_step(self, step_name, patch: Dict) -> None:
        """Merge ``patch`` into one sub-record.  Structural checks only."""
        self._ensure_editable()
        if isinstance(step_name, int):
            step_name = WizardStep(step_name).key
        updaters = {
            'account_data': self._update_account,
            'profile': self._update_profile,
            'business_gallery': self._update_gallery,
            'admission_test': self._update_admission,
        }
        if step_name not in updaters:
            raise UnknownFieldError(f"Unknown wizard step: {step_name}")
        updaters[step_name](patch)
        self._touch(step_name)

    def _reject_unknown(self, sub_record, patch, step_name):
        unknown = set(patch) - _field_names(sub_record)
        if unknown:
            raise UnknownFieldError(f"Unknown fields for {step_name}: {', '.join(sorted(unknown))}")

    def _update_account(self, patch):
        account: AccountData = self.record.account_data
        self._reject_unknown(account, patch, 'account_data')
        if 'username_locked' in patch:
            raise FieldLockedError('username_locked is managed by the wizard')
        if 'username' in patch:
            username = (patch['username'] or '').strip()
            if account.username_locked and username != account.username:
                raise FieldLockedError('Username cannot be changed after the account step is complete')
            account.username = username
        if 'account_type' in patch:
            account.account_type = AccountType(patch['account_type'])
        for flag in ('terms_accepted', 'privacy_accepted'):
            if flag in patch:
                setattr(account, flag, bool(patch[flag]))

    def _update_profile(self, patch):
        profile: ProfileData = self.record.profile
        self._reject_unknown(profile, patch, 'profile')
        for name in ('job_title', 'specialization', 'introduction'):
            if name in patch:
                setattr(profile, name, patch[name] or '')
        if 'skills' in patch:
            profile.skills = normalize_skills(patch['skills'])
        if 'hourly_rate' in patch:
            rate = patch['hourly_rate']
            if rate is None or rate <= 0:
                raise ValueError('Hourly rate must be positive')
            profile.hourly_rate = rate
        if 'availability' in patch:
            profile.availability = Availability(patch['availability'])
        if 'languages' in patch:
            profile.languages = [
                entry if isinstance(entry, LanguageEntry) else LanguageEntry.from_dict(entry)
                for entry in patch['languages']
            ]

    def _update_gallery(self, patch):
        gallery: BusinessGallery = self.record.business_gallery
        allowed = {'portfolio_items', 'testimonials'}
        unknown = set(patch) - allowed
        if unknown:
            raise UnknownFieldError(
                f"Unknown fields for business_gallery: {', '.join(sorted(unknown))}"
            )
        for index, item_patch in enumerate(patch.get('portfolio_items') or []):
            if index >= PORTFOLIO_SLOTS:
                raise UnknownFieldError(f"Portfolio has only {PORTFOLIO_SLOTS} slots")
            self._merge_portfolio_item(index, item_patch)
        if 'testimonials' in patch:
            gallery.testimonials = [
                t if isinstance(t, Testimonial) else Testimonial.from_dict(t)
                for t in patch['testimonials']
            ]

    def _merge_portfolio_item(self, index: int, item_patch: Dict):
        unknown = set(item_patch) - set(PORTFOLIO_TEXT_FIELDS)
        if unknown:
            raise UnknownFieldError(
                f"Portfolio item fields not editable here: {', '.join(sorted(unknown))}"
            )
        item = self.record.business_gallery.portfolio_items[index]
        for name in ('title', 'description', 'project_url'):
            if name in item_patch:
                setattr(item, name, item_patch[name] or '')
        if 'skills' in item_patch:
            item.skills = normalize_skills(item_patch['skills'])

    def _update_admission(self, patch):
        test: AdmissionTest = self.record.admission_test
        self._reject_unknown(test, patch, 'admission_test')
        if 'completed' in patch or 'score' in patch:
            raise FieldLockedError('Score and completion are set by the admission test')
        for question_id, answer in (patch.get('answers') or {}).items():
            self._set_answer(question_id, answer)

    def update_portfolio_item(self, slot: int, patch: Dict) -> None:
        self._ensure_editable()
        self._slot(slot)
        self._merge_portfolio_item(slot, patch)
        self._touch('business_gallery')

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def go_to_step(self, step: int) -> StepOutcome:
        """Jump straight to ``step``; prerequisites are not checked."""
        self._ensure_editable()
        result = transition(Editing(self.current_step), Action.GO_TO, target=step)
        if result.outcome == Outcome.REJECTED:
            raise InvalidStepError(f"Step must be between {WizardStep.first()} and {WizardStep.last()}, got {step}")
        self.record.current_step = int(result.state.step)
        return StepOutcome(OutcomeKind.MOVED, self.record.current_step)

    def _advance_issues(self) -> List[str]:
        step = self.current_step
        if step != WizardStep.last():
            return self.gate.check(self.record, step).issues
        issues = []
        for result in self.gate.check_all(self.record):
            issues.extend(result.issues)
        return issues

    def advance(self) -> StepOutcome:
        self._ensure_editable()
        step = self.current_step
        issues = self._advance_issues()
        result = transition(Editing(step), Action.ADVANCE, step_valid=not issues)

        if result.outcome == Outcome.BLOCKED:
            self.last_error = INCOMPLETE_STEP_MESSAGE
            return StepOutcome(OutcomeKind.BLOCKED, int(step), INCOMPLETE_STEP_MESSAGE, issues)

        if result.outcome == Outcome.SUBMIT:
            return self._submit()

        if step == WizardStep.ACCOUNT:
            self.record.account_data.username_locked = True
        self.record.current_step = int(result.state.step)
        self.last_error = None
        return StepOutcome(OutcomeKind.MOVED, self.record.current_step)

    def retreat(self) -> StepOutcome:
        self._ensure_editable()
        result = transition(Editing(self.current_step), Action.RETREAT)
        self.last_error = None
        if result.outcome == Outcome.EXIT:
            self.navigator.set_active_page(EXIT_PAGE)
            return StepOutcome(OutcomeKind.EXITED, self.record.current_step)
        self.record.current_step = int(result.state.step)
        return StepOutcome(OutcomeKind.MOVED, self.record.current_step)

    def _submit(self) -> StepOutcome:
        record = self.record
        try:
            receipt = self.submitter.submit(record)
        except Exception as exc:
            logger.exception("Verification submission failed for user %s", record.user_id)
            send_alert(
                "warning",
                "Verification submission failed",
                f"user={record.user_id} error={exc}",
            )
            self.last_error = SUBMIT_FAILED_MESSAGE
            return StepOutcome(OutcomeKind.SUBMIT_FAILED, record.current_step, SUBMIT_FAILED_MESSAGE)

        self.receipt = receipt
        record.status = VerificationStatus.UNDER_REVIEW
        record.submitted_at = self.clock()
        record.dirty_steps.clear()
        released = release_all(record.attachments())
        self.last_error = None
        logger.info(
            "Verification submitted for user %s (score=%s, %d attachments released)",
            record.user_id, record.admission_test.score, released,
        )
        self.navigator.set_active_page(SUBMITTED_PAGE)
        return StepOutcome(OutcomeKind.SUBMITTED, record.current_step)

    # -------------------------------------------------------------------------
    # Skills
    # -------------------------------------------------------------------------

    def add_skill(self, skill: str) -> bool:
        """Append ``skill`` unless blank or already present."""
        self._ensure_editable()
        cleaned = (skill or '').strip()
        if not cleaned or cleaned in self.record.profile.skills:
            return False
        self.record.profile.skills.append(cleaned)
        self._touch('profile')
        return True

    def remove_skill(self, skill: str) -> bool:
        self._ensure_editable()
        if skill not in self.record.profile.skills:
            return False
        self.record.profile.skills.remove(skill)
        self._touch('profile')
        return True

    # -------------------------------------------------------------------------
    # Gallery attachments
    # -------------------------------------------------------------------------

    def _slot(self, slot: int):
        if not 0 <= slot < PORTFOLIO_SLOTS:
            raise UnknownFieldError(f"Portfolio slot must be between 0 and {PORTFOLIO_SLOTS - 1}")
        return self.record.business_gallery.portfolio_items[slot]

    def set_thumbnail(self, slot: int, handle: Optional[AttachmentHandle]) -> None:
        """Replace the slot's thumbnail; the previous handle is released."""
        self._ensure_editable()
        item = self._slot(slot)
        previous = item.thumbnail
        item.thumbnail = handle
        if previous is not None and previous != handle:
            previous.release()
        self._touch('business_gallery')

    def add_image(self, slot: int, handle: AttachmentHandle) -> None:
        self._ensure_editable()
        self._slot(slot).images.append(handle)
        self._touch('business_gallery')

    def remove_image(self, slot: int, handle_id: str) -> bool:
        self._ensure_editable()
        item = self._slot(slot)
        for handle in item.images:
            if handle.id == handle_id:
                item.images.remove(handle)
                handle.release()
                self._touch('business_gallery')
                return True
        return False

    def add_certificate(self, handle: AttachmentHandle) -> None:
        self._ensure_editable()
        self.record.business_gallery.certificates.append(handle)
        self._touch('business_gallery')

    def remove_certificate(self, handle_id: str) -> bool:
        self._ensure_editable()
        certificates = self.record.business_gallery.certificates
        for handle in certificates:
            if handle.id == handle_id:
                certificates.remove(handle)
                handle.release()
                self._touch('business_gallery')
                return True
        return False

    def add_testimonial(self, client_name: str, rating: int, comment: str = '',
                        project_title: str = '', client_company: str = '') -> Testimonial:
        self._ensure_editable()
        testimonial = Testimonial(
            client_name=client_name,
            rating=rating,
            comment=comment,
            project_title=project_title,
            client_company=client_company,
        )
        self.record.business_gallery.testimonials.append(testimonial)
        self._touch('business_gallery')
        return testimonial

    def remove_testimonial(self, index: int) -> None:
        self._ensure_editable()
        testimonials = self.record.business_gallery.testimonials
        if not 0 <= index < len(testimonials):
            raise UnknownFieldError(f"No testimonial at position {index}")
        del testimonials[index]
        self._touch('business_gallery')

    # -------------------------------------------------------------------------
    # Admission test
    # -------------------------------------------------------------------------

    def _set_answer(self, question_id: str, answer):
        test = self.record.admission_test
        if test.completed:
            raise AdmissionTestLockedError('Admission test answers cannot change after scoring')
        question = QUESTIONS_BY_ID.get(question_id)
        if question is None:
            raise UnknownFieldError(f"Unknown admission question: {question_id}")

        if question.kind == QuestionKind.MULTI:
            if isinstance(answer, str):
                answer = frozenset({answer}) if answer else frozenset()
            else:
                answer = frozenset(answer or ())
        elif answer is None:
            answer = ''
        if answer:
            test.answers[question_id] = answer
        else:
            test.answers.pop(question_id, None)

    def answer_question(self, question_id: str, answer) -> None:
        self._ensure_editable()
        self._set_answer(question_id, answer)
        self._touch('admission_test')

    def complete_admission_test(self) -> int:
        """Score the test once every question is answered.  Runs only once."""
        self._ensure_editable()
        test = self.record.admission_test
        if test.completed:
            raise AdmissionTestLockedError('Admission test has already been scored')
        if not answers_complete(test.answers):
            raise IncompleteAnswersError('Answer every question before finishing the test')
        test.score = score_answers(test.answers)
        test.completed = True
        self._touch('admission_test')
        logger.info("Admission test scored %s for user %s", test.score, self.record.user_id)
        return test.score

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    def discard(self) -> int:
        """Drop staged attachments without contacting the backend."""
        released = release_all(self.record.attachments())
        logger.debug("Discarded wizard for user %s (%d attachments released)",
                     self.record.user_id, released)
        return released
