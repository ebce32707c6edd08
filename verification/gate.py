"""
Submission gate: per-step completeness predicates.

Each predicate returns the list of unmet requirements for its step; an
empty list means the step is complete.  The gate never raises for
validation failures, callers surface ``GateResult.issues`` inline.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List

from .records import VerificationRecord
from .steps import WizardStep

MIN_USERNAME_LENGTH = 3
MIN_JOB_TITLE_LENGTH = 3
MIN_INTRODUCTION_LENGTH = 50
MIN_SKILLS = 3

INCOMPLETE_STEP_MESSAGE = 'Please complete all required fields before proceeding.'


def account_issues(record: VerificationRecord) -> List[str]:
    account = record.account_data
    issues = []
    if len(account.username or '') < MIN_USERNAME_LENGTH:
        issues.append(f'Username must be at least {MIN_USERNAME_LENGTH} characters.')
    if not account.terms_accepted:
        issues.append('You must accept the terms of service.')
    if not account.privacy_accepted:
        issues.append('You must accept the privacy policy.')
    return issues


def profile_issues(record: VerificationRecord) -> List[str]:
    profile = record.profile
    issues = []
    if len(profile.job_title or '') < MIN_JOB_TITLE_LENGTH:
        issues.append(f'Job title must be at least {MIN_JOB_TITLE_LENGTH} characters.')
    if not profile.specialization:
        issues.append('Choose a specialization.')
    if len(profile.introduction or '') < MIN_INTRODUCTION_LENGTH:
        issues.append(f'Introduction must be at least {MIN_INTRODUCTION_LENGTH} characters.')
    if len(profile.skills) < MIN_SKILLS:
        issues.append(f'Add at least {MIN_SKILLS} skills.')
    return issues


def gallery_issues(record: VerificationRecord) -> List[str]:
    if any(item.is_filled for item in record.business_gallery.portfolio_items):
        return []
    return ['Complete at least one portfolio item with a title, description and thumbnail.']


def admission_issues(record: VerificationRecord) -> List[str]:
    if record.admission_test.completed:
        return []
    return ['Complete the admission test.']


STEP_PREDICATES: Dict[WizardStep, Callable[[VerificationRecord], List[str]]] = {
    WizardStep.ACCOUNT: account_issues,
    WizardStep.PROFILE: profile_issues,
    WizardStep.GALLERY: gallery_issues,
    WizardStep.ADMISSION: admission_issues,
}


@dataclass
class GateResult:
    step: WizardStep
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def __bool__(self):
        return self.ok


class SubmissionGate:
    """Evaluates step predicates against a record."""

    def __init__(self, predicates=None):
        self.predicates = dict(predicates or STEP_PREDICATES)

    def check(self, record: VerificationRecord, step) -> GateResult:
        step = WizardStep(step)
        return GateResult(step=step, issues=self.predicates[step](record))

    def can_advance(self, record: VerificationRecord) -> bool:
        return self.check(record, record.current_step).ok

    def check_all(self, record: VerificationRecord) -> List[GateResult]:
        return [self.check(record, step) for step in WizardStep]

    def can_submit(self, record: VerificationRecord) -> bool:
        return all(result.ok for result in self.check_all(record))
