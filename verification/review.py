"""Reviewer decisions on submitted verifications."""

import logging

from django.db import transaction
from django.utils import timezone

from config.alerting import send_alert

from .exceptions import ReviewError
from .models import FreelancerVerification, VerificationReview

logger = logging.getLogger(__name__)

CHECKLIST_KEYS = ('profile_complete', 'portfolio_quality', 'skills_verified', 'documents_valid')


def review_verification(verification, reviewer, decision, comments='', checklist=None):
    """
    Record a review decision and move the verification accordingly.

    approved / rejected close the review; needs_revision sends the record
    back to in_progress so the freelancer can edit it again.  Only
    under_review rows can be reviewed; rejection needs a reason.
    """
    decision = VerificationReview.Decision(decision)
    comments = (comments or '').strip()
    checklist = {key: bool((checklist or {}).get(key, False)) for key in CHECKLIST_KEYS}

    if decision == VerificationReview.Decision.REJECTED and not comments:
        raise ReviewError('A rejection reason is required.')

    with transaction.atomic():
        verification = FreelancerVerification.objects.select_for_update().get(pk=verification.pk)
        if verification.status != FreelancerVerification.Status.UNDER_REVIEW:
            raise ReviewError(
                f"Only verifications under review can be reviewed (status is {verification.status})."
            )

        now = timezone.now()
        if decision == VerificationReview.Decision.APPROVED:
            verification.status = FreelancerVerification.Status.APPROVED
            verification.rejection_reason = None
        elif decision == VerificationReview.Decision.REJECTED:
            verification.status = FreelancerVerification.Status.REJECTED
            verification.rejection_reason = comments
        else:
            verification.status = FreelancerVerification.Status.IN_PROGRESS
        verification.reviewed_at = now
        verification.reviewed_by = reviewer
        verification.save(update_fields=[
            'status', 'rejection_reason', 'reviewed_at', 'reviewed_by', 'updated_at',
        ])

        review = VerificationReview.objects.create(
            verification=verification,
            reviewer=reviewer,
            decision=decision,
            comments=comments,
            checklist=checklist,
        )

    logger.info(
        "Verification %s reviewed by %s: %s", verification.pk, reviewer, decision.value,
    )
    if decision == VerificationReview.Decision.REJECTED:
        send_alert("info", "Verification rejected", f"verification={verification.pk} reason={comments}")
    return review
