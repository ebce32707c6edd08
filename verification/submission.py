"""
Persistence collaborator for finished verification records.

``StepController`` only knows the ``VerificationSubmitter`` protocol.  The
ORM implementation pushes staged attachments into Django storage and writes
the verification row; any failure rolls the row back, removes files already
stored and surfaces as ``SubmissionError``.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Protocol, Tuple

from django.core.files import File
from django.core.files.storage import default_storage
from django.db import DatabaseError, transaction
from django.utils import timezone

from .exceptions import AttachmentReleasedError, SubmissionError
from .models import FreelancerVerification, VerificationAttachment
from .records import VerificationRecord

logger = logging.getLogger(__name__)


@dataclass
class SubmissionReceipt:
    verification_id: int
    stored_files: List[str] = field(default_factory=list)


class VerificationSubmitter(Protocol):
    def submit(self, record: VerificationRecord) -> SubmissionReceipt:
        ...


def _attachment_plan(record: VerificationRecord) -> List[Tuple[str, object, object]]:
    """(kind, slot, handle) for every staged file in the record."""
    plan = []
    for slot, item in enumerate(record.business_gallery.portfolio_items):
        if item.thumbnail is not None:
            plan.append((VerificationAttachment.Kind.THUMBNAIL, slot, item.thumbnail))
        for handle in item.images:
            plan.append((VerificationAttachment.Kind.IMAGE, slot, handle))
    for handle in record.business_gallery.certificates:
        plan.append((VerificationAttachment.Kind.CERTIFICATE, None, handle))
    return plan


class OrmVerificationSubmitter:
    """Stores the record as a ``FreelancerVerification`` row."""

    def __init__(self, user, storage=None, clock=None):
        self.user = user
        self.storage = storage or default_storage
        self.clock = clock or timezone.now

    def submit(self, record: VerificationRecord) -> SubmissionReceipt:
        stored: List[str] = []
        try:
            with transaction.atomic():
                verification, _ = FreelancerVerification.objects.select_for_update().get_or_create(
                    user=self.user,
                )
                if verification.status in (
                    FreelancerVerification.Status.UNDER_REVIEW,
                    FreelancerVerification.Status.APPROVED,
                ):
                    raise SubmissionError(
                        f"Verification for {self.user} is already {verification.status}"
                    )

                snapshot = record.to_dict()
                verification.status = FreelancerVerification.Status.UNDER_REVIEW
                verification.current_step = record.current_step
                verification.username = record.account_data.username
                verification.job_title = record.profile.job_title
                verification.specialization = record.profile.specialization
                verification.steps = snapshot['steps']
                verification.admission_score = record.admission_test.score
                verification.submitted_at = self.clock()
                verification.reviewed_at = None
                verification.reviewed_by = None
                verification.rejection_reason = None
                verification.save()

                verification.attachments.all().delete()
                for kind, slot, handle in _attachment_plan(record):
                    with handle.open() as fh:
                        name = self.storage.save(
                            f"verification/{self.user.pk}/{handle.id}_{handle.name}",
                            File(fh),
                        )
                    stored.append(name)
                    attachment = VerificationAttachment(
                        verification=verification,
                        kind=kind,
                        slot=slot,
                        original_name=handle.name,
                        content_type=handle.content_type,
                        size=handle.size,
                    )
                    attachment.file.name = name
                    attachment.save()
        except SubmissionError:
            self._cleanup(stored)
            raise
        except (DatabaseError, OSError, AttachmentReleasedError) as exc:
            self._cleanup(stored)
            logger.exception("Failed to persist verification for user %s", self.user.pk)
            raise SubmissionError(str(exc)) from exc

        logger.info(
            "Stored verification %s for user %s with %d files",
            verification.pk, self.user.pk, len(stored),
        )
        return SubmissionReceipt(verification_id=verification.pk, stored_files=stored)

    def _cleanup(self, names: List[str]):
        for name in names:
            try:
                self.storage.delete(name)
            except OSError:
                logger.warning("Could not remove stored file %s after failed submission", name)
