from django.conf import settings
from django.db import models


class FreelancerVerification(models.Model):
    """
    Persisted snapshot of a submitted verification wizard.

    The wizard itself edits an in-memory record; this row is written once on
    submission and afterwards only changed by reviewers.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        IN_PROGRESS = 'in_progress', 'In Progress'
        UNDER_REVIEW = 'under_review', 'Under Review'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='freelancer_verification',
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    current_step = models.PositiveSmallIntegerField(default=1)
    username = models.CharField(max_length=150, blank=True)
    job_title = models.CharField(max_length=255, blank=True)
    specialization = models.CharField(max_length=255, blank=True)
    steps = models.JSONField(
        default=dict,
        blank=True,
        help_text='Snapshot of the four wizard sub-records at submission time',
    )
    admission_score = models.PositiveSmallIntegerField(null=True, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_verifications',
    )
    rejection_reason = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-submitted_at', '-created_at']
        verbose_name = 'Freelancer Verification'
        verbose_name_plural = 'Freelancer Verifications'

    def __str__(self):
        return f"{self.username or self.user} - {self.get_status_display()}"

    @property
    def admission_verdict(self):
        from .scoring import verdict
        if self.admission_score is None:
            return ''
        return verdict(self.admission_score)


class VerificationAttachment(models.Model):
    """A file stored for a submitted verification."""

    class Kind(models.TextChoices):
        THUMBNAIL = 'thumbnail', 'Portfolio Thumbnail'
        IMAGE = 'image', 'Portfolio Image'
        CERTIFICATE = 'certificate', 'Certificate'

    verification = models.ForeignKey(
        FreelancerVerification,
        on_delete=models.CASCADE,
        related_name='attachments',
    )
    kind = models.CharField(max_length=20, choices=Kind.choices)
    slot = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text='Portfolio slot (0-2) for thumbnails and images',
    )
    file = models.FileField(upload_to='verification/%Y/%m/')
    original_name = models.CharField(max_length=255)
    content_type = models.CharField(max_length=100, blank=True)
    size = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['kind', 'slot', 'created_at']
        verbose_name = 'Verification Attachment'
        verbose_name_plural = 'Verification Attachments'

    def __str__(self):
        return f"{self.get_kind_display()}: {self.original_name}"


class VerificationReview(models.Model):
    """A reviewer's decision on a submitted verification."""

    class Decision(models.TextChoices):
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'
        NEEDS_REVISION = 'needs_revision', 'Needs Revision'

    verification = models.ForeignKey(
        FreelancerVerification,
        on_delete=models.CASCADE,
        related_name='reviews',
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='verification_reviews',
    )
    decision = models.CharField(max_length=20, choices=Decision.choices)
    comments = models.TextField(blank=True)
    checklist = models.JSONField(
        default=dict,
        blank=True,
        help_text='profile_complete, portfolio_quality, skills_verified, documents_valid',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Verification Review'
        verbose_name_plural = 'Verification Reviews'

    def __str__(self):
        return f"{self.verification} - {self.get_decision_display()}"
