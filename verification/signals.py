"""
Django signals for the verification app.

Alerts reviewers about new submissions, promotes approved users to the
freelancer role and removes stored files when their attachment row goes.
"""

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from config.alerting import send_alert
from verification.models import FreelancerVerification, VerificationAttachment

logger = logging.getLogger(__name__)


@receiver(post_save, sender=FreelancerVerification)
def on_verification_saved(sender, instance, created, **kwargs):
    if instance.status == FreelancerVerification.Status.UNDER_REVIEW:
        update_fields = kwargs.get('update_fields')
        if update_fields and 'status' not in update_fields:
            return
        send_alert(
            "info",
            "New freelancer verification",
            f"user={instance.user_id} username={instance.username} score={instance.admission_score}",
        )
    elif instance.status == FreelancerVerification.Status.APPROVED:
        user = instance.user
        if user.role != user.Role.FREELANCER:
            user.role = user.Role.FREELANCER
            user.save(update_fields=['role', 'updated_at'])
            logger.info("User %s promoted to freelancer after approval", user.pk)


@receiver(post_delete, sender=VerificationAttachment)
def delete_stored_file(sender, instance, **kwargs):
    if instance.file:
        instance.file.delete(save=False)
