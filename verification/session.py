"""Carry the wizard's in-memory record between requests in the session."""

import logging

from .records import VerificationRecord

logger = logging.getLogger(__name__)

SESSION_KEY = 'verification_record'


def load_record(request):
    """Return the user's record from the session, starting a new one if absent."""
    data = request.session.get(SESSION_KEY)
    user = request.user
    if data and str(data.get('user_id')) == str(user.pk):
        try:
            return VerificationRecord.from_dict(data)
        except (KeyError, ValueError):
            logger.warning("Discarding unreadable verification record for user %s", user.pk)
    return VerificationRecord.start(user.pk, getattr(user, 'full_name', '') or user.get_full_name())


def save_record(request, record):
    request.session[SESSION_KEY] = record.to_dict()


def clear_record(request):
    request.session.pop(SESSION_KEY, None)
