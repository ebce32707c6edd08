"""
Onboarding flows: role selection, welcome walkthrough, email verification.
"""

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)


# =============================================================================
# Role selection
# =============================================================================

def destination_for_role(role: str) -> str:
    """Freelancers go through verification; everyone else lands on the dashboard."""
    return 'freelancer-verification' if role == 'freelancer' else 'dashboard'


# =============================================================================
# Welcome walkthrough
# =============================================================================

@dataclass(frozen=True)
class Slide:
    icon: str
    title: str
    description: str


WALKTHROUGH_SLIDES: Tuple[Slide, ...] = (
    Slide('clock', 'Welcome to Waqti',
          'Exchange services using time as currency. Offer your skills and earn '
          'time credits to get what you need.'),
    Slide('users', 'How Time Exchange Works',
          "1 hour of service = 1 time credit. Everyone's time is valued equally, "
          'creating a fair exchange system.'),
    Slide('briefcase', 'Offer Your Services',
          'Create service listings, set your time rate, and start earning time '
          'credits from helping others.'),
    Slide('message-square', 'Connect & Communicate',
          'Chat with service providers, negotiate details, and build lasting '
          'professional relationships.'),
    Slide('shield', 'Safe & Secure',
          'Your transactions are protected with our escrow system. Time credits '
          'are held safely until service completion.'),
    Slide('star', 'Ready to Start?',
          "You've received 2 free hours to get started. Begin by exploring "
          'services or offering your own!'),
)


@dataclass
class Walkthrough:
    """Position within the slide deck."""
    index: int = 0
    completed: bool = False

    @property
    def total(self) -> int:
        return len(WALKTHROUGH_SLIDES)

    @property
    def slide(self) -> Slide:
        return WALKTHROUGH_SLIDES[self.index]

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == self.total - 1

    def next(self) -> bool:
        """Move forward; on the last slide this completes the walkthrough."""
        if self.is_last:
            self.completed = True
            return True
        self.index += 1
        return False

    def previous(self):
        if not self.is_first:
            self.index -= 1

    def go_to(self, index: int):
        if not 0 <= index < self.total:
            raise IndexError(f"Slide index out of range: {index}")
        self.index = index

    def skip(self):
        self.completed = True


def complete_walkthrough(user):
    user.walkthrough_completed = True
    user.save(update_fields=['walkthrough_completed', 'updated_at'])
    logger.info("User %s finished the welcome walkthrough", user.pk)


# =============================================================================
# Email verification
# =============================================================================

def resend_cooldown_seconds() -> int:
    return settings.WAQTI_CONFIG.get('email_resend_cooldown_seconds', 60)


def cooldown_remaining(sent_at, now=None, cooldown: Optional[int] = None) -> int:
    """Whole seconds left before another verification email may be sent."""
    if sent_at is None:
        return 0
    now = now or timezone.now()
    cooldown = resend_cooldown_seconds() if cooldown is None else cooldown
    remaining = (sent_at + timedelta(seconds=cooldown) - now).total_seconds()
    return max(0, math.ceil(remaining))


def request_verification_email(user, now=None) -> int:
    """
    Stamp a resend request.  Returns 0 when accepted, otherwise the seconds
    left on the cooldown (nothing is stamped in that case).

    Delivery itself is handled by the hosted auth provider.
    """
    now = now or timezone.now()
    remaining = cooldown_remaining(user.verification_email_sent_at, now)
    if remaining:
        return remaining
    user.verification_email_sent_at = now
    user.save(update_fields=['verification_email_sent_at', 'updated_at'])
    logger.info("Verification email requested for user %s", user.pk)
    return 0
