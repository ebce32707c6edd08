"""
Tests for core/onboarding.py.

Covers:
- destination_for_role(): freelancers are sent to verification
- Walkthrough: next/previous/go_to/skip over the six slides
- cooldown_remaining(): whole seconds, rounded up, never negative
- request_verification_email(): stamps only outside the cooldown
"""

import os
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')

from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from core.onboarding import (
    WALKTHROUGH_SLIDES,
    Walkthrough,
    complete_walkthrough,
    cooldown_remaining,
    destination_for_role,
    request_verification_email,
)

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=dt_timezone.utc)


class TestDestinationForRole:

    def test_freelancer(self):
        assert destination_for_role('freelancer') == 'freelancer-verification'

    @pytest.mark.parametrize('role', ['client', '', 'anything'])
    def test_everyone_else(self, role):
        assert destination_for_role(role) == 'dashboard'


class TestWalkthrough:

    def test_six_slides(self):
        assert len(WALKTHROUGH_SLIDES) == 6
        assert WALKTHROUGH_SLIDES[0].title == 'Welcome to Waqti'
        assert WALKTHROUGH_SLIDES[-1].title == 'Ready to Start?'

    def test_next_until_complete(self):
        state = Walkthrough()
        for _ in range(5):
            assert state.next() is False
        assert state.is_last
        assert state.next() is True
        assert state.completed

    def test_previous_stops_at_first(self):
        state = Walkthrough(index=1)
        state.previous()
        state.previous()
        assert state.index == 0
        assert state.is_first

    def test_go_to(self):
        state = Walkthrough()
        state.go_to(4)
        assert state.slide.title == 'Safe & Secure'
        with pytest.raises(IndexError):
            state.go_to(6)

    def test_skip(self):
        state = Walkthrough(index=2)
        state.skip()
        assert state.completed

    @pytest.mark.django_db
    def test_complete_walkthrough_persists(self, user):
        complete_walkthrough(user)
        user.refresh_from_db()
        assert user.walkthrough_completed


# =============================================================================
# Email verification
# =============================================================================

class TestCooldown:

    def test_never_sent(self):
        assert cooldown_remaining(None, NOW, 60) == 0

    def test_rounds_up(self):
        sent = NOW - timedelta(seconds=10, milliseconds=500)
        assert cooldown_remaining(sent, NOW, 60) == 50

    def test_expired(self):
        assert cooldown_remaining(NOW - timedelta(seconds=61), NOW, 60) == 0

    def test_uses_configured_cooldown(self, settings):
        settings.WAQTI_CONFIG = {**settings.WAQTI_CONFIG, 'email_resend_cooldown_seconds': 120}
        assert cooldown_remaining(NOW - timedelta(seconds=20), NOW) == 100


@pytest.mark.django_db
class TestRequestVerificationEmail:

    def test_first_request_stamps(self, user):
        assert request_verification_email(user, NOW) == 0
        user.refresh_from_db()
        assert user.verification_email_sent_at == NOW

    def test_inside_cooldown_is_refused(self, user):
        request_verification_email(user, NOW)
        later = NOW + timedelta(seconds=15)
        assert request_verification_email(user, later) == 45
        user.refresh_from_db()
        assert user.verification_email_sent_at == NOW

    def test_after_cooldown(self, user):
        request_verification_email(user, NOW)
        later = NOW + timedelta(seconds=60)
        assert request_verification_email(user, later) == 0
        user.refresh_from_db()
        assert user.verification_email_sent_at == later
