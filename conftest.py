"""
Root conftest for the Waqti platform test suite.

Handles:
- Django settings configuration (in-memory SQLite unless DATABASE_URL is set)
- Shared fixtures: users, fake wizard collaborators, staged attachments and
  a verification record that passes every step
"""

import io
import os

import pytest

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')


# ---------------------------------------------------------------------------
# Fake collaborators for StepController
# ---------------------------------------------------------------------------

class FakeNavigator:
    """Records every page the controller asks for."""

    def __init__(self):
        self.pages = []

    def set_active_page(self, page, query=None):
        self.pages.append(page)

    @property
    def active_page(self):
        return self.pages[-1] if self.pages else None


class FakeSubmitter:
    """Captures submitted records; set ``error`` to make submit() raise."""

    def __init__(self, error=None):
        self.error = error
        self.submitted = []

    def submit(self, record):
        from verification.submission import SubmissionReceipt

        if self.error is not None:
            raise self.error
        self.submitted.append(record.to_dict())
        return SubmissionReceipt(verification_id=len(self.submitted))


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.fixture
def user(db):
    from core.models import User
    return User.objects.create_user(
        username='sara',
        email='sara@example.com',
        password='pass12345',
        full_name='Sara Al Amiri',
        role=User.Role.FREELANCER,
    )


@pytest.fixture
def admin_user(db):
    from core.models import User
    return User.objects.create_user(
        username='waqti_admin',
        email='admin@waqti.com',
        password='pass12345',
        full_name='Waqti Admin',
        email_verified=True,
    )


# ---------------------------------------------------------------------------
# Wizard fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture
def submitter():
    return FakeSubmitter()


@pytest.fixture
def staging_dir(tmp_path):
    path = tmp_path / 'staging'
    path.mkdir()
    return path


@pytest.fixture
def stage_file(staging_dir):
    """Factory: stage an in-memory file and return its AttachmentHandle."""
    from verification.attachments import AttachmentHandle

    def _stage(name='shot.png', content=b'\x89PNG fake image bytes', content_type='image/png'):
        return AttachmentHandle.stage(io.BytesIO(content), staging_dir, name, content_type)

    return _stage


@pytest.fixture
def complete_record(stage_file):
    """A record on step 4 that passes every step predicate except the test."""
    from verification.records import LanguageEntry, Testimonial, VerificationRecord

    record = VerificationRecord.start('42', 'Sara Al Amiri')
    account = record.account_data
    account.terms_accepted = True
    account.privacy_accepted = True
    account.username_locked = True

    profile = record.profile
    profile.job_title = 'UI/UX Designer'
    profile.specialization = 'UI/UX Design'
    profile.introduction = 'I design clear, accessible interfaces for web and mobile products.'
    profile.skills = ['Figma', 'Sketch', 'CSS']
    profile.languages = [LanguageEntry('Arabic'), LanguageEntry.from_dict({'language': 'English', 'proficiency': 'advanced'})]

    item = record.business_gallery.portfolio_items[0]
    item.title = 'Banking app redesign'
    item.description = 'End-to-end redesign of a retail banking app.'
    item.thumbnail = stage_file('thumb.png')
    item.images.append(stage_file('screen.png'))
    record.business_gallery.certificates.append(
        stage_file('cert.pdf', b'%PDF-1.4 fake', 'application/pdf')
    )
    record.business_gallery.testimonials.append(Testimonial('Omar', 5, 'Great work'))

    record.current_step = 4
    return record


@pytest.fixture
def admission_answers():
    """Three single-choice answers right, multi-choice fully right: 100."""
    from verification.scoring import ADMISSION_QUESTIONS
    return {q.id: (q.correct_option if q.kind == 'single' else set(q.correct)) for q in ADMISSION_QUESTIONS}
