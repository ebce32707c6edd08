"""
Tests for verification/views.py: the wizard over HTTP.

Covers:
 1. Login required
 2. GET renders step 1 with the suggested username
 3. POST next on an incomplete step re-renders with the inline error
 4. POST next on a complete step 1 moves on and locks the username
 5. POST back on step 1 returns to the dashboard
 6. htmx requests get the step partial
 7. Gallery uploads are staged and previewable; a staging failure releases this request's files
 8. Final submit stores the verification and clears the draft
 9. Discard releases staged files and clears the draft
10. Users under review are sent to the status page
11. Clearing an admission answer removes it from the draft
12. Edited steps are flagged on the next render, then cleared
"""

import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.test_settings')

from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from verification.attachments import AttachmentHandle
from verification.controller import SUBMIT_FAILED_MESSAGE
from verification.exceptions import SubmissionError
from verification.gate import INCOMPLETE_STEP_MESSAGE
from verification.models import FreelancerVerification
from verification.session import SESSION_KEY
from verification.views import UPLOAD_FAILED_MESSAGE

WIZARD_URL = '/verification/'


def _store(client, record):
    session = client.session
    session[SESSION_KEY] = record.to_dict()
    session.save()


def _draft(client):
    return client.session.get(SESSION_KEY)


@pytest.fixture
def logged_in(client, user):
    client.force_login(user)
    return client


@pytest.mark.django_db
class TestWizardBasics:

    def test_login_required(self, client):
        response = client.get(reverse('verification:wizard'))
        assert response.status_code == 302
        assert reverse('core:login') in response.url

    def test_get_renders_first_step(self, logged_in):
        response = logged_in.get(WIZARD_URL)
        assert response.status_code == 200
        content = response.content.decode()
        assert 'sara_al_amiri' in content
        assert '<html' in content
        assert _draft(logged_in)['current_step'] == 1

    def test_htmx_gets_partial(self, logged_in):
        response = logged_in.get(WIZARD_URL, HTTP_HX_REQUEST='true')
        assert response.status_code == 200
        assert '<html' not in response.content.decode()
        assert 'wizard-step' in response.content.decode()

    def test_incomplete_step_blocks(self, logged_in):
        response = logged_in.post(WIZARD_URL, {'username': 'sara_designs', 'account_type': 'freelancer', 'action': 'next'})
        assert response.status_code == 200
        assert INCOMPLETE_STEP_MESSAGE in response.content.decode()
        assert _draft(logged_in)['current_step'] == 1

    def test_invalid_username_charset(self, logged_in):
        response = logged_in.post(WIZARD_URL, {'username': 'sara designs!', 'account_type': 'freelancer', 'action': 'save'})
        assert response.status_code == 400

    def test_complete_step_moves_on(self, logged_in):
        response = logged_in.post(WIZARD_URL, {
            'username': 'sara_designs',
            'account_type': 'freelancer',
            'terms_accepted': 'on',
            'privacy_accepted': 'on',
            'action': 'next',
        })
        assert response.status_code == 302
        assert response.url == reverse('verification:wizard')
        draft = _draft(logged_in)
        assert draft['current_step'] == 2
        assert draft['steps']['account_data']['username'] == 'sara_designs'
        assert draft['steps']['account_data']['username_locked'] is True

    def test_cancel_on_first_step_goes_to_dashboard(self, logged_in):
        response = logged_in.post(WIZARD_URL, {'username': 'sara_al_amiri', 'account_type': 'freelancer', 'action': 'back'})
        assert response.status_code == 302
        assert response.url == reverse('core:dashboard')
        assert _draft(logged_in) is not None

    def test_under_review_redirects_to_status(self, logged_in, user):
        with patch('verification.signals.send_alert'):
            FreelancerVerification.objects.create(user=user, status=FreelancerVerification.Status.UNDER_REVIEW)
        response = logged_in.get(WIZARD_URL)
        assert response.status_code == 302
        assert response.url == reverse('verification:status')


@pytest.mark.django_db
class TestWizardProfileStep:

    def test_add_and_remove_skill(self, logged_in, complete_record, user):
        complete_record.user_id = str(user.pk)
        complete_record.current_step = 2
        _store(logged_in, complete_record)
        form = {
            'job_title': 'UI/UX Designer',
            'specialization': 'UI/UX Design',
            'introduction': complete_record.profile.introduction,
            'skills': 'Figma, Sketch, CSS',
            'availability': 'full_time',
        }

        logged_in.post(WIZARD_URL, {**form, 'action': 'add_skill:Python'})
        assert _draft(logged_in)['steps']['profile']['skills'] == ['Figma', 'Sketch', 'CSS', 'Python']

        logged_in.post(WIZARD_URL, {**form, 'action': 'remove_skill:Sketch'})
        assert _draft(logged_in)['steps']['profile']['skills'] == ['Figma', 'CSS']

    def test_edit_marks_shown_once(self, logged_in, complete_record, user):
        complete_record.user_id = str(user.pk)
        complete_record.current_step = 2
        _store(logged_in, complete_record)

        logged_in.post(WIZARD_URL, {
            'job_title': 'Product Designer',
            'specialization': 'UI/UX Design',
            'introduction': complete_record.profile.introduction,
            'skills': 'Figma, Sketch, CSS',
            'availability': 'full_time',
            'action': 'save',
        })
        assert _draft(logged_in)['dirty_steps'] == ['profile']

        response = logged_in.get(WIZARD_URL)
        assert [indicator.edited for indicator in response.context['steps']] == [False, True, False, False]
        assert _draft(logged_in)['dirty_steps'] == []

        response = logged_in.get(WIZARD_URL)
        assert not any(indicator.edited for indicator in response.context['steps'])


@pytest.mark.django_db
class TestWizardGallery:

    def test_upload_thumbnail_and_preview(self, logged_in, complete_record, user):
        complete_record.user_id = str(user.pk)
        complete_record.current_step = 3
        _store(logged_in, complete_record)
        upload = SimpleUploadedFile('logo.png', b'\x89PNG new thumbnail', content_type='image/png')

        response = logged_in.post(WIZARD_URL, {
            'title_1': 'Brand refresh',
            'description_1': 'Logo and identity for a cafe',
            'thumbnail_1': upload,
            'action': 'save',
        })

        assert response.status_code == 302
        item = _draft(logged_in)['steps']['business_gallery']['portfolio_items'][1]
        assert item['title'] == 'Brand refresh'
        assert item['thumbnail']['name'] == 'logo.png'

        preview = logged_in.get(reverse('verification:attachment_preview', args=[item['thumbnail']['id']]))
        assert preview.status_code == 200
        assert preview.content == b'\x89PNG new thumbnail'
        assert preview['Content-Type'] == 'image/png'

    def test_non_image_thumbnail_rejected(self, logged_in, complete_record, user):
        complete_record.user_id = str(user.pk)
        complete_record.current_step = 3
        _store(logged_in, complete_record)
        upload = SimpleUploadedFile('notes.txt', b'not an image', content_type='text/plain')

        response = logged_in.post(WIZARD_URL, {'thumbnail_0': upload, 'action': 'save'})

        assert response.status_code == 400

    def test_staging_failure_releases_request_files(self, logged_in, complete_record, user):
        complete_record.user_id = str(user.pk)
        complete_record.current_step = 3
        _store(logged_in, complete_record)
        real_stage = AttachmentHandle.stage
        staged = []

        def disk_fills_up(*args, **kwargs):
            if staged:
                raise OSError(28, 'No space left on device')
            staged.append(real_stage(*args, **kwargs))
            return staged[-1]

        with patch('verification.views.AttachmentHandle.stage', side_effect=disk_fills_up):
            response = logged_in.post(WIZARD_URL, {
                'title_1': 'Brand refresh',
                'description_1': 'Logo and identity for a cafe',
                'thumbnail_1': SimpleUploadedFile('logo.png', b'\x89PNG logo', content_type='image/png'),
                'image_1': SimpleUploadedFile('menu.png', b'\x89PNG menu', content_type='image/png'),
                'action': 'save',
            })

        assert response.status_code == 400
        assert UPLOAD_FAILED_MESSAGE in response.content.decode()
        assert len(staged) == 1
        assert staged[0].released
        assert not staged[0].path.exists()
        item = _draft(logged_in)['steps']['business_gallery']['portfolio_items'][1]
        assert item['thumbnail'] is None
        assert item['images'] == []

    def test_unknown_preview_is_404(self, logged_in):
        response = logged_in.get(reverse('verification:attachment_preview', args=['missing']))
        assert response.status_code == 404


@pytest.mark.django_db
class TestWizardAdmission:

    def test_unchecking_every_option_clears_answer(self, logged_in, complete_record, user):
        complete_record.user_id = str(user.pk)
        complete_record.admission_test.answers['negative_reviews_causes'] = frozenset({'Delivering the project late'})
        _store(logged_in, complete_record)

        response = logged_in.post(WIZARD_URL, {'action': 'save'})

        assert response.status_code == 302
        assert 'negative_reviews_causes' not in _draft(logged_in)['steps']['admission_test']['answers']

    def test_cleared_answer_blocks_scoring(self, logged_in, complete_record, user, admission_answers):
        complete_record.user_id = str(user.pk)
        complete_record.admission_test.answers.update(
            {key: frozenset(value) if isinstance(value, set) else value for key, value in admission_answers.items()}
        )
        _store(logged_in, complete_record)
        form = {key: value for key, value in admission_answers.items() if not isinstance(value, set)}

        response = logged_in.post(WIZARD_URL, {**form, 'action': 'complete_test'})

        assert response.status_code == 400
        test = _draft(logged_in)['steps']['admission_test']
        assert not test['completed']
        assert 'negative_reviews_causes' not in test['answers']


@pytest.mark.django_db
class TestWizardSubmit:

    def _ready(self, client, record, user):
        record.user_id = str(user.pk)
        record.admission_test.completed = True
        record.admission_test.score = 100
        _store(client, record)

    def test_submit_persists_and_clears_draft(self, logged_in, complete_record, user):
        self._ready(logged_in, complete_record, user)
        handles = complete_record.attachments()

        with patch('verification.signals.send_alert'):
            response = logged_in.post(WIZARD_URL, {'action': 'next'})

        assert response.status_code == 302
        assert response.url == reverse('core:dashboard')
        verification = FreelancerVerification.objects.get(user=user)
        assert verification.status == FreelancerVerification.Status.UNDER_REVIEW
        assert verification.attachments.count() == 3
        assert _draft(logged_in) is None
        assert all(not h.path.exists() for h in handles)

    def test_submit_failure_shows_banner(self, logged_in, complete_record, user):
        self._ready(logged_in, complete_record, user)

        with patch('verification.views.OrmVerificationSubmitter.submit', side_effect=SubmissionError('down')), \
                patch('verification.controller.send_alert'):
            response = logged_in.post(WIZARD_URL, {'action': 'next'})

        assert response.status_code == 200
        assert SUBMIT_FAILED_MESSAGE in response.content.decode()
        assert _draft(logged_in)['current_step'] == 4
        assert not FreelancerVerification.objects.filter(user=user).exists()

    def test_discard(self, logged_in, complete_record, user):
        complete_record.user_id = str(user.pk)
        _store(logged_in, complete_record)
        handles = complete_record.attachments()

        response = logged_in.post(WIZARD_URL, {'action': 'discard'})

        assert response.status_code == 302
        assert _draft(logged_in) is None
        assert all(not h.path.exists() for h in handles)


@pytest.mark.django_db
class TestStatusView:

    def test_shows_rejection_reason(self, logged_in, user):
        FreelancerVerification.objects.create(
            user=user,
            status=FreelancerVerification.Status.REJECTED,
            rejection_reason='Please add a portfolio thumbnail',
            admission_score=60,
        )
        response = logged_in.get(reverse('verification:status'))
        content = response.content.decode()
        assert 'Please add a portfolio thumbnail' in content
        assert 'Needs Review' in content
