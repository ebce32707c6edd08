"""
Forms for the verification wizard.

One form per step.  Forms only check structure (charset, types, choices);
step completeness is the gate's job, so every field is optional here and
``patch()`` returns the dict handed to ``StepController.update_step``.
"""

from django import forms
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator

from .records import (
    PORTFOLIO_SLOTS,
    SPECIALIZATIONS,
    AccountType,
    Availability,
    Proficiency,
)
from .scoring import ADMISSION_QUESTIONS, QuestionKind

INPUT_CLASS = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-indigo-500 focus:border-indigo-500'
CHECKBOX_CLASS = 'h-4 w-4 text-indigo-600 focus:ring-indigo-500 border-gray-300 rounded'

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

username_validator = RegexValidator(
    regex=r'^[A-Za-z0-9_]+$',
    message='Username may only contain letters, numbers and underscores.',
)


def _check_upload(upload, image_only=False):
    if upload is None:
        return None
    if upload.size > MAX_UPLOAD_BYTES:
        raise ValidationError('Files must be 10 MB or smaller.')
    content_type = getattr(upload, 'content_type', '') or ''
    if image_only and not content_type.startswith('image/'):
        raise ValidationError('Please upload an image file.')
    return upload


class AccountStepForm(forms.Form):
    username = forms.CharField(
        max_length=150,
        required=False,
        validators=[username_validator],
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'your_username'}),
    )
    account_type = forms.ChoiceField(
        choices=[(t.value, t.value.title()) for t in AccountType],
        initial=AccountType.FREELANCER.value,
        widget=forms.RadioSelect,
    )
    terms_accepted = forms.BooleanField(
        required=False,
        label='I agree to the terms of service',
        widget=forms.CheckboxInput(attrs={'class': CHECKBOX_CLASS}),
    )
    privacy_accepted = forms.BooleanField(
        required=False,
        label='I agree to the privacy policy',
        widget=forms.CheckboxInput(attrs={'class': CHECKBOX_CLASS}),
    )

    def __init__(self, *args, username_locked=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.username_locked = username_locked
        if username_locked:
            self.fields['username'].disabled = True
            self.fields['username'].help_text = 'Your username is confirmed and can no longer be changed.'

    def patch(self):
        data = dict(self.cleaned_data)
        if self.username_locked:
            data.pop('username', None)
        return data


class ProfileStepForm(forms.Form):
    job_title = forms.CharField(
        max_length=255,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'e.g. UI/UX Designer'}),
    )
    specialization = forms.ChoiceField(
        required=False,
        choices=[('', 'Choose a specialization')] + [(s, s) for s in SPECIALIZATIONS],
        widget=forms.Select(attrs={'class': INPUT_CLASS}),
    )
    introduction = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': INPUT_CLASS, 'rows': 5}),
        help_text='At least 50 characters.',
    )
    skills = forms.CharField(
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Figma, Sketch, CSS'}),
        help_text='Comma separated.',
    )
    hourly_rate = forms.FloatField(
        required=False,
        widget=forms.NumberInput(attrs={'class': INPUT_CLASS, 'step': '0.5'}),
    )
    availability = forms.ChoiceField(
        choices=[
            (Availability.FULL_TIME.value, 'Full time'),
            (Availability.PART_TIME.value, 'Part time'),
            (Availability.WEEKENDS.value, 'Weekends'),
        ],
        initial=Availability.FULL_TIME.value,
        widget=forms.Select(attrs={'class': INPUT_CLASS}),
    )
    languages = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': INPUT_CLASS, 'rows': 2}),
        help_text='One per line, e.g. "Arabic - native".',
    )

    def clean_skills(self):
        raw = self.cleaned_data.get('skills') or ''
        return [s.strip() for s in raw.split(',') if s.strip()]

    def clean_hourly_rate(self):
        rate = self.cleaned_data.get('hourly_rate')
        if rate is not None and rate <= 0:
            raise ValidationError('Hourly rate must be positive.')
        return rate

    def clean_languages(self):
        entries = []
        for line in (self.cleaned_data.get('languages') or '').splitlines():
            line = line.strip()
            if not line:
                continue
            language, _, proficiency = line.partition('-')
            proficiency = proficiency.strip().lower() or Proficiency.NATIVE.value
            if proficiency not in Proficiency._value2member_map_:
                raise ValidationError(f'Unknown proficiency "{proficiency}".')
            entries.append({'language': language.strip(), 'proficiency': proficiency})
        return entries

    def patch(self):
        data = dict(self.cleaned_data)
        if data.get('hourly_rate') is None:
            data.pop('hourly_rate', None)
        if not data.get('languages'):
            data.pop('languages', None)
        return data


class GalleryStepForm(forms.Form):
    """Three portfolio slots plus optional certificate and testimonial."""

    certificate = forms.FileField(required=False)
    testimonial_client_name = forms.CharField(max_length=255, required=False)
    testimonial_client_company = forms.CharField(max_length=255, required=False)
    testimonial_rating = forms.IntegerField(required=False, min_value=1, max_value=5)
    testimonial_comment = forms.CharField(required=False, widget=forms.Textarea(attrs={'rows': 2}))
    testimonial_project_title = forms.CharField(max_length=255, required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for slot in range(PORTFOLIO_SLOTS):
            self.fields[f'title_{slot}'] = forms.CharField(
                max_length=255, required=False,
                widget=forms.TextInput(attrs={'class': INPUT_CLASS}),
            )
            self.fields[f'description_{slot}'] = forms.CharField(
                required=False,
                widget=forms.Textarea(attrs={'class': INPUT_CLASS, 'rows': 3}),
            )
            self.fields[f'project_url_{slot}'] = forms.URLField(
                required=False,
                widget=forms.URLInput(attrs={'class': INPUT_CLASS}),
            )
            self.fields[f'thumbnail_{slot}'] = forms.FileField(required=False)
            self.fields[f'image_{slot}'] = forms.FileField(required=False)

    def clean(self):
        cleaned = super().clean()
        for slot in range(PORTFOLIO_SLOTS):
            for name in (f'thumbnail_{slot}', f'image_{slot}'):
                try:
                    _check_upload(cleaned.get(name), image_only=True)
                except ValidationError as exc:
                    self.add_error(name, exc)
        try:
            _check_upload(cleaned.get('certificate'))
        except ValidationError as exc:
            self.add_error('certificate', exc)

        if cleaned.get('testimonial_client_name') and not cleaned.get('testimonial_rating'):
            self.add_error('testimonial_rating', 'Give the testimonial a rating from 1 to 5.')
        return cleaned

    def patch(self):
        items = []
        for slot in range(PORTFOLIO_SLOTS):
            items.append({
                'title': self.cleaned_data.get(f'title_{slot}') or '',
                'description': self.cleaned_data.get(f'description_{slot}') or '',
                'project_url': self.cleaned_data.get(f'project_url_{slot}') or '',
            })
        return {'portfolio_items': items}

    def uploads(self):
        """(slot, kind, file) for every file attached in this request."""
        files = []
        for slot in range(PORTFOLIO_SLOTS):
            if self.cleaned_data.get(f'thumbnail_{slot}'):
                files.append((slot, 'thumbnail', self.cleaned_data[f'thumbnail_{slot}']))
            if self.cleaned_data.get(f'image_{slot}'):
                files.append((slot, 'image', self.cleaned_data[f'image_{slot}']))
        if self.cleaned_data.get('certificate'):
            files.append((None, 'certificate', self.cleaned_data['certificate']))
        return files

    def testimonial(self):
        name = self.cleaned_data.get('testimonial_client_name')
        if not name:
            return None
        return {
            'client_name': name,
            'client_company': self.cleaned_data.get('testimonial_client_company') or '',
            'rating': self.cleaned_data['testimonial_rating'],
            'comment': self.cleaned_data.get('testimonial_comment') or '',
            'project_title': self.cleaned_data.get('testimonial_project_title') or '',
        }


class AdmissionStepForm(forms.Form):
    """One radio group or checkbox group per admission question."""

    def __init__(self, *args, locked=False, **kwargs):
        super().__init__(*args, **kwargs)
        for question in ADMISSION_QUESTIONS:
            choices = [(option, option) for option in question.options]
            if question.kind == QuestionKind.MULTI:
                field = forms.MultipleChoiceField(
                    choices=choices, required=False, label=question.prompt,
                    widget=forms.CheckboxSelectMultiple,
                )
            else:
                field = forms.ChoiceField(
                    choices=choices, required=False, label=question.prompt,
                    widget=forms.RadioSelect,
                )
            field.disabled = locked
            self.fields[question.id] = field

    def patch(self):
        return {
            'answers': {
                question.id: self.cleaned_data.get(question.id)
                for question in ADMISSION_QUESTIONS
            }
        }


STEP_FORMS = {
    1: AccountStepForm,
    2: ProfileStepForm,
    3: GalleryStepForm,
    4: AdmissionStepForm,
}


def initial_for(record, step):
    """Initial form data for ``step`` taken from the in-memory record."""
    if step == 1:
        return record.account_data.to_dict()
    if step == 2:
        profile = record.profile
        return {
            'job_title': profile.job_title,
            'specialization': profile.specialization,
            'introduction': profile.introduction,
            'skills': ', '.join(profile.skills),
            'hourly_rate': profile.hourly_rate,
            'availability': profile.availability.value,
            'languages': '\n'.join(
                f"{entry.language} - {entry.proficiency.value}" for entry in profile.languages
            ),
        }
    if step == 3:
        initial = {}
        for slot, item in enumerate(record.business_gallery.portfolio_items):
            initial[f'title_{slot}'] = item.title
            initial[f'description_{slot}'] = item.description
            initial[f'project_url_{slot}'] = item.project_url
        return initial
    answers = record.admission_test.answers
    return {
        question_id: answer if isinstance(answer, str) else sorted(answer)
        for question_id, answer in answers.items()
    }
