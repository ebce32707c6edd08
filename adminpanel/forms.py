from django import forms

from verification.models import VerificationReview
from verification.review import CHECKLIST_KEYS

CHECKBOX_CLASS = 'h-4 w-4 text-indigo-600 focus:ring-indigo-500 border-gray-300 rounded'


class VerificationReviewForm(forms.Form):
    decision = forms.ChoiceField(choices=VerificationReview.Decision.choices, widget=forms.RadioSelect)
    comments = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={
            'class': 'w-full px-4 py-2 border border-gray-300 rounded-lg',
            'rows': 3,
        }),
        help_text='Required when rejecting.',
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for key in CHECKLIST_KEYS:
            self.fields[key] = forms.BooleanField(
                required=False,
                label=key.replace('_', ' ').capitalize(),
                widget=forms.CheckboxInput(attrs={'class': CHECKBOX_CLASS}),
            )

    def clean(self):
        cleaned = super().clean()
        if cleaned.get('decision') == VerificationReview.Decision.REJECTED and not (cleaned.get('comments') or '').strip():
            self.add_error('comments', 'A rejection reason is required.')
        return cleaned

    def checklist(self):
        return {key: self.cleaned_data.get(key, False) for key in CHECKLIST_KEYS}
