"""
Forms for the marketplace app.
"""

from django import forms
from django.core.exceptions import ValidationError

from .models import SavedSearch

INPUT_CLASS = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-indigo-500 focus:border-indigo-500'


class SavedSearchForm(forms.ModelForm):
    """Create or edit a saved search.  ``filters`` is edited as key=value lines."""

    filters_text = forms.CharField(
        required=False,
        label='Filters',
        widget=forms.Textarea(attrs={'class': INPUT_CLASS, 'rows': 3, 'placeholder': 'category=design\nrating=4+'}),
        help_text='One filter per line as key=value.',
    )

    class Meta:
        model = SavedSearch
        fields = ['name', 'description', 'query', 'category', 'notifications', 'is_public']
        widgets = {
            'name': forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'e.g. Senior web developers'}),
            'description': forms.Textarea(attrs={'class': INPUT_CLASS, 'rows': 2}),
            'query': forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Search terms'}),
            'category': forms.Select(attrs={'class': INPUT_CLASS}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk and self.instance.filters:
            self.fields['filters_text'].initial = '\n'.join(
                f'{key}={value}' for key, value in self.instance.filters.items()
            )

    def clean_name(self):
        name = (self.cleaned_data.get('name') or '').strip()
        if not name:
            raise ValidationError('Give the search a name.')
        return name

    def clean_filters_text(self):
        filters = {}
        for line in (self.cleaned_data.get('filters_text') or '').splitlines():
            line = line.strip()
            if not line:
                continue
            key, sep, value = line.partition('=')
            if not sep or not key.strip():
                raise ValidationError(f'"{line}" is not in key=value form.')
            filters[key.strip()] = value.strip()
        return filters

    def save(self, commit=True):
        search = super().save(commit=False)
        search.filters = self.cleaned_data.get('filters_text') or {}
        if commit:
            search.save()
        return search
