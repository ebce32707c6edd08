"""
Forms for the core app.
Handles user registration and onboarding forms.
"""

from decimal import Decimal

from django import forms
from django.conf import settings
from django.contrib.auth.forms import UserCreationForm
from django.core.exceptions import ValidationError

from .models import User

INPUT_CLASS = 'w-full px-4 py-2 border border-gray-300 rounded-lg focus:ring-2 focus:ring-indigo-500 focus:border-indigo-500'


class SignupForm(UserCreationForm):
    """
    Registration form with full name and phone.
    New accounts are credited the configured signup bonus (2 hours by default).
    """
    full_name = forms.CharField(
        max_length=255,
        required=True,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': 'Your full name'}),
    )

    email = forms.EmailField(
        required=True,
        widget=forms.EmailInput(attrs={'class': INPUT_CLASS, 'placeholder': 'you@example.com'}),
        help_text='We\'ll send a verification link to this address.'
    )

    phone = forms.CharField(
        max_length=32,
        required=False,
        widget=forms.TextInput(attrs={'class': INPUT_CLASS, 'placeholder': '+971 50 000 0000'}),
    )

    class Meta:
        model = User
        fields = ('username', 'email', 'full_name', 'phone', 'password1', 'password2')
        widgets = {
            'username': forms.TextInput(attrs={
                'class': INPUT_CLASS,
                'placeholder': 'Choose a username',
            }),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['password1'].widget.attrs.update({
            'class': INPUT_CLASS,
            'placeholder': 'Create a strong password',
        })
        self.fields['password2'].widget.attrs.update({
            'class': INPUT_CLASS,
            'placeholder': 'Confirm your password',
        })

    def clean_email(self):
        email = self.cleaned_data.get('email')
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationError('A user with this email already exists.')
        return email

    def clean_full_name(self):
        full_name = (self.cleaned_data.get('full_name') or '').strip()
        if len(full_name) < 2:
            raise ValidationError('Full name must be at least 2 characters long.')
        return full_name

    def save(self, commit=True):
        user = super().save(commit=False)
        user.email = self.cleaned_data['email']
        user.full_name = self.cleaned_data['full_name']
        user.phone = self.cleaned_data.get('phone', '')
        user.balance = Decimal(str(settings.WAQTI_CONFIG.get('signup_bonus_hours', 2)))
        if commit:
            user.save()
        return user


class RoleSelectionForm(forms.Form):
    role = forms.ChoiceField(choices=User.Role.choices, widget=forms.RadioSelect)
