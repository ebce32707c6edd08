"""
URL configuration for the verification app.
"""

from django.urls import path
from . import views

app_name = 'verification'

urlpatterns = [
    path('', views.VerificationWizardView.as_view(), name='wizard'),
    path('status/', views.VerificationStatusView.as_view(), name='status'),
    path('attachments/<str:handle_id>/', views.AttachmentPreviewView.as_view(), name='attachment_preview'),
]
