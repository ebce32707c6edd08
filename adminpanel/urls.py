"""
URL configuration for the admin panel.
"""

from django.urls import path
from . import views

app_name = 'adminpanel'

urlpatterns = [
    # Dashboard and row actions
    path('', views.AdminDashboardView.as_view(), name='dashboard'),
    path('users/<int:pk>/action/', views.UserActionView.as_view(), name='user_action'),
    path('services/<int:pk>/action/', views.ServiceActionView.as_view(), name='service_action'),

    # Escrow
    path('escrow/', views.EscrowListView.as_view(), name='escrow'),
    path('escrow/export/', views.EscrowExportView.as_view(), name='escrow_export'),
    path('escrow/<int:pk>/', views.EscrowDetailView.as_view(), name='escrow_detail'),
    path('escrow/<int:pk>/<str:action>/', views.EscrowActionView.as_view(), name='escrow_action'),

    # Verification review queue
    path('verifications/', views.VerificationQueueView.as_view(), name='verifications'),
    path('verifications/<int:pk>/', views.VerificationReviewView.as_view(), name='verification_review'),
]
