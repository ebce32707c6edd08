"""
URL configuration for the marketplace app.
"""

from django.urls import path
from . import views

app_name = 'marketplace'

urlpatterns = [
    # Browse
    path('services/', views.ServiceBrowseView.as_view(), name='services'),
    path('projects/', views.ProjectBrowseView.as_view(), name='projects'),
    path('freelancers/', views.FreelancerBrowseView.as_view(), name='freelancers'),

    # Saved searches
    path('saved-searches/', views.SavedSearchListView.as_view(), name='saved_searches'),
    path('saved-searches/new/', views.SavedSearchCreateView.as_view(), name='saved_search_create'),
    path('saved-searches/<int:pk>/edit/', views.SavedSearchUpdateView.as_view(), name='saved_search_edit'),
    path('saved-searches/<int:pk>/delete/', views.SavedSearchDeleteView.as_view(), name='saved_search_delete'),
    path('saved-searches/<int:pk>/run/', views.SavedSearchRunView.as_view(), name='saved_search_run'),
]
