"""
URL configuration for installdesk_backend project.
"""
from django.contrib import admin
from django.urls import path, include
from . import views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include('accounts.urls')),
    path('api/clients/', include('clients.urls')),
    path('api/projects/', include('projects.urls')),
    path('api/sites/', include('hosting.urls')),
    path('api/installations/', include('installations.urls')),
    path('api/dashboard/stats/', views.dashboard_stats, name='dashboard_stats'),
]
