"""
URLs for hosting app.
"""
from django.urls import path
from . import views

urlpatterns = [
    path('', views.sites_list, name='sites_list'),
    path('check-domain/', views.check_domain, name='check_domain'),
    path('stats/', views.site_stats, name='site_stats'),
    path('<int:site_id>/', views.site_detail, name='site_detail'),
    path('<int:site_id>/status/', views.site_status, name='site_status'),
    path('<int:site_id>/credentials/', views.site_credentials, name='site_credentials'),
]
