"""
URLs for installations app.
"""
from django.urls import path
from . import views

urlpatterns = [
    path('', views.installations_list, name='installations_list'),
    path('session/', views.installation_session, name='installation_session'),
    path('<int:site_id>/', views.installation_detail, name='installation_detail'),
    path('<int:site_id>/complete/', views.installation_complete, name='installation_complete'),
    path('<int:site_id>/steps/', views.installation_steps, name='installation_steps'),
    path('<int:site_id>/steps/report/', views.installation_step_report, name='installation_step_report'),
    path('<int:site_id>/steps/status-all/', views.installation_steps_status, name='installation_steps_status'),
]
