"""
URL configuration for daily_updates app.
"""

from django.urls import path
from . import views

app_name = 'daily_updates'

urlpatterns = [
    path('', views.update_list, name='update_list'),
    path('unread-count/', views.unread_count, name='unread_count'),
    path('read-all/', views.update_read_all, name='read_all'),

    # Attachments
    path('attachments/<int:attachment_id>/download/', views.attachment_download, name='attachment_download'),
    path('attachments/<int:attachment_id>/delete/', views.attachment_delete, name='attachment_delete'),

    # Single update
    path('<int:pk>/', views.update_detail, name='update_detail'),
    path('<int:pk>/edit/', views.update_edit, name='update_edit'),
    path('<int:pk>/delete/', views.update_delete, name='update_delete'),
    path('<int:pk>/pin/', views.update_pin, name='update_pin'),
    path('<int:pk>/read/', views.update_read, name='update_read'),
    path('<int:pk>/attachments/', views.attachment_upload, name='attachment_upload'),
]
