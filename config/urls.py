"""
URL configuration for the royalty back office.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from api import views as api_views
from smartlinks import views as smartlink_views

urlpatterns = [
    path('admin/', admin.site.urls),

    # Session auth
    path('api/auth/status/', api_views.auth_status, name='auth_status'),
    path('api/v1/users/me/', api_views.CurrentUserView.as_view(), name='current_user'),

    # Catalog (songs, collaborators, publishing entities, catalog search)
    path('api/v1/', include('catalog.urls')),

    # Publishing / master split ledgers
    path('api/v1/', include('rights.urls')),

    # Contracts and e-signature
    path('api/v1/', include('contracts.urls')),

    # Broadcast email
    path('api/v1/', include('notifications.urls')),

    # Smart links (admin CRUD, public page data) and the click redirect
    path('api/v1/', include('smartlinks.urls')),
    path('r/<int:smart_link_id>/<str:service>/', smartlink_views.smart_link_redirect, name='smart-link-redirect'),
]
