"""
URL configuration for the portfolio project.

The map page lives at the root; its JSON API is under /api/.
"""

from django.contrib import admin
from django.urls import path, include
from portfolio import auth
from portfolio import views as home_views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/admin/login/", auth.login_view, name='admin_login'),
    path("api/admin/logout/", auth.logout_view, name='admin_logout'),
    path("api/admin/status/", auth.status_view, name='admin_status'),
    path("api/", include("projects.urls")),
    path("", home_views.home, name='home'),
]
