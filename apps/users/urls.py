"""URL routing for the users domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from . import views

app_name = "users"

urlpatterns = [
    path("login/", views.login_view, name="login"),
    path("logout/", views.logout_view, name="logout"),
]
