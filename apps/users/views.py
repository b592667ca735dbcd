"""Login and logout views for the dashboard."""

from __future__ import annotations

import structlog
from django.contrib import messages
from django.contrib.auth import authenticate, login, logout
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from .forms import LoginForm
from .session import admin_user_id

logger = structlog.get_logger(__name__)


@require_http_methods(["GET", "POST"])
def login_view(request):
    if request.method == "GET":
        return render(request, "users/login.html", {"form": LoginForm()})

    form = LoginForm(request.POST)
    if not form.is_valid():
        return render(request, "users/login.html", {"form": form})

    user = authenticate(
        request,
        username=form.cleaned_data["email"],
        password=form.cleaned_data["password"],
    )
    if user is None:
        logger.info("login.rejected", email=form.cleaned_data["email"])
        messages.error(request, "Invalid login credentials")
        return redirect("users:login")

    # login() rotates the session key.
    login(request, user)
    admin_user_id.put(request.session, user.pk)
    logger.info("login.ok", user_id=user.pk)
    messages.success(request, "Logged in successfully")
    return redirect("home")


@require_POST
def logout_view(request):
    logout(request)
    return redirect("users:login")
