"""View decorators for the dashboard."""

from __future__ import annotations

from functools import wraps

from django.contrib import messages
from django.shortcuts import redirect

from .session import admin_user_id


def admin_required(view_func):
    """Redirect visitors without a dashboard login to the login page with a notice.

    A dashboard login is an authenticated user whose id was stored under
    ``userId`` by the login view.
    """

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        user = request.user
        if not user.is_authenticated or admin_user_id.get(request.session) != user.pk:
            messages.error(request, "Log in first!")
            return redirect("users:login")
        return view_func(request, *args, **kwargs)

    return _wrapped
