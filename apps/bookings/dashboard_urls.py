"""URL routing for the reservation dashboard (mounted under /admin/)."""

from __future__ import annotations

from django.urls import path, register_converter  # type: ignore

from . import dashboard_views as views


class SourceConverter:
    """Page an action was started from: new list, all list or calendar."""

    regex = "new|all|cal"

    def to_python(self, value: str) -> str:
        return value

    def to_url(self, value: str) -> str:
        return value


register_converter(SourceConverter, "src")

app_name = "dashboard"

urlpatterns = [
    path("dashboard/", views.dashboard, name="dashboard"),
    path("new-reservations/", views.new_reservations, name="new-reservations"),
    path("all-reservations/", views.all_reservations, name="all-reservations"),
    path("reservations/<src:src>/<int:reservation_id>/show/", views.reservation_show, name="reservation-show"),
    path(
        "process-reservation/<src:src>/<int:reservation_id>/",
        views.process_reservation,
        name="process-reservation",
    ),
    path(
        "delete-reservation/<src:src>/<int:reservation_id>/",
        views.delete_reservation,
        name="delete-reservation",
    ),
    path("reservations-calendar/", views.reservations_calendar, name="reservations-calendar"),
]
