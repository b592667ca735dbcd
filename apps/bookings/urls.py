"""URL routing for the public booking flow."""

from __future__ import annotations

from django.urls import path  # type: ignore

from . import views

app_name = "bookings"

urlpatterns = [
    path("search-availability/", views.search_availability, name="search-availability"),
    path("search-availability-json/", views.availability_json, name="search-availability-json"),
    path("choose-room/<int:room_id>/", views.choose_room, name="choose-room"),
    path("book-room/", views.book_room, name="book-room"),
    path("make-reservation/", views.make_reservation, name="make-reservation"),
    path("reservation-summary/", views.reservation_summary, name="reservation-summary"),
]
