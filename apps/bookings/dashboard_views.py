"""Dashboard views: reservation management and the month calendar."""

from __future__ import annotations

from urllib.parse import urlencode

import structlog
from django.contrib import messages  # type: ignore
from django.http import Http404  # type: ignore
from django.shortcuts import redirect, render  # type: ignore
from django.urls import reverse  # type: ignore
from django.utils import timezone  # type: ignore
from django.views.decorators.http import require_GET, require_http_methods, require_POST  # type: ignore

from apps.users.decorators import admin_required

from .domain.calendar import diff_block_edits
from .exceptions import PersistenceError, RecordNotFound, SessionMissingError
from .forms import GuestDetailsForm
from .session import block_map, reservation_map
from .views import form_fields

logger = structlog.get_logger(__name__)

LIST_ROUTES = {
    "new": "dashboard:new-reservations",
    "all": "dashboard:all-reservations",
}


def _calendar_url(year, month) -> str:
    return f"{reverse('dashboard:reservations-calendar')}?{urlencode({'y': year, 'm': month})}"


def _back_to(request, src: str):
    """Redirect to where the action was started from (list or calendar month)."""
    if src == "cal":
        today = timezone.localdate()
        year = request.POST.get("y") or request.GET.get("y") or today.year
        month = request.POST.get("m") or request.GET.get("m") or today.month
        return redirect(_calendar_url(year, month))
    return redirect(LIST_ROUTES[src])


def _month_from(params) -> tuple[int, int]:
    today = timezone.localdate()
    try:
        year = int(params.get("y", today.year))
        month = int(params.get("m", today.month))
    except (TypeError, ValueError):
        return today.year, today.month
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        return today.year, today.month
    return year, month


@require_GET
@admin_required
def dashboard(request):
    return render(request, "dashboard/dashboard.html")


@require_GET
@admin_required
def new_reservations(request):
    try:
        reservations = request.booking.store.new_reservations()
    except PersistenceError:
        messages.error(request, "can't load reservations")
        return redirect("dashboard:dashboard")
    return render(request, "dashboard/new-reservations.html", {"reservations": reservations, "src": "new"})


@require_GET
@admin_required
def all_reservations(request):
    try:
        reservations = request.booking.store.all_reservations()
    except PersistenceError:
        messages.error(request, "can't load reservations")
        return redirect("dashboard:dashboard")
    return render(request, "dashboard/all-reservations.html", {"reservations": reservations, "src": "all"})


@require_http_methods(["GET", "POST"])
@admin_required
def reservation_show(request, src: str, reservation_id: int):
    store = request.booking.store
    try:
        reservation = store.get_reservation(reservation_id)
    except RecordNotFound:
        raise Http404("Reservation not found")

    if request.method == "GET":
        form = GuestDetailsForm(
            initial={
                "first-name": reservation.first_name,
                "last-name": reservation.last_name,
                "email": reservation.email,
                "phone": reservation.phone,
            }
        )
    else:
        form = GuestDetailsForm(request.POST)
        if form.is_valid():
            for field, value in form.guest_details().items():
                setattr(reservation, field, value)
            try:
                store.update_reservation(reservation)
            except PersistenceError:
                messages.error(request, "can't save changes")
                return _back_to(request, src)
            logger.info("dashboard.reservation_updated", reservation_id=reservation.pk)
            messages.success(request, "changes saved")
            return _back_to(request, src)

    context = {
        "reservation": reservation,
        "form": form,
        "fields": form_fields(form),
        "src": src,
        "year": request.GET.get("y", ""),
        "month": request.GET.get("m", ""),
    }
    return render(request, "dashboard/reservations-show.html", context)


@require_POST
@admin_required
def process_reservation(request, src: str, reservation_id: int):
    try:
        request.booking.store.mark_processed(reservation_id, True)
    except RecordNotFound:
        raise Http404("Reservation not found")
    except PersistenceError:
        messages.error(request, "can't update reservation")
        return _back_to(request, src)

    logger.info("dashboard.reservation_processed", reservation_id=reservation_id)
    messages.success(request, "Reservation marked as processed")
    return _back_to(request, src)


@require_POST
@admin_required
def delete_reservation(request, src: str, reservation_id: int):
    try:
        request.booking.store.delete_reservation(reservation_id)
    except RecordNotFound:
        raise Http404("Reservation not found")
    except PersistenceError:
        messages.error(request, "can't delete reservation")
        return _back_to(request, src)

    logger.info("dashboard.reservation_deleted", reservation_id=reservation_id)
    messages.success(request, "Reservation deleted")
    return _back_to(request, src)


@require_http_methods(["GET", "POST"])
@admin_required
def reservations_calendar(request):
    if request.method == "POST":
        return _post_calendar(request)

    year, month = _month_from(request.GET)
    services = request.booking
    try:
        rooms = services.store.all_rooms()
        view = services.calendar.build_month_view(year, month, rooms)
    except PersistenceError:
        messages.error(request, "can't load calendar")
        return redirect("dashboard:dashboard")

    for room in rooms:
        block_map.for_key(room.pk).put(request.session, view.block_map[room.pk])
        reservation_map.for_key(room.pk).put(request.session, view.reservation_map[room.pk])

    context = {
        "view": view,
        "rows": view.rows(),
        "days": view.days,
        "now": view.first_day,
        "previous": view.previous_month,
        "next": view.next_month,
    }
    return render(request, "dashboard/reservations-calendar.html", context)


def _post_calendar(request):
    year, month = _month_from(request.POST)
    services = request.booking
    try:
        rooms = services.store.all_rooms()
        block_maps = {room.pk: block_map.for_key(room.pk).require(request.session) for room in rooms}
        reservation_maps = {
            room.pk: reservation_map.for_key(room.pk).require(request.session) for room in rooms
        }
    except SessionMissingError as exc:
        logger.warning("dashboard.calendar_state_missing", key=exc.key)
        messages.error(request, str(exc))
        return redirect(_calendar_url(year, month))
    except PersistenceError:
        messages.error(request, "can't load calendar")
        return redirect(_calendar_url(year, month))

    edits = diff_block_edits(block_maps, reservation_maps, request.POST.keys())
    try:
        services.calendar.apply_block_edits(edits)
    except PersistenceError:
        messages.error(request, "can't save changes")
        return redirect(_calendar_url(year, month))

    logger.info(
        "dashboard.calendar_saved",
        removed=len(edits.remove),
        added=len(edits.add),
        skipped=len(edits.skipped),
    )
    messages.success(request, "changes saved")
    return redirect(_calendar_url(year, month))
