"""Public views for the booking flow.

search availability -> choose room (or book room from a room page)
-> make reservation -> reservation summary
"""

from __future__ import annotations

import structlog
from django.contrib import messages  # type: ignore
from django.shortcuts import redirect, render  # type: ignore
from django.views.decorators.http import require_GET, require_http_methods  # type: ignore
from rest_framework.decorators import api_view, permission_classes  # type: ignore
from rest_framework.permissions import AllowAny  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.value_objects import DATE_FORMAT, parse_date

from .application.workflow import SubmissionState
from .exceptions import PersistenceError, RecordNotFound, SessionMissingError
from .forms import INVERTED_DATES_MESSAGE, AvailabilityForm, ReservationForm
from .serializers import AvailabilityProbeResultSerializer, AvailabilityProbeSerializer
from .session import ReservationDraft, reservation_draft

logger = structlog.get_logger(__name__)

MISSING_DRAFT = "Can't get reservation from session"
NO_ROOMS = "No Rooms are available"
DATABASE_ERROR = "Error connecting to database"


def form_fields(form) -> dict:
    """Bound fields keyed with underscores, so templates can reach ``first-name``."""
    return {name.replace("-", "_"): form[name] for name in form.fields}


def _draft_or_home(request):
    try:
        return reservation_draft.require(request.session), None
    except SessionMissingError as exc:
        logger.warning("booking.draft_missing", path=request.path, key=exc.key)
        messages.error(request, MISSING_DRAFT)
        return None, redirect("home")


@require_http_methods(["GET", "POST"])
def search_availability(request):
    if request.method == "GET":
        return render(request, "bookings/search-availability.html", {"form": AvailabilityForm()})

    form = AvailabilityForm(request.POST)
    if not form.is_valid():
        if form.has_unparsable_dates():
            field = "start" if "start" in form.errors else "end"
            messages.error(request, form.errors[field][0])
            return redirect("home")
        messages.error(request, form.non_field_errors()[0])
        return redirect("bookings:search-availability")

    start, end = form.cleaned_data["start"], form.cleaned_data["end"]
    try:
        rooms = request.booking.availability.available_rooms(start, end)
    except PersistenceError:
        messages.error(request, DATABASE_ERROR)
        return redirect("home")

    logger.info("booking.search", start=str(start), end=str(end), free=[room.pk for room in rooms])
    if not rooms:
        messages.error(request, NO_ROOMS)
        return redirect("bookings:search-availability")

    draft = ReservationDraft(start_date=start, end_date=end)
    reservation_draft.put(request.session, draft)
    return render(request, "bookings/choose-room.html", {"rooms": rooms, "draft": draft})


@api_view(["POST"])
@permission_classes([AllowAny])
def availability_json(request):
    """Availability probe used by the room pages."""

    serializer = AvailabilityProbeSerializer(data=request.data)
    if not serializer.is_valid():
        payload = {"ok": False, "message": "can't parse request", "roomId": "", "startDate": "", "endDate": ""}
        return Response(AvailabilityProbeResultSerializer(payload).data)

    data = serializer.validated_data
    result = {
        "ok": False,
        "message": "",
        "roomId": str(data["room_id"]),
        "startDate": data["start"].strftime(DATE_FORMAT),
        "endDate": data["end"].strftime(DATE_FORMAT),
    }
    try:
        result["ok"] = request.booking.availability.is_room_available(data["room_id"], data["start"], data["end"])
    except PersistenceError:
        result["message"] = DATABASE_ERROR

    logger.info("booking.probe", room_id=data["room_id"], available=result["ok"])
    return Response(AvailabilityProbeResultSerializer(result).data)


@require_GET
def choose_room(request, room_id: int):
    draft, response = _draft_or_home(request)
    if response is not None:
        return response

    try:
        room = request.booking.store.get_room(room_id)
    except PersistenceError:
        messages.error(request, "can't get room id")
        return redirect("home")

    reservation_draft.put(request.session, draft.with_room(room))
    return redirect("bookings:make-reservation")


@require_GET
def book_room(request):
    """Start a draft from a room page link: ``?id=<room>&s=<start>&e=<end>``."""

    try:
        room_id = int(request.GET.get("id", ""))
    except ValueError:
        messages.error(request, "can't get room id")
        return redirect("home")
    try:
        start = parse_date(request.GET.get("s"))
    except ValueError:
        messages.error(request, "can't parse start date")
        return redirect("home")
    try:
        end = parse_date(request.GET.get("e"))
    except ValueError:
        messages.error(request, "can't parse end date")
        return redirect("home")
    if start > end:
        messages.error(request, INVERTED_DATES_MESSAGE)
        return redirect("home")

    try:
        room = request.booking.store.get_room(room_id)
    except PersistenceError:
        messages.error(request, "can't get room id")
        return redirect("home")

    draft = ReservationDraft(start_date=start, end_date=end).with_room(room)
    reservation_draft.put(request.session, draft)
    logger.info("booking.book_room", room_id=room.pk, start=str(start), end=str(end))
    return redirect("bookings:make-reservation")


def _render_reservation_form(request, form, draft: ReservationDraft, status: int = 200):
    context = {"form": form, "fields": form_fields(form), "draft": draft}
    return render(request, "bookings/make-reservation.html", context, status=status)


@require_http_methods(["GET", "POST"])
def make_reservation(request):
    if request.method == "POST":
        return _post_reservation(request)

    draft, response = _draft_or_home(request)
    if response is not None:
        return response

    try:
        room = request.booking.store.get_room(draft.room_id)
    except RecordNotFound:
        messages.error(request, "can't find room")
        return redirect("home")
    except PersistenceError:
        messages.error(request, DATABASE_ERROR)
        return redirect("home")

    draft = draft.with_room(room)
    reservation_draft.put(request.session, draft)
    form = ReservationForm(
        initial={
            "first-name": draft.first_name,
            "last-name": draft.last_name,
            "email": draft.email,
            "phone": draft.phone,
            "start-date": draft.start_date.strftime(DATE_FORMAT),
            "end-date": draft.end_date.strftime(DATE_FORMAT),
            "room-id": draft.room_id,
        }
    )
    return _render_reservation_form(request, form, draft)


def _post_reservation(request):
    outcome = request.booking.workflow.submit(request.POST)

    if outcome.state is SubmissionState.REJECTED:
        previous = reservation_draft.get(request.session)
        reservation = outcome.reservation
        draft = ReservationDraft.from_reservation(
            reservation,
            room_name=previous.room_name if previous and previous.room_id == reservation.room_id else "",
        )
        return _render_reservation_form(request, outcome.form, draft)

    if outcome.state is SubmissionState.FAILED:
        messages.error(request, outcome.message)
        return redirect("home")

    reservation_draft.put(
        request.session,
        ReservationDraft.from_reservation(outcome.reservation, room_name=outcome.room.room_name),
    )
    logger.info("booking.confirmed", reservation_id=outcome.reservation.pk)
    return redirect("bookings:reservation-summary")


@require_GET
def reservation_summary(request):
    draft = reservation_draft.pop(request.session)
    if draft is None:
        logger.warning("booking.summary_without_draft")
        messages.error(request, MISSING_DRAFT)
        return redirect("home")

    return render(request, "bookings/reservation-summary.html", {"draft": draft})
