"""Integration tests for the public booking pages."""

from __future__ import annotations

from datetime import date

from django.contrib.messages import get_messages
from django.core import mail
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Reservation, Restriction, RoomRestriction
from apps.bookings.session import ReservationDraft, reservation_draft


def _notices(response) -> list[str]:
    return [str(message) for message in get_messages(response.wsgi_request)]


def _reservation_post(**overrides) -> dict[str, str]:
    data = {
        "first-name": "Yusuf",
        "last-name": "Grenada",
        "email": "yusuf@example.com",
        "phone": "",
        "start-date": "2050-01-01",
        "end-date": "2050-01-03",
        "room-id": "1",
    }
    data.update(overrides)
    return data


class BookingTestMixin:
    def put_draft(self, draft: ReservationDraft) -> None:
        session = self.client.session
        reservation_draft.put(session, draft)
        session.save()

    def block(self, room_id: int, start: date, end: date) -> RoomRestriction:
        return RoomRestriction.objects.create(
            room_id=room_id,
            start_date=start,
            end_date=end,
            restriction_id=Restriction.OWNER_BLOCK,
        )


class StaticPageTests(TestCase):
    def test_pages_render(self) -> None:
        for name in ("home", "about", "contact", "generals", "majors"):
            with self.subTest(page=name):
                response = self.client.get(reverse(name))
                self.assertEqual(response.status_code, 200)


class SearchAvailabilityTests(BookingTestMixin, TestCase):
    def setUp(self) -> None:
        self.url = reverse("bookings:search-availability")

    def test_get_renders_form(self) -> None:
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "bookings/search-availability.html")

    def test_free_rooms_are_listed_and_draft_stored(self) -> None:
        self.block(1, date(2050, 1, 1), date(2050, 1, 5))

        response = self.client.post(self.url, {"start": "2050-01-02", "end": "2050-01-03"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([room.pk for room in response.context["rooms"]], [2])
        draft = reservation_draft.get(self.client.session)
        self.assertEqual(draft.start_date, date(2050, 1, 2))
        self.assertEqual(draft.room_id, 0)

    def test_no_rooms_redirects_back(self) -> None:
        self.block(1, date(2050, 1, 1), date(2050, 1, 5))
        self.block(2, date(2050, 1, 3), date(2050, 1, 3))

        response = self.client.post(self.url, {"start": "2050-01-02", "end": "2050-01-03"})

        self.assertRedirects(response, self.url, fetch_redirect_response=False)
        self.assertEqual(_notices(response), ["No Rooms are available"])

    def test_bad_date_redirects_home(self) -> None:
        response = self.client.post(self.url, {"start": "invalid", "end": "2050-01-03"})

        self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)
        self.assertEqual(_notices(response), ["can't parse start date"])

    def test_inverted_dates_redirect_back(self) -> None:
        response = self.client.post(self.url, {"start": "2050-01-05", "end": "2050-01-03"})

        self.assertRedirects(response, self.url, fetch_redirect_response=False)
        self.assertEqual(len(_notices(response)), 1)


class AvailabilityProbeTests(BookingTestMixin, APITestCase):
    def setUp(self) -> None:
        self.url = reverse("bookings:search-availability-json")

    def test_available_room(self) -> None:
        response = self.client.post(self.url, {"start": "2050-01-01", "end": "2050-01-03", "room-id": "1"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.json(),
            {"ok": True, "message": "", "roomId": "1", "startDate": "2050-01-01", "endDate": "2050-01-03"},
        )

    def test_unavailable_room(self) -> None:
        self.block(2, date(2050, 1, 3), date(2050, 1, 3))

        response = self.client.post(self.url, {"start": "2050-01-01", "end": "2050-01-03", "room-id": "2"})

        self.assertFalse(response.json()["ok"])
        self.assertEqual(response.json()["roomId"], "2")

    def test_invalid_request(self) -> None:
        response = self.client.post(self.url, {"start": "nope", "end": "2050-01-03", "room-id": "1"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["ok"], False)
        self.assertEqual(response.json()["message"], "can't parse request")


class RoomSelectionTests(BookingTestMixin, TestCase):
    def test_choose_room_updates_draft(self) -> None:
        self.put_draft(ReservationDraft(start_date=date(2050, 1, 1), end_date=date(2050, 1, 3)))

        response = self.client.get(reverse("bookings:choose-room", args=[1]))

        self.assertRedirects(response, reverse("bookings:make-reservation"), fetch_redirect_response=False)
        draft = reservation_draft.get(self.client.session)
        self.assertEqual((draft.room_id, draft.room_name), (1, "General's Quarters"))

    def test_choose_room_without_draft(self) -> None:
        response = self.client.get(reverse("bookings:choose-room", args=[1]))

        self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)
        self.assertEqual(_notices(response), ["Can't get reservation from session"])

    def test_book_room_builds_draft(self) -> None:
        url = reverse("bookings:book-room")
        response = self.client.get(url, {"id": "2", "s": "2050-01-01", "e": "2050-01-03"})

        self.assertRedirects(response, reverse("bookings:make-reservation"), fetch_redirect_response=False)
        draft = reservation_draft.get(self.client.session)
        self.assertEqual(draft.room_name, "Major's Suite")
        self.assertEqual(draft.end_date, date(2050, 1, 3))

    def test_book_room_bad_input(self) -> None:
        url = reverse("bookings:book-room")
        for query in ({"id": "x", "s": "2050-01-01", "e": "2050-01-03"}, {"id": "1", "s": "bad", "e": "2050-01-03"}):
            with self.subTest(query=query):
                response = self.client.get(url, query)
                self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)

    def test_book_room_inverted_dates(self) -> None:
        url = reverse("bookings:book-room")
        response = self.client.get(url, {"id": "1", "s": "2050-01-05", "e": "2050-01-03"})

        self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)
        self.assertEqual(_notices(response), ["Arrival must not be after departure"])
        self.assertIsNone(reservation_draft.get(self.client.session))


class MakeReservationTests(BookingTestMixin, TestCase):
    def setUp(self) -> None:
        self.url = reverse("bookings:make-reservation")

    def test_get_without_draft_redirects_home(self) -> None:
        response = self.client.get(self.url)

        self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)
        self.assertEqual(_notices(response), ["Can't get reservation from session"])

    def test_get_prefills_from_draft(self) -> None:
        self.put_draft(ReservationDraft(start_date=date(2050, 1, 1), end_date=date(2050, 1, 3), room_id=1))

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "General&#x27;s Quarters")
        self.assertContains(response, 'name="start-date" value="2050-01-01"')

    def test_get_unknown_room_redirects_home(self) -> None:
        self.put_draft(ReservationDraft(start_date=date(2050, 1, 1), end_date=date(2050, 1, 3), room_id=99))

        response = self.client.get(self.url)

        self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)

    def test_post_valid_redirects_to_summary(self) -> None:
        response = self.client.post(self.url, _reservation_post())

        self.assertRedirects(response, reverse("bookings:reservation-summary"), fetch_redirect_response=False)
        reservation = Reservation.objects.get()
        self.assertTrue(RoomRestriction.objects.filter(reservation=reservation).exists())
        draft = reservation_draft.get(self.client.session)
        self.assertEqual(draft.reservation_id, reservation.pk)
        self.assertEqual(len(mail.outbox), 2)

    def test_post_invalid_rerenders_with_errors(self) -> None:
        response = self.client.post(self.url, _reservation_post(**{"first-name": "j"}))

        self.assertEqual(response.status_code, 200)
        self.assertIn("first-name", response.context["form"].errors)
        self.assertContains(response, "This field must be at least 3 characters long")
        self.assertContains(response, 'value="j"')
        self.assertFalse(Reservation.objects.exists())

    def test_post_unparsable_date_redirects_home(self) -> None:
        response = self.client.post(self.url, _reservation_post(**{"start-date": "invalid"}))

        self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)
        self.assertEqual(_notices(response), ["can't parse start date"])


@override_settings(
    BOOKING_STORE={
        "BACKEND": "apps.bookings.stores.InMemoryStore",
        "OPTIONS": {"failing_room_ids": [2]},
    }
)
class ForcedFailureTests(TestCase):
    def test_failing_room_redirects_with_notice(self) -> None:
        url = reverse("bookings:make-reservation")

        response = self.client.post(url, _reservation_post(**{"room-id": "2"}))

        self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)
        self.assertEqual(_notices(response), ["can't insert reservation into the database"])
        self.assertFalse(Reservation.objects.exists())
        self.assertFalse(RoomRestriction.objects.exists())


class ReservationSummaryTests(BookingTestMixin, TestCase):
    def setUp(self) -> None:
        self.url = reverse("bookings:reservation-summary")

    def test_summary_pops_draft(self) -> None:
        self.put_draft(
            ReservationDraft(
                start_date=date(2050, 1, 1),
                end_date=date(2050, 1, 3),
                room_id=1,
                room_name="General's Quarters",
                first_name="Yusuf",
                last_name="Grenada",
                email="yusuf@example.com",
                reservation_id=7,
            )
        )

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Yusuf Grenada")
        self.assertIsNone(reservation_draft.get(self.client.session))

        response = self.client.get(self.url)
        self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)

    def test_summary_without_draft(self) -> None:
        response = self.client.get(self.url)

        self.assertRedirects(response, reverse("home"), fetch_redirect_response=False)
        self.assertEqual(_notices(response), ["Can't get reservation from session"])
