"""Tests for the month calendar projection and block edits."""

from __future__ import annotations

from datetime import date

import pytest
from django.test import TestCase

from apps.bookings.domain.calendar import BlockEdits, diff_block_edits, month_range, project_month
from apps.bookings.exceptions import PersistenceError
from apps.bookings.models import Reservation, Restriction, Room, RoomRestriction
from apps.bookings.services import build_services
from apps.bookings.stores import DjangoStore, InMemoryStore

ROOMS = [Room(id=1, room_name="General's Quarters"), Room(id=2, room_name="Major's Suite")]


def _reservation_row(pk, room_id, reservation_id, start, end) -> RoomRestriction:
    return RoomRestriction(
        id=pk,
        room_id=room_id,
        reservation_id=reservation_id,
        restriction_id=Restriction.RESERVATION,
        start_date=start,
        end_date=end,
    )


def _block_row(pk, room_id, day) -> RoomRestriction:
    return RoomRestriction(
        id=pk,
        room_id=room_id,
        restriction_id=Restriction.OWNER_BLOCK,
        start_date=day,
        end_date=day,
    )


def test_empty_month_is_all_zero() -> None:
    view = project_month(2050, 2, ROOMS, {})

    for room in ROOMS:
        assert len(view.reservation_map[room.pk]) == 28
        assert set(view.reservation_map[room.pk].values()) == {0}
        assert set(view.block_map[room.pk].values()) == {0}


def test_three_day_reservation_marks_three_days() -> None:
    rows = {1: [_reservation_row(10, 1, 7, date(2050, 1, 1), date(2050, 1, 3))]}

    view = project_month(2050, 1, ROOMS, rows)

    marked = {day: value for day, value in view.reservation_map[1].items() if value}
    assert marked == {date(2050, 1, 1): 7, date(2050, 1, 2): 7, date(2050, 1, 3): 7}
    assert set(view.block_map[1].values()) == {0}
    assert set(view.reservation_map[2].values()) == {0}


def test_reservation_spanning_month_end_is_clipped() -> None:
    rows = {1: [_reservation_row(10, 1, 7, date(2050, 1, 30), date(2050, 2, 2))]}

    january = project_month(2050, 1, ROOMS, rows)
    february = project_month(2050, 2, ROOMS, rows)

    assert [day.day for day, value in january.reservation_map[1].items() if value] == [30, 31]
    assert [day.day for day, value in february.reservation_map[1].items() if value] == [1, 2]
    assert date(2050, 2, 1) not in january.reservation_map[1]


def test_block_marks_start_day_with_restriction_id() -> None:
    rows = {2: [_block_row(42, 2, date(2050, 1, 15))]}

    view = project_month(2050, 1, ROOMS, rows)

    assert view.block_map[2][date(2050, 1, 15)] == 42
    assert sum(1 for value in view.block_map[2].values() if value) == 1
    assert set(view.reservation_map[2].values()) == {0}


def test_rows_expose_cells_per_room() -> None:
    rows = {1: [_block_row(42, 1, date(2050, 1, 2))]}
    view = project_month(2050, 1, ROOMS, rows)

    room_rows = view.rows()

    assert [row.room.pk for row in room_rows] == [1, 2]
    assert len(room_rows[0].cells) == 31
    assert room_rows[0].cells[1].block_id == 42
    assert room_rows[0].cells[1].key == "2050-01-02"


def test_diff_block_edits() -> None:
    days = month_range(2050, 1)
    blocks = {1: {day: 0 for day in days.days()}, 2: {day: 0 for day in days.days()}}
    reservations = {1: {day: 0 for day in days.days()}, 2: {day: 0 for day in days.days()}}
    blocks[1][date(2050, 1, 5)] = 11
    blocks[1][date(2050, 1, 6)] = 12
    reservations[2][date(2050, 1, 20)] = 3

    posted = [
        "csrfmiddlewaretoken",
        "y",
        "m",
        "remove_block_1_2050-01-06",
        "add_block_2_2050-01-10",
        "add_block_2_2050-01-20",
        "add_block_9_2050-01-10",
        "add_block_1_not-a-date",
    ]
    edits = diff_block_edits(blocks, reservations, posted)

    assert edits.remove == [11]
    assert edits.add == [(2, date(2050, 1, 10))]
    assert edits.skipped == [(2, date(2050, 1, 20))]


class CalendarProjectionTests(TestCase):
    def test_build_month_view_from_ledger(self) -> None:
        services = build_services(DjangoStore())
        reservation = Reservation.objects.create(
            first_name="Yusuf",
            last_name="Grenada",
            email="yusuf@example.com",
            start_date=date(2050, 1, 1),
            end_date=date(2050, 1, 3),
            room_id=1,
        )
        RoomRestriction.objects.create(
            room_id=1,
            reservation=reservation,
            start_date=reservation.start_date,
            end_date=reservation.end_date,
            restriction_id=Restriction.RESERVATION,
        )
        block_id = services.ledger.insert_block(2, date(2050, 1, 2))

        view = services.calendar.build_month_view(2050, 1, services.store.all_rooms())

        self.assertEqual(sum(1 for value in view.reservation_map[1].values() if value), 3)
        self.assertEqual(view.block_map[2][date(2050, 1, 2)], block_id)
        self.assertEqual(view.previous_month, date(2049, 12, 31))
        self.assertEqual(view.next_month, date(2050, 2, 1))


def test_apply_block_edits_rolls_back_on_failed_insert() -> None:
    store = InMemoryStore(failing_restriction_room_ids=[2])
    services = build_services(store)
    kept = services.ledger.insert_block(1, date(2050, 1, 15))

    edits = BlockEdits(remove=[kept], add=[(1, date(2050, 1, 16)), (2, date(2050, 1, 17))])
    with pytest.raises(PersistenceError):
        services.calendar.apply_block_edits(edits)

    rows = store.restrictions_for_room(1, date(2050, 1, 1), date(2050, 1, 31))
    assert [row.pk for row in rows] == [kept]


def test_apply_block_edits_ignores_blocks_already_gone() -> None:
    store = InMemoryStore()
    services = build_services(store)
    gone = services.ledger.insert_block(2, date(2050, 1, 10))
    services.ledger.delete_block(gone)

    services.calendar.apply_block_edits(BlockEdits(remove=[gone], add=[(1, date(2050, 1, 20))]))

    rows = store.restrictions_for_room(1, date(2050, 1, 1), date(2050, 1, 31))
    assert [row.start_date for row in rows] == [date(2050, 1, 20)]
