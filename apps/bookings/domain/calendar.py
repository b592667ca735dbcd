"""
Calendar Projection

Turns the restriction ledger into per-room, per-day maps for one month:

- reservation_map[room_id][day] -> reservation id (0 when free)
- block_map[room_id][day] -> restriction id of an owner block (0 when none)

Reservation rows mark every day of their range that falls inside the month.
Block rows mark only their start day. The two maps are independent, a day
may carry both a reservation and a block.

Also computes which blocks to add or remove when the calendar form is posted.
"""

import calendar as _calendar
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Tuple

from shared.domain.value_objects import DateRange, parse_date

DayMap = Dict[date, int]

REMOVE_BLOCK_PREFIX = "remove_block_"
ADD_BLOCK_PREFIX = "add_block_"
_CHECKBOX_RE = re.compile(r"^(?P<room>\d+)_(?P<day>\d{4}-\d{2}-\d{2})$")


def month_range(year: int, month: int) -> DateRange:
    """First to last day of the month, inclusive."""
    last_day = _calendar.monthrange(year, month)[1]
    return DateRange(date(year, month, 1), date(year, month, last_day))


def empty_day_map(month: DateRange) -> DayMap:
    return {day: 0 for day in month.days()}


@dataclass
class DayCell:
    """One room/day cell of the rendered calendar."""
    day: date
    reservation_id: int = 0
    block_id: int = 0

    @property
    def key(self) -> str:
        return self.day.isoformat()


@dataclass
class RoomRow:
    room: object
    cells: List[DayCell]


@dataclass
class MonthView:
    """
    Month calendar for a set of rooms

    Maps are keyed by room id, then by day.
    """
    year: int
    month: int
    rooms: List[object]
    reservation_map: Dict[int, DayMap] = field(default_factory=dict)
    block_map: Dict[int, DayMap] = field(default_factory=dict)

    @property
    def dates(self) -> DateRange:
        return month_range(self.year, self.month)

    @property
    def days(self) -> List[date]:
        return list(self.dates.days())

    @property
    def first_day(self) -> date:
        return self.dates.start_date

    @property
    def previous_month(self) -> date:
        return self.first_day - timedelta(days=1)

    @property
    def next_month(self) -> date:
        return self.dates.end_date + timedelta(days=1)

    def rows(self) -> List[RoomRow]:
        """Rooms with their day cells, in the order the rooms were given."""
        result = []
        for room in self.rooms:
            reservations = self.reservation_map.get(room.pk, {})
            blocks = self.block_map.get(room.pk, {})
            cells = [
                DayCell(day=day, reservation_id=reservations.get(day, 0), block_id=blocks.get(day, 0))
                for day in self.days
            ]
            result.append(RoomRow(room=room, cells=cells))
        return result


def project_month(year: int, month: int, rooms: Iterable, restrictions_by_room: Mapping[int, Iterable]) -> MonthView:
    """
    Build the month view from restriction rows

    restrictions_by_room maps room id to the restriction rows overlapping
    the month. Rows outside the month are clipped or ignored.
    """
    window = month_range(year, month)
    rooms = list(rooms)
    view = MonthView(year=year, month=month, rooms=rooms)

    for room in rooms:
        reservations = empty_day_map(window)
        blocks = empty_day_map(window)

        for row in restrictions_by_room.get(room.pk, ()):
            if row.reservation_id:
                inside = row.dates.clip(window)
                if inside is None:
                    continue
                for day in inside.days():
                    reservations[day] = row.reservation_id
            elif window.contains(row.start_date):
                blocks[row.start_date] = row.pk

        view.reservation_map[room.pk] = reservations
        view.block_map[room.pk] = blocks

    return view


@dataclass
class BlockEdits:
    """Outcome of comparing the stashed block map with a posted calendar form."""
    remove: List[int] = field(default_factory=list)
    add: List[Tuple[int, date]] = field(default_factory=list)
    skipped: List[Tuple[int, date]] = field(default_factory=list)


def _parse_checkbox(name: str, prefix: str):
    match = _CHECKBOX_RE.match(name[len(prefix):])
    if match is None:
        return None
    try:
        return int(match.group("room")), parse_date(match.group("day"))
    except ValueError:
        return None


def diff_block_edits(
    block_maps: Mapping[int, DayMap],
    reservation_maps: Mapping[int, DayMap],
    posted: Iterable[str],
) -> BlockEdits:
    """
    Work out block changes from posted checkbox names

    - a block in block_maps whose remove_block_<room>_<day> box was not
      posted is removed
    - every add_block_<room>_<day> box adds a block, unless the reservation
      map marks that day as reserved (skipped)

    Rooms missing from block_maps are ignored for adds.
    """
    posted = set(posted)
    edits = BlockEdits()

    for room_id, blocks in block_maps.items():
        for day, block_id in sorted(blocks.items()):
            if block_id > 0 and f"{REMOVE_BLOCK_PREFIX}{room_id}_{day.isoformat()}" not in posted:
                edits.remove.append(block_id)

    for name in sorted(posted):
        if not name.startswith(ADD_BLOCK_PREFIX):
            continue
        parsed = _parse_checkbox(name, ADD_BLOCK_PREFIX)
        if parsed is None or parsed[0] not in block_maps:
            continue
        room_id, day = parsed
        if reservation_maps.get(room_id, {}).get(day, 0) > 0:
            edits.skipped.append((room_id, day))
        else:
            edits.add.append((room_id, day))

    return edits
