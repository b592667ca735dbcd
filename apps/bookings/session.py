"""Typed session values for the booking flow."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import date
from typing import Any, Dict, Optional

from shared.domain.value_objects import DateRange, parse_date
from shared.infrastructure.session import KeyedSessionValue, SessionValue


@dataclass(frozen=True)
class ReservationDraft:
    """Reservation being assembled across the search, choose and book pages."""

    start_date: date
    end_date: date
    room_id: int = 0
    room_name: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    reservation_id: Optional[int] = None

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    def with_room(self, room) -> "ReservationDraft":
        return replace(self, room_id=room.pk, room_name=room.room_name)

    @classmethod
    def from_reservation(cls, reservation, room_name: str = "") -> "ReservationDraft":
        return cls(
            start_date=reservation.start_date,
            end_date=reservation.end_date,
            room_id=reservation.room_id,
            room_name=room_name,
            first_name=reservation.first_name,
            last_name=reservation.last_name,
            email=reservation.email,
            phone=reservation.phone,
            reservation_id=reservation.pk,
        )

    def to_json(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["start_date"] = self.start_date.isoformat()
        payload["end_date"] = self.end_date.isoformat()
        return payload

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "ReservationDraft":
        data = dict(payload)
        data["start_date"] = parse_date(data["start_date"])
        data["end_date"] = parse_date(data["end_date"])
        data["room_id"] = int(data.get("room_id") or 0)
        return cls(**data)


def _load_day_map(payload: Dict[str, Any]) -> Dict[date, int]:
    return {parse_date(key): int(value) for key, value in payload.items()}


def _dump_day_map(day_map: Dict[date, int]) -> Dict[str, int]:
    return {day.isoformat(): value for day, value in day_map.items()}


reservation_draft: SessionValue[ReservationDraft] = SessionValue(
    "reservation",
    load=ReservationDraft.from_json,
    dump=ReservationDraft.to_json,
)

block_map = KeyedSessionValue("block_map_", load=_load_day_map, dump=_dump_day_map)
reservation_map = KeyedSessionValue("reservation_map_", load=_load_day_map, dump=_dump_day_map)
