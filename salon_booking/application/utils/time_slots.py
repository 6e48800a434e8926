from __future__ import annotations

import re
from datetime import date, datetime

from salon_booking.domain.entities.time_slot import TimeSlot

# (start_hour, end_hour) in 24h local time; the salon closes at 10 PM
SLOT_WINDOWS = (
    (9, 11),
    (11, 13),
    (13, 15),
    (15, 17),
    (17, 19),
    (19, 21),
    (20, 22),
)

_LABEL_START_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])")


def _format_hour(hour: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display}:00 {suffix}"


def generate_time_slots() -> list[TimeSlot]:
    """Fixed list of bookable 2-hour windows, earliest first."""
    slots: list[TimeSlot] = []
    for start, end in SLOT_WINDOWS:
        label = f"{_format_hour(start)} - {_format_hour(end)}"
        slots.append(TimeSlot(value=label, label=label))
    return slots


def parse_slot_start(label: str) -> float:
    """Start of a slot label such as "1:00 PM - 3:00 PM" as fractional hours (13.0)."""
    match = _LABEL_START_RE.match(label)
    if not match:
        raise ValueError(f"Unrecognized time slot label: {label!r}")
    hour = int(match.group(1)) % 12
    minute = int(match.group(2))
    if match.group(3).upper() == "PM":
        hour += 12
    return hour + minute / 60


def get_available_time_slots(selected_date: date | None, now: datetime | None = None) -> list[TimeSlot]:
    """
    All slots for any day other than today. For today, only slots that start
    strictly after the current local wall-clock time. May be empty late in the day.
    """
    slots = generate_time_slots()
    if selected_date is None:
        return slots

    if now is None:
        now = datetime.now()
    if selected_date != now.date():
        return slots

    current_time = now.hour + now.minute / 60
    return [slot for slot in slots if parse_slot_start(slot.label) > current_time]


def pick_slot_for_date(
    selected_date: date,
    current_value: str | None,
    now: datetime | None = None,
) -> str | None:
    """
    Keep the current slot if still bookable on the date, else fall back to the
    first available one. With nothing available the current value is returned as is.
    """
    available = get_available_time_slots(selected_date, now)
    if not available:
        return current_value
    if current_value and any(slot.value == current_value for slot in available):
        return current_value
    return available[0].value
