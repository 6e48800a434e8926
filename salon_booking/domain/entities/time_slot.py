from dataclasses import dataclass


@dataclass(frozen=True)
class TimeSlot:
    value: str
    label: str
