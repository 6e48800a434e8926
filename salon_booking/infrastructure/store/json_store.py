from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any

from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.domain.entities.booking import Booking, BookingStatus
from salon_booking.domain.entities.profile import Profile
from salon_booking.infrastructure.store.memory_store import MemoryBookingRepository, MemoryProfileRepository
from salon_booking.infrastructure.supabase.client import to_json_value
from salon_booking.infrastructure.supabase.mappers import (
    booking_from_row,
    booking_to_row,
    profile_from_row,
    profile_to_row,
)

logger = logging.getLogger(__name__)


class JsonTableFile:
    """One JSON array of rows on disk, written atomically through a temp file."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = threading.Lock()

    def load(self) -> list[dict[str, Any]]:
        if not self._path.exists():
            return []
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                rows = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            # A corrupted file starts the table over instead of failing startup
            logger.error("Could not read table file", extra={"table": str(self._path), "error": str(e)})
            return []
        return rows if isinstance(rows, list) else []

    def save(self, rows: list[dict[str, Any]]) -> None:
        temp_path = self._path.with_suffix(".json.tmp")
        payload = [{k: to_json_value(v) for k, v in row.items()} for row in rows]
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise


class JsonProfileRepository(MemoryProfileRepository):
    def __init__(self, data_dir: str = "./data") -> None:
        self._file = JsonTableFile(Path(data_dir) / "profiles.json")
        super().__init__(profile_from_row(row) for row in self._file.load())

    def upsert(self, profile: Profile) -> Profile:
        stored = super().upsert(profile)
        self._flush()
        return stored

    def _flush(self) -> None:
        with self._file.lock:
            self._file.save([profile_to_row(p) for p in self._profiles.values()])


class JsonBookingRepository(MemoryBookingRepository):
    def __init__(
        self,
        data_dir: str = "./data",
        profiles: ProfileRepositoryPort | None = None,
        enforce_slot_uniqueness: bool = False,
    ) -> None:
        super().__init__(profiles=profiles, enforce_slot_uniqueness=enforce_slot_uniqueness)
        self._file = JsonTableFile(Path(data_dir) / "bookings.json")
        for row in self._file.load():
            booking = booking_from_row(row)
            self._bookings[booking.id] = replace(booking, customer=None)

    def insert(
        self,
        user_id: str,
        booking_date: date,
        time_slot: str | None,
        services: list[str],
        category_list: list[str],
        total_amount: float | None,
        amount_paid: float | None,
        status: BookingStatus,
    ) -> Booking:
        booking = super().insert(
            user_id, booking_date, time_slot, services, category_list, total_amount, amount_paid, status
        )
        self._flush()
        return booking

    def update(self, booking_id: str, changes: dict[str, Any]) -> Booking:
        booking = super().update(booking_id, changes)
        self._flush()
        return booking

    def _flush(self) -> None:
        with self._file.lock:
            self._file.save([booking_to_row(b) for b in self._bookings.values()])
