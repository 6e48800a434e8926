from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.profile import Profile


class ProfileRepositoryPort(ABC):
    @abstractmethod
    def get(self, user_id: str) -> Profile | None:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, profile: Profile) -> Profile:
        """Insert or merge on id. Returns the stored row."""
        raise NotImplementedError

    @abstractmethod
    def list_page(self, offset: int, limit: int, search: str | None = None) -> tuple[list[Profile], int]:
        """
        Profiles newest first, optionally matching `search` against
        full_name, email_id or phone_number (case-insensitive).
        Returns (profiles, total_matching).
        """
        raise NotImplementedError
