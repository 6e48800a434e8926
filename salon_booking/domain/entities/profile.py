from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Profile:
    id: str
    full_name: str
    email_id: str
    phone_number: str | None = None
    instagram_id: str | None = None
    gender: str | None = None  # "male", "female" or None
    onboarding_completed: bool = False
    is_admin: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def needs_onboarding(self) -> bool:
        return not self.onboarding_completed


@dataclass(frozen=True)
class ProfileUpdate:
    full_name: str | None = None
    phone_number: str | None = None
    instagram_id: str | None = None
    gender: str | None = None
