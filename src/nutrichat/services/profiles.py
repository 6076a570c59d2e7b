"""Profile lifecycle and phone-number authentication."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol

from nutrichat.domain.profile import UserProfile

logger = logging.getLogger(__name__)

MIN_PHONE_LENGTH = 3
CODE_LENGTH = 4


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_by_phone(self, phone_number: str) -> UserProfile | None:
        """Return the profile for a phone number, if present."""

    def create_profile(self, phone_number: str) -> UserProfile:
        """Create and return a profile with default targets."""

    def update_profile(self, uuid: str, fields: dict[str, object]) -> None:
        """Update name and targets of a profile row."""


class AuthError(Exception):
    """Raised when a sign-in step cannot proceed."""


@dataclass
class ProfileService:
    """Application service for profile lookup, creation and updates."""

    repository: ProfileRepository

    def find(self, phone_number: str) -> UserProfile | None:
        """Return a profile; raise AuthError when the datastore is unreachable."""
        try:
            return self.repository.get_by_phone(phone_number)
        except Exception as exc:
            logger.exception("Error fetching profile", extra={"phone": phone_number})
            raise AuthError("Connection failed. Please try again.") from exc

    def ensure_profile(self, phone_number: str) -> UserProfile | None:
        """Return the existing profile or create one."""
        existing = self.find(phone_number)
        if existing:
            return existing
        try:
            return self.repository.create_profile(phone_number)
        except Exception:
            logger.exception("Error creating profile", extra={"phone": phone_number})
            return None

    def save(self, profile: UserProfile) -> bool:
        """Persist name and targets remotely; return False on failure."""
        if not profile.uuid:
            return False
        try:
            self.repository.update_profile(
                profile.uuid,
                {
                    "name": profile.name,
                    "calorie_target": profile.calorie_target,
                    "protein_target": profile.protein_target,
                },
            )
        except Exception:
            logger.exception("Error updating profile", extra={"uuid": profile.uuid})
            return False
        return True


@dataclass
class AuthService:
    """Two-step phone sign-in with a simulated one-time code."""

    profile_service: ProfileService

    def request_code(self, phone_number: str) -> None:
        """Validate the phone number and check the datastore is reachable."""
        if len(phone_number.strip()) < MIN_PHONE_LENGTH:
            raise AuthError("Please enter a valid phone number")
        self.profile_service.find(phone_number.strip())

    def verify_code(self, phone_number: str, code: str) -> UserProfile:
        """Accept any 4-digit code and return the signed-in profile."""
        if len(code) != CODE_LENGTH or not code.isdigit():
            raise AuthError("Please enter the 4-digit code")
        profile = self.profile_service.ensure_profile(phone_number.strip())
        if profile is None:
            raise AuthError("Failed to retrieve or create profile.")
        if profile.phone_number is None:
            profile = replace(profile, phone_number=phone_number.strip())
        return profile
