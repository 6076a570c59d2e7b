"""Supabase-backed profile repository."""

from dataclasses import dataclass

from supabase import Client

from nutrichat.domain.profile import UserProfile
from nutrichat.services.profiles import ProfileRepository

DEFAULT_NAME = "User"
DEFAULT_CALORIE_TARGET = 2200
DEFAULT_PROTEIN_TARGET = 150


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile persistence.

    Targets are stored as strings in the ``Profiles`` table.
    """

    client: Client

    def get_by_phone(self, phone_number: str) -> UserProfile | None:
        """Return the profile for a phone number, if present."""
        response = (
            self.client.table("Profiles")
            .select("*")
            .eq("phone_number", phone_number)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_profile(response.data[0])
        return None

    def create_profile(self, phone_number: str) -> UserProfile:
        """Insert a profile with default name and targets."""
        response = (
            self.client.table("Profiles")
            .insert(
                {
                    "phone_number": phone_number,
                    "name": DEFAULT_NAME,
                    "calories_target": str(DEFAULT_CALORIE_TARGET),
                    "protein_target": str(DEFAULT_PROTEIN_TARGET),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create profile in Supabase")
        return _parse_profile(response.data[0])

    def update_profile(self, uuid: str, fields: dict[str, object]) -> None:
        """Update name and targets for a profile row."""
        updates: dict[str, object] = {}
        if fields.get("name"):
            updates["name"] = fields["name"]
        if fields.get("calorie_target"):
            updates["calories_target"] = str(fields["calorie_target"])
        if fields.get("protein_target"):
            updates["protein_target"] = str(fields["protein_target"])
        if not updates:
            return
        self.client.table("Profiles").update(updates).eq("uuid", uuid).execute()


def _parse_profile(row: dict[str, object]) -> UserProfile:
    return UserProfile(
        uuid=str(row["uuid"]) if row.get("uuid") else None,
        phone_number=row.get("phone_number"),
        name=str(row.get("name") or DEFAULT_NAME),
        calorie_target=_parse_int(row.get("calories_target"))
        or DEFAULT_CALORIE_TARGET,
        protein_target=_parse_int(row.get("protein_target"))
        or DEFAULT_PROTEIN_TARGET,
    )


def _parse_int(value: object) -> int | None:
    try:
        return int(float(str(value)))
    except ValueError:
        return None
