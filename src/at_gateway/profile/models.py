"""Profile domain model: owned by the external identity service, read-only here."""

from dataclasses import dataclass

from src.at_common.enums import ProfileRole


@dataclass(frozen=True)
class Profile:
    id: str
    role: str
    email: str | None = None
    display_name: str | None = None

    @property
    def can_list_items(self) -> bool:
        return self.role in (ProfileRole.DESIGNER, ProfileRole.ADMIN)
