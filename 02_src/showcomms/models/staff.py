"""Staff roster models used for mention resolution."""

from dataclasses import dataclass


@dataclass
class StaffProfile:
    """A staff member who can be @mentioned."""

    id: str
    display_name: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def full_name(self) -> str:
        """Display name, falling back to first and last name."""
        if self.display_name.strip():
            return self.display_name.strip()
        return f"{self.first_name} {self.last_name}".strip()
