"""@mention parsing and resolution."""

import re
from typing import Iterable, Sequence

from ..config import DEFAULT_ROLE_KEYS
from ..models import Mention, MentionType, StaffProfile, sanitize_body

# `@` plus 2-64 handle characters, at the start or after whitespace.
MENTION_PATTERN = re.compile(r"(?:^|(?<=\s))@([A-Za-z0-9_.-]{2,64})")

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_handle(value: str | None) -> str:
    """Lower-case and drop everything that is not a-z or 0-9."""
    return _NON_ALNUM.sub("", str(value or "").lower())


def build_staff_handles(staff_roster: Iterable[StaffProfile]) -> dict[str, StaffProfile]:
    """Map normalized full names and first names to staff profiles.

    Later roster rows win when two people share a handle.
    """
    handles: dict[str, StaffProfile] = {}
    for staff in staff_roster:
        name = staff.full_name
        if not name:
            continue
        full = normalize_handle(name)
        if full:
            handles[full] = staff
        first = normalize_handle(staff.first_name)
        if first:
            handles[first] = staff
    return handles


def parse_mentions(
    text: str | None,
    staff_roster: Iterable[StaffProfile] = (),
    role_keys: Sequence[str] | None = None,
) -> list[Mention]:
    """Extract user and role mentions from message text.

    Role keys take precedence over staff handles; tokens matching neither
    are dropped. A mention repeated in the same text is returned once.
    """
    body = sanitize_body(text)
    keys = list(role_keys) if role_keys else list(DEFAULT_ROLE_KEYS)
    roles = {normalize_handle(key): key for key in reversed(keys)}
    handles = build_staff_handles(staff_roster)

    mentions: list[Mention] = []
    seen: set[str] = set()
    for match in MENTION_PATTERN.finditer(body):
        raw_token = match.group(1).strip()
        normalized = normalize_handle(raw_token)
        if not normalized:
            continue
        dedupe_key = f"@{normalized}"
        if dedupe_key in seen:
            continue
        seen.add(dedupe_key)

        role_key = roles.get(normalized)
        if role_key is not None:
            mentions.append(
                Mention(
                    token=raw_token,
                    type=MentionType.ROLE,
                    mentioned_role_key=role_key,
                )
            )
            continue

        staff = handles.get(normalized)
        if staff is not None and staff.id:
            mentions.append(
                Mention(
                    token=raw_token,
                    type=MentionType.USER,
                    mentioned_user_id=staff.id,
                )
            )

    return mentions


class MentionParser:
    """Parser bound to a staff roster and a set of role keys."""

    def __init__(
        self,
        staff_roster: Iterable[StaffProfile] = (),
        role_keys: Sequence[str] | None = None,
    ):
        self._staff_roster = list(staff_roster)
        self._role_keys = list(role_keys) if role_keys else list(DEFAULT_ROLE_KEYS)

    @property
    def role_keys(self) -> list[str]:
        return list(self._role_keys)

    def set_roster(self, staff_roster: Iterable[StaffProfile]) -> None:
        """Replace the staff roster used for user mentions."""
        self._staff_roster = list(staff_roster)

    def parse(self, text: str | None) -> list[Mention]:
        """Parse mentions in text against the bound roster and role keys."""
        return parse_mentions(text, self._staff_roster, self._role_keys)
