"""Reaction aggregation."""

from typing import Iterable

from ..models import Reaction, ReactionSummary


def summarize_reactions(
    reactions: Iterable[Reaction], current_user_id: str | None = None
) -> list[ReactionSummary]:
    """Reduce raw reaction rows to per-emoji counts.

    Duplicate (emoji, user) rows count once. Rows without a user id cannot be
    deduplicated and each count on their own. Rows with a blank emoji are not
    reactions and are skipped. The result is ordered by count, highest first;
    equal counts keep the order in which the emoji was first seen.
    """
    by_emoji: dict[str, ReactionSummary] = {}
    seen: set[tuple[str, str]] = set()

    for row in reactions or ():
        emoji = str(row.emoji or "").strip()
        if not emoji:
            continue
        if row.user_id:
            pair = (emoji, row.user_id)
            if pair in seen:
                continue
            seen.add(pair)

        summary = by_emoji.get(emoji)
        if summary is None:
            summary = by_emoji[emoji] = ReactionSummary(emoji=emoji, count=0)
        summary.count += 1
        if current_user_id and row.user_id == current_user_id:
            summary.reacted_by_current_user = True

    return sorted(by_emoji.values(), key=lambda summary: -summary.count)


def toggle_reaction_rows(
    reactions: Iterable[Reaction], emoji: str, user_id: str
) -> list[Reaction]:
    """Apply one toggle: remove the user's reaction if present, else add it."""
    rows = list(reactions or ())
    remaining = [r for r in rows if not (r.emoji == emoji and r.user_id == user_id)]
    if len(remaining) == len(rows):
        remaining.append(Reaction(emoji=emoji, user_id=user_id))
    return remaining
