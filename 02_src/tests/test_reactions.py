"""Tests for reaction aggregation."""

from showcomms.models import Reaction, ReactionSummary
from showcomms.reactions import summarize_reactions, toggle_reaction_rows


class TestSummarizeReactions:
    """Tests for summarize_reactions()."""

    def test_counts_and_current_user_flag(self):
        """Test counting per emoji and flagging the current user."""
        rows = [
            Reaction(emoji="👍", user_id="u1"),
            Reaction(emoji="👍", user_id="u2"),
            Reaction(emoji="🔥", user_id="u2"),
        ]
        summary = summarize_reactions(rows, "u1")

        assert summary == [
            ReactionSummary(emoji="👍", count=2, reacted_by_current_user=True),
            ReactionSummary(emoji="🔥", count=1, reacted_by_current_user=False),
        ]

    def test_duplicate_user_emoji_counted_once(self):
        """Test that the same user and emoji pair counts once."""
        rows = [
            Reaction(emoji="👍", user_id="u1"),
            Reaction(emoji="👍", user_id="u1"),
        ]
        summary = summarize_reactions(rows, "u1")
        assert summary == [ReactionSummary(emoji="👍", count=1, reacted_by_current_user=True)]

    def test_rows_without_user_each_count(self):
        """Test that anonymous rows are not deduplicated."""
        rows = [Reaction(emoji="✅"), Reaction(emoji="✅")]
        assert summarize_reactions(rows, "u1")[0].count == 2

    def test_blank_emoji_skipped(self):
        """Test that rows without an emoji are ignored."""
        rows = [Reaction(emoji="", user_id="u1"), Reaction(emoji="  ", user_id="u2")]
        assert summarize_reactions(rows, "u1") == []

    def test_sorted_by_count_then_first_seen(self):
        """Test ordering: highest count first, ties keep first-seen order."""
        rows = [
            Reaction(emoji="🎭", user_id="u1"),
            Reaction(emoji="🎶", user_id="u1"),
            Reaction(emoji="🔥", user_id="u1"),
            Reaction(emoji="🔥", user_id="u2"),
        ]
        summary = summarize_reactions(rows)
        assert [s.emoji for s in summary] == ["🔥", "🎭", "🎶"]

    def test_no_current_user(self):
        """Test that nothing is flagged without a current user."""
        summary = summarize_reactions([Reaction(emoji="👍", user_id="u1")])
        assert summary[0].reacted_by_current_user is False

    def test_empty_input(self):
        """Test summarizing nothing."""
        assert summarize_reactions([]) == []
        assert summarize_reactions(None) == []


class TestToggleReactionRows:
    """Tests for toggle_reaction_rows()."""

    def test_adds_missing_reaction(self):
        """Test that a toggle adds the user's reaction."""
        rows = toggle_reaction_rows([], "👍", "u1")
        assert rows == [Reaction(emoji="👍", user_id="u1")]

    def test_removes_existing_reaction(self):
        """Test that a second toggle removes it again."""
        rows = toggle_reaction_rows([Reaction(emoji="👍", user_id="u1")], "👍", "u1")
        assert rows == []

    def test_leaves_other_users_alone(self):
        """Test that toggling touches only the given user and emoji."""
        rows = [Reaction(emoji="👍", user_id="u2"), Reaction(emoji="🔥", user_id="u1")]
        result = toggle_reaction_rows(rows, "👍", "u1")
        assert len(result) == 3
        assert rows == [Reaction(emoji="👍", user_id="u2"), Reaction(emoji="🔥", user_id="u1")]
