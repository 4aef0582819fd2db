"""Reactions module."""

from .aggregator import summarize_reactions, toggle_reaction_rows

__all__ = ["summarize_reactions", "toggle_reaction_rows"]
