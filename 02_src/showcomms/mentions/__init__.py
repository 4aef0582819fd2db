"""Mentions module."""

from .parser import MentionParser, build_staff_handles, normalize_handle, parse_mentions

__all__ = ["MentionParser", "parse_mentions", "normalize_handle", "build_staff_handles"]
