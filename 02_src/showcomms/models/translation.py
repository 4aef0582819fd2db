"""Inline translation models."""

from dataclasses import dataclass


@dataclass
class TranslationResult:
    """State of one message's inline translation panel."""

    language: str
    text: str = ""
    loading: bool = False
    error: str = ""
