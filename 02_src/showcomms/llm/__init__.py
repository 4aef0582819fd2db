"""LLM module."""

from .translator import ITranslator, Translator

__all__ = ["ITranslator", "Translator"]
