"""Syntax classification for display."""

from .languages import LanguageProfile, detect_language, known_languages, profile_for
from .tokenizer import (
    SyntaxTokenizer,
    TokenCategory,
    TokenSpan,
    retokenize,
    tokenize,
)

__all__ = [
    "LanguageProfile",
    "SyntaxTokenizer",
    "TokenCategory",
    "TokenSpan",
    "detect_language",
    "known_languages",
    "profile_for",
    "retokenize",
    "tokenize",
]
