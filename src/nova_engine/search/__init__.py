"""Find and replace over buffer text."""

from .engine import Direction, Match, ReplaceAllResult, SearchEngine, compile_query

__all__ = ["Direction", "Match", "ReplaceAllResult", "SearchEngine", "compile_query"]
