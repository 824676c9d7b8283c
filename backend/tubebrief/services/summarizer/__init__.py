"""Summarizer agent."""

from .main import get_summarizer_agent, normalize_brief, summarize_transcript

__all__ = ["get_summarizer_agent", "normalize_brief", "summarize_transcript"]
