"""
Producer handlers - one per CLI, each turning a raw payload into a
NotificationEvent or None (suppress).

Used by normalizer.py
"""
from .claude import handle_claude
from .codex import handle_codex
from .gemini import handle_gemini

__all__ = ["handle_claude", "handle_codex", "handle_gemini"]
