"""
AI Notifier.

Desktop notifications for AI coding CLIs (Claude Code, Gemini CLI, Codex CLI).
Each CLI invokes the notifier from a hook; clicking the notification brings
the originating terminal back to the front.

Subpackages:
- notifier_utils: Shared utilities (logging, I/O, state, notification service)
- handlers: Per-CLI payload handlers
- tests: Unit tests
"""
__version__ = "0.3.0"
