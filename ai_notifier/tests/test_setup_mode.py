#!/usr/bin/env python3
"""Unit tests for setup_mode.py - status and hook configuration output."""

import io
import json
from unittest import TestCase, main
from unittest.mock import patch

from ai_notifier.detector import Producer
from ai_notifier.setup_mode import hook_snippets, run_setup

SETUP = "ai_notifier.setup_mode"


class TestHookSnippets(TestCase):

    def setUp(self):
        self.snippets = hook_snippets("/usr/local/bin/ai-notifier")

    def test_every_producer_covered(self):
        self.assertEqual(set(self.snippets), {Producer.CLAUDE, Producer.GEMINI, Producer.CODEX})

    def test_claude_settings_are_json(self):
        path, body = self.snippets[Producer.CLAUDE].split("\n", 1)
        self.assertEqual(path, "~/.claude/settings.json")
        hooks = json.loads(body)["hooks"]
        self.assertEqual(hooks["Stop"][0]["hooks"][0]["command"], "/usr/local/bin/ai-notifier")
        self.assertIn("Notification", hooks)

    def test_gemini_registers_model_hook_only(self):
        body = self.snippets[Producer.GEMINI].split("\n", 1)[1]
        hooks = json.loads(body)["hooks"]
        self.assertIn("AfterModel", hooks)
        self.assertNotIn("AfterAgent", hooks)

    def test_codex_notify_array(self):
        self.assertIn('notify = ["/usr/local/bin/ai-notifier"]', self.snippets[Producer.CODEX])


class TestRunSetup(TestCase):

    @patch(f"{SETUP}.get_platform", return_value="linux")
    @patch(f"{SETUP}.available_backend", return_value=None)
    def test_no_backend(self, mock_backend, mock_platform):
        out = io.StringIO()
        self.assertEqual(run_setup(out=out), 1)
        self.assertIn("notify-send", out.getvalue())

    @patch(f"{SETUP}.send_notification", return_value=True)
    @patch(f"{SETUP}.available_backend", return_value="terminal-notifier")
    def test_prints_snippets_and_sends_test(self, mock_backend, mock_send):
        out = io.StringIO()
        self.assertEqual(run_setup(out=out), 0)
        text = out.getvalue()
        self.assertIn("terminal-notifier", text)
        self.assertIn("Claude Code", text)
        self.assertIn("Gemini CLI", text)
        self.assertIn("Codex CLI", text)
        mock_send.assert_called_once()

    @patch(f"{SETUP}.send_notification", return_value=False)
    @patch(f"{SETUP}.available_backend", return_value="notify-send")
    def test_failed_test_notification(self, mock_backend, mock_send):
        self.assertEqual(run_setup(out=io.StringIO()), 1)

    @patch(f"{SETUP}.send_notification")
    @patch(f"{SETUP}.available_backend", return_value="notify-send")
    def test_without_test_notification(self, mock_backend, mock_send):
        self.assertEqual(run_setup(out=io.StringIO(), send_test=False), 0)
        mock_send.assert_not_called()


if __name__ == "__main__":
    main()
