#!/usr/bin/env python3
"""Unit tests for notify.py - cross-platform notification service.

Tests escaping functions, platform detection, backends and the
callback-style service used by the dispatcher.
"""

import shlex
import sys
import tempfile
from pathlib import Path
from unittest import TestCase, main
from unittest.mock import patch, MagicMock

import ai_notifier
from ai_notifier.detector import Producer
from ai_notifier.notifier_utils.notify import (
    HostNotificationService,
    NotificationRequest,
    OneShot,
    _notify_linux,
    _notify_osascript,
    _notify_terminal_notifier,
    _notify_windows,
    available_backend,
    click_command,
    escape_applescript,
    escape_powershell,
    find_icon,
    get_platform,
    send_notification,
)

NOTIFY = "ai_notifier.notifier_utils.notify"


def make_request(**overrides) -> NotificationRequest:
    fields = {
        "title": "Claude Code · api",
        "subtitle": "Response complete",
        "body": "All done.",
        "user_info": {"kind": "iterm", "session_id": "w0t0p0:ABC"},
    }
    fields.update(overrides)
    return NotificationRequest(**fields)


class TestEscapeApplescript(TestCase):
    """Tests for AppleScript string escaping."""

    def test_escapes_backslash(self):
        """Backslashes are doubled."""
        self.assertEqual(escape_applescript("path\\to\\file"), "path\\\\to\\\\file")

    def test_escapes_double_quote(self):
        """Double quotes are escaped."""
        self.assertEqual(escape_applescript('Say "hello"'), 'Say \\"hello\\"')

    def test_normal_text_unchanged(self):
        self.assertEqual(escape_applescript("Hello World"), "Hello World")


class TestEscapePowershell(TestCase):
    """Tests for PowerShell string escaping."""

    def test_escapes_backtick(self):
        self.assertEqual(escape_powershell("test`value"), "test``value")

    def test_escapes_double_quote(self):
        self.assertEqual(escape_powershell('Say "hello"'), 'Say `"hello`"')

    def test_escapes_dollar_sign(self):
        self.assertEqual(escape_powershell("Cost is $100"), "Cost is `$100")


class TestGetPlatform(TestCase):
    """Tests for platform detection."""

    def test_darwin_returns_macos(self):
        with patch.object(sys, "platform", "darwin"):
            self.assertEqual(get_platform(), "macos")

    def test_win32_returns_windows(self):
        with patch.object(sys, "platform", "win32"):
            self.assertEqual(get_platform(), "windows")

    def test_unknown_returns_linux(self):
        """Unknown platform defaults to 'linux'."""
        with patch.object(sys, "platform", "freebsd"):
            self.assertEqual(get_platform(), "linux")


class TestFindIcon(TestCase):
    """Tests for icon lookup."""

    def test_returns_path_when_icon_exists(self):
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "gemini-logo.png").write_bytes(b"png")
            self.assertEqual(find_icon("gemini-logo", tmp), str(Path(tmp) / "gemini-logo.png"))

    def test_returns_none_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIsNone(find_icon("gemini-logo", tmp))

    def test_png_preferred_over_svg(self):
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "codex-logo.svg").write_text("<svg/>")
            (Path(tmp) / "codex-logo.png").write_bytes(b"png")
            self.assertTrue(find_icon("codex-logo", tmp).endswith(".png"))

    def test_package_ships_an_icon_per_producer(self):
        icon_dir = Path(ai_notifier.__file__).parent / "icons"
        for producer in Producer:
            self.assertIsNotNone(find_icon(producer.icon_name, icon_dir), producer)


class TestOneShot(TestCase):
    """Tests for the single-use completion signal."""

    def test_wait_times_out_when_never_set(self):
        self.assertFalse(OneShot().wait(0.01))

    def test_first_value_wins(self):
        signal = OneShot()
        signal.set(True)
        signal.set(False)
        self.assertTrue(signal.wait(0.01))
        self.assertTrue(signal.value)


class TestClickCommand(TestCase):
    """Tests for the click relaunch command."""

    def test_relaunches_module_with_user_info(self):
        cmd = click_command({"kind": "vscode", "cwd": "/work/api"})
        self.assertEqual(cmd[:4], [sys.executable, "-m", "ai_notifier", "--clicked"])
        self.assertEqual(cmd[4], "--user-info")
        self.assertIn('"cwd":"/work/api"', cmd[5])


class TestNotifyLinux(TestCase):
    """Tests for Linux notification via notify-send."""

    @patch("shutil.which")
    def test_returns_false_if_notify_send_not_found(self, mock_which):
        mock_which.return_value = None
        self.assertFalse(_notify_linux(make_request()))

    @patch("shutil.which")
    @patch("subprocess.Popen")
    def test_runs_detached_wrapper_with_click_command(self, mock_popen, mock_which):
        """notify-send runs under a detached shell that relaunches on click."""
        mock_which.return_value = "/usr/bin/notify-send"
        self.assertTrue(_notify_linux(make_request(urgency="critical")))

        args = mock_popen.call_args[0][0]
        self.assertEqual(args[:2], ["sh", "-c"])
        self.assertIn("--app-name=AI Notifier", args)
        self.assertIn("--urgency=critical", args)
        self.assertIn("Claude Code · api", args)
        self.assertIn("Response complete\nAll done.", args)
        self.assertIn("--clicked", args)
        self.assertTrue(mock_popen.call_args[1]["start_new_session"])

    @patch("shutil.which")
    @patch("subprocess.Popen")
    def test_returns_false_on_exception(self, mock_popen, mock_which):
        mock_which.return_value = "/usr/bin/notify-send"
        mock_popen.side_effect = OSError("Failed")
        self.assertFalse(_notify_linux(make_request()))


class TestNotifyTerminalNotifier(TestCase):
    """Tests for macOS notification via terminal-notifier."""

    @patch("shutil.which")
    def test_returns_false_if_not_installed(self, mock_which):
        mock_which.return_value = None
        self.assertFalse(_notify_terminal_notifier(make_request()))

    @patch("shutil.which")
    @patch("subprocess.run")
    def test_passes_fields_and_click_command(self, mock_run, mock_which):
        mock_which.return_value = "/opt/homebrew/bin/terminal-notifier"
        mock_run.return_value = MagicMock(returncode=0)

        self.assertTrue(_notify_terminal_notifier(make_request(icon="/icons/claude-logo.png")))

        cmd = mock_run.call_args[0][0]
        self.assertEqual(cmd[cmd.index("-title") + 1], "Claude Code · api")
        self.assertEqual(cmd[cmd.index("-subtitle") + 1], "Response complete")
        self.assertEqual(cmd[cmd.index("-contentImage") + 1], "/icons/claude-logo.png")
        execute = shlex.split(cmd[cmd.index("-execute") + 1])
        self.assertIn("--clicked", execute)

    @patch("shutil.which")
    @patch("subprocess.run")
    def test_leading_dash_message_is_padded(self, mock_run, mock_which):
        mock_which.return_value = "/usr/local/bin/terminal-notifier"
        mock_run.return_value = MagicMock(returncode=0)
        _notify_terminal_notifier(make_request(body="-rf everything"))
        cmd = mock_run.call_args[0][0]
        self.assertEqual(cmd[cmd.index("-message") + 1], " -rf everything")

    @patch("shutil.which")
    @patch("subprocess.run")
    def test_low_urgency_is_silent(self, mock_run, mock_which):
        mock_which.return_value = "/usr/local/bin/terminal-notifier"
        mock_run.return_value = MagicMock(returncode=0)
        _notify_terminal_notifier(make_request(urgency="low"))
        self.assertNotIn("-sound", mock_run.call_args[0][0])

    @patch("shutil.which")
    @patch("subprocess.run")
    def test_nonzero_exit_is_failure(self, mock_run, mock_which):
        mock_which.return_value = "/usr/local/bin/terminal-notifier"
        mock_run.return_value = MagicMock(returncode=1)
        self.assertFalse(_notify_terminal_notifier(make_request()))


class TestNotifyOsascript(TestCase):
    """Tests for macOS fallback via osascript."""

    @patch("shutil.which")
    @patch("subprocess.run")
    def test_escapes_title_and_body(self, mock_run, mock_which):
        """Title and body are escaped for AppleScript safety."""
        mock_which.return_value = "/usr/bin/osascript"
        mock_run.return_value = MagicMock(returncode=0)

        self.assertTrue(_notify_osascript(make_request(title='Say "hello"', body="C:\\test")))

        script = mock_run.call_args[0][0][2]
        self.assertIn('\\"', script)
        self.assertIn("\\\\", script)


class TestNotifyWindows(TestCase):
    """Tests for Windows notification via PowerShell."""

    @patch("shutil.which")
    def test_returns_false_if_powershell_not_found(self, mock_which):
        mock_which.return_value = None
        self.assertFalse(_notify_windows(make_request()))

    @patch("shutil.which")
    @patch("subprocess.Popen")
    def test_escapes_title_and_body(self, mock_popen, mock_which):
        mock_which.return_value = "C:\\Windows\\powershell.exe"
        self.assertTrue(_notify_windows(make_request(title="Cost: $100", body='Say "hi"')))
        script = mock_popen.call_args[0][0][2]
        self.assertIn("`$", script)
        self.assertIn('`"', script)


class TestSendNotification(TestCase):
    """Tests for platform dispatch."""

    @patch(f"{NOTIFY}.get_platform", return_value="linux")
    def test_dispatches_to_platform_backend(self, mock_platform):
        backend = MagicMock(return_value=True)
        request = make_request()
        with patch.dict(f"{NOTIFY}._BACKENDS", {"linux": backend}):
            self.assertTrue(send_notification(request))
        backend.assert_called_once_with(request)

    @patch(f"{NOTIFY}.get_platform", return_value="unknown")
    def test_returns_false_for_unknown_platform(self, mock_platform):
        self.assertFalse(send_notification(make_request()))

    @patch(f"{NOTIFY}.get_platform", return_value="macos")
    @patch(f"{NOTIFY}._notify_osascript", return_value=True)
    @patch(f"{NOTIFY}._notify_terminal_notifier", return_value=False)
    def test_macos_falls_back_to_osascript(self, mock_tn, mock_osa, mock_platform):
        self.assertTrue(send_notification(make_request()))
        mock_tn.assert_called_once()
        mock_osa.assert_called_once()


class TestAvailability(TestCase):
    """Tests for backend discovery."""

    @patch(f"{NOTIFY}.get_platform", return_value="linux")
    @patch("shutil.which", return_value="/usr/bin/notify-send")
    def test_linux_checks_notify_send(self, mock_which, mock_platform):
        self.assertEqual(available_backend(), "notify-send")
        mock_which.assert_called_with("notify-send")

    @patch(f"{NOTIFY}.get_platform", return_value="macos")
    def test_macos_prefers_terminal_notifier(self, mock_platform):
        with patch("shutil.which", side_effect=lambda tool: f"/usr/bin/{tool}"):
            self.assertEqual(available_backend(), "terminal-notifier")

    @patch(f"{NOTIFY}.get_platform", return_value="macos")
    def test_macos_osascript_only(self, mock_platform):
        with patch("shutil.which", side_effect=lambda tool: "/usr/bin/osascript" if tool == "osascript" else None):
            self.assertEqual(available_backend(), "osascript")

    @patch(f"{NOTIFY}.get_platform", return_value="linux")
    @patch("shutil.which", return_value=None)
    def test_returns_none_when_tool_not_found(self, mock_which, mock_platform):
        self.assertIsNone(available_backend())


class TestHostNotificationService(TestCase):
    """Tests for the callback-style service."""

    def test_deliver_reports_sender_result(self):
        service = HostNotificationService(sender=lambda request: True)
        done = OneShot()
        service.deliver(make_request(), done.set)
        self.assertTrue(done.wait(1.0))
        self.assertTrue(done.value)

    def test_deliver_reports_failure_when_sender_raises(self):
        def broken(request):
            raise RuntimeError("dbus gone")

        service = HostNotificationService(sender=broken)
        done = OneShot()
        service.deliver(make_request(), done.set)
        self.assertTrue(done.wait(1.0))
        self.assertFalse(done.value)

    def test_click_fires_immediately_for_relaunch(self):
        service = HostNotificationService(clicked_user_info={"kind": "terminal", "tty": "/dev/ttys003"})
        clicked = OneShot()
        service.listen_for_click(clicked.set)
        self.assertTrue(clicked.wait(0.01))
        self.assertEqual(clicked.value["tty"], "/dev/ttys003")

    def test_no_click_without_relaunch(self):
        service = HostNotificationService()
        clicked = OneShot()
        service.listen_for_click(clicked.set)
        self.assertFalse(clicked.wait(0.01))


if __name__ == "__main__":
    main()
