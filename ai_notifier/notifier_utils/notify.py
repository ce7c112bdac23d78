"""
Cross-platform notification service.

Supports macOS (terminal-notifier, falling back to osascript), Linux
(notify-send) and Windows (powershell). Delivery runs on a daemon thread and
reports back through a callback, so the caller bounds the wait itself.

Clicks: the notification relaunches this CLI with
``--clicked --user-info <json>``; the relaunched process receives the click
through listen_for_click().

Security: All user input is properly escaped to prevent command injection.
"""
import shlex
import shutil
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Literal

from ai_notifier.config import APP_NAME, ICON_DIR, Timeouts, fast_json_dumps
from .logging import log_event

Urgency = Literal["low", "normal", "critical"]


def escape_applescript(text: str) -> str:
    """Escape text for AppleScript string literals.

    AppleScript uses backslash escaping for special characters.
    """
    return text.replace("\\", "\\\\").replace('"', '\\"')


def escape_powershell(text: str) -> str:
    """Escape text for PowerShell string literals.

    PowerShell uses backtick for escaping in double-quoted strings.
    """
    return text.replace("`", "``").replace('"', '`"').replace("$", "`$")


def get_platform() -> str:
    """Detect platform."""
    if sys.platform == "darwin":
        return "macos"
    elif sys.platform == "win32":
        return "windows"
    return "linux"


ICON_EXTENSIONS = (".png", ".svg")


def find_icon(icon_name: str, icon_dir: Path = ICON_DIR) -> str | None:
    """Path of <icon_name>.png (or .svg) in the icon directory, if present.

    The package ships SVG icons; a PNG dropped next to one takes precedence.
    """
    for extension in ICON_EXTENSIONS:
        path = Path(icon_dir) / f"{icon_name}{extension}"
        if path.is_file():
            return str(path)
    return None


# =============================================================================
# One-shot signal
# =============================================================================

class OneShot:
    """Single-use completion signal with a bounded wait.

    The first set() wins; later calls are ignored.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self.value = None

    def set(self, value=None) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self.value = value
            self._event.set()

    def wait(self, timeout: float) -> bool:
        """True if set within timeout."""
        return self._event.wait(timeout)


# =============================================================================
# Requests
# =============================================================================

@dataclass
class NotificationRequest:
    title: str
    subtitle: str
    body: str
    icon: str | None = None
    user_info: dict[str, str] = field(default_factory=dict)
    urgency: Urgency = "normal"


def click_command(user_info: dict[str, str]) -> list[str]:
    """Command a click runs to hand the user info back to this CLI."""
    return [
        sys.executable, "-m", "ai_notifier",
        "--clicked", "--user-info", fast_json_dumps(user_info).decode("utf-8"),
    ]


# =============================================================================
# Backends
# =============================================================================

# notify-send blocks until the notification closes and prints the chosen
# action; run it detached so the click survives this process exiting.
_LINUX_CLICK_WRAPPER = (
    'action=$(notify-send "$1" "$2" "$3" "$4" "$5" --wait --action=default=Focus "$6" "$7"); '
    '[ "$action" = default ] && shift 7 && exec "$@"'
)


def _notify_linux(request: NotificationRequest) -> bool:
    """Send notification via notify-send (Linux)."""
    if not shutil.which("notify-send"):
        return False
    body = f"{request.subtitle}\n{request.body}" if request.subtitle else request.body
    icon = f"--icon={request.icon}" if request.icon else "--icon=utilities-terminal"
    try:
        subprocess.Popen(
            [
                "sh", "-c", _LINUX_CLICK_WRAPPER, "ai-notifier",
                f"--app-name={APP_NAME}",
                f"--urgency={request.urgency}",
                icon,
                "--expire-time=10000",
                "--hint=string:x-ai-notifier:1",
                request.title,
                body,
                *click_command(request.user_info),
            ],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        return True
    except OSError:
        return False


def _notify_terminal_notifier(request: NotificationRequest) -> bool:
    """Send notification via terminal-notifier (macOS), click relaunches us."""
    notifier = shutil.which("terminal-notifier")
    if not notifier:
        return False
    cmd = [
        notifier,
        "-title", request.title,
        "-subtitle", request.subtitle,
        # A leading "-" would be read as another flag
        "-message", request.body if not request.body.startswith("-") else " " + request.body,
        "-group", f"ai-notifier-{request.user_info.get('session_id') or 'default'}",
        "-execute", shlex.join(click_command(request.user_info)),
    ]
    if request.icon:
        cmd.extend(["-contentImage", request.icon])
    if request.urgency != "low":
        cmd.extend(["-sound", "default"])
    try:
        result = subprocess.run(cmd, capture_output=True, timeout=Timeouts.HELPER, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        log_event("notify", "terminal_notifier_failed", {"error": str(e)}, "warning")
        return False
    return result.returncode == 0


def _notify_osascript(request: NotificationRequest) -> bool:
    """Send notification via osascript (macOS). No click support.

    Security: Title and body are escaped to prevent AppleScript injection.
    """
    if not shutil.which("osascript"):
        return False
    script = (
        f'display notification "{escape_applescript(request.body)}" '
        f'with title "{escape_applescript(request.title)}" '
        f'subtitle "{escape_applescript(request.subtitle)}" '
        f'sound name "default"'
    )
    try:
        result = subprocess.run(
            ["osascript", "-e", script],
            capture_output=True,
            timeout=Timeouts.HELPER,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def _notify_macos(request: NotificationRequest) -> bool:
    return _notify_terminal_notifier(request) or _notify_osascript(request)


def _notify_windows(request: NotificationRequest) -> bool:
    """Send notification via PowerShell (Windows 10+). No click support.

    Security: Title and body are escaped to prevent PowerShell injection.
    """
    if not shutil.which("powershell"):
        return False
    safe_title = escape_powershell(f"{request.title}: {request.subtitle}")
    safe_body = escape_powershell(request.body)
    script = f'''
    [Windows.UI.Notifications.ToastNotificationManager, Windows.UI.Notifications, ContentType = WindowsRuntime] | Out-Null
    $template = [Windows.UI.Notifications.ToastNotificationManager]::GetTemplateContent([Windows.UI.Notifications.ToastTemplateType]::ToastText02)
    $textNodes = $template.GetElementsByTagName("text")
    $textNodes.Item(0).AppendChild($template.CreateTextNode("{safe_title}")) | Out-Null
    $textNodes.Item(1).AppendChild($template.CreateTextNode("{safe_body}")) | Out-Null
    $toast = [Windows.UI.Notifications.ToastNotification]::new($template)
    [Windows.UI.Notifications.ToastNotificationManager]::CreateToastNotifier("{APP_NAME}").Show($toast)
    '''
    try:
        subprocess.Popen(
            ["powershell", "-Command", script],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return True
    except OSError:
        return False


_BACKENDS = {
    "linux": _notify_linux,
    "macos": _notify_macos,
    "windows": _notify_windows,
}

_REQUIRED_TOOLS = {
    "linux": ("notify-send",),
    "macos": ("terminal-notifier", "osascript"),
    "windows": ("powershell",),
}


def send_notification(request: NotificationRequest) -> bool:
    """
    Send a desktop notification (cross-platform), blocking.

    Returns:
        True if the notification was handed to the OS, False if unavailable
        or the backend reported an error
    """
    backend = _BACKENDS.get(get_platform())
    if backend is None:
        return False
    return backend(request)


def available_backend() -> str | None:
    """Name of the first notification tool found, for setup output."""
    for tool in _REQUIRED_TOOLS.get(get_platform(), ()):
        if shutil.which(tool):
            return tool
    return None


# =============================================================================
# Service
# =============================================================================

class HostNotificationService:
    """Callback-style facade over the platform backends.

    Args:
        clicked_user_info: user info handed over by a click relaunch
            (None when this process was not started by a click)
        sender: blocking send function, replaceable in tests
    """

    def __init__(
        self,
        clicked_user_info: dict[str, str] | None = None,
        sender: Callable[[NotificationRequest], bool] = send_notification,
    ):
        self.clicked_user_info = clicked_user_info
        self.sender = sender

    def deliver(self, request: NotificationRequest, on_result: Callable[[bool], None]) -> None:
        """Send on a daemon thread; on_result(ok) fires when the backend returns."""
        def worker():
            try:
                ok = self.sender(request)
            except Exception as e:
                log_event("notify", "error", {"type": type(e).__name__, "msg": str(e)}, "error")
                ok = False
            on_result(ok)

        threading.Thread(target=worker, name="notify-deliver", daemon=True).start()

    def listen_for_click(self, on_click: Callable[[dict[str, str]], None]) -> None:
        """Register the click callback. Fires at once for a click relaunch."""
        if self.clicked_user_info is not None:
            on_click(self.clicked_user_info)
