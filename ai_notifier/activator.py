"""
Terminal activation - bring the invoking terminal back to the front.

Best effort only: every helper runs as an isolated subprocess with output
discarded, failures are logged and swallowed.

Security: Session ids, ttys and paths come from payloads and environment,
so everything interpolated into AppleScript is escaped.
"""
import os
import shutil
import subprocess

from ai_notifier.config import Timeouts
from ai_notifier.notifier_utils import log_event
from ai_notifier.notifier_utils.notify import escape_applescript
from ai_notifier.terminal import TerminalContext, TerminalKind

VSCODE_APP = "Visual Studio Code"
VSCODE_FOCUS_TERMINAL_URI = "vscode://command/workbench.action.terminal.focus"
VSCODE_CLI_PATHS = (
    "/usr/local/bin/code",
    "/opt/homebrew/bin/code",
    "/Applications/Visual Studio Code.app/Contents/Resources/app/bin/code",
)


def _run(args: list[str]) -> bool:
    """Run a helper, discard output. Returns True on exit code 0."""
    try:
        result = subprocess.run(
            args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=Timeouts.HELPER,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        log_event("activator", "helper_failed", {"cmd": args[0], "error": str(e)}, "warning")
        return False
    if result.returncode != 0:
        log_event("activator", "helper_failed", {"cmd": args[0], "code": result.returncode}, "warning")
        return False
    return True


def run_applescript(script: str) -> bool:
    if not shutil.which("osascript"):
        log_event("activator", "osascript_unavailable", {}, "debug")
        return False
    return _run(["osascript", "-e", script])


# =============================================================================
# iTerm2
# =============================================================================

def iterm_unique_id(session_id: str) -> str:
    """ITERM_SESSION_ID looks like "w0t0p5:C6684449-..." - the part after ':' is unique."""
    return session_id.rsplit(":", 1)[-1]


def iterm_script(session_id: str | None) -> str:
    if not session_id:
        return 'tell application "iTerm2" to activate'
    target = escape_applescript(iterm_unique_id(session_id))
    return f'''
tell application "iTerm2"
  repeat with w in windows
    repeat with t in tabs of w
      repeat with s in sessions of t
        if unique ID of s is "{target}" then
          select w
          tell t to select
          tell s to select
        end if
      end repeat
    end repeat
  end repeat
  activate
end tell'''


def activate_iterm(context: TerminalContext) -> None:
    run_applescript(iterm_script(context.session_id))


# =============================================================================
# VS Code
# =============================================================================

def find_vscode_cli() -> str | None:
    found = shutil.which("code")
    if found:
        return found
    for path in VSCODE_CLI_PATHS:
        if os.access(path, os.X_OK):
            return path
    return None


def activate_vscode(context: TerminalContext) -> None:
    if context.working_directory:
        cli = find_vscode_cli()
        if cli:
            # Raises the window that already has this folder open
            _run([cli, context.working_directory])
        else:
            log_event("activator", "vscode_cli_missing", {}, "debug")
    run_applescript(f'tell application "{VSCODE_APP}" to activate')
    if shutil.which("open"):
        _run(["open", VSCODE_FOCUS_TERMINAL_URI])


# =============================================================================
# Terminal.app
# =============================================================================

def terminal_app_script(tty_device: str | None) -> str:
    if not tty_device:
        return 'tell application "Terminal" to activate'
    target = escape_applescript(tty_device)
    return f'''
tell application "Terminal"
  repeat with w in windows
    repeat with t in tabs of w
      if tty of t is "{target}" then
        set selected of t to true
        set index of w to 1
      end if
    end repeat
  end repeat
  activate
end tell'''


def activate_terminal_app(context: TerminalContext) -> None:
    run_applescript(terminal_app_script(context.tty_device))


# =============================================================================
# Dispatch
# =============================================================================

def activate(context: TerminalContext) -> None:
    """Focus the terminal described by context. Never raises."""
    log_event("activator", "activate", {
        "kind": context.kind.value,
        "has_session": bool(context.session_id),
        "has_tty": bool(context.tty_device),
        "has_cwd": bool(context.working_directory),
    })
    try:
        if context.kind is TerminalKind.ITERM:
            activate_iterm(context)
        elif context.kind is TerminalKind.VSCODE:
            activate_vscode(context)
        elif context.kind is TerminalKind.APPLE_TERMINAL:
            activate_terminal_app(context)
        elif context.session_id:
            activate_iterm(context)
        elif context.tty_device:
            activate_terminal_app(context)
        elif context.working_directory:
            activate_vscode(context)
    except Exception as e:
        log_event("activator", "error", {"type": type(e).__name__, "msg": str(e)}, "error")
