"""
Response preview - squeeze arbitrary response text into a notification body.

Deterministic and side-effect free.
"""
from ai_notifier.config import Labels, Limits

ELLIPSIS = Labels.ELLIPSIS


def preview(
    text: str | None,
    max_lines: int = Limits.PREVIEW_MAX_LINES,
    max_chars: int = Limits.PREVIEW_MAX_CHARS,
) -> str:
    """Bounded single-line preview of text.

    Keeps up to max_lines non-blank lines joined by single spaces. The
    character budget counts one separator per joined line. A line that does
    not fit is cut (leaving room for the ellipsis) and the preview stops.
    Anything left out is marked with a trailing ellipsis.

    Examples:
        >>> preview("Done.\\n\\nAll tests pass.")
        'Done. All tests pass.'
        >>> preview("a\\nb\\nc", max_lines=2)
        'a b…'
    """
    if not text:
        return ""
    lines = [line.strip() for line in text.strip().splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        return ""

    parts: list[str] = []
    used = 0
    for line in lines:
        if len(parts) >= max_lines:
            break
        separator = 1 if parts else 0
        remaining = max_chars - used - separator
        if len(line) > remaining:
            cut = line[:max(remaining - len(ELLIPSIS), 0)].rstrip()
            if cut:
                parts.append(cut + ELLIPSIS)
            break
        parts.append(line)
        used += separator + len(line)

    result = " ".join(parts)
    if len(result) < len(" ".join(lines)) and not result.endswith(ELLIPSIS):
        result += ELLIPSIS
    return result
