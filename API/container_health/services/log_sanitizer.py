import re
from typing import Iterable, Union

from container_health.domain.container import LogWindow

# ESC [ <params> <final byte>  (colours, cursor moves, erase-line, ...)
ANSI_CSI = re.compile(r"\x1b\[[0-9;:?]*[@-~]")

# JSON-escaped forms of the characters loggers like to escape: > < &
_ESCAPED_UNICODE = re.compile(r"\\u00(3e|3c|26)", re.IGNORECASE)
_UNESCAPED = {"3e": ">", "3c": "<", "26": "&"}

# C0 controls and DEL anywhere in the line; tab is kept
CONTROL_BYTES = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]+")

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def _single_pass(line: str) -> str:
    # Earlier stages must settle before control bytes are stripped, otherwise
    # the ESC of a sequence exposed by a removal would be stripped on its own.
    line, removed = ANSI_CSI.subn("", line)
    if removed:
        return line
    line, replaced = _ESCAPED_UNICODE.subn(lambda m: _UNESCAPED[m.group(1).lower()], line)
    if replaced:
        return line
    line = CONTROL_BYTES.sub("", line)
    return line.rstrip()


def sanitize_line(line: str) -> str:
    """
    Strip terminal escape sequences, escaped-unicode artifacts and control bytes.

    Passes repeat until nothing changes: removing one artifact can expose another
    (``"\\u00" ESC"[0m" "3c"`` becomes ``"\\u003c"``), and every pass only ever
    shortens the line, so the loop terminates and the result is a fixed point.
    """
    while True:
        cleaned = _single_pass(line)
        if cleaned == line:
            return cleaned
        line = cleaned


def sanitize_lines(lines: Iterable[str]) -> list[str]:
    cleaned = (sanitize_line(line) for line in lines)
    return [line for line in cleaned if line.strip()]


def to_log_window(raw: Union[bytes, str, None], limit: int) -> LogWindow:
    """
    Decode a log tail returned by the engine into a bounded LogWindow.
    Only the most recent `limit` non-blank lines are kept.
    """
    if not raw:
        return LogWindow()
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    lines = sanitize_lines(_LINE_BREAK.split(text))
    if limit > 0:
        lines = lines[-limit:]
    else:
        lines = []
    return LogWindow(tuple(lines))
