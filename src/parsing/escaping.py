"""Escaping of quoted PO strings.

Only the characters below are escaped. The backslash pair comes first so the
backslashes introduced by later replacements are never escaped twice.
"""

from __future__ import annotations

import re

from parsing.errors import UnescapeError

__all__ = ["escape", "unescape", "ESCAPES"]

ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ("\n", "\\n"),
    ("\t", "\\t"),
    ('"', '\\"'),
    # xgettext warns about these but they are valid
    ("\v", "\\v"),
    ("\b", "\\b"),
    ("\r", "\\r"),
    ("\f", "\\f"),
    ("\a", "\\a"),
)

_UNESCAPES = {escaped[1]: raw for raw, escaped in ESCAPES}
_RE_ESCAPE_SEQUENCE = re.compile(r"\\(.?)", re.DOTALL)


def escape(text: str) -> str:
    for raw, escaped in ESCAPES:
        text = text.replace(raw, escaped)
    return text


def _replace(match: re.Match) -> str:
    code = match.group(1)
    try:
        return _UNESCAPES[code]
    except KeyError:
        raise UnescapeError(match.group(0)) from None


def unescape(text: str) -> str:
    """Resolve escape sequences in ``text``.

    Raises:
        UnescapeError: for a sequence not in ``ESCAPES`` (including a lone trailing backslash).
    """
    if "\\" not in text:
        return text
    return _RE_ESCAPE_SEQUENCE.sub(_replace, text)
