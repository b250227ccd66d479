"""Render a ``CatalogFile`` back to PO text.

Output order: header comment, header entry (one ``"Key: Value\\n"`` line per meta
key), then every entry separated by a blank line. Parsing the output yields an
equal ``CatalogFile``.
"""

from __future__ import annotations

import re
from typing import List

from domain.models import CatalogFile, Entry
from parsing.escaping import escape

__all__ = ["serialize", "format_entry", "quote"]

_RE_AFTER_NEWLINE = re.compile(r"(?<=\n)")


def quote(keyword: str, text: str) -> List[str]:
    """Render ``keyword "text"``; multi-line text is split after each newline."""
    parts = [p for p in _RE_AFTER_NEWLINE.split(text) if p] if "\n" in text[:-1] else [text]
    if len(parts) == 1:
        return [f'{keyword} "{escape(text)}"']
    return [f'{keyword} ""'] + [f'"{escape(part)}"' for part in parts]


def format_entry(entry: Entry) -> str:
    lines = entry.comment_lines()
    if entry.context is not None:
        lines.extend(quote("msgctxt", entry.context))
    lines.extend(quote("msgid", entry.id))
    if entry.plural_id is not None:
        lines.extend(quote("msgid_plural", entry.plural_id))
    if len(entry.forms) <= 1:
        lines.extend(quote("msgstr", (entry.forms or [""])[0] or ""))
    else:
        for idx, form in enumerate(entry.forms):
            # gaps stay gaps
            if form is not None:
                lines.extend(quote(f"msgstr[{idx}]", form))
    return "\n".join(lines)


def _format_header(file: CatalogFile) -> str:
    lines: List[str] = []
    if file.header_comment:
        lines.append(file.header_comment)
    lines.append('msgid ""')
    lines.append('msgstr ""')
    for key, value in file.meta.items():
        lines.append(f'"{escape(key)}: {escape(value)}\\n"')
    return "\n".join(lines)


def serialize(file: CatalogFile) -> str:
    blocks = [_format_header(file)]
    blocks.extend(format_entry(entry) for entry in file.entries)
    return "\n\n".join(blocks) + "\n"
