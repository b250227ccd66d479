"""Line-oriented parser for gettext PO catalogs.

The parser is a small state machine:

``CLEAN``     between entries
``COMMENTS``  collecting ``#`` lines for the next entry
``DATA``      collecting ``msgctxt``/``msgid``/``msgid_plural``/``msgstr`` lines and their
              ``"..."`` continuations

A comment after data, a ``msgctxt`` after data and a ``msgid`` after anything but
``msgctxt`` each close the current entry. ``#~`` (obsolete) lines close the current
entry and are otherwise ignored.

``parse`` returns a full ``CatalogFile`` (comments, header comment, meta).
``parse_catalog(sparse=True)`` keeps only the message table and the Plural-Forms
header, which is all a runtime lookup needs.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from domain.models import COMMENT_ATTRIBUTES, CatalogData, CatalogFile, Entry
from parsing.errors import FormatError, UnescapeError
from parsing.escaping import unescape

__all__ = ["POParser", "parse", "parse_catalog"]

log = logging.getLogger(__name__)

_RE_LINES = re.compile(r"\r\n|\r|\n")
_RE_DATA = re.compile(r'^msg(?P<field>ctxt|id_plural|id|str)(?:\[(?P<index>\d+)\])?\s+"(?P<text>.*)"$')
_RE_CONTINUATION = re.compile(r'^"(?P<text>.*)"$')


class State(Enum):
    CLEAN = 0
    COMMENTS = 1
    DATA = 2


class POParser:
    """Incremental PO reader. Feed stripped lines, then call ``finish``."""

    def __init__(self, *, sparse: bool = False) -> None:
        self.sparse = sparse
        self.file = CatalogFile()
        self.messages: Dict[str, List[Optional[str]]] = {}
        self.plural: Optional[str] = None
        self._has_meta = False
        self._seen: Set[str] = set()
        self._reset()

    def _reset(self) -> None:
        self.state = State.CLEAN
        self._entry = Entry()
        self._has_id = False
        self._field: Optional[Tuple[str, int]] = None
        self._start_line: Optional[int] = None

    # Line handling -----------------------------------------------------
    def feed_line(self, lineno: int, line: str) -> None:
        line = line.strip()
        if not line:
            return
        if line.startswith("#~"):
            self._close_entry()
            return
        if line.startswith("#"):
            if self.state is State.DATA:
                self._close_entry()
            if self._start_line is None:
                self._start_line = lineno
            self.state = State.COMMENTS
            self._add_comment(lineno, line)
            return
        if line.startswith("msg"):
            self._add_data(lineno, line)
            return
        if line.startswith('"'):
            self._continue_field(lineno, line)
            return
        raise FormatError("Illegal PO line", line=lineno, text=line)

    def _add_comment(self, lineno: int, line: str) -> None:
        if line == "#":
            marker, text = " ", ""
        else:
            marker = line[1]
            if marker not in COMMENT_ATTRIBUTES:
                raise FormatError(f"Unknown comment type {line[:2]!r}", line=lineno, text=line)
            text = line[2:]
            if marker != " " and text.startswith(" "):
                text = text[1:]
        if self.sparse:
            return
        getattr(self._entry, COMMENT_ATTRIBUTES[marker]).append(text)

    def _add_data(self, lineno: int, line: str) -> None:
        m = _RE_DATA.match(line)
        if not m:
            raise FormatError("Illegal PO data line", line=lineno, text=line)
        field, index = m.group("field"), m.group("index")
        if index is not None and field != "str":
            raise FormatError(f"msg{field} cannot be indexed", line=lineno, text=line)
        value = self._unescape(lineno, m.group("text"))

        # msgctxt always opens a new entry; msgid does unless it follows msgctxt
        if self.state is State.DATA and (
            field == "ctxt" or (field == "id" and self._field is not None and self._field[0] != "ctxt")
        ):
            self._close_entry()
        if self._start_line is None:
            self._start_line = lineno
        self.state = State.DATA

        entry = self._entry
        idx = 0
        if field == "ctxt":
            entry.context = value
        elif field == "id":
            entry.id = value
            self._has_id = True
        elif not self._has_id:
            raise FormatError(f"msg{field} without preceding msgid", line=lineno, text=line)
        elif field == "id_plural":
            if entry.plural_id is not None:
                raise FormatError("Duplicate msgid_plural", line=lineno, text=line)
            entry.plural_id = value
        else:
            idx = int(index or 0)
            if idx >= len(entry.forms):
                entry.forms.extend([None] * (idx + 1 - len(entry.forms)))
            if entry.forms[idx] is not None:
                raise FormatError(f"Duplicate msgstr[{idx}]", line=lineno, text=line)
            entry.forms[idx] = value
        self._field = (field, idx)

    def _continue_field(self, lineno: int, line: str) -> None:
        m = _RE_CONTINUATION.match(line)
        if not m:
            raise FormatError("Illegal PO line", line=lineno, text=line)
        if self.state is not State.DATA or self._field is None:
            raise FormatError("String continuation without an open field", line=lineno, text=line)
        value = self._unescape(lineno, m.group("text"))
        field, idx = self._field
        entry = self._entry
        if field == "ctxt":
            entry.context = (entry.context or "") + value
        elif field == "id":
            entry.id += value
        elif field == "id_plural":
            entry.plural_id = (entry.plural_id or "") + value
        else:
            entry.forms[idx] = (entry.forms[idx] or "") + value

    @staticmethod
    def _unescape(lineno: int, text: str) -> str:
        try:
            return unescape(text)
        except UnescapeError as exc:
            raise UnescapeError(exc.sequence, line=lineno) from None

    # Entry completion ---------------------------------------------------
    def _close_entry(self) -> None:
        entry, start = self._entry, self._start_line
        if not self._has_id:
            if entry.context is not None:
                raise FormatError("msgctxt without msgid", line=start)
            if self.state is State.COMMENTS:
                log.debug("Dropping comment block without message (line %s)", start)
            self._reset()
            return
        if not entry.forms or entry.forms[0] is None:
            raise FormatError(f"Missing msgstr for msgid {entry.id!r}", line=start)

        if entry.is_meta():
            self._store_meta(entry, start)
        else:
            key = entry.key
            if key in self._seen:
                raise FormatError(f"Duplicate message {entry.id!r}", line=start)
            self._seen.add(key)
            if not self.sparse:
                self.file.entries.append(entry)
            elif entry.is_translated():
                self.messages[key] = list(entry.forms)
        self._reset()

    def _store_meta(self, entry: Entry, start: Optional[int]) -> None:
        if self._has_meta:
            raise FormatError("Duplicate header entry", line=start)
        self._has_meta = True
        if not self.sparse:
            self.file.header_comment = "\n".join(entry.comment_lines())
        for raw in (entry.forms[0] or "").strip("\n").split("\n"):
            if not raw:
                continue
            key, sep, value = raw.partition(": ")
            if not sep:
                if not raw.endswith(":"):
                    raise FormatError("Illegal header line", line=start, text=raw)
                key, value = raw[:-1], ""
            if key == "Plural-Forms":
                self.plural = value
            if not self.sparse:
                self.file.meta[key] = value

    def finish(self) -> None:
        if self.state is not State.CLEAN:
            self._close_entry()


def _run(source: str, *, sparse: bool) -> POParser:
    parser = POParser(sparse=sparse)
    if source.startswith("\ufeff"):
        source = source[1:]
    for lineno, line in enumerate(_RE_LINES.split(source), start=1):
        parser.feed_line(lineno, line)
    parser.finish()
    return parser


def parse(source: str) -> CatalogFile:
    """Parse PO text into a file model with entries, comments and meta data.

    Raises:
        FormatError: malformed PO structure.
        UnescapeError: unknown escape sequence in a quoted string.
    """
    return _run(source, sparse=False).file


def parse_catalog(source: str, *, sparse: bool = False) -> CatalogData:
    """Parse PO text straight into lookup data.

    Sparse mode skips comments and meta data; both modes yield the same messages
    and Plural-Forms header.
    """
    if not sparse:
        return parse(source).to_catalog_data()
    parser = _run(source, sparse=True)
    return CatalogData(messages=parser.messages, plural=parser.plural, meta=None)
