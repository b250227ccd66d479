"""Domain models for PO catalogs: message entries, file model and compiled catalog data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from config import settings

# (comment marker character, Entry attribute), in serialization order
COMMENT_TYPES: tuple[tuple[str, str], ...] = (
    (" ", "translator_comments"),
    (".", "extracted_comments"),
    (":", "references"),
    (",", "flags"),
    ("|", "previous"),
)
COMMENT_ATTRIBUTES: Dict[str, str] = dict(COMMENT_TYPES)


def message_key(context: Optional[str], msgid: str) -> str:
    """Return the lookup key for a message; an empty context still counts as a context."""
    if context is None:
        return msgid
    return context + settings.CONTEXT_SEPARATOR + msgid


@dataclass(slots=True)
class Entry:
    id: str = ""
    context: Optional[str] = None
    plural_id: Optional[str] = None
    forms: List[Optional[str]] = field(default_factory=list)
    translator_comments: List[str] = field(default_factory=list)
    extracted_comments: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)
    previous: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return message_key(self.context, self.id)

    def is_meta(self) -> bool:
        return self.id == ""

    def is_plural(self) -> bool:
        return self.plural_id is not None

    def is_translated(self) -> bool:
        return any(self.forms)

    def comment_lines(self) -> List[str]:
        """Render all comments in PO syntax, grouped by type."""
        lines: List[str] = []
        for marker, attr in COMMENT_TYPES:
            for text in getattr(self, attr):
                lines.append(f"#{marker}{'' if marker == ' ' else ' '}{text}".rstrip())
        return lines


@dataclass(slots=True)
class CatalogData:
    """Runtime catalog payload: message forms by key plus the raw Plural-Forms header.

    ``meta`` is None for sparse catalogs. Entries whose translations are all empty are
    not listed in ``messages`` (msgfmt does the same), so a lookup returns the source
    string rather than ``""``.
    """

    messages: Dict[str, List[Optional[str]]] = field(default_factory=dict)
    plural: Optional[str] = None
    meta: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.meta is not None:
            data["meta"] = dict(self.meta)
        data["plural"] = self.plural
        data["messages"] = {k: list(v) for k, v in self.messages.items()}
        return data

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CatalogData":
        messages = raw.get("messages") or {}
        meta = raw.get("meta")
        return cls(
            messages={str(k): list(v) for k, v in messages.items()},
            plural=raw.get("plural"),
            meta=dict(meta) if meta is not None else None,
        )


@dataclass(slots=True)
class CatalogFile:
    entries: List[Entry] = field(default_factory=list)
    meta: Dict[str, str] = field(default_factory=dict)
    header_comment: str = ""

    @property
    def plural(self) -> Optional[str]:
        return self.meta.get("Plural-Forms")

    def find(self, msgid: str, context: Optional[str] = None) -> Optional[Entry]:
        for entry in self.entries:
            if entry.id == msgid and entry.context == context:
                return entry
        return None

    def to_catalog_data(self, *, sparse: bool = False) -> CatalogData:
        """Compile the entry list into a lookup table.

        Untranslated entries (every ``msgstr`` empty) are skipped so lookups fall back to
        the source string instead of returning ``""``. Fuzzy entries are kept.
        """
        messages = {e.key: list(e.forms) for e in self.entries if e.is_translated()}
        return CatalogData(
            messages=messages,
            plural=self.plural,
            meta=None if sparse else dict(self.meta),
        )
