"""CatalogLibrary: compiled message catalogs keyed by textdomain and language.

Language codes are normalized (lower case, ``_`` replaced by ``-``) and looked up
along a fallback chain that drops the last subtag on each step
(``de-de-1996`` -> ``de-de`` -> ``de``).

Thread safety: catalogs are compiled outside the lock and swapped in under it, so
a reader sees either the previous catalog or the new one, never a partial state.
Concurrent installs for the same (domain, language) pair serialize on the lock and
the last writer wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import RLock
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from domain.models import CatalogData, CatalogFile
from parsing.plural_rule import PluralRule, parse_plural_forms

__all__ = [
    "CompiledCatalog",
    "CatalogLibrary",
    "normalize_language",
    "language_fallbacks",
]

log = logging.getLogger(__name__)

CatalogSource = Union[CatalogData, CatalogFile, Mapping[str, Any]]


def normalize_language(code: str) -> str:
    return code.strip().lower().replace("_", "-")


def language_fallbacks(code: str) -> List[str]:
    """Return candidate codes from most to least specific."""
    bits = normalize_language(code).split("-")
    return ["-".join(bits[:i]) for i in range(len(bits), 0, -1)]


@dataclass(frozen=True)
class CompiledCatalog:
    """Lookup-ready catalog for one (domain, language) pair."""

    messages: Mapping[str, Tuple[Optional[str], ...]]
    plural_rule: PluralRule
    plural: Optional[str] = None
    meta: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def compile(cls, source: CatalogSource) -> "CompiledCatalog":
        """Build a catalog from parsed data; raises PluralExpressionError for a bad header."""
        data = _as_catalog_data(source)
        rule = parse_plural_forms(data.plural)
        messages = {key: tuple(forms) for key, forms in data.messages.items()}
        return cls(
            messages=MappingProxyType(messages),
            plural_rule=rule,
            plural=data.plural,
            meta=MappingProxyType(dict(data.meta or {})),
        )

    def forms(self, key: str) -> Optional[Tuple[Optional[str], ...]]:
        return self.messages.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.messages

    def __len__(self) -> int:
        return len(self.messages)


def _as_catalog_data(source: CatalogSource) -> CatalogData:
    if isinstance(source, CatalogData):
        return source
    if isinstance(source, CatalogFile):
        return source.to_catalog_data()
    if isinstance(source, Mapping):
        return CatalogData.from_dict(source)
    raise TypeError(f"Unsupported catalog source: {type(source).__name__}")


class CatalogLibrary:
    """Store of compiled catalogs per textdomain and normalized language code.

    ``default_language`` is used by resolvers when a call passes no language.
    """

    def __init__(self, default_language: Optional[str] = None) -> None:
        self.default_language = default_language
        self._lock = RLock()
        self._catalogs: Dict[str, Dict[str, CompiledCatalog]] = {}

    def set_catalog(self, domain: str, lang: str, catalog: CatalogSource) -> CompiledCatalog:
        """Compile ``catalog`` and install it, replacing any previous one for the pair."""
        compiled = catalog if isinstance(catalog, CompiledCatalog) else CompiledCatalog.compile(catalog)
        code = normalize_language(lang)
        with self._lock:
            self._catalogs.setdefault(domain, {})[code] = compiled
        log.debug("Installed catalog %s/%s (%d messages)", domain, code, len(compiled))
        return compiled

    def remove_catalog(self, domain: str, lang: str) -> None:
        """Remove the catalog for the pair; no-op when absent."""
        code = normalize_language(lang)
        with self._lock:
            langs = self._catalogs.get(domain)
            if langs is None or langs.pop(code, None) is None:
                return
            if not langs:
                del self._catalogs[domain]
        log.debug("Removed catalog %s/%s", domain, code)

    def get_catalog(self, domain: str, lang: str, fallback: bool = True) -> Optional[CompiledCatalog]:
        """Return the catalog for ``lang`` or, with ``fallback``, for a less specific code."""
        with self._lock:
            langs = self._catalogs.get(domain)
            if not langs:
                return None
            candidates = language_fallbacks(lang)
            if not fallback:
                candidates = candidates[:1]
            for code in candidates:
                catalog = langs.get(code)
                if catalog is not None:
                    if code != candidates[0]:
                        log.debug("Language fallback %s -> %s for domain %s", candidates[0], code, domain)
                    return catalog
        return None

    def has_catalog(self, domain: str, lang: str) -> bool:
        return self.get_catalog(domain, lang, fallback=False) is not None

    def domains(self) -> List[str]:
        with self._lock:
            return sorted(self._catalogs)

    def languages(self, domain: str) -> Sequence[str]:
        with self._lock:
            return sorted(self._catalogs.get(domain, {}))
