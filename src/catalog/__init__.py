"""Catalog storage and message lookup.

Public API:
 - CatalogLibrary / CompiledCatalog: per (domain, language) catalog store with subtag fallback
 - MessageResolver / TextDomain: plural-aware message resolution
"""

from .library import (  # noqa: F401
    CatalogLibrary,
    CompiledCatalog,
    language_fallbacks,
    normalize_language,
)
from .resolver import MessageResolver, NoLanguageError, TextDomain  # noqa: F401
