"""Message resolution against a CatalogLibrary.

Missing catalogs, missing messages and missing plural forms never raise; they fall
back to the source strings. Only a call with no usable language is an error.
"""

from __future__ import annotations

import logging
from typing import Optional

from catalog.library import CatalogLibrary
from domain.models import message_key
from parsing.errors import PluralExpressionError

__all__ = ["NoLanguageError", "MessageResolver", "TextDomain"]

log = logging.getLogger(__name__)


class NoLanguageError(LookupError):
    """Raised when neither the call nor the library provides a language."""


def _source_string(singular: str, plural: Optional[str], count: int) -> str:
    if count == 1 or plural is None:
        return singular
    return plural


class MessageResolver:
    def __init__(self, library: CatalogLibrary) -> None:
        self.library = library

    def resolve(
        self,
        domain: str,
        lang: Optional[str],
        context: Optional[str],
        singular: str,
        plural: Optional[str],
        count: int,
    ) -> str:
        """Return the translation of ``singular``/``plural`` for ``count``.

        Lookup order: catalog for ``lang`` (with subtag fallback), message by
        ``context`` + ``singular``, plural form chosen by the catalog's rule. A
        missing form 0 yields ``singular``; any other missing form falls back to
        form 0, then to the source strings. A rule that fails to evaluate (division
        by zero) is logged and treated as form 0.

        Raises:
            NoLanguageError: ``lang`` is None and the library has no default language.
        """
        lang = lang or self.library.default_language
        if not lang:
            raise NoLanguageError(f"No language given for {singular!r} and no default language configured")

        catalog = self.library.get_catalog(domain, lang)
        if catalog is None:
            return _source_string(singular, plural, count)

        forms = catalog.forms(message_key(context, singular))
        if forms is None:
            log.debug("No translation for %r in %s/%s", singular, domain, lang)
            return _source_string(singular, plural, count)

        try:
            idx = catalog.plural_rule(count)
        except PluralExpressionError as e:
            log.warning("Plural rule failed in %s/%s for n=%s: %s", domain, lang, count, e)
            idx = 0
        if 0 <= idx < len(forms) and forms[idx] is not None:
            return forms[idx]  # type: ignore[return-value]
        if idx == 0:
            return singular
        if forms and forms[0] is not None:
            return forms[0]
        return _source_string(singular, plural, count)


class TextDomain:
    """Resolver bound to one textdomain and, optionally, one language."""

    def __init__(self, resolver: MessageResolver, name: str, lang: Optional[str] = None) -> None:
        self.resolver = resolver
        self.name = name
        self.lang = lang

    def gettext(self, message: str) -> str:
        return self.resolver.resolve(self.name, self.lang, None, message, None, 1)

    def ngettext(self, singular: str, plural: str, n: int) -> str:
        return self.resolver.resolve(self.name, self.lang, None, singular, plural, n)

    def pgettext(self, context: str, message: str) -> str:
        return self.resolver.resolve(self.name, self.lang, context, message, None, 1)

    def npgettext(self, context: str, singular: str, plural: str, n: int) -> str:
        return self.resolver.resolve(self.name, self.lang, context, singular, plural, n)
