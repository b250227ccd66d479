"""Catalog loaders: fetch PO text for a (domain, language) pair.

The library itself never performs I/O. A loader is any object with an async
``load(domain, lang) -> str`` method; ``install_catalog`` awaits it, parses the
result in sparse mode and installs it. A failed load or parse leaves previously
installed catalogs untouched.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional, Protocol

import httpx

from catalog.library import CatalogLibrary, CompiledCatalog, language_fallbacks
from config import settings
from parsing.po_parser import parse_catalog

__all__ = [
    "CatalogLoadError",
    "CatalogLoader",
    "FileCatalogLoader",
    "HttpCatalogLoader",
    "install_catalog",
]

log = logging.getLogger(__name__)


class CatalogLoadError(RuntimeError):
    pass


class CatalogLoader(Protocol):
    async def load(self, domain: str, lang: str) -> str: ...


class FileCatalogLoader:
    """Reads ``<root>/<lang>/LC_MESSAGES/<domain>.po``, trying less specific languages in turn.

    Directory names are matched as given and in ``ll_CC`` spelling, e.g. ``de-at`` also
    finds ``de_AT``.
    """

    def __init__(self, root: Optional[str] = None, encoding: str = "utf-8") -> None:
        self.root = root or settings.CATALOG_DIR
        self.encoding = encoding

    def _candidates(self, domain: str, lang: str) -> list[tuple[str, str]]:
        paths: list[tuple[str, str]] = []
        for code in language_fallbacks(lang):
            bits = code.split("-")
            spellings = [code, "_".join([bits[0]] + [b.upper() for b in bits[1:]])]
            for spelling in dict.fromkeys(spellings):
                paths.append((code, os.path.join(self.root, spelling, "LC_MESSAGES", f"{domain}.po")))
        return paths

    def _read(self, domain: str, lang: str) -> str:
        candidates = self._candidates(domain, lang)
        for code, path in candidates:
            if os.path.exists(path):
                if code != candidates[0][0]:
                    log.debug("Catalog %s/%s served from %s (%s)", domain, lang, code, path)
                with open(path, "r", encoding=self.encoding) as fh:
                    return fh.read()
        raise CatalogLoadError(f"No catalog for {domain}/{lang} under {self.root}")

    async def load(self, domain: str, lang: str) -> str:
        return await asyncio.to_thread(self._read, domain, lang)


class HttpCatalogLoader:
    """GETs ``<base_url>/<lang>/<domain>.po`` with retry and exponential back-off."""

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        retries: int | None = None,
        backoff: float | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = client
        self.retries = retries if retries is not None else settings.DEFAULT_RETRIES
        self.backoff = backoff if backoff is not None else settings.DEFAULT_BACKOFF_FACTOR

    def url_for(self, domain: str, lang: str) -> str:
        return f"{self.base_url}/{lang}/{domain}.po"

    async def load(self, domain: str, lang: str) -> str:
        url = self.url_for(domain, lang)
        client = self.client
        close_client = False
        if client is None:
            headers = {"User-Agent": settings.DEFAULT_USER_AGENT}
            client = httpx.AsyncClient(headers=headers, timeout=settings.DEFAULT_TIMEOUT)
            close_client = True
        try:
            attempt = 0
            while True:
                attempt += 1
                try:
                    resp = await client.get(url)
                    resp.raise_for_status()
                    return resp.text
                except httpx.HTTPError as e:
                    if attempt > self.retries:
                        raise CatalogLoadError(f"Failed to fetch {url} after {self.retries} retries: {e}") from e
                    sleep_for = self.backoff * (2 ** (attempt - 1))
                    log.warning(
                        "Attempt %d/%d failed for %s: %s. Retrying in %.1fs",
                        attempt,
                        self.retries,
                        url,
                        e,
                        sleep_for,
                    )
                    await asyncio.sleep(sleep_for)
        finally:
            if close_client:
                await client.aclose()


async def install_catalog(
    library: CatalogLibrary, loader: CatalogLoader, domain: str, lang: str
) -> CompiledCatalog:
    """Load, parse and install one catalog; errors propagate before anything is installed.

    The catalog is installed under ``lang`` as requested, even when the loader fell
    back to a less specific language (a ``de`` file serving ``de-ch``).
    """
    source = await loader.load(domain, lang)
    data = parse_catalog(source, sparse=True)
    return library.set_catalog(domain, lang, data)
