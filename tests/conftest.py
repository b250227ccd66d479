# Shared fixtures for catalog tests. Sample PO files live under tests/data/locale
# in the usual <lang>/LC_MESSAGES/<domain>.po layout.

from pathlib import Path

import pytest

from catalog import CatalogLibrary, MessageResolver

LOCALE_DIR = Path(__file__).parent / "data" / "locale"


def read_po(lang: str, domain: str = "simple") -> str:
    return (LOCALE_DIR / lang / "LC_MESSAGES" / f"{domain}.po").read_text(encoding="utf-8")


@pytest.fixture
def locale_dir() -> Path:
    return LOCALE_DIR


@pytest.fixture
def library() -> CatalogLibrary:
    return CatalogLibrary()


@pytest.fixture
def resolver(library: CatalogLibrary) -> MessageResolver:
    return MessageResolver(library)
