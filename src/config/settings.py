"""Global configuration and constants for catalog parsing, lookup and loading."""

from __future__ import annotations

import os
from typing import Final

# Joins msgctxt and msgid into a single lookup key (same byte GNU gettext uses)
CONTEXT_SEPARATOR: Final = "\x04"

# English rule used when a catalog carries no Plural-Forms header
DEFAULT_PLURAL_EXPRESSION: Final = "n == 1 ? 0 : 1"
DEFAULT_NPLURALS: Final = 2
MAX_PLURAL_EXPRESSION_LENGTH: Final = 1000

CATALOG_DIR: Final = os.environ.get("POCATALOG_CATALOG_DIR", "locale")

DEFAULT_USER_AGENT: Final = "pocatalog/0.1"
DEFAULT_TIMEOUT: Final = 15  # seconds
DEFAULT_RETRIES: Final = 3
DEFAULT_BACKOFF_FACTOR: Final = 0.6
