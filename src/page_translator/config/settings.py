"""
Configuration settings for the page translation pipeline.

This module centralizes all configuration constants and default values used
throughout the pipeline. Settings are grouped by their functional area for
easy maintenance.

Configuration includes:
    - Translation gateway settings
    - Language settings
    - Text scanning settings
    - Mutation watcher settings
    - Storage settings
    - Orchestration settings
    - Logging settings

Note:
    Every value can be overridden through the environment variable of the
    same name.

Author: Leonardo Pacciani-Mori
License: MIT
"""

import os


def _env_flag(name: str, default: str = "false") -> bool:
    """Read a boolean environment variable."""
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_list(name: str, default: str) -> list:
    """Read a comma-separated environment variable into a list."""
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


# =============================================================================
# TRANSLATION GATEWAY CONFIGURATION
# =============================================================================

# URL of the translation gateway endpoint.
# Accepts {"texts": [...], "targetLanguage": "<code>"} and answers
# {"translations": [...]} in the same order.
TRANSLATION_GATEWAY_URL = os.getenv(
    "TRANSLATION_GATEWAY_URL",
    "http://localhost:54321/functions/v1/translate-content",
)

# Optional bearer token sent with every gateway request.
TRANSLATION_GATEWAY_TOKEN = os.getenv("TRANSLATION_GATEWAY_TOKEN", "")

# Client-side timeout in seconds for one gateway round trip.
# A timed-out call is treated like any other gateway failure.
GATEWAY_TIMEOUT_SECONDS = float(os.getenv("GATEWAY_TIMEOUT_SECONDS", "15"))

# Message shown to the user when a translation batch fails.
GATEWAY_FAILURE_MESSAGE = "Translation failed. Showing original text."

# =============================================================================
# LANGUAGE CONFIGURATION
# =============================================================================

# Language the static markup is authored in.
# Switching to this language restores originals instead of calling the gateway.
SOURCE_LANGUAGE = os.getenv("SOURCE_LANGUAGE", "en")

# =============================================================================
# TEXT SCANNING CONFIGURATION
# =============================================================================

# Text nodes whose trimmed content is shorter than this are not translated.
MIN_TEXT_LENGTH = int(os.getenv("MIN_TEXT_LENGTH", "2"))

# Elements whose text content is never translated.
EXCLUDED_TAGS = frozenset(_env_list("EXCLUDED_TAGS", "script,style,noscript,template"))

# Opt-out attribute: an element carrying it is skipped with all descendants.
NO_TRANSLATE_ATTR = "data-no-translate"

# Marker holding the untranslated text of an element's first text child.
# Later text children of the same element use "<ORIGINAL_ATTR>-<slot>".
ORIGINAL_ATTR = "data-original"

# Marker holding the language an element is currently translated into.
TRANSLATED_ATTR = "data-translated"

# =============================================================================
# MUTATION WATCHER CONFIGURATION
# =============================================================================

# Quiet period in seconds before re-scanning after article content appears.
STRUCTURAL_DEBOUNCE_SECONDS = float(os.getenv("STRUCTURAL_DEBOUNCE_SECONDS", "0.3"))

# Quiet period in seconds before re-scanning after incidental text changes.
PLAIN_DEBOUNCE_SECONDS = float(os.getenv("PLAIN_DEBOUNCE_SECONDS", "0.5"))

# CSS selectors identifying article content the reader is waiting for.
STRUCTURAL_SELECTORS = _env_list(
    "STRUCTURAL_SELECTORS",
    ".article-content,#cms-article,article,main",
)

# =============================================================================
# STORAGE CONFIGURATION
# =============================================================================

# SQLite file holding the selected language and the translation cache.
PREFERENCES_DB_PATH = os.getenv("PREFERENCES_DB_PATH", "page_translator_preferences.db")

# Storage key of the selected language.
LANGUAGE_STORAGE_KEY = "selected_language"

# Storage key of the serialized translation cache.
CACHE_STORAGE_KEY = "translation_cache"

# Maximum number of cached source texts.
# None keeps the cache unbounded; a number enables least-recently-used eviction.
_max_entries = os.getenv("TRANSLATION_CACHE_MAX_ENTRIES", "")
TRANSLATION_CACHE_MAX_ENTRIES = int(_max_entries) if _max_entries else None

# =============================================================================
# ORCHESTRATION CONFIGURATION
# =============================================================================

# Drop gateway results of a pass when the language changed while it was in flight.
DISCARD_STALE_RESULTS = _env_flag("DISCARD_STALE_RESULTS")

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

# Default level of setup_logging(), as a level name.
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# =============================================================================
# PAGE FETCHING CONFIGURATION
# =============================================================================

# Timeout in seconds when the command-line tool downloads a page.
FETCH_TIMEOUT_SECONDS = int(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))

# Request headers used when downloading a page.
FETCH_HEADERS = {
    "User-Agent": os.getenv(
        "FETCH_USER_AGENT",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}
