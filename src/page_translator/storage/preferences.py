"""
Language preference store for the page translation pipeline.

This module holds the durable state of the pipeline: the language the
reader selected and the translation cache (original text -> language ->
translation). Both are read once when the store is created and written
back to storage on every change.

Every change to the cache persists the whole cache blob, not just the new
entry. This keeps the storage format a single value but costs time linear
in the size of the cache.

Author: Leonardo Pacciani-Mori
License: MIT
"""

import json
from collections import OrderedDict
from typing import Dict, Iterable, Optional, Tuple, Union

from ..config.settings import (
    LANGUAGE_STORAGE_KEY,
    CACHE_STORAGE_KEY,
    TRANSLATION_CACHE_MAX_ENTRIES,
)
from ..config.logging_config import get_logger
from ..core.languages import Language, source_language
from .backends import KeyValueStorage

# Module-level logger for consistent logging.
logger = get_logger(__name__)


class LanguagePreferenceStore:
    """
    Durable selected language and translation cache.

    Cached translations are never invalidated. By default the cache is
    unbounded; passing ``max_entries`` keeps only that many source texts,
    evicting the least recently used one first.

    Args:
        storage: The key-value storage holding the persisted state.
        max_entries: Optional limit on the number of cached source texts.

    Example:
        >>> store = LanguagePreferenceStore(MemoryStorage())
        >>> store.put_cached("Breaking News", Language.HI, "ताज़ा खबर")
        >>> store.get_cached("Breaking News", "hi")
        'ताज़ा खबर'
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        max_entries: Optional[int] = TRANSLATION_CACHE_MAX_ENTRIES
    ):
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be a positive number or None")

        self.storage = storage
        self.max_entries = max_entries
        self._language = self._load_language()
        self._cache = self._load_cache()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _load_language(self) -> Language:
        stored = self.storage.get(LANGUAGE_STORAGE_KEY)
        if not stored:
            return source_language()

        try:
            return Language.parse(stored)
        except ValueError:
            logger.warning(
                f"Ignoring unsupported stored language {stored!r}; "
                f"using {source_language().code}"
            )
            return source_language()

    def _load_cache(self) -> "OrderedDict[str, Dict[str, str]]":
        cache = OrderedDict()
        blob = self.storage.get(CACHE_STORAGE_KEY)
        if not blob:
            return cache

        try:
            data = json.loads(blob)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Translation cache could not be parsed, starting empty: {str(e)}")
            return cache

        if not isinstance(data, dict):
            logger.warning("Translation cache has an unexpected shape, starting empty")
            return cache

        # Keeps only well-formed entries of a partially damaged blob.
        for text, translations in data.items():
            if not isinstance(translations, dict):
                continue
            entry = {
                code: translated
                for code, translated in translations.items()
                if isinstance(code, str) and isinstance(translated, str)
            }
            if entry:
                cache[text] = entry

        logger.debug(f"Loaded {len(cache)} cached texts from storage")
        return cache

    # -------------------------------------------------------------------------
    # Selected language
    # -------------------------------------------------------------------------

    def get_current_language(self) -> Language:
        """Return the selected language, or the source language if none was chosen."""
        return self._language

    def set_current_language(self, language: Union[Language, str]) -> bool:
        """
        Select and persist a language.

        Args:
            language: The language to select.

        Returns:
            bool: True if the selection changed, False if ``language`` was
                already the current language (nothing is written).

        Raises:
            ValueError: If ``language`` is not a supported language code.
        """
        language = Language.parse(language)
        if language is self._language:
            return False

        self._language = language
        self.storage.set(LANGUAGE_STORAGE_KEY, language.code)
        logger.info(f"Selected language changed to {language.code}")
        return True

    # -------------------------------------------------------------------------
    # Translation cache
    # -------------------------------------------------------------------------

    def get_cached(self, text: str, language: Union[Language, str]) -> Optional[str]:
        """
        Look up a cached translation.

        Args:
            text: The original text exactly as it was sent to the gateway.
            language: The target language.

        Returns:
            The cached translation, or None if the pair was never cached.
        """
        language = Language.parse(language)
        entry = self._cache.get(text)
        if entry is None:
            return None

        translation = entry.get(language.code)
        if translation is not None and self.max_entries is not None:
            self._cache.move_to_end(text)
        return translation

    def put_cached(self, text: str, language: Union[Language, str], translation: str) -> None:
        """Cache one translation and persist the whole cache."""
        self.put_many([(text, translation)], language)

    def put_many(
        self,
        pairs: Iterable[Tuple[str, str]],
        language: Union[Language, str]
    ) -> None:
        """
        Cache several translations into one language, persisting once.

        Args:
            pairs: (original text, translation) pairs.
            language: The language of the translations.
        """
        language = Language.parse(language)
        changed = False

        for text, translation in pairs:
            entry = self._cache.setdefault(text, {})
            if entry.get(language.code) != translation:
                entry[language.code] = translation
                changed = True
            if self.max_entries is not None:
                self._cache.move_to_end(text)

        if self.max_entries is not None:
            while len(self._cache) > self.max_entries:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"Evicted least recently used cache entry {evicted[:40]!r}")
                changed = True

        if changed:
            self._persist_cache()

    def _persist_cache(self) -> None:
        self.storage.set(CACHE_STORAGE_KEY, json.dumps(self._cache, ensure_ascii=False))

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, text: str) -> bool:
        return text in self._cache

    def cache_stats(self) -> dict:
        """
        Get statistics about the translation cache.

        Returns:
            A dictionary containing:
            - total_texts: Number of cached source texts
            - total_translations: Number of cached (text, language) pairs
            - by_language: Dict mapping language code to count
        """
        by_language: Dict[str, int] = {}
        for translations in self._cache.values():
            for code in translations:
                by_language[code] = by_language.get(code, 0) + 1

        return {
            'total_texts': len(self._cache),
            'total_translations': sum(by_language.values()),
            'by_language': by_language,
        }
