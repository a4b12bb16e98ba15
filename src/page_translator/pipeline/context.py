"""
Translation context for the page translation pipeline.

The context is built once when the application starts and handed to every
orchestrator, so that all pages share one preference store, one
translation cache and one gateway client without module-level globals.

Author: Leonardo Pacciani-Mori
License: MIT
"""

from dataclasses import dataclass, field
from typing import Optional

from ..config.settings import (
    PREFERENCES_DB_PATH,
    TRANSLATION_CACHE_MAX_ENTRIES,
    GATEWAY_TIMEOUT_SECONDS,
    STRUCTURAL_DEBOUNCE_SECONDS,
    PLAIN_DEBOUNCE_SECONDS,
    DISCARD_STALE_RESULTS,
)
from ..config.logging_config import get_logger
from ..storage.backends import KeyValueStorage, SQLiteStorage
from ..storage.preferences import LanguagePreferenceStore
from ..translation.gateway import TranslationGatewayClient, Transport
from ..translation.notifications import LogNotifier, Notifier
from ..dom.scanner import TextScanner

# Module-level logger for consistent logging.
logger = get_logger(__name__)


@dataclass
class TranslationContext:
    """
    Shared state and collaborators of the translation pipeline.

    Attributes:
        store: Selected language and translation cache.
        gateway: Cache-aware gateway client.
        scanner: Text scanner and exclusion rules.
        notifier: Receives reader-facing messages.
        structural_delay: Quiet period after article content appears.
        plain_delay: Quiet period after other changes.
        discard_stale_results: Drop the results of a pass when the language
            changed while its gateway call was in flight.
    """
    store: LanguagePreferenceStore
    gateway: TranslationGatewayClient
    scanner: TextScanner = field(default_factory=TextScanner)
    notifier: Notifier = field(default_factory=LogNotifier)
    structural_delay: float = STRUCTURAL_DEBOUNCE_SECONDS
    plain_delay: float = PLAIN_DEBOUNCE_SECONDS
    discard_stale_results: bool = DISCARD_STALE_RESULTS

    @classmethod
    def create(
        cls,
        storage: Optional[KeyValueStorage] = None,
        transport: Optional[Transport] = None,
        notifier: Optional[Notifier] = None,
        max_cache_entries: Optional[int] = TRANSLATION_CACHE_MAX_ENTRIES,
        gateway_timeout: float = GATEWAY_TIMEOUT_SECONDS,
        **options
    ) -> "TranslationContext":
        """
        Build a context from its parts, filling in defaults from settings.

        Args:
            storage: Durable storage. Defaults to SQLite at PREFERENCES_DB_PATH.
            transport: Gateway transport. Defaults to HTTP.
            notifier: Reader notifications. Defaults to the log.
            max_cache_entries: Optional LRU limit of the translation cache.
            gateway_timeout: Client-side timeout of a gateway round trip.
            **options: Remaining TranslationContext fields (scanner,
                structural_delay, plain_delay, discard_stale_results).

        Returns:
            TranslationContext: The ready context.

        Example:
            >>> context = TranslationContext.create(storage=MemoryStorage())
        """
        if storage is None:
            storage = SQLiteStorage(PREFERENCES_DB_PATH)
        notifier = notifier or LogNotifier()

        store = LanguagePreferenceStore(storage, max_entries=max_cache_entries)
        gateway = TranslationGatewayClient(
            store,
            transport=transport,
            notifier=notifier,
            timeout=gateway_timeout
        )

        logger.info(
            f"Translation context ready (language={store.get_current_language().code}, "
            f"cached texts={len(store)})"
        )
        return cls(store=store, gateway=gateway, notifier=notifier, **options)
