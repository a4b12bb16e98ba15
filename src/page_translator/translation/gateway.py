"""
Translation gateway client for the page translation pipeline.

This module resolves a list of texts into a target language using the
translation cache and a remote translation gateway. Texts are translated by:
1. Looking up every text in the cache
2. Collecting the unique uncached texts, in order of first appearance
3. Sending all of them to the gateway in a single request
4. Caching each returned translation
5. Returning the translations in the order of the input

Any failure of the gateway round trip (network error, non-2xx status,
timeout, malformed or short response) returns the input unchanged and
notifies the reader, so a broken gateway never hides the page text.

Author: Leonardo Pacciani-Mori
License: MIT
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

import aiohttp

from ..config.settings import (
    TRANSLATION_GATEWAY_URL,
    TRANSLATION_GATEWAY_TOKEN,
    GATEWAY_TIMEOUT_SECONDS,
    GATEWAY_FAILURE_MESSAGE,
)
from ..config.logging_config import get_logger
from ..core.languages import Language
from ..storage.preferences import LanguagePreferenceStore
from .notifications import LogNotifier, Notifier

# Module-level logger for consistent logging.
logger = get_logger(__name__)

# Async callable sending (texts, language) to a gateway and returning its translations.
Transport = Callable[[List[str], Language], Awaitable[List[str]]]


class GatewayError(Exception):
    """A translation gateway round trip did not produce usable translations."""


def build_gateway_payload(texts: Sequence[str], language: Language) -> Dict[str, Any]:
    """
    Build the JSON body of a gateway request.

    Example:
        >>> build_gateway_payload(["Breaking News"], Language.HI)
        {'texts': ['Breaking News'], 'targetLanguage': 'hi'}
    """
    return {"texts": list(texts), "targetLanguage": language.code}


def parse_gateway_response(data: Any, expected_count: int) -> List[str]:
    """
    Validate a gateway response body and extract its translations.

    Args:
        data: The decoded JSON body.
        expected_count: Number of texts that were sent.

    Returns:
        List[str]: The translations, aligned with the texts that were sent.

    Raises:
        GatewayError: If the body has no translations list, the list is
            empty or shorter/longer than the request, or contains anything
            other than strings.
    """
    if not isinstance(data, dict):
        raise GatewayError(f"Unexpected response body: {data!r}")

    if data.get("error"):
        raise GatewayError(f"Gateway reported an error: {data['error']}")

    translations = data.get("translations")
    if not isinstance(translations, list) or not translations:
        raise GatewayError("No translations received")

    if len(translations) != expected_count:
        raise GatewayError(
            f"Expected {expected_count} translations, received {len(translations)}"
        )

    if not all(isinstance(item, str) for item in translations):
        raise GatewayError("Translations must all be strings")

    return translations


class HttpGatewayTransport:
    """
    Sends translation requests to the gateway over HTTP with aiohttp.

    Args:
        url: The gateway endpoint.
        token: Optional bearer token.
        timeout: Request timeout in seconds.
        session: Optional shared ClientSession. When omitted a session is
            opened for each request.
    """

    def __init__(
        self,
        url: str = TRANSLATION_GATEWAY_URL,
        token: str = TRANSLATION_GATEWAY_TOKEN,
        timeout: float = GATEWAY_TIMEOUT_SECONDS,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.url = url
        self.token = token
        self.timeout = timeout
        self.session = session

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token.strip()}"
        return headers

    async def __call__(self, texts: List[str], language: Language) -> List[str]:
        if self.session is not None:
            return await self._post(self.session, texts, language)

        async with aiohttp.ClientSession() as session:
            return await self._post(session, texts, language)

    async def _post(
        self,
        session: aiohttp.ClientSession,
        texts: List[str],
        language: Language
    ) -> List[str]:
        try:
            async with session.post(
                self.url,
                json=build_gateway_payload(texts, language),
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if not 200 <= response.status < 300:
                    body = await response.text()
                    raise GatewayError(f"Gateway returned {response.status}: {body[:200]}")
                data = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise GatewayError(f"Gateway request failed: {str(e)}") from e
        except ValueError as e:
            raise GatewayError(f"Gateway response is not valid JSON: {str(e)}") from e

        return parse_gateway_response(data, len(texts))


class TranslationGatewayClient:
    """
    Cache-aware batching client of the translation gateway.

    Args:
        store: The preference store holding the translation cache.
        transport: Async callable performing the gateway round trip.
            Defaults to an HttpGatewayTransport built from settings.
        notifier: Receives the reader-facing message when a batch fails.
        timeout: Client-side limit in seconds on one round trip.

    Example:
        >>> client = TranslationGatewayClient(store)
        >>> await client.translate(["Breaking News", "Sports"], Language.HI)
        ['ताज़ा खबर', 'खेल']
    """

    def __init__(
        self,
        store: LanguagePreferenceStore,
        transport: Optional[Transport] = None,
        notifier: Optional[Notifier] = None,
        timeout: float = GATEWAY_TIMEOUT_SECONDS,
        failure_message: str = GATEWAY_FAILURE_MESSAGE
    ):
        self.store = store
        self.transport = transport or HttpGatewayTransport(timeout=timeout)
        self.notifier = notifier or LogNotifier()
        self.timeout = timeout
        self.failure_message = failure_message

        # Number of round trips attempted, successful or not.
        self.request_count = 0
        self.failure_count = 0
        self.last_error: Optional[Exception] = None

    async def translate(
        self,
        texts: Sequence[str],
        language: Union[Language, str]
    ) -> List[str]:
        """
        Translate texts, fetching only what the cache does not know.

        Args:
            texts: Texts to translate, in page order. Duplicates are allowed.
            language: The target language.

        Returns:
            List[str]: One entry per input text, in input order. On gateway
                failure the input texts themselves.
        """
        language = Language.parse(language)
        texts = list(texts)

        if not texts:
            return []

        if language.is_source:
            return texts

        results: List[Optional[str]] = [None] * len(texts)
        pending: Dict[str, List[int]] = {}

        for index, text in enumerate(texts):
            cached = self.store.get_cached(text, language)
            if cached:
                results[index] = cached
            else:
                # Dict keeps insertion order, so the batch follows first appearance.
                pending.setdefault(text, []).append(index)

        if not pending:
            logger.debug(f"All {len(texts)} texts resolved from cache ({language.code})")
            return results

        to_fetch = list(pending)
        cache_hits = sum(1 for result in results if result is not None)
        logger.info(
            f"Requesting {len(to_fetch)} translations into {language.code} "
            f"({cache_hits} cache hits)"
        )

        try:
            translations = await self._fetch(to_fetch, language)
        except Exception as e:
            self.failure_count += 1
            self.last_error = e
            logger.error(f"Translation into {language.code} failed: {str(e)}")
            self.notifier.notify(self.failure_message)
            return texts

        # Only the trimmed core of a text node is ever replaced.
        translations = [translated.strip() for translated in translations]
        fetched = [
            (text, translated) for text, translated in zip(to_fetch, translations) if translated
        ]
        self.store.put_many(fetched, language)

        for text, translated in zip(to_fetch, translations):
            for index in pending[text]:
                # An empty translation leaves the original in place.
                results[index] = translated or text

        return results

    async def _fetch(self, texts: List[str], language: Language) -> List[str]:
        self.request_count += 1
        translations = await asyncio.wait_for(
            self.transport(texts, language),
            timeout=self.timeout
        )
        if not isinstance(translations, list):
            translations = list(translations)
        return parse_gateway_response({"translations": translations}, len(texts))
