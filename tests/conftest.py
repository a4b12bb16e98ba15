import asyncio
from typing import Dict, List, Optional

import pytest

from page_translator.core.languages import Language
from page_translator.pipeline import TranslationContext
from page_translator.storage import MemoryStorage
from page_translator.translation import GatewayError, QueueNotifier


HINDI = {
    "Breaking News": "ताज़ा खबर",
    "Markets rally after rate cut": "दर कटौती के बाद बाज़ार में तेज़ी",
    "Sports": "खेल",
    "Weather": "मौसम",
    "Live updates": "लाइव अपडेट",
    "Read more": "और पढ़ें",
}

TAMIL = {
    "Breaking News": "முக்கிய செய்திகள்",
    "Markets rally after rate cut": "வட்டி குறைப்புக்குப் பின் சந்தை உயர்வு",
    "Sports": "விளையாட்டு",
}

ARTICLE_HTML = (
    "<html><head><title>Daily</title></head><body>"
    "<header><h1> Breaking News </h1></header>"
    "<main>\n  <p>Markets rally after rate cut</p>\n"
    "  <script>var headline = 'Breaking News';</script>\n"
    "  <style>.x { color: red; }</style>\n"
    "  <noscript>Enable JavaScript</noscript>\n"
    "  <div data-no-translate><span>Sports</span></div>\n"
    "  <p>|</p>\n"
    "</main>"
    "</body></html>"
)


class FakeTransport:
    """Records gateway calls and answers from a fixed dictionary."""

    def __init__(self, translations: Optional[Dict[str, Dict[str, str]]] = None,
                 error: Optional[Exception] = None, delay: float = 0):
        self.translations = translations if translations is not None else {"hi": HINDI, "ta": TAMIL}
        self.error = error
        self.delay = delay
        self.calls: List[tuple] = []

    async def __call__(self, texts, language):
        self.calls.append((list(texts), language.code))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        table = self.translations.get(language.code, {})
        return [table.get(text, f"[{language.code}] {text}") for text in texts]


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def failing_transport():
    return FakeTransport(error=GatewayError("Gateway returned 502: Bad Gateway"))


@pytest.fixture
def notifier():
    return QueueNotifier()


@pytest.fixture
def context(storage, transport, notifier):
    return TranslationContext.create(
        storage=storage,
        transport=transport,
        notifier=notifier,
        max_cache_entries=None,
        structural_delay=0.01,
        plain_delay=0.02,
        discard_stale_results=False,
    )


@pytest.fixture
def hindi():
    return Language.HI
