import asyncio

import pytest

from conftest import ARTICLE_HTML, FakeTransport, HINDI, TAMIL
from page_translator.config.settings import GATEWAY_FAILURE_MESSAGE
from page_translator.core.languages import Language
from page_translator.dom import Page
from page_translator.pipeline import (
    PassOutcome,
    PassState,
    TranslationContext,
    TranslationOrchestrator,
    translate_html,
)
from page_translator.storage import MemoryStorage
from page_translator.translation import QueueNotifier


def _context(transport, **options):
    options.setdefault("structural_delay", 0.01)
    options.setdefault("plain_delay", 0.02)
    return TranslationContext.create(
        storage=MemoryStorage(),
        transport=transport,
        notifier=QueueNotifier(),
        max_cache_entries=None,
        **options
    )


def test_breaking_news_is_translated_and_cached(context, transport):
    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.mount()
        report = await orchestrator.set_language("hi")
        orchestrator.unmount()
        return page, report

    page, report = asyncio.run(scenario())

    h1 = page.soup.h1
    assert str(h1.string) == " ताज़ा खबर "
    assert h1["data-original"] == "Breaking News"
    assert h1["data-translated"] == "hi"
    assert context.store.get_cached("Breaking News", Language.HI) == HINDI["Breaking News"]

    assert report.outcome is PassOutcome.TRANSLATED
    assert report.gateway_called
    assert report.written == 2
    assert report.states == [
        PassState.SCANNING, PassState.TRANSLATING, PassState.APPLYING, PassState.IDLE,
    ]
    assert transport.calls == [(["Breaking News", "Markets rally after rate cut"], "hi")]


def test_excluded_content_is_never_translated(context):
    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.set_language("hi")
        return page

    page = asyncio.run(scenario())

    assert page.soup.script.string == "var headline = 'Breaking News';"
    assert page.soup.noscript.string == "Enable JavaScript"
    assert page.soup.span.string == "Sports"
    assert page.soup.find("p", string="|") is not None


def test_switching_back_to_source_restores_page_exactly(context):
    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.mount()
        mounted_html = page.to_html()
        await orchestrator.set_language("hi")
        translated_html = page.to_html()
        report = await orchestrator.set_language("en")
        return mounted_html, translated_html, page.to_html(), report

    mounted_html, translated_html, restored_html, report = asyncio.run(scenario())

    assert translated_html != mounted_html
    assert restored_html == mounted_html
    assert "data-translated" not in restored_html
    assert report.outcome is PassOutcome.RESTORED
    assert report.restored == 2
    assert not report.gateway_called


def test_reselecting_language_uses_cache(context, transport):
    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.mount()
        await orchestrator.set_language("hi")
        await orchestrator.set_language("en")
        report = await orchestrator.set_language("hi")
        return page, report

    page, report = asyncio.run(scenario())

    assert str(page.soup.h1.string) == " ताज़ा खबर "
    assert report.outcome is PassOutcome.TRANSLATED
    assert not report.gateway_called
    assert len(transport.calls) == 1


def test_switching_between_target_languages_uses_originals(context, transport):
    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.set_language("hi")
        await orchestrator.set_language("ta")
        return page

    page = asyncio.run(scenario())

    assert str(page.soup.h1.string) == f" {TAMIL['Breaking News']} "
    assert page.soup.h1["data-translated"] == "ta"
    assert transport.calls[1] == (["Breaking News", "Markets rally after rate cut"], "ta")


def test_second_pass_is_idempotent(context, transport):
    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.set_language("hi")
        html = page.to_html()
        report = await orchestrator.run_pass()
        return html, page.to_html(), report

    html_before, html_after, report = asyncio.run(scenario())

    assert html_after == html_before
    assert report.written == 0
    assert not report.gateway_called
    assert len(transport.calls) == 1


def test_selecting_current_language_does_nothing(context, transport):
    async def scenario():
        orchestrator = TranslationOrchestrator(context, Page(ARTICLE_HTML))
        await orchestrator.set_language("hi")
        return await orchestrator.set_language(Language.HI)

    assert asyncio.run(scenario()) is None
    assert len(transport.calls) == 1


def test_gateway_failure_leaves_page_unchanged(failing_transport):
    context = _context(failing_transport)

    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.mount()
        html = page.to_html()
        report = await orchestrator.set_language("hi")
        return html, page.to_html(), report

    html_before, html_after, report = asyncio.run(scenario())

    assert html_after == html_before
    assert report.outcome is PassOutcome.FAILED
    assert report.written == 0
    assert context.notifier.drain() == [GATEWAY_FAILURE_MESSAGE]
    assert context.store.get_current_language() is Language.HI
    assert len(context.store) == 0


def test_marker_inconsistency_is_left_untouched(context):
    html = '<body><h2 data-translated="hi">ताज़ा खबर</h2><p>Sports news</p></body>'

    async def scenario():
        page = Page(html)
        await TranslationOrchestrator(context, page).set_language("ta")
        return page

    page = asyncio.run(scenario())

    assert page.soup.h2.string == "ताज़ा खबर"
    assert page.soup.h2["data-translated"] == "hi"
    assert page.soup.p["data-translated"] == "ta"


def test_trigger_during_pass_is_skipped():
    transport = FakeTransport(delay=0.05)
    context = _context(transport)
    context.store.set_current_language("hi")

    async def scenario():
        orchestrator = TranslationOrchestrator(context, Page(ARTICLE_HTML))
        return await asyncio.gather(orchestrator.run_pass("first"), orchestrator.run_pass("second"))

    first, second = asyncio.run(scenario())

    assert first.outcome is PassOutcome.TRANSLATED
    assert second.outcome is PassOutcome.SKIPPED
    assert second.states == []
    assert len(transport.calls) == 1


@pytest.mark.parametrize("discard, outcome", [
    (False, PassOutcome.TRANSLATED),
    (True, PassOutcome.DISCARDED),
])
def test_language_change_during_pass_marks_results_stale(discard, outcome):
    transport = FakeTransport(delay=0.05)
    context = _context(transport, discard_stale_results=discard)

    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        first = asyncio.ensure_future(orchestrator.set_language("hi"))
        await asyncio.sleep(0.01)
        second = await orchestrator.set_language("ta")
        return page, await first, second

    page, first, second = asyncio.run(scenario())

    assert first.stale
    assert first.outcome is outcome
    assert second.outcome is PassOutcome.SKIPPED
    assert context.store.get_current_language() is Language.TA
    if discard:
        assert str(page.soup.h1.string) == " Breaking News "
    else:
        assert str(page.soup.h1.string) == " ताज़ा खबर "


def test_content_arriving_after_mount_is_translated(context, transport):
    context.store.set_current_language("hi")

    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.mount()
        page.append_html(
            page.soup.main,
            '<div class="article-content"><p>Live updates</p><p>Read more</p></div>',
        )
        await asyncio.sleep(0.1)
        orchestrator.unmount()
        return page, orchestrator

    page, orchestrator = asyncio.run(scenario())

    article = page.soup.find(class_="article-content")
    assert [p.string for p in article.find_all("p")] == [HINDI["Live updates"], HINDI["Read more"]]
    assert orchestrator.last_report.reason == "mutation"
    assert transport.calls[-1] == (["Live updates", "Read more"], "hi")


def test_own_writes_do_not_trigger_passes(context, transport):
    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.mount()
        await orchestrator.set_language("hi")
        await asyncio.sleep(0.1)
        orchestrator.unmount()
        return orchestrator

    orchestrator = asyncio.run(scenario())

    assert orchestrator.last_report.reason == "language"
    assert len(transport.calls) == 1


def test_unmount_disconnects_watcher(context):
    async def scenario():
        page = Page(ARTICLE_HTML)
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.mount()
        assert page.subscriber_count == 1
        orchestrator.close()
        return page, orchestrator

    page, orchestrator = asyncio.run(scenario())
    assert page.subscriber_count == 0
    assert orchestrator.watcher is None


def test_empty_page_has_nothing_to_do(context, transport):
    async def scenario():
        orchestrator = TranslationOrchestrator(context, Page("<body><p> </p></body>"))
        return await orchestrator.set_language("hi")

    report = asyncio.run(scenario())
    assert report.outcome is PassOutcome.NOTHING_TO_DO
    assert transport.calls == []


def test_translate_html_round_trip(context):
    translated, report = asyncio.run(translate_html(ARTICLE_HTML, "hi", context))

    assert report.outcome is PassOutcome.TRANSLATED
    assert HINDI["Breaking News"] in translated
    assert 'data-original="Breaking News"' in translated

    restored, report = asyncio.run(translate_html(translated, "en", context))

    assert report.outcome is PassOutcome.RESTORED
    assert "<h1 data-original=\"Breaking News\"> Breaking News </h1>" in restored
    assert HINDI["Breaking News"] not in restored


def test_one_character_translation_can_be_restored_and_switched():
    transport = FakeTransport({"ur": {"and": "و"}, "hi": {"and": "और"}})
    context = _context(transport)

    async def scenario():
        page = Page("<body><p>and</p></body>")
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.set_language("ur")
        translated = page.soup.p.string
        restored_report = await orchestrator.set_language("en")
        restored = page.soup.p.string
        await orchestrator.set_language("ur")
        switched_report = await orchestrator.set_language("hi")
        return translated, restored, restored_report, page.soup.p.string, switched_report

    translated, restored, restored_report, switched, switched_report = asyncio.run(scenario())

    assert translated == "و"
    assert restored == "and"
    assert restored_report.outcome is PassOutcome.RESTORED
    assert restored_report.scanned == 1
    assert switched == "और"
    assert switched_report.written == 1


def test_padded_translation_is_written_once():
    transport = FakeTransport({"hi": {"Sports": " खेल \n"}})
    context = _context(transport)

    async def scenario():
        page = Page("<body><h2> Sports </h2></body>")
        orchestrator = TranslationOrchestrator(context, page)
        first = await orchestrator.set_language("hi")
        second = await orchestrator.run_pass()
        third = await orchestrator.run_pass()
        return page, first, second, third

    page, first, second, third = asyncio.run(scenario())

    assert str(page.soup.h2.string) == " खेल "
    assert first.written == 1
    assert second.written == 0
    assert third.written == 0
    assert context.store.get_cached("Sports", Language.HI) == "खेल"


def test_padded_cache_entry_is_applied_trimmed():
    context = _context(FakeTransport())
    context.store.put_cached("Sports", Language.HI, "  खेल  ")

    async def scenario():
        page = Page("<body><h2>Sports</h2></body>")
        orchestrator = TranslationOrchestrator(context, page)
        await orchestrator.set_language("hi")
        second = await orchestrator.run_pass()
        return page, second

    page, second = asyncio.run(scenario())

    assert page.soup.h2.string == "खेल"
    assert second.written == 0
