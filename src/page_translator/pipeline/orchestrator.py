"""
Translation orchestrator for the page translation pipeline.

This module is the single coordination point of the pipeline. A pass is
triggered when a page is mounted, when the reader selects a language, and
when the mutation watcher reports that new content has settled. Each pass
moves through the following states:

    IDLE -> SCANNING -> RESTORING -> IDLE          (source language)
    IDLE -> SCANNING -> TRANSLATING -> APPLYING -> IDLE

Only one pass runs at a time. A trigger arriving while a pass is in flight
is ignored rather than queued; the next trigger (usually the watcher's
debounce timer) picks up anything it missed.

A gateway failure ends the pass without touching the page, and a second
pass over an unchanged page writes nothing and calls nothing, since every
text is a cache hit that already matches what is shown.

Author: Leonardo Pacciani-Mori
License: MIT
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from bs4 import Tag

from ..config.settings import TRANSLATED_ATTR
from ..config.logging_config import get_logger
from ..core.languages import Language
from ..core.string_utils import split_whitespace, with_surrounding_whitespace
from ..dom.document import Page
from ..dom.scanner import ScannedText
from ..dom.watcher import MutationWatcher
from .context import TranslationContext

# Module-level logger for consistent logging.
logger = get_logger(__name__)


class PassState(Enum):
    """State of the orchestrator."""
    IDLE = "idle"
    SCANNING = "scanning"
    RESTORING = "restoring"
    TRANSLATING = "translating"
    APPLYING = "applying"


class PassOutcome(Enum):
    """How an orchestration pass ended."""
    SKIPPED = "skipped"
    NOTHING_TO_DO = "nothing_to_do"
    RESTORED = "restored"
    TRANSLATED = "translated"
    FAILED = "failed"
    DISCARDED = "discarded"


@dataclass
class PassReport:
    """
    Summary of one orchestration pass.

    Attributes:
        reason: What triggered the pass ("mount", "language", "mutation", ...).
        language: Language the pass worked towards, None if it was skipped.
        outcome: How the pass ended.
        scanned: Number of text nodes found by the scanner.
        written: Number of text nodes whose text was rewritten.
        restored: Number of text nodes set back to their original text.
        skipped: Number of scanned nodes left untouched (detached from the
            page, or without a usable translation).
        gateway_called: Whether the pass sent a request to the gateway.
        stale: Whether the language changed while the gateway call was in flight.
        states: The states the pass went through, in order.
    """
    reason: str
    language: Optional[Language] = None
    outcome: PassOutcome = PassOutcome.SKIPPED
    scanned: int = 0
    written: int = 0
    restored: int = 0
    skipped: int = 0
    gateway_called: bool = False
    stale: bool = False
    states: List[PassState] = field(default_factory=list)


class TranslationOrchestrator:
    """
    Keeps one page in the reader's selected language.

    Args:
        context: The shared translation context.
        page: The page to translate.
        root: The element to translate. Defaults to the page body.

    Example:
        >>> orchestrator = TranslationOrchestrator(context, Page(html))
        >>> await orchestrator.mount()
        >>> await orchestrator.set_language("hi")
        >>> orchestrator.unmount()
    """

    def __init__(self, context: TranslationContext, page: Page, root: Optional[Tag] = None):
        self.context = context
        self.page = page
        self.root = root if root is not None else page.root

        self.state = PassState.IDLE
        self.generation = 0
        self.watcher: Optional[MutationWatcher] = None
        self.last_report: Optional[PassReport] = None

    @property
    def in_flight(self) -> bool:
        return self.state is not PassState.IDLE

    # -------------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------------

    async def mount(self) -> PassReport:
        """Start watching the page for new content and run the initial pass."""
        if self.watcher is None:
            self.watcher = MutationWatcher(
                self.page,
                self.root,
                on_settled=self._on_content_settled,
                scanner=self.context.scanner,
                structural_delay=self.context.structural_delay,
                plain_delay=self.context.plain_delay,
            )
            self.watcher.start()
        return await self.run_pass("mount")

    def unmount(self) -> None:
        """Stop watching the page. Pending debounced passes are cancelled."""
        if self.watcher is not None:
            self.watcher.disconnect()
            self.watcher = None

    close = unmount

    async def set_language(self, language: Union[Language, str]) -> Optional[PassReport]:
        """
        Select a language and bring the page to it.

        Args:
            language: The language to show.

        Returns:
            The report of the triggered pass, or None if ``language`` was
            already selected.

        Raises:
            ValueError: If ``language`` is not a supported language code.
        """
        if not self.context.store.set_current_language(language):
            return None
        self.generation += 1
        return await self.run_pass("language")

    def _on_content_settled(self):
        return self.run_pass("mutation")

    # -------------------------------------------------------------------------
    # Orchestration pass
    # -------------------------------------------------------------------------

    def _enter(self, report: PassReport, state: PassState) -> None:
        self.state = state
        report.states.append(state)

    async def run_pass(self, reason: str = "manual") -> PassReport:
        """
        Run one scan -> resolve -> apply cycle.

        Never raises: any failure leaves the page as it was.

        Args:
            reason: Label of the trigger, used in logs and the report.

        Returns:
            PassReport: What the pass did.
        """
        if self.in_flight:
            logger.debug(f"Ignoring {reason} trigger: a pass is already {self.state.value}")
            return PassReport(reason=reason)

        language = self.context.store.get_current_language()
        generation = self.generation
        report = PassReport(reason=reason, language=language)

        try:
            self._enter(report, PassState.SCANNING)
            scanned = self.context.scanner.scan(self.root)
            report.scanned = len(scanned)

            if not scanned:
                report.outcome = PassOutcome.NOTHING_TO_DO
                return report

            if language.is_source:
                self._enter(report, PassState.RESTORING)
                self._restore(scanned, report)
                report.outcome = PassOutcome.RESTORED
                return report

            self._enter(report, PassState.TRANSLATING)
            originals = list(dict.fromkeys(item.original for item in scanned))

            gateway = self.context.gateway
            requests_before = gateway.request_count
            failures_before = gateway.failure_count
            translations = await gateway.translate(originals, language)
            report.gateway_called = gateway.request_count > requests_before

            if report.gateway_called and gateway.failure_count > failures_before:
                report.outcome = PassOutcome.FAILED
                return report

            report.stale = generation != self.generation
            if report.stale and self.context.discard_stale_results:
                logger.info(
                    f"Discarding {language.code} results: language changed during the pass"
                )
                report.outcome = PassOutcome.DISCARDED
                return report

            self._enter(report, PassState.APPLYING)
            resolved = dict(zip(originals, translations))
            self._apply(scanned, resolved, language, report)
            report.outcome = PassOutcome.TRANSLATED
            return report

        except Exception as e:
            logger.error(f"Translation pass ({reason}) failed: {str(e)}", exc_info=True)
            report.outcome = PassOutcome.FAILED
            return report

        finally:
            self._enter(report, PassState.IDLE)
            self.last_report = report
            logger.info(
                f"Pass {reason} -> {report.outcome.value}: language={language.code}, "
                f"scanned={report.scanned}, written={report.written}, "
                f"gateway={'yes' if report.gateway_called else 'no'}"
            )

    def _is_attached(self, item: ScannedText) -> bool:
        # The page may have changed while the gateway call was in flight.
        return item.node.parent is item.element

    def _restore(self, scanned: List[ScannedText], report: PassReport) -> None:
        for item in scanned:
            if not self._is_attached(item):
                report.skipped += 1
                continue

            current = str(item.node)
            if split_whitespace(current)[1] != item.original:
                self.page.write_text(
                    item.node, with_surrounding_whitespace(current, item.original)
                )
                report.written += 1
                report.restored += 1

            if item.element.has_attr(TRANSLATED_ATTR):
                del item.element[TRANSLATED_ATTR]

    def _apply(
        self,
        scanned: List[ScannedText],
        resolved: Dict[str, str],
        language: Language,
        report: PassReport
    ) -> None:
        for item in scanned:
            translation = (resolved.get(item.original) or "").strip()
            if not translation or not self._is_attached(item):
                report.skipped += 1
                continue

            current = str(item.node)
            if split_whitespace(current)[1] != translation:
                self.page.write_text(item.node, with_surrounding_whitespace(current, translation))
                report.written += 1

            if item.element.get(TRANSLATED_ATTR) != language.code:
                item.element[TRANSLATED_ATTR] = language.code


async def translate_html(
    html: str,
    language: Union[Language, str],
    context: TranslationContext
) -> Tuple[str, PassReport]:
    """
    Translate a whole HTML document in one pass.

    Selecting the source language restores a document that was translated
    earlier, using the original-text markers it carries.

    Args:
        html: The HTML document.
        language: The language to show.
        context: The shared translation context.

    Returns:
        Tuple[str, PassReport]: The resulting HTML and the report of the pass.

    Example:
        >>> html, report = await translate_html(source, "hi", context)
    """
    page = Page(html)
    orchestrator = TranslationOrchestrator(context, page)
    context.store.set_current_language(language)
    report = await orchestrator.run_pass("document")
    return page.to_html(), report
