"""
Mutation watcher for the page translation pipeline.

This module reacts to content that appears after the first translation
pass, such as an article body loaded after the page shell. It subscribes to
the mutations of a Page and, once the page has been quiet for a short
while, asks for a new translation pass.

Mutation batches are handled as follows:
    1. Records whose target lies in an excluded region are dropped
    2. The remaining records are checked for new content
    3. A batch that inserts article content is "structural" and uses the
       shorter quiet period; anything else uses the longer one
    4. Every new batch restarts the quiet period, so a burst of changes
       produces a single pass

Author: Leonardo Pacciani-Mori
License: MIT
"""

import asyncio
import inspect
from typing import Any, Callable, List, Optional, Sequence, Tuple

from bs4 import Tag

from ..config.settings import (
    STRUCTURAL_DEBOUNCE_SECONDS,
    PLAIN_DEBOUNCE_SECONDS,
    STRUCTURAL_SELECTORS,
)
from ..config.logging_config import get_logger
from .document import CHILD_LIST, CHARACTER_DATA, MutationRecord, Page, Subscription
from .scanner import TextScanner, is_text_node

# Module-level logger for consistent logging.
logger = get_logger(__name__)


class MutationWatcher:
    """
    Debounced trigger for translation passes after page changes.

    Args:
        page: The page to watch.
        root: The element whose subtree is watched.
        on_settled: Called once the page has been quiet for the debounce
            period. May be a coroutine function; it is then scheduled as a
            task on the running loop.
        scanner: Provides the exclusion rules.
        structural_delay: Quiet period after article content is inserted.
        plain_delay: Quiet period after any other change.
        structural_selectors: CSS selectors identifying article content.
        loop: Event loop for the timers. Defaults to the loop running when
            ``start()`` is called.
    """

    def __init__(
        self,
        page: Page,
        root: Tag,
        on_settled: Callable[[], Any],
        scanner: Optional[TextScanner] = None,
        structural_delay: float = STRUCTURAL_DEBOUNCE_SECONDS,
        plain_delay: float = PLAIN_DEBOUNCE_SECONDS,
        structural_selectors: Sequence[str] = STRUCTURAL_SELECTORS,
        loop: Optional[asyncio.AbstractEventLoop] = None
    ):
        self.page = page
        self.root = root
        self.on_settled = on_settled
        self.scanner = scanner or TextScanner()
        self.structural_delay = structural_delay
        self.plain_delay = plain_delay
        self.structural_selectors = list(structural_selectors)
        self.loop = loop

        self._subscription: Optional[Subscription] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: set = set()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        return self._subscription is not None

    @property
    def pending(self) -> bool:
        """True while a debounced trigger is waiting to fire."""
        return self._timer is not None

    def start(self) -> None:
        """
        Subscribe to the page. Calling it again has no effect.

        The running event loop, if any, is kept for the debounce timers, so
        changes reported later from synchronous code can still be scheduled.
        """
        if self.loop is None:
            self.loop = self._event_loop()
        if self._subscription is None:
            self._subscription = self.page.on_subtree_changed(self.root, self.handle_mutations)
            logger.debug(f"Watching <{self.root.name}> for new content")

    def disconnect(self) -> None:
        """Unsubscribe and cancel any waiting trigger."""
        if self._subscription is not None:
            self._subscription.disconnect()
            self._subscription = None
        self._cancel_timer()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        logger.debug("Mutation watcher disconnected")

    # -------------------------------------------------------------------------
    # Mutation handling
    # -------------------------------------------------------------------------

    def _is_structural_node(self, node: Tag) -> bool:
        for selector in self.structural_selectors:
            if node.css.match(selector) or node.select_one(selector) is not None:
                return True
        return False

    def classify(self, records: List[MutationRecord]) -> Tuple[bool, bool]:
        """
        Decide whether a mutation batch brings new content.

        Args:
            records: The mutation records of one batch.

        Returns:
            Tuple[bool, bool]: (has_new_content, is_structural). Removals
                alone bring no new content.
        """
        has_new_content = False
        is_structural = False

        for record in records:
            if record.type == CHILD_LIST:
                for node in record.added_nodes:
                    if isinstance(node, Tag):
                        has_new_content = True
                        if not is_structural and self._is_structural_node(node):
                            is_structural = True
                    elif is_text_node(node):
                        has_new_content = True
            elif record.type == CHARACTER_DATA:
                has_new_content = True

        return has_new_content, is_structural

    def handle_mutations(self, records: List[MutationRecord]) -> None:
        """
        Subscription callback: filter, classify and debounce a mutation batch.

        Tests can call this directly with hand-built records.
        """
        relevant = [record for record in records if not self.scanner.is_excluded(record.target)]
        if not relevant:
            return

        has_new_content, is_structural = self.classify(relevant)
        if not has_new_content:
            return

        delay = self.structural_delay if is_structural else self.plain_delay
        logger.debug(
            f"{len(relevant)} mutation(s) with new "
            f"{'article' if is_structural else 'text'} content; "
            f"translating after {delay:.2f}s of quiet"
        )
        self._schedule(delay)

    # -------------------------------------------------------------------------
    # Debounce timer
    # -------------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _event_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        if self.loop is not None and not self.loop.is_closed():
            return self.loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def _schedule(self, delay: float) -> None:
        loop = self._event_loop()
        if loop is None:
            logger.warning("No event loop available; dropping translation trigger")
            return
        self._cancel_timer()
        self._timer = loop.call_later(delay, self._fire)

    def _fire(self) -> None:
        self._timer = None
        result = self.on_settled()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result, loop=self._event_loop())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
