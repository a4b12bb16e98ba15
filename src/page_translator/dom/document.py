"""
Page model for the page translation pipeline.

A Page wraps a BeautifulSoup document and is the write path for content
changes made after the page was loaded (an article body arriving, a
headline being updated). Every such change is reported to subscribers as a
MutationRecord, the way a browser reports DOM mutations to an observer.

Writes made by the translation pipeline itself go through ``write_text``,
which changes the text without reporting it, so translating a page never
schedules another translation of the same page.

Author: Leonardo Pacciani-Mori
License: MIT
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement

from ..config.logging_config import get_logger

# Module-level logger for consistent logging.
logger = get_logger(__name__)

# Mutation record types.
CHILD_LIST = "childList"
CHARACTER_DATA = "characterData"


@dataclass
class MutationRecord:
    """
    One change to the page.

    Attributes:
        type: CHILD_LIST for inserted or removed nodes, CHARACTER_DATA for
            a changed text node.
        target: The element whose children changed, or the element owning
            the changed text node.
        added_nodes: Nodes inserted by a CHILD_LIST change.
        removed_nodes: Nodes removed by a CHILD_LIST change.
    """
    type: str
    target: Tag
    added_nodes: List[PageElement] = field(default_factory=list)
    removed_nodes: List[PageElement] = field(default_factory=list)


MutationCallback = Callable[[List[MutationRecord]], None]


class Subscription:
    """A registered interest in the mutations under one element."""

    def __init__(self, page: "Page", root: Tag, callback: MutationCallback):
        self.page = page
        self.root = root
        self.callback = callback
        self.active = True

    def covers(self, target: Tag) -> bool:
        if target is self.root:
            return True
        return any(parent is self.root for parent in target.parents)

    def disconnect(self) -> None:
        """Stop receiving mutations. Safe to call more than once."""
        if self.active:
            self.active = False
            self.page._unsubscribe(self)


class Page:
    """
    A parsed HTML document that reports changes to its subscribers.

    Args:
        markup: HTML source or an already parsed BeautifulSoup document.
        parser: BeautifulSoup parser used for HTML source.

    Example:
        >>> page = Page("<main><h1>Breaking News</h1></main>")
        >>> page.on_subtree_changed(page.root, print)
        >>> page.append_html(page.soup.main, "<p>Live updates</p>")
    """

    def __init__(self, markup: Union[str, BeautifulSoup], parser: str = "html.parser"):
        if isinstance(markup, BeautifulSoup):
            self.soup = markup
        else:
            self.soup = BeautifulSoup(markup, parser)
        self.parser = parser
        self._subscriptions: List[Subscription] = []
        self._pending: Optional[List[MutationRecord]] = None

    @property
    def root(self) -> Tag:
        """The body element if there is one, else the whole document."""
        return self.soup.body or self.soup

    def to_html(self) -> str:
        return str(self.soup)

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def on_subtree_changed(self, root: Tag, callback: MutationCallback) -> Subscription:
        """
        Call ``callback`` with the mutation records of every change under ``root``.

        Returns:
            Subscription: Handle whose ``disconnect()`` stops the callbacks.
        """
        subscription = Subscription(self, root, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @contextmanager
    def batch(self):
        """
        Deliver the mutations of several changes together.

        Example:
            >>> with page.batch():
            ...     page.append_html(main, "<h2>Update</h2>")
            ...     page.set_text(headline_text, "New headline")
        """
        if self._pending is not None:
            yield
            return

        self._pending = []
        try:
            yield
        finally:
            records, self._pending = self._pending, None
            self._deliver(records)

    def _emit(self, record: MutationRecord) -> None:
        if self._pending is not None:
            self._pending.append(record)
        else:
            self._deliver([record])

    def _deliver(self, records: List[MutationRecord]) -> None:
        if not records:
            return
        logger.debug(f"Delivering {len(records)} mutation record(s)")
        for subscription in list(self._subscriptions):
            relevant = [record for record in records if subscription.covers(record.target)]
            if relevant and subscription.active:
                subscription.callback(relevant)

    # -------------------------------------------------------------------------
    # Reported changes
    # -------------------------------------------------------------------------

    def parse_fragment(self, html: str) -> List[PageElement]:
        """Parse an HTML fragment into detached nodes."""
        fragment = BeautifulSoup(html, self.parser)
        if fragment.body is not None:
            return list(fragment.body.contents)
        return list(fragment.contents)

    def append_html(self, parent: Tag, html: str) -> List[PageElement]:
        """
        Parse ``html`` and append the resulting nodes to ``parent``.

        Returns:
            List[PageElement]: The inserted nodes.
        """
        nodes = self.parse_fragment(html)
        for node in nodes:
            parent.append(node.extract())
        self._emit(MutationRecord(CHILD_LIST, parent, added_nodes=nodes))
        return nodes

    def append_text(self, parent: Tag, text: str) -> NavigableString:
        """Append a text node to ``parent``."""
        node = NavigableString(text)
        parent.append(node)
        self._emit(MutationRecord(CHILD_LIST, parent, added_nodes=[node]))
        return node

    def remove(self, node: PageElement) -> None:
        """Remove a node from the page."""
        parent = node.parent
        node.extract()
        if parent is not None:
            self._emit(MutationRecord(CHILD_LIST, parent, removed_nodes=[node]))

    def set_text(self, node: NavigableString, text: str) -> NavigableString:
        """
        Change the content of a text node.

        Returns:
            NavigableString: The node now holding ``text``.
        """
        parent = node.parent
        replacement = self.write_text(node, text)
        if parent is not None:
            self._emit(MutationRecord(CHARACTER_DATA, parent))
        return replacement

    # -------------------------------------------------------------------------
    # Unreported changes
    # -------------------------------------------------------------------------

    def write_text(self, node: NavigableString, text: str) -> NavigableString:
        """
        Replace the content of a text node without notifying subscribers.

        Returns:
            NavigableString: The node now holding ``text``.
        """
        if str(node) == text:
            return node
        replacement = NavigableString(text)
        node.replace_with(replacement)
        return replacement
