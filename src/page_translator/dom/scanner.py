"""
Text scanner for the page translation pipeline.

This module finds the translatable text of a page: the text nodes under a
root element, in document order, that are long enough to translate and do
not sit inside a script, style or opted-out region.

The first time a text node is seen, its trimmed content is recorded on the
owning element as the original-text marker. A marker is never overwritten,
so it stays the source of truth for restoring the page however many times
the visible text is switched between languages. An element's first text
child uses the ``data-original`` attribute; later text children use
``data-original-<slot>``, where the slot is the child's position among the
element's text children.

Author: Leonardo Pacciani-Mori
License: MIT
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, Optional

from bs4 import NavigableString, Tag
from bs4.element import PageElement, PreformattedString

from ..config.settings import (
    MIN_TEXT_LENGTH,
    EXCLUDED_TAGS,
    NO_TRANSLATE_ATTR,
    ORIGINAL_ATTR,
    TRANSLATED_ATTR,
)
from ..config.logging_config import get_logger
from ..core.string_utils import is_translatable_text

# Module-level logger for consistent logging.
logger = get_logger(__name__)


@dataclass
class ScannedText:
    """
    A translatable text node found by the scanner.

    Attributes:
        node: The text node as it is in the page right now.
        element: The element owning the text node.
        original: The untranslated text recorded for the node.
        slot: Position of the node among the element's text children.
    """
    node: NavigableString
    element: Tag
    original: str
    slot: int = 0


def is_text_node(node: PageElement) -> bool:
    """True for visible character data; comments, doctypes and CDATA are not."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def marker_name(slot: int) -> str:
    """Name of the original-text marker for a text slot."""
    if slot == 0:
        return ORIGINAL_ATTR
    return f"{ORIGINAL_ATTR}-{slot}"


def text_slot(node: NavigableString) -> int:
    """Position of a text node among the text children of its element."""
    slot = 0
    for sibling in node.parent.contents:
        if sibling is node:
            return slot
        if is_text_node(sibling):
            slot += 1
    raise ValueError("Text node is not a child of its parent")


def get_original(element: Tag, slot: int = 0) -> Optional[str]:
    """Return the recorded original text of an element's text slot, if any."""
    return element.attrs.get(marker_name(slot))


class TextScanner:
    """
    Enumerates translatable text under a root element.

    Args:
        min_length: Minimum trimmed length of a text worth translating.
        excluded_tags: Element names whose content is never translated.
        no_translate_attr: Attribute opting an element and its descendants out.

    Example:
        >>> scanner = TextScanner()
        >>> [item.original for item in scanner.scan(page.root)]
        ['Breaking News', 'Markets rally after rate cut']
    """

    def __init__(
        self,
        min_length: int = MIN_TEXT_LENGTH,
        excluded_tags: FrozenSet[str] = EXCLUDED_TAGS,
        no_translate_attr: str = NO_TRANSLATE_ATTR
    ):
        self.min_length = min_length
        self.excluded_tags = frozenset(tag.lower() for tag in excluded_tags)
        self.no_translate_attr = no_translate_attr

    # -------------------------------------------------------------------------
    # Exclusion rules
    # -------------------------------------------------------------------------

    def is_excluded_element(self, element: Tag) -> bool:
        """True if ``element`` itself opts its content out of translation."""
        name = (element.name or "").lower()
        return name in self.excluded_tags or element.has_attr(self.no_translate_attr)

    def is_excluded(self, node: PageElement) -> bool:
        """
        True if ``node`` lies in a region that is never translated.

        A node is excluded when it or any of its ancestors is a script,
        style or similar container, or carries the opt-out attribute.
        """
        element = node if isinstance(node, Tag) else node.parent
        while element is not None:
            if self.is_excluded_element(element):
                return True
            element = element.parent
        return False

    # -------------------------------------------------------------------------
    # Scanning
    # -------------------------------------------------------------------------

    def _walk(self, root: Tag) -> Iterator[NavigableString]:
        """Yield text nodes under ``root`` in document order, skipping excluded subtrees."""
        stack = [iter(root.contents)]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                continue
            if isinstance(child, Tag):
                if not self.is_excluded_element(child):
                    stack.append(iter(child.contents))
            elif is_text_node(child):
                yield child

    def scan(self, root: Tag) -> List[ScannedText]:
        """
        Find the translatable text nodes under ``root``.

        Records the original-text marker of every node seen for the first
        time. A node whose element is marked as translated but has no
        original recorded for it is skipped, since its current text may
        already be a translation.

        Args:
            root: The element to scan (the page body, an article, ...).

        Returns:
            List[ScannedText]: The nodes in document order.
        """
        if self.is_excluded(root):
            return []

        found: List[ScannedText] = []
        captured = 0

        for node in self._walk(root):
            element = node.parent
            slot = text_slot(node)
            original = get_original(element, slot)

            # Tracked nodes are returned whatever their current text, which may
            # be a translation shorter than the minimum length.
            if original is None:
                if not is_translatable_text(node, self.min_length):
                    continue
                if element.has_attr(TRANSLATED_ATTR):
                    logger.warning(
                        f"Skipping <{element.name}> text slot {slot}: marked as "
                        f"translated but no original text is recorded"
                    )
                    continue
                original = node.strip()
                element[marker_name(slot)] = original
                captured += 1

            found.append(ScannedText(node=node, element=element, original=original, slot=slot))

        if captured:
            logger.debug(f"Recorded original text for {captured} new text nodes")

        return found
