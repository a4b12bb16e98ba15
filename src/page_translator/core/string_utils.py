"""
String utilities for the page translation pipeline.

Text nodes are translated by their trimmed content, while the whitespace
around that content belongs to the page layout. These helpers split a text
node into its layout whitespace and its translatable core, and put the two
back together after translation or restoration.

Author: Leonardo Pacciani-Mori
License: MIT
"""

import re
from typing import Tuple

from ..config.settings import MIN_TEXT_LENGTH

# Leading whitespace, core text, trailing whitespace.
_WHITESPACE_PATTERN = re.compile(r'^(\s*)(.*?)(\s*)\Z', re.DOTALL)


def split_whitespace(text: str) -> Tuple[str, str, str]:
    """
    Split text into its leading whitespace, core content and trailing whitespace.

    Args:
        text: The raw text of a text node.

    Returns:
        Tuple[str, str, str]: (leading, core, trailing), where joining the
            three parts gives back the input exactly.

    Example:
        >>> split_whitespace("\\n  Breaking News ")
        ('\\n  ', 'Breaking News', ' ')
    """
    if not text:
        return "", "", ""

    match = _WHITESPACE_PATTERN.match(text)
    return match.group(1), match.group(2), match.group(3)


def with_surrounding_whitespace(current: str, core: str) -> str:
    """
    Replace the core content of a text while keeping its surrounding whitespace.

    Args:
        current: The text currently shown in the node.
        core: The new core content (a translation or the original).

    Returns:
        str: The new text with the whitespace of ``current`` around ``core``.

    Example:
        >>> with_surrounding_whitespace(" Breaking News\\n", "ताज़ा खबर")
        ' ताज़ा खबर\\n'
    """
    leading, _, trailing = split_whitespace(current)
    return f"{leading}{core}{trailing}"


def is_translatable_text(text: str, min_length: int = MIN_TEXT_LENGTH) -> bool:
    """
    Check whether a text is long enough to be worth translating.

    Whitespace-only strings and single characters (punctuation, bullets,
    separators) are not sent to the gateway.

    Args:
        text: The raw text of a text node.
        min_length: Minimum length of the trimmed text.

    Returns:
        bool: True if the trimmed text has at least ``min_length`` characters.
    """
    if not text:
        return False
    return len(text.strip()) >= min_length
