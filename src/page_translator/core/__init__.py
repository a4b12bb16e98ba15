"""
Core utilities module for the page translation pipeline.

Submodules:
    languages: The closed set of supported languages.
    string_utils: Whitespace-preserving text helpers.
"""

from .languages import Language, LANGUAGE_NAMES, source_language
from .string_utils import split_whitespace, with_surrounding_whitespace, is_translatable_text
