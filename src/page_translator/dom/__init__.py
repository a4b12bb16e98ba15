"""
Page module for the page translation pipeline.

Submodules:
    document: BeautifulSoup page model reporting changes as mutation records.
    scanner: Finds translatable text and records original-text markers.
    watcher: Debounces page changes into translation passes.
"""

from .document import Page, MutationRecord, Subscription, CHILD_LIST, CHARACTER_DATA
from .scanner import ScannedText, TextScanner, get_original, marker_name
from .watcher import MutationWatcher
