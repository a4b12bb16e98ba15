"""
Incremental Page Translation Package.

This package translates the visible text of an HTML page into one of the
supported languages, caching every translation durably and keeping the
original text on the page so it can be restored to the source language
without reloading it.

Modules:
    config: Configuration settings and logging setup.
    core: Supported languages and text helpers.
    storage: Durable key-value storage and the language preference store.
    translation: Translation gateway client and failure notifications.
    dom: Page model, text scanner and mutation watcher.
    pipeline: Translation context and the orchestrator.

Author: Leonardo Pacciani-Mori
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Leonardo Pacciani-Mori"
