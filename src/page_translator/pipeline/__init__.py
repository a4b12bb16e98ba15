"""
Pipeline module for the page translation pipeline.

Submodules:
    context: Shared state built once per application.
    orchestrator: Scan -> resolve -> apply passes for one page.
"""

from .context import TranslationContext
from .orchestrator import (
    PassOutcome,
    PassReport,
    PassState,
    TranslationOrchestrator,
    translate_html,
)
