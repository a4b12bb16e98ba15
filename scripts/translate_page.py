#!/usr/bin/env python3
"""
CLI script for translating an HTML page.

This script runs one orchestration pass over an HTML document, read from a
file or downloaded from a URL, and writes the translated document. The
output keeps the original-text markers, so running the script again on its
own output with the source language restores the page.

Usage:
    python translate_page.py --input article.html --language hi --output article.hi.html
    python translate_page.py --url https://example.com/news/1 --language ta
    python translate_page.py --input article.hi.html --language en --output article.html
    python translate_page.py --stats

Author: Leonardo Pacciani-Mori
License: MIT
"""

import sys
from pathlib import Path

# Allow running without package installation
_script_dir = Path(__file__).parent
_project_root = _script_dir.parent
_src_dir = _project_root / "src"
if _src_dir.exists() and str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import argparse
import asyncio
from typing import Optional


def parse_arguments() -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: The parsed arguments.
    """
    from page_translator.core.languages import Language
    from page_translator.config.settings import (
        PREFERENCES_DB_PATH,
        TRANSLATION_GATEWAY_TOKEN,
        TRANSLATION_GATEWAY_URL,
    )

    parser = argparse.ArgumentParser(
        description="Translate the visible text of an HTML page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Translate a saved article into Hindi
    python translate_page.py --input article.html --language hi --output article.hi.html

    # Download and translate a page, printing the result
    python translate_page.py --url https://example.com/news/1 --language ta

    # Restore a translated page to the source language
    python translate_page.py --input article.hi.html --language en

    # Show translation cache statistics only
    python translate_page.py --stats
        """
    )

    # Page source (mutually exclusive group)
    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument(
        "--input",
        type=str,
        help="Path of the HTML file to translate"
    )
    source_group.add_argument(
        "--url",
        type=str,
        help="URL of the page to download and translate"
    )

    parser.add_argument(
        "--language",
        type=str,
        choices=[lang.code for lang in Language],
        help="Language to translate the page into"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Where to write the translated HTML (default: standard output)"
    )

    parser.add_argument(
        "--cache-db",
        type=str,
        default=PREFERENCES_DB_PATH,
        help=f"SQLite file holding the translation cache (default: {PREFERENCES_DB_PATH})"
    )

    parser.add_argument(
        "--gateway-url",
        type=str,
        default=TRANSLATION_GATEWAY_URL,
        help="Translation gateway endpoint"
    )

    parser.add_argument(
        "--token",
        type=str,
        default=TRANSLATION_GATEWAY_TOKEN,
        help="Bearer token for the translation gateway"
    )

    # Statistics only mode
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Only show translation cache statistics, don't translate"
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write log messages to this file"
    )

    # Verbosity
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    return parser.parse_args()


def load_html(args: argparse.Namespace) -> Optional[str]:
    """
    Read the HTML document named by the arguments.

    Args:
        args: The parsed command-line arguments.

    Returns:
        str or None: The HTML source, or None if no source was given.

    Raises:
        requests.RequestException: If the page cannot be downloaded.
    """
    if args.input:
        return Path(args.input).read_text(encoding="utf-8")

    if args.url:
        import requests
        from page_translator.config.settings import FETCH_HEADERS, FETCH_TIMEOUT_SECONDS

        response = requests.get(args.url, headers=FETCH_HEADERS, timeout=FETCH_TIMEOUT_SECONDS)
        response.raise_for_status()
        return response.text

    return None


def print_cache_stats(stats: dict) -> None:
    """Print translation cache statistics as a table."""
    from rich.console import Console
    from rich.table import Table
    from page_translator.core.languages import Language

    console = Console()
    table = Table(title="Translation cache", show_header=True, header_style="bold cyan")
    table.add_column("Language")
    table.add_column("Translations", justify="right")

    for code, count in sorted(stats["by_language"].items()):
        try:
            name = Language.parse(code).display_name
        except ValueError:
            name = code
        table.add_row(name, str(count))

    console.print(table)
    console.print(
        f"{stats['total_texts']} cached texts, "
        f"{stats['total_translations']} translations"
    )


def main() -> int:
    """
    Main entry point for the translation CLI.

    Returns:
        int: Exit code (0 for success, non-zero for failure).
    """
    args = parse_arguments()

    # Set up logging
    from page_translator.config.logging_config import setup_logging
    from page_translator.config.settings import LOG_LEVEL

    setup_logging("DEBUG" if args.verbose else LOG_LEVEL, log_file=args.log_file)

    from page_translator.config.logging_config import get_logger
    from page_translator.pipeline import PassOutcome, TranslationContext, translate_html
    from page_translator.storage import SQLiteStorage
    from page_translator.translation import HttpGatewayTransport

    logger = get_logger(__name__)

    context = TranslationContext.create(
        storage=SQLiteStorage(args.cache_db),
        transport=HttpGatewayTransport(url=args.gateway_url, token=args.token),
    )

    # If stats-only mode, just show statistics and exit
    if args.stats:
        print_cache_stats(context.store.cache_stats())
        return 0

    if not args.language:
        logger.error("No language specified. Use --language")
        return 1

    try:
        html = load_html(args)
        if html is None:
            logger.error("No page specified. Use --input or --url")
            return 1

        translated, report = asyncio.run(translate_html(html, args.language, context))

        if args.output:
            Path(args.output).write_text(translated, encoding="utf-8")
            logger.info(f"Wrote {args.output}")
        else:
            sys.stdout.write(translated)

        # Fail-open passes still produce a readable page, but the run did not translate.
        return 2 if report.outcome is PassOutcome.FAILED else 0

    except KeyboardInterrupt:
        logger.warning("Translation interrupted by user")
        return 130

    except Exception as e:
        logger.error(f"Translation failed with error: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
