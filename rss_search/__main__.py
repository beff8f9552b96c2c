"""Command-line entry point: index a feed list, then search it interactively."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from .config import Config, load_config
from .errors import IngestionAborted, SourceReadError
from .search import SearchEngine, SearchHit, normalize_query

LOGGER = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Index RSS feeds and search their articles")
    parser.add_argument("feed_file", type=Path, nargs="?", help="File listing one feed URL per line")
    parser.add_argument(
        "threads",
        nargs="?",
        help="Maximum number of worker threads, zero or less for no limit",
    )
    parser.add_argument("--max-results", type=int, help="Number of results shown per query")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def format_hit(rank: int, hit: SearchHit) -> str:
    published = hit.article.published_at
    lines = [f"{rank}. {hit.title} ({plural(hit.occurrences, 'hit')})"]
    if published is not None:
        lines.append(f"Published: {published.strftime('%Y-%m-%d %H:%M')}")
    description = hit.article.plain_description
    if description:
        lines.append(description)
    lines.append(hit.address or "")
    return "\n".join(lines)


def run_shell(
    engine: SearchEngine,
    max_results: int,
    read: Callable[[str], str] = input,
    out: TextIO = sys.stdout,
) -> None:
    """Prompt for single search terms until a blank line or end of input."""

    while True:
        try:
            query = read("Search term (blank to exit): ")
        except EOFError:
            break
        if not query:
            break

        word = normalize_query(query)
        hits = engine.search(word)
        print(f"Actual query: {word}", file=out)
        print(f"Search returned {plural(len(hits), 'result')}", file=out)
        if len(hits) > max_results:
            print(f"Only the first {max_results} results are shown", file=out)
        for rank, hit in enumerate(hits[:max_results], start=1):
            print(format_hit(rank, hit), file=out)
            print(file=out)


def parse_threads(value: str) -> int:
    """Read the thread limit, falling back to no limit when it is not a number."""

    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid thread limit %r, using no limit", value)
        return 0


def build_config(args: argparse.Namespace) -> Config:
    config = load_config()
    if args.feed_file:
        config = replace(config, feed_file=args.feed_file)
    if args.threads is not None:
        config = replace(config, max_threads=parse_threads(args.threads))
    if args.max_results is not None:
        config = replace(config, max_results=args.max_results)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)
    config = build_config(args)

    if config.unbounded:
        LOGGER.info("No thread limit, the worker pool grows as needed")
    else:
        LOGGER.info("Using at most %d worker threads", config.max_threads)

    try:
        engine = SearchEngine.from_feed_file(config)
    except SourceReadError as exc:
        LOGGER.error("%s", exc)
        return 1
    except IngestionAborted as exc:
        LOGGER.error("%s", exc)
        return 130

    print(f"Indexed {plural(engine.article_count(), 'article')}")
    run_shell(engine, config.max_results)
    return 0


if __name__ == "__main__":
    sys.exit(main())
