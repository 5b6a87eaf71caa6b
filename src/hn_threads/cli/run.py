"""
Command line entry point: dump comment trees or list top stories
"""
import argparse
import asyncio
import json
import logging
import sys
import time
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

from hn_threads.delivery.file_delivery import FileDelivery
from hn_threads.ingestion.aggregator import fetch_top_basic_info, search_top_stories
from hn_threads.ingestion.crawler import TreeCrawler
from hn_threads.ingestion.hackernews import HackerNewsResolver
from hn_threads.services.config import Config, load_config
from hn_threads.services.logging import setup_logging

logger = logging.getLogger(__name__)


def parse_item_id(value: str) -> int:
    """Accept a raw id or a news.ycombinator.com/item?id=N URL."""
    value = value.strip()
    if value.isdigit():
        return int(value)

    url = urlparse(value)
    if "ycombinator.com" in url.netloc.lower() and url.path.startswith("/item"):
        ids = parse_qs(url.query).get("id", [])
        if ids and ids[0].isdigit():
            return int(ids[0])

    raise argparse.ArgumentTypeError(f"not a Hacker News item id or URL: {value!r}")


def _build_resolver(config: Config) -> HackerNewsResolver:
    return HackerNewsResolver(
        base_url=config.HN_BASE_URL,
        timeout=config.REQUEST_TIMEOUT,
        max_concurrency=config.MAX_CONCURRENCY,
    )


async def dump_item(
    resolver: HackerNewsResolver,
    delivery: FileDelivery,
    item_id: int,
) -> bool:
    """Crawl one item into its dump file. Returns False if the crawl failed."""
    item = await resolver.resolve_item(item_id)

    if item is None or not item.title:
        logger.warning(f"Item {item_id} not found.")
        return True

    logger.info(f'Getting comments for "{item.title}"')

    crawler = TreeCrawler(resolver)
    try:
        async with crawler.crawl(item_id) as stream:
            count = await delivery.write_crawl(item.title, stream)
    except Exception as e:
        logger.exception(f"Failed to dump item {item_id}: {e}")
        return False

    logger.info(f"Processed {count} comments for item {item_id}")
    return True


async def run_crawl(config: Config, item_ids: List[int], output: Optional[str]) -> int:
    delivery = FileDelivery(output or config.OUTPUT_DIR)

    async with _build_resolver(config) as resolver:
        results = await asyncio.gather(
            *(dump_item(resolver, delivery, item_id) for item_id in item_ids),
            return_exceptions=True,
        )

    failed = 0
    for item_id, result in zip(item_ids, results):
        if isinstance(result, BaseException):
            logger.error(f"Item {item_id} failed: {result}")
            failed += 1
        elif result is False:
            failed += 1

    return 1 if failed else 0


async def run_top(config: Config, limit: Optional[int], query: Optional[str]) -> int:
    async with _build_resolver(config) as resolver:
        if query:
            stories = await search_top_stories(resolver, query, max_results=limit or 20)
        else:
            stories = await fetch_top_basic_info(resolver, limit=limit or config.TOP_STORIES_LIMIT)

    print(json.dumps([s.model_dump() for s in stories], indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hn-threads",
        description="Extract Hacker News comment trees in JSON format.",
    )
    parser.add_argument("--config", default=None,
                        help="Path to config.yml (default: resources/config.yml)")
    sub = parser.add_subparsers(dest="command", required=True)

    crawl = sub.add_parser("crawl", help="Dump the full comment tree of one or more items")
    crawl.add_argument("--id", dest="ids", type=parse_item_id, nargs="+", action="extend",
                       required=True,
                       help="The item id or news.ycombinator.com item URL. Multiple can be specified.")
    crawl.add_argument("-o", "--output", default=None,
                       help="Directory for the results (default: OUTPUT_DIR)")

    top = sub.add_parser("top", help="List the current top stories")
    top.add_argument("--limit", type=int, default=None,
                     help="Number of top stories to resolve")
    top.add_argument("--query", default=None,
                     help="Only keep stories whose title contains this text")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    start_time = time.perf_counter()
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.LOG_LEVEL)

    if args.command == "crawl":
        status = asyncio.run(run_crawl(config, args.ids, args.output))
    else:
        status = asyncio.run(run_top(config, args.limit, args.query))

    logger.info(f"Total time: {time.perf_counter() - start_time:.2f}s")
    return status


if __name__ == "__main__":
    sys.exit(main())
