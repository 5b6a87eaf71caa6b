"""
Ingestion module - item resolution, tree crawling and bulk aggregation.
"""
from hn_threads.ingestion.base import ItemResolver, ResolverError
from hn_threads.ingestion.crawler import CrawlError, CrawlStream, TreeCrawler
from hn_threads.ingestion.aggregator import (
    fetch_top_basic_info,
    resolve_basic_info,
    search_top_stories,
)
from hn_threads.ingestion.hackernews import HackerNewsResolver

__all__ = [
    "ItemResolver",
    "ResolverError",
    "HackerNewsResolver",
    "TreeCrawler",
    "CrawlStream",
    "CrawlError",
    "resolve_basic_info",
    "fetch_top_basic_info",
    "search_top_stories",
]
