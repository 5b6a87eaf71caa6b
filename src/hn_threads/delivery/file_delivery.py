"""
File delivery for crawl results
"""
import logging
import re
from pathlib import Path

import aiofiles
import aiofiles.os

from hn_threads.ingestion.crawler import CrawlStream

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^A-Za-z0-9_.~]+")


def slugify(value: str | None) -> str:
    if value is None:
        return ""
    return _SLUG_RE.sub("-", value).lower()


class FileDelivery:
    name = "file"

    def __init__(self, output_dir: str = "output"):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, title: str) -> Path:
        return self.output_dir / f"{slugify(title)}.comments.json"

    async def write_crawl(self, title: str, stream: CrawlStream) -> int:
        """
        Drain `stream` into `<slug>.comments.json` as a JSON array.

        Items are written as they arrive. Returns the number written; on a
        crawl failure the partial file is removed and the error re-raised.
        """
        path = self.path_for(title)
        count = 0

        try:
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write("[")
                async for item in stream:
                    if count:
                        await f.write(",")
                    await f.write("\n  " + item.model_dump_json(exclude_none=True))
                    count += 1
                await f.write("\n]\n")
        except BaseException:
            # Failure or cancellation: never leave a truncated dump behind
            if path.exists():
                await aiofiles.os.remove(path)
            raise

        logger.info(f"Wrote {count} items to {path}")
        return count
