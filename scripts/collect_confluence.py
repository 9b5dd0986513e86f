"""
Run one Confluence collection and write the documents as NDJSON.

    python scripts/collect_confluence.py --space ENG --space OPS > docs.ndjson

Configuration comes from the environment / .env (see Settings); command-line
options override it. Progress is logged to stderr.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, TextIO

import httpx
from dotenv import load_dotenv
load_dotenv()

from confluence_collator.api.dependencies import get_catalog_client
from confluence_collator.config import Settings, get_settings
from confluence_collator.core.logging import configure_logging
from confluence_collator.search.collator import ConfluenceCollatorFactory

logger = logging.getLogger("collator.cli")


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Collect Confluence pages as indexable documents.")
    parser.add_argument(
        "--space",
        dest="spaces",
        action="append",
        help="Space key to crawl (repeatable). Overrides CONFLUENCE_SPACES.",
    )
    parser.add_argument(
        "--parallelism",
        type=int,
        default=None,
        help="Maximum concurrent page fetches. Overrides CONFLUENCE_PARALLELISM_LIMIT.",
    )
    parser.add_argument(
        "--catalog-url",
        default=None,
        help="Resolve spaces from this catalog instead of the static list.",
    )
    parser.add_argument("--output", default=None, help="Output file (default: stdout).")
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL.")
    return parser.parse_args(argv)


async def collect(factory: ConfluenceCollatorFactory, out: TextIO) -> int:
    count = 0
    async for document in factory.get_collator():
        out.write(document.model_dump_json(by_alias=True) + "\n")
        count += 1
    return count


def build_factory(
    args: argparse.Namespace,
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> ConfluenceCollatorFactory:
    """Apply command-line overrides to the settings and build the collator."""
    overrides = {}
    if args.spaces:
        overrides["confluence_spaces"] = args.spaces
    if args.catalog_url:
        # CATALOG_TOKEN still applies to a catalog given on the command line
        overrides["catalog_base_url"] = args.catalog_url
    if overrides:
        settings = settings.model_copy(update=overrides)

    return ConfluenceCollatorFactory.from_settings(
        settings,
        parallelism_limit=args.parallelism,
        catalog=get_catalog_client(settings),
        http_client=http_client,
    )


async def main(
    argv: Optional[list] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    factory = build_factory(args, settings, http_client=http_client)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as out:
            count = await collect(factory, out)
    else:
        count = await collect(factory, sys.stdout)

    logger.info("Collected %d documents from %s", count, factory.wiki_url)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
