"""Example demonstrating batched item loading against the live API."""

import asyncio
import os

from src.integrations.hackernews import HackerNewsClient, StoryListing
from src.loaders import create_item_loader
from src.utils.logging_config import get_logger, setup_logging

# Set up environment for example
os.environ["APP_NAME"] = "hn-graphql-example"
os.environ["LOG_LEVEL"] = "DEBUG"


async def main() -> None:
    setup_logging(force_reconfigure=True)
    logger = get_logger(__name__)

    async with HackerNewsClient() as client:
        loader = create_item_loader(client)

        print("=== Example 1: Top 3 stories in one batch ===")
        ids = (await client.fetch_list(StoryListing.TOP))[:3]
        if not ids:
            logger.warning("Top stories listing is empty")
            return
        stories = await loader.load_many(ids)
        for story in stories:
            if story is not None:
                logger.info(f"{story.id}: {story.title} by {story.author}")

        print("\n=== Example 2: Comments of every story, one shared batch ===")
        # Each story asks for its own kids; the loader merges them into one window.
        # Jobs have no kids field.
        found = [story for story in stories if story is not None]
        kid_lists = await asyncio.gather(
            *(loader.load_many((getattr(story, "kids", None) or [])[:2]) for story in found)
        )
        for story, kids in zip(found, kid_lists):
            authors = [kid.author for kid in kids if kid is not None]
            logger.info(f"{story.id}: first replies by {authors}")

        print("\n=== Example 3: Repeated ids are fetched once ===")
        results = await loader.load_many([ids[0], ids[0], ids[0]])
        logger.info(f"Got {len(results)} results for 1 distinct id")


if __name__ == "__main__":
    asyncio.run(main())
