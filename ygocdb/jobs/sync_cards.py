"""
Sync the ygocdb card dataset.

Checks the remote version token and, when it differs from the local one,
downloads, extracts and stores the card archive.

Usage:
    python -m ygocdb.jobs.sync_cards [--force] [--check-only]
"""

import argparse
import asyncio
import logging

from ygocdb.models.failure import YgocdbError
from ygocdb.services.container import Services, SyncResult

logger = logging.getLogger(__name__)


class ProgressLogger:
    """Logs download progress at every whole ``step`` percent."""

    def __init__(self, step: int = 10) -> None:
        self.step = step
        self._last = -step

    def __call__(self, fraction: float) -> None:
        percent = int(fraction * 100)
        due = percent >= self._last + self.step or (percent == 100 and self._last < 100)
        if due:
            self._last = percent
            logger.info("Downloading cards.zip: %d%%", percent)


async def check_version(services: Services) -> str | None:
    """Log and return the new remote token, if any."""
    local = services.store.local_token()
    logger.info("Local dataset version: %s", local or "none")
    remote = await services.check_for_update()
    if remote is None:
        logger.info("No update available")
    else:
        logger.info("Update available: %s", remote)
    return remote


async def run_sync(force: bool = False, services: Services | None = None) -> SyncResult:
    """
    Load the local dataset and bring it up to date.

    Args:
        force: Download even when the version token is unchanged
        services: Service container (built from settings when omitted)

    Returns:
        What the sync did.
    """
    owned = services is None
    services = services or Services()
    try:
        if services.store.has_local_data:
            try:
                await services.store.load()
            except YgocdbError as e:
                logger.warning("Local card data unreadable, downloading again: %s", e)
                force = True

        result = await services.sync(force=force, progress_callback=ProgressLogger())
        if result.updated:
            logger.info("Synced %d cards (version %s)", result.card_count, result.token)
        return result
    except YgocdbError as e:
        logger.error("Card sync failed: %s", e)
        raise
    finally:
        if owned:
            await services.aclose()


async def run_check(services: Services | None = None) -> str | None:
    owned = services is None
    services = services or Services()
    try:
        return await check_version(services)
    finally:
        if owned:
            await services.aclose()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Sync the ygocdb card dataset.")
    parser.add_argument("--force", action="store_true", help="download even if up to date")
    parser.add_argument(
        "--check-only", action="store_true", help="only report whether an update exists"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        if args.check_only:
            asyncio.run(run_check())
        else:
            asyncio.run(run_sync(force=args.force))
    except YgocdbError as e:
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
