"""
Main entry point for the JLPT page checker.

Runs a single check by default, for an external timer (cron, systemd timer).
Pass --daemon to keep running and check on the configured cron schedule.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

import structlog

from checker.errors import CheckerError, ConfigError
from checker.fetcher import PageFetcher
from checker.notifier import NtfyNotifier
from checker.state_store import MongoStateStore
from scheduler.check_service import PageCheckService
from scheduler.scheduler_service import SchedulerService
from utilities.config import CheckerConfig, load_config
from utilities.logger import setup_logging

USAGE = "Usage: python checker_main.py [--once|--daemon]"


def build_service(config: CheckerConfig) -> SchedulerService:
    """Wire the checker components from configuration."""
    store = MongoStateStore(
        connection_url=config.mongodb_url,
        database_name=config.mongodb_database,
        collection_name=config.state_collection
    )
    check_service = PageCheckService(
        config=config,
        fetcher=PageFetcher(config),
        store=store,
        notifier=NtfyNotifier(config)
    )
    return SchedulerService(config, check_service, store)


async def main(argv=None) -> int:
    """Run the checker, returning the process exit code."""
    argv = sys.argv[1:] if argv is None else argv
    mode = argv[0] if argv else "--once"
    if mode not in ("--once", "--daemon"):
        print(f"Unknown argument: {mode}")
        print(USAGE)
        return 2

    try:
        config = load_config()
    except ConfigError as e:
        setup_logging()
        structlog.get_logger(__name__).error("Startup failed", error=str(e))
        return 2

    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger = structlog.get_logger(__name__)
    logger.info("Starting JLPT page checker", mode=mode, page_url=config.page_url)

    service = build_service(config)

    if mode == "--daemon":
        try:
            await service.start_daemon()
        except CheckerError as e:
            logger.error("Scheduler service failed", error=str(e))
            return 1
        return 0

    result = await service.run_once()
    if not result.success:
        logger.error("Check run failed", error_type=result.error_type, errors=result.errors)
        return 1

    logger.info("Check run finished", status=result.status.value, persisted=result.persisted)
    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
