"""
Scheduler service for the page checker.

This module provides:
- Single-run mode for external timers
- Cron scheduling with APScheduler for daemon mode
- Store connection lifecycle and graceful shutdown
"""

import asyncio
import signal
from typing import Optional

import structlog
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from checker.errors import StoreError
from checker.models import CheckResult
from checker.state_store import MongoStateStore
from scheduler.check_service import PageCheckService
from utilities.config import CheckerConfig

logger = structlog.get_logger(__name__)


CHECK_JOB_ID = "page_check"


class SchedulerService:
    """Drives page checks once or on a cron schedule."""

    def __init__(self, config: CheckerConfig, check_service: PageCheckService, store: MongoStateStore):
        """
        Initialize scheduler service.

        Args:
            config: Checker configuration
            check_service: Service performing a single check
            store: State store whose connection this service owns
        """
        self.config = config
        self.check_service = check_service
        self.store = store
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.logger = logger.bind(component="scheduler_service")
        self._stop_event: Optional[asyncio.Event] = None

    async def run_once(self) -> CheckResult:
        """Connect, run one check, disconnect."""
        try:
            await self.store.connect()
        except StoreError as e:
            return await self.check_service.report_failure(e)

        try:
            return await self.check_service.run()
        finally:
            await self.store.disconnect()

    def build_trigger(self) -> CronTrigger:
        """Build the cron trigger from configuration."""
        return CronTrigger.from_crontab(self.config.schedule_cron, timezone=self.config.timezone)

    def _setup_scheduler(self) -> AsyncIOScheduler:
        scheduler = AsyncIOScheduler(timezone=self.config.timezone)

        def job_executed_listener(event):
            result = event.retval
            self.logger.info(
                "Job executed",
                job_id=event.job_id,
                success=result.success if result else None,
                status=result.status.value if result and result.status else None
            )

        def job_error_listener(event):
            self.logger.error(
                "Job execution failed",
                job_id=event.job_id,
                error=str(event.exception)
            )

        scheduler.add_listener(job_executed_listener, EVENT_JOB_EXECUTED)
        scheduler.add_listener(job_error_listener, EVENT_JOB_ERROR)

        # One instance at a time so runs never overlap on the store
        scheduler.add_job(
            func=self.check_service.run,
            trigger=self.build_trigger(),
            id=CHECK_JOB_ID,
            name="Page Check",
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        return scheduler

    async def start_daemon(self) -> None:
        """Run checks on the configured schedule until stopped."""
        try:
            await self.store.connect()
        except StoreError as e:
            await self.check_service.report_failure(e)
            raise

        self._stop_event = asyncio.Event()

        loop = asyncio.get_running_loop()
        handled_signals = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
                handled_signals.append(sig)
            except (NotImplementedError, RuntimeError):
                # Unsupported by this event loop or outside the main thread
                pass

        self.scheduler = self._setup_scheduler()
        self.scheduler.start()
        self.logger.info(
            "Scheduler service started",
            schedule_cron=self.config.schedule_cron,
            timezone=self.config.timezone
        )

        try:
            await self._stop_event.wait()
        finally:
            for sig in handled_signals:
                loop.remove_signal_handler(sig)
            if self.scheduler.running:
                self.scheduler.shutdown(wait=False)
            await self.store.disconnect()
            self.logger.info("Scheduler service stopped")

    def stop(self) -> None:
        """Request daemon shutdown."""
        self.logger.info("Stopping scheduler service")
        if self._stop_event is not None:
            self._stop_event.set()
