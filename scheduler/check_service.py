"""
Page check orchestration.

This module provides:
- The run state machine (fetch, normalize, compare, notify, persist)
- Conditional persistence of the content digest
- Best-effort debug metadata and failure notifications
"""

import time
import uuid
from datetime import datetime
from typing import Optional

import structlog

from checker.change_detector import ChangeDetector, compose_message
from checker.errors import FetchError, StoreError
from checker.fetcher import PageFetcher
from checker.fingerprinting import ContentFingerprinter
from checker.models import CheckResult, DetectionResult, RunState
from checker.normalizer import HtmlNormalizer
from checker.notifier import NtfyNotifier, compose_error_message
from checker.state_store import (
    CURRENT_HASH_DEBUG_KEY,
    LAST_CHANGE_TIMESTAMP_KEY,
    PAGE_HASH_KEY,
    PREVIOUS_HASH_DEBUG_KEY,
    MongoStateStore,
)
from utilities.config import CheckerConfig
from utilities.logger import CheckLogger

logger = structlog.get_logger(__name__)


class PageCheckService:
    """Runs one page check against injected fetch, store and notify capabilities."""

    def __init__(
        self,
        config: CheckerConfig,
        fetcher: PageFetcher,
        store: MongoStateStore,
        notifier: NtfyNotifier
    ):
        """
        Initialize the check service.

        Args:
            config: Checker configuration
            fetcher: Page fetch capability
            store: Key-value state store
            notifier: Notification capability
        """
        self.config = config
        self.fetcher = fetcher
        self.store = store
        self.notifier = notifier

        self.normalizer = HtmlNormalizer(content_region=config.content_region)
        self.fingerprinter = ContentFingerprinter()
        self.change_detector = ChangeDetector(config.target_keyword)

        self.state = RunState.DONE
        self.check_logger = CheckLogger("page_check")
        self.logger = logger.bind(component="check_service")

    def _transition(self, state: RunState) -> None:
        self.state = state
        self.check_logger.log_state_transition(state.value)

    async def run(self) -> CheckResult:
        """
        Scheduled entry point: run a check and absorb any failure.

        Returns:
            CheckResult, with success False if the run failed
        """
        check_id = str(uuid.uuid4())
        start = time.monotonic()

        try:
            return await self.check_page(check_id=check_id)
        except Exception as e:
            return await self.report_failure(e, check_id=check_id, started_at=start)
        finally:
            self.check_logger.clear_context()

    async def report_failure(
        self,
        error: Exception,
        check_id: Optional[str] = None,
        started_at: Optional[float] = None
    ) -> CheckResult:
        """
        Move to the failed state and attempt one failure notification.

        The notification is best-effort: its own failure is logged and ignored.
        """
        failed_state = self.state
        self._transition(RunState.FAILED)
        self.check_logger.log_error(str(error), error_type=type(error).__name__, state=failed_state.value)

        try:
            await self.notifier.send(compose_error_message(error))
        except Exception as notify_error:
            self.logger.warning(
                "Failure notification could not be sent",
                error=str(notify_error)
            )

        return CheckResult(
            check_id=check_id or str(uuid.uuid4()),
            final_state=RunState.FAILED,
            duration_seconds=time.monotonic() - started_at if started_at else 0.0,
            success=False,
            error_type=type(error).__name__,
            status_code=error.status_code if isinstance(error, FetchError) else None,
            errors=[str(error)]
        )

    async def check_page(self, check_id: Optional[str] = None) -> CheckResult:
        """
        Run the check steps in order.

        Returns:
            CheckResult for a completed run

        Raises:
            FetchError, StoreError, NotifyError: From the failing step
        """
        check_id = check_id or str(uuid.uuid4())
        start = time.monotonic()
        run_timestamp = datetime.utcnow()
        self.check_logger.bind_context(check_id=check_id)
        self.check_logger.log_check_start(self.config.page_url)

        self._transition(RunState.FETCHING)
        html = await self.fetcher.fetch(self.config.page_url)

        self._transition(RunState.NORMALIZING)
        normalized = self.normalizer.normalize(html)
        current_digest = self.fingerprinter.fingerprint(normalized)

        self._transition(RunState.COMPARING)
        stored_digest = await self.store.get(PAGE_HASH_KEY)
        detection = self.change_detector.detect(current_digest, stored_digest, normalized)
        message = compose_message(detection.status, self.config.page_url, self.config.target_keyword)
        self.logger.info(message, check_id=check_id)

        # Sent on every run, including unchanged ones
        self._transition(RunState.NOTIFYING)
        await self.notifier.send(message)

        persisted = False
        # A keyword hit on an unchanged digest writes nothing; the stored value is already current
        if detection.content_changed:
            self._transition(RunState.PERSISTING)
            await self.store.put(PAGE_HASH_KEY, current_digest)
            persisted = True
            if self.config.write_debug_metadata:
                await self._write_debug_metadata(detection, run_timestamp)

        self._transition(RunState.DONE)
        duration = time.monotonic() - start
        self.check_logger.log_check_complete(detection.status.value, persisted, duration)

        return CheckResult(
            check_id=check_id,
            run_timestamp=run_timestamp,
            final_state=RunState.DONE,
            status=detection.status,
            message=message,
            current_digest=current_digest,
            previous_digest=stored_digest,
            persisted=persisted,
            notification_sent=True,
            duration_seconds=duration
        )

    async def _write_debug_metadata(self, detection: DetectionResult, changed_at: datetime) -> None:
        """Record the previous and current digests; failures do not abort the run."""
        entries = {
            PREVIOUS_HASH_DEBUG_KEY: detection.previous_digest or "",
            CURRENT_HASH_DEBUG_KEY: detection.current_digest,
            LAST_CHANGE_TIMESTAMP_KEY: changed_at.isoformat(),
        }
        for key, value in entries.items():
            try:
                await self.store.put(key, value)
                self.check_logger.log_store_operation("put", key, success=True)
            except StoreError:
                self.check_logger.log_store_operation("put", key, success=False)
