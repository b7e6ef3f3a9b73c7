"""
Change detection for the watched page.

Classifies a check by priority: keyword found, then content changed, then
unchanged. The classification also picks the notification message.
"""

from typing import Optional

import structlog

from checker.models import ChangeStatus, DetectionResult

logger = structlog.get_logger(__name__)


KEYWORD_MESSAGE = "JLPT {keyword} dates may have been announced! Check {page_url}"
CHANGED_MESSAGE = "UCD JLPT page has been updated. Check {page_url}"
UNCHANGED_MESSAGE = "JLPT check complete - no changes detected."


class ChangeDetector:
    """Compares the current digest against the stored one and scans for the keyword."""

    def __init__(self, keyword: str):
        """
        Initialize change detector.

        Args:
            keyword: Case-sensitive target string; empty never matches
        """
        self.keyword = keyword
        self.logger = logger.bind(component="change_detector")

    def detect(
        self,
        current_digest: str,
        stored_digest: Optional[str],
        normalized_content: str
    ) -> DetectionResult:
        """
        Classify a check.

        Args:
            current_digest: Digest of this run's normalized content
            stored_digest: Digest from the previous run, None on first run
            normalized_content: Content the keyword is searched in

        Returns:
            DetectionResult with the priority classification
        """
        content_changed = stored_digest != current_digest
        keyword_found = bool(self.keyword) and self.keyword in normalized_content

        if keyword_found:
            status = ChangeStatus.KEYWORD_FOUND
        elif content_changed:
            status = ChangeStatus.CONTENT_CHANGED
        else:
            status = ChangeStatus.UNCHANGED

        self.logger.info(
            "Change detection completed",
            status=status.value,
            content_changed=content_changed,
            keyword_found=keyword_found,
            first_run=stored_digest is None
        )

        return DetectionResult(
            status=status,
            content_changed=content_changed,
            keyword_found=keyword_found,
            current_digest=current_digest,
            previous_digest=stored_digest
        )


def compose_message(status: ChangeStatus, page_url: str, keyword: str) -> str:
    """Build the notification body for a classification."""
    if status == ChangeStatus.KEYWORD_FOUND:
        return KEYWORD_MESSAGE.format(keyword=keyword, page_url=page_url)
    if status == ChangeStatus.CONTENT_CHANGED:
        return CHANGED_MESSAGE.format(page_url=page_url)
    return UNCHANGED_MESSAGE
