"""
Models for page checking and change detection.

This module defines Pydantic models for:
- Change classification
- Run state tracking
- Detection results
- Per-run check summaries
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ChangeStatus(str, Enum):
    """Classification of a page check, in priority order."""
    KEYWORD_FOUND = "keyword_found"
    CONTENT_CHANGED = "content_changed"
    UNCHANGED = "unchanged"


class RunState(str, Enum):
    """States of a single check run."""
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    COMPARING = "comparing"
    NOTIFYING = "notifying"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class DetectionResult(BaseModel):
    """Outcome of comparing the current page against the stored digest."""
    status: ChangeStatus = Field(..., description="Priority classification of the check")
    content_changed: bool = Field(..., description="Current digest differs from the stored one")
    keyword_found: bool = Field(..., description="Target keyword appears in normalized content")
    current_digest: str = Field(..., min_length=64, max_length=64, description="SHA-256 of normalized content")
    previous_digest: Optional[str] = Field(default=None, description="Stored digest, absent on first run")


class CheckResult(BaseModel):
    """Summary of one check run."""
    check_id: str = Field(..., description="Unique run identifier")
    run_timestamp: datetime = Field(default_factory=datetime.utcnow)
    final_state: RunState = Field(default=RunState.DONE)

    # Detection outcome
    status: Optional[ChangeStatus] = Field(default=None)
    message: Optional[str] = Field(default=None, description="Notification body sent for this run")
    current_digest: Optional[str] = Field(default=None)
    previous_digest: Optional[str] = Field(default=None)

    # Side effects
    persisted: bool = Field(default=False, description="New digest written to the store")
    notification_sent: bool = Field(default=False)

    duration_seconds: float = Field(default=0.0)

    # Status
    success: bool = Field(default=True)
    error_type: Optional[str] = Field(default=None)
    status_code: Optional[int] = Field(default=None, description="HTTP status of a failed fetch")
    errors: List[str] = Field(default_factory=list)
