"""
Content fingerprinting for change detection.

Digests are SHA-256 over the UTF-8 bytes of normalized content, rendered as
lowercase hexadecimal.
"""

import hashlib
from typing import Union

import structlog

logger = structlog.get_logger(__name__)


class ContentFingerprinter:
    """Content fingerprinting system for change detection."""

    def __init__(self):
        self.logger = logger.bind(component="fingerprinter")

    def fingerprint(self, content: Union[str, bytes]) -> str:
        """
        Generate SHA-256 hash of normalized content.

        Args:
            content: Normalized content, str is encoded as UTF-8

        Returns:
            SHA-256 hash string
        """
        if isinstance(content, str):
            content = content.encode("utf-8")

        content_hash = hashlib.sha256(content).hexdigest()

        self.logger.debug(
            "Generated content hash",
            hash=content_hash[:16] + "...",
            content_bytes=len(content)
        )

        return content_hash
