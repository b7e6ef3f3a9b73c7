"""
HTML normalization for stable content hashing.

Removes volatile markup regions (comments, scripts, styles, no-script and
footer blocks) so the digest only moves when meaningful content changes.
This is a single forward scan, not an HTML parser: malformed markup is
handled by truncating at an unterminated region.
"""

import re
from typing import List, NamedTuple, Optional

import structlog

logger = structlog.get_logger(__name__)


class StrippedRegion(NamedTuple):
    """Opening and closing markers of a removable region."""
    name: str
    opening: re.Pattern
    closing: re.Pattern


def _element_region(tag: str) -> StrippedRegion:
    return StrippedRegion(
        name=tag,
        opening=re.compile(rf"<{tag}\b", re.IGNORECASE),
        closing=re.compile(rf"</{tag}\s*>", re.IGNORECASE),
    )


VOLATILE_REGIONS: List[StrippedRegion] = [
    StrippedRegion(name="comment", opening=re.compile(r"<!--"), closing=re.compile(r"-->")),
    _element_region("script"),
    _element_region("style"),
    _element_region("noscript"),
    _element_region("footer"),
]


class HtmlNormalizer:
    """Strips volatile regions from raw page HTML."""

    def __init__(self, content_region: Optional[str] = None, regions: Optional[List[StrippedRegion]] = None):
        """
        Initialize the normalizer.

        Args:
            content_region: Optional tag name (e.g. "main") to narrow the page to
                before stripping. The full page is used when the tag is absent.
            regions: Region markers to strip, defaults to VOLATILE_REGIONS
        """
        self.content_region = content_region
        self.regions = VOLATILE_REGIONS if regions is None else regions
        self.logger = logger.bind(component="normalizer")

    def normalize(self, html: str) -> str:
        """
        Produce normalized content from a page snapshot.

        Args:
            html: Raw page HTML

        Returns:
            Page text with every volatile region removed
        """
        if self.content_region:
            html = extract_region(html, self.content_region)

        normalized = self.strip_volatile_regions(html)

        self.logger.debug(
            "Normalized page content",
            raw_length=len(html),
            normalized_length=len(normalized)
        )

        return normalized

    def strip_volatile_regions(self, html: str) -> str:
        """
        Remove every configured region from html.

        The earliest opening marker always wins. Its closing marker is searched
        from the opening position; if none exists the rest of the input is
        dropped. Each region's next opening match is cached and only searched
        again once the scan has moved past it.
        """
        retained = []
        position = 0

        candidates = []
        for region in self.regions:
            match = region.opening.search(html)
            if match:
                candidates.append((region, match))

        while candidates:
            region, opening = min(candidates, key=lambda candidate: candidate[1].start())
            retained.append(html[position:opening.start()])

            closing = region.closing.search(html, opening.start())
            if closing is None:
                self.logger.debug(
                    "Unterminated region, truncating",
                    region=region.name,
                    offset=opening.start()
                )
                return "".join(retained)

            position = closing.end()

            # Regions with no further match drop out of the scan
            refreshed = []
            for region, match in candidates:
                if match.start() < position:
                    match = region.opening.search(html, position)
                    if match is None:
                        continue
                refreshed.append((region, match))
            candidates = refreshed

        retained.append(html[position:])
        return "".join(retained)


def extract_region(html: str, tag: str) -> str:
    """
    Narrow html to the first <tag>...</tag> section, closing tag included.

    Falls back to the whole input when either tag is missing.
    """
    opening = re.search(rf"<{re.escape(tag)}\b[^>]*>", html, re.IGNORECASE)
    if not opening:
        return html

    closing = re.search(rf"</{re.escape(tag)}\s*>", html[opening.end():], re.IGNORECASE)
    if not closing:
        return html

    return html[opening.start():opening.end() + closing.end()]
