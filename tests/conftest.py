"""
Pytest configuration and shared fixtures.
"""

from typing import Dict, Optional, Set
from unittest.mock import AsyncMock

import pytest

from checker.errors import StoreError
from checker.fetcher import PageFetcher
from checker.fingerprinting import ContentFingerprinter
from checker.normalizer import HtmlNormalizer
from checker.notifier import NtfyNotifier
from utilities.config import CheckerConfig


TEST_PAGE_URL = "https://example.com/japan/exams/"


class FakeStateStore:
    """Dict-backed stand-in for MongoStateStore."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, failing_keys: Optional[Set[str]] = None):
        self.data = dict(initial or {})
        self.failing_keys = failing_keys or set()
        self.puts = []
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def get(self, key: str) -> Optional[str]:
        if key in self.failing_keys:
            raise StoreError(f"Failed to read {key}", operation="get", key=key)
        return self.data.get(key)

    async def put(self, key: str, value: str) -> bool:
        if key in self.failing_keys:
            raise StoreError(f"Failed to write {key}", operation="put", key=key)
        self.puts.append((key, value))
        self.data[key] = value
        return True


def digest_of(html: str) -> str:
    """Digest the checker would compute for a page."""
    return ContentFingerprinter().fingerprint(HtmlNormalizer().normalize(html))


@pytest.fixture
def checker_config():
    """Create checker configuration for testing."""
    return CheckerConfig(
        _env_file=None,
        ntfy_topic="jlpt-test",
        page_url=TEST_PAGE_URL,
        target_keyword="2026",
        request_timeout=10
    )


@pytest.fixture
def fake_store():
    """Empty in-memory state store."""
    return FakeStateStore()


@pytest.fixture
def mock_fetcher():
    """Create a mock page fetcher."""
    return AsyncMock(spec=PageFetcher)


@pytest.fixture
def mock_notifier():
    """Create a mock notifier."""
    notifier = AsyncMock(spec=NtfyNotifier)
    notifier.send.return_value = None
    return notifier


@pytest.fixture
def sample_page_html():
    """Exams page without the target keyword."""
    return """<!DOCTYPE html>
<html>
    <head>
        <title>Japanese Language Proficiency Test</title>
        <script>window.dataLayer = [{"ts": 1718000000}];</script>
        <style>.banner { color: red; }</style>
    </head>
    <body>
        <!-- cache generated 2025-06-10T10:00:00Z -->
        <main>
            <h1>JLPT at UCD</h1>
            <p>The December 2025 test will be held on Sunday 7 December.</p>
            <noscript><img src="/pixel.gif?id=abc123"></noscript>
        </main>
        <footer>&copy; University College Dublin, rendered in 41ms</footer>
    </body>
</html>
"""


@pytest.fixture
def keyword_page_html():
    """Exams page announcing next year's dates."""
    return """<html>
    <body>
        <main>
            <h1>JLPT at UCD</h1>
            <p>Registration for the July 2026 test opens in March.</p>
        </main>
        <footer>&copy; University College Dublin</footer>
    </body>
</html>
"""


@pytest.fixture
def store_factory():
    """Build in-memory state stores with preset data or failing keys."""
    return FakeStateStore


@pytest.fixture
def page_digest():
    """Compute the digest the checker stores for a page."""
    return digest_of
