"""
Pytest fixtures for comment analysis tests.

Provides:
- Fixed clock and comment factories
- In-memory and SQLite stores
- Fake classifier / summarizer
- httpx mock transport helpers
- Flask test client with an injected orchestrator
"""

import pytest
import httpx
from datetime import datetime, timedelta, timezone

from models.comment import UnifiedComment
from models.content_record import ContentRecord
from models.platform_account import PlatformAccount
from services.account_store import AccountStore
from services.cache_store import InMemoryCacheStore
from services.content_store import ContentStore
from services.database_service import DatabaseService
from services.gemini_service import GeminiService
from services.logger import LoggerService
from utils.helpers import to_iso


FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# CLOCK AND COMMENT FIXTURES
# =============================================================================

@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    """Clock callable returning a fixed instant."""
    return lambda: fixed_now


@pytest.fixture
def make_comment(fixed_now):
    """Factory for UnifiedComment posted `minutes_ago` before the fixed clock."""
    def _make(comment_id, minutes_ago=1, platform="instagram", text=None, content_id="c1"):
        return UnifiedComment(
            id=str(comment_id),
            text=text or f"Komentarz {comment_id}",
            author="autor",
            timestamp=to_iso(fixed_now - timedelta(minutes=minutes_ago)),
            platform=platform,
            content_id=content_id,
            content_title="Post",
            content_url="https://example.com/p/1",
        )
    return _make


@pytest.fixture
def make_comments(make_comment):
    """Factory for `count` comments, newest first, one minute apart."""
    def _make(count, platform="instagram", prefix="c"):
        return [make_comment(f"{prefix}{i}", minutes_ago=i + 1, platform=platform) for i in range(count)]
    return _make


# =============================================================================
# CLASSIFIER / SUMMARIZER FAKES
# =============================================================================

class FakeClassifier:
    """Classifies every comment as positive; fails on selected calls (1-based)."""

    def __init__(self, fail_on=(), skip_ids=()):
        self.fail_on = set(fail_on)
        self.skip_ids = set(skip_ids)
        self.calls = []

    def classify_comments(self, batch):
        self.calls.append([c["id"] for c in batch])
        if len(self.calls) in self.fail_on:
            raise RuntimeError("classifier unavailable")
        return [
            {"id": c["id"], "category": "positive", "sentiment": 0.8, "toxicity": 0.05, "reasoning": "ok"}
            for c in batch
            if c["id"] not in self.skip_ids
        ]


class FakeSummarizer:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def generate_comment_summary(self, items):
        self.calls.append(items)
        if self.fail:
            raise RuntimeError("summarizer unavailable")
        summary = GeminiService.compute_statistics(items)
        if items:
            summary.critical_insights = "Wnioski testowe"
        return summary


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def summarizer():
    return FakeSummarizer()


# =============================================================================
# STORAGE FIXTURES
# =============================================================================

@pytest.fixture
def cache_store():
    return InMemoryCacheStore()


@pytest.fixture
def db(tmp_path):
    """SQLite database in a temporary directory."""
    return DatabaseService(str(tmp_path / "data" / "test.db"))


@pytest.fixture
def content_store(db):
    return ContentStore(db)


@pytest.fixture
def account_store(db):
    return AccountStore(db)


@pytest.fixture
def youtube_account(fixed_now):
    return PlatformAccount(
        user_id="u1",
        platform="youtube",
        access_token="yt-token",
        refresh_token="yt-refresh",
        token_expires_at=fixed_now + timedelta(days=3650),
        external_account_id="channel-1",
    )


@pytest.fixture
def instagram_account():
    return PlatformAccount(
        user_id="u1",
        platform="instagram",
        access_token="ig-token",
        external_account_id="biz-1",
    )


@pytest.fixture
def youtube_record(fixed_now):
    return ContentRecord(
        id="rec-yt-1",
        owner_id="u1",
        platform="youtube",
        title="Moje wideo",
        created_at=fixed_now - timedelta(hours=2),
        remote_media_id="vid1",
    )


# =============================================================================
# HTTP FIXTURES
# =============================================================================

@pytest.fixture
def mock_http():
    """Builds an httpx.Client backed by a handler; requests are recorded."""
    def _build(handler):
        requests = []

        def _record(request):
            requests.append(request)
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(_record))
        client.recorded = requests
        return client
    return _build


# =============================================================================
# LOGGER
# =============================================================================

@pytest.fixture(autouse=True)
def clear_logs():
    LoggerService().clear_logs()
    yield
    LoggerService().clear_logs()
