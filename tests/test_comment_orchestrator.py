"""
Tests for CommentAnalysisOrchestrator.

Tests cover:
- Cached reads (fresh, stale, missing, expired)
- Refresh runs with collectors, platform filters and collector failures
- Scope errors surfaced to the caller
- Ad-hoc analysis and cache invalidation
"""

import pytest
import httpx
from datetime import timedelta

from models.analysis_cache_entry import AnalysisCacheEntry, CommentSummary
from models.comment import ClassifiedComment
from models.content_record import ContentRecord
from services.cache_policy import expiry_for
from services.comment_orchestrator import CommentAnalysisOrchestrator, RefreshLockRegistry, adhoc_ids
from services.errors import PlatformScopeError
from services.instagram_collector import InstagramCollector
from services.youtube_collector import YouTubeCollector


class StubInstagramCollector:
    def __init__(self, comments=None, error=None):
        self.comments = comments or []
        self.error = error
        self.calls = 0

    def collect(self, account, resolver, cutoff):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.comments)


class StubYouTubeCollector:
    def __init__(self, comments=None, error=None):
        self.comments = comments or []
        self.error = error
        self.calls = []

    def collect(self, account, contents, resolver, cutoff, tracker=None):
        self.calls.append((contents, cutoff))
        if self.error:
            raise self.error
        return list(self.comments)


@pytest.fixture
def build_orchestrator(cache_store, content_store, account_store, classifier, summarizer, clock):
    def _build(instagram=None, youtube=None):
        return CommentAnalysisOrchestrator(
            cache_store,
            content_store,
            account_store,
            instagram_collector=instagram or StubInstagramCollector(),
            youtube_collector=youtube or StubYouTubeCollector(),
            classifier=classifier,
            summarizer=summarizer,
            clock=clock,
        )
    return _build


def seed_entry(cache_store, now, time_range, minutes_ago, make_comment, summary=True):
    refreshed_at = now - timedelta(minutes=minutes_ago)
    cache_store.upsert(AnalysisCacheEntry(
        user_id="u1",
        platform="all",
        time_range=time_range,
        comments=[ClassifiedComment.from_unified(make_comment("cached-1"), {"category": "positive"})],
        summary=CommentSummary(total_comments=1, positive_count=1) if summary else None,
        refreshed_at=refreshed_at,
        expires_at=expiry_for(time_range, refreshed_at),
    ))


class TestCachedReads:
    """Tests for reads without refresh."""

    def test_missing_entry_needs_refresh(self, build_orchestrator):
        instagram = StubInstagramCollector()
        response = build_orchestrator(instagram=instagram).get_comments("u1", "all", "24h")

        assert response["needsRefresh"] is True
        assert response["comments"] == []
        assert response["summary"] is None
        assert instagram.calls == 0

    def test_stale_entry_still_returned(self, build_orchestrator, cache_store, fixed_now, make_comment):
        seed_entry(cache_store, fixed_now, "7d", 45, make_comment)
        response = build_orchestrator().get_comments("u1", "all", "7d")

        assert response["fromCache"] is True
        assert response["isStale"] is True
        assert response["needsRefresh"] is False
        assert response["comments"][0]["id"] == "cached-1"
        assert response["comments"][0]["category"] == "positive"
        assert response["summary"]["totalComments"] == 1

    def test_fresh_entry_not_stale(self, build_orchestrator, cache_store, fixed_now, make_comment):
        seed_entry(cache_store, fixed_now, "7d", 10, make_comment)
        response = build_orchestrator().get_comments("u1", "all", "7d")
        assert response["isStale"] is False
        assert response["isPartial"] is False

    def test_expired_entry_treated_as_missing(self, build_orchestrator, cache_store, fixed_now, make_comment):
        seed_entry(cache_store, fixed_now, "24h", 45, make_comment)
        assert build_orchestrator().get_comments("u1", "all", "24h")["needsRefresh"] is True

    def test_checkpoint_reported_as_partial(self, build_orchestrator, cache_store, fixed_now, make_comment):
        seed_entry(cache_store, fixed_now, "28d", 5, make_comment, summary=False)
        response = build_orchestrator().get_comments("u1", "all", "28d")
        assert response["isPartial"] is True
        assert response["summary"] is None


class TestRefresh:
    """Tests for refresh runs."""

    def test_refresh_truncates_to_150(self, build_orchestrator, cache_store, fixed_now, make_comments):
        instagram = StubInstagramCollector(make_comments(120, prefix="ig"))
        youtube = StubYouTubeCollector(make_comments(100, platform="youtube", prefix="yt"))

        response = build_orchestrator(instagram, youtube).get_comments("u1", "all", "7d", refresh=True)

        assert response["fromCache"] is False
        assert response["truncated"] is True
        assert len(response["comments"]) == 150
        assert response["platformErrors"] == []
        assert cache_store.get(("u1", "all", "7d"), now=fixed_now) is not None

    def test_refresh_response_timestamps(self, build_orchestrator, make_comments):
        response = build_orchestrator(StubInstagramCollector(make_comments(3))).get_comments(
            "u1", "all", "24h", refresh=True
        )
        assert response["refreshedAt"] == "2024-06-01T12:00:00Z"
        assert response["expiresAt"] == "2024-06-01T12:30:00Z"

    def test_platform_filter_runs_single_collector(self, build_orchestrator):
        instagram = StubInstagramCollector()
        youtube = StubYouTubeCollector()
        build_orchestrator(instagram, youtube).get_comments("u1", "youtube", "24h", refresh=True)

        assert instagram.calls == 0
        assert len(youtube.calls) == 1

    def test_failing_collector_does_not_fail_request(self, build_orchestrator, cache_store, make_comments):
        instagram = StubInstagramCollector(error=RuntimeError("API down"))
        youtube = StubYouTubeCollector(make_comments(5, platform="youtube"))

        response = build_orchestrator(instagram, youtube).get_comments("u1", "all", "24h", refresh=True)

        assert response["success"] is True
        assert len(response["comments"]) == 5
        assert response["platformErrors"] == []

    def test_scope_error_reported(self, build_orchestrator, make_comments):
        instagram = StubInstagramCollector(make_comments(2))
        youtube = StubYouTubeCollector(error=PlatformScopeError("youtube", "Połącz ponownie konto"))

        response = build_orchestrator(instagram, youtube).get_comments("u1", "all", "24h", refresh=True)

        assert len(response["comments"]) == 2
        assert response["platformErrors"] == [{
            "platform": "youtube",
            "code": "reauthorization_required",
            "message": "Połącz ponownie konto",
        }]

    def test_contents_loaded_for_time_range(self, build_orchestrator, content_store, youtube_record, fixed_now):
        old = ContentRecord(
            id="rec-old", owner_id="u1", platform="youtube", created_at=fixed_now - timedelta(days=3),
            remote_media_id="vid-old",
        )
        content_store.save(youtube_record)
        content_store.save(old)
        youtube = StubYouTubeCollector()

        response = build_orchestrator(youtube=youtube).get_comments("u1", "youtube", "24h", refresh=True)

        contents, cutoff = youtube.calls[0]
        assert [c.id for c in contents] == ["rec-yt-1"]
        assert cutoff == fixed_now - timedelta(hours=24)
        assert response["totalContentsConsidered"] == 1

    def test_all_http_calls_failing_still_writes_entry(
        self, cache_store, content_store, account_store, classifier, summarizer, clock,
        mock_http, instagram_account, youtube_account, youtube_record
    ):
        account_store.save(instagram_account)
        account_store.save(youtube_account)
        content_store.save(youtube_record)
        http = mock_http(lambda request: httpx.Response(500, json={"error": {"message": "down"}}))

        orchestrator = CommentAnalysisOrchestrator(
            cache_store,
            content_store,
            account_store,
            instagram_collector=InstagramCollector(http_client=http),
            youtube_collector=YouTubeCollector(account_store, http_client=http),
            classifier=classifier,
            summarizer=summarizer,
            clock=clock,
        )
        response = orchestrator.get_comments("u1", "all", "24h", refresh=True)

        assert response["comments"] == []
        assert response["summary"]["totalComments"] == 0
        entry = cache_store.get(("u1", "all", "24h"), now=clock())
        assert entry is not None
        assert entry.summary is not None

    def test_refresh_replaces_previous_entry(self, build_orchestrator, cache_store, fixed_now, make_comment, make_comments):
        seed_entry(cache_store, fixed_now, "7d", 20, make_comment)
        build_orchestrator(StubInstagramCollector(make_comments(2, prefix="n"))).get_comments(
            "u1", "all", "7d", refresh=True
        )

        entry = cache_store.get(("u1", "all", "7d"), now=fixed_now)
        assert [c.id for c in entry.comments] == ["n0", "n1"]
        assert entry.refreshed_at == fixed_now


class TestInvalidateAndAnalyze:
    """Tests for cache invalidation and ad-hoc analysis."""

    def test_invalidate_all(self, build_orchestrator, cache_store, fixed_now, make_comment):
        seed_entry(cache_store, fixed_now, "7d", 1, make_comment)
        seed_entry(cache_store, fixed_now, "1y", 1, make_comment)

        assert build_orchestrator().invalidate("u1", "all") == 2
        assert cache_store.get(("u1", "all", "7d"), now=fixed_now) is None

    def test_analyze_does_not_touch_cache(self, build_orchestrator, cache_store):
        response = build_orchestrator().analyze_comments([
            {"id": "a", "text": "Świetne!", "timestamp": "2024-06-01T10:00:00Z"},
            {"text": "Bez id"},
        ])

        assert response["success"] is True
        assert len(response["classifiedComments"]) == 2
        assert response["summary"]["positiveCount"] == 2
        assert cache_store.write_history == []

    def test_analyze_keeps_every_comment_in_input_order(self, build_orchestrator, cache_store):
        response = build_orchestrator().analyze_comments([
            {"id": "1", "text": "a", "timestamp": "2024-01-01T10:00:00Z"},
            {"text": "b", "timestamp": "2024-06-01T10:00:00Z"},
            {"id": "x", "text": "c"},
            {"id": "x", "text": "d"},
        ])

        classified = response["classifiedComments"]
        assert [c["text"] for c in classified] == ["a", "b", "c", "d"]
        assert [c["id"] for c in classified] == ["1", "adhoc-1", "adhoc-2", "adhoc-3"]
        assert response["summary"]["totalComments"] == 4
        assert cache_store.write_history == []

    def test_analyze_none_summary_falls_back_to_statistics(self, cache_store, content_store, account_store,
                                                           classifier, clock):
        orchestrator = CommentAnalysisOrchestrator(
            cache_store, content_store, account_store,
            instagram_collector=StubInstagramCollector(),
            youtube_collector=StubYouTubeCollector(),
            classifier=classifier,
            summarizer=NoneSummarizer(),
            clock=clock,
        )

        summary = orchestrator.analyze_comments([{"text": "a"}, {"text": "b"}])["summary"]

        assert summary["totalComments"] == 2
        assert summary["criticalInsights"] == "Nie udało się teraz wygenerować szczegółowych wniosków."


class NoneSummarizer:
    def generate_comment_summary(self, items):
        return None


class TestAdhocIds:
    """Tests for ids assigned to ad-hoc comments."""

    def test_unique_caller_ids_kept(self):
        assert adhoc_ids([{"id": "a"}, {"id": 7}]) == ["a", "7"]

    def test_missing_and_empty_ids_replaced(self):
        assert adhoc_ids([{"text": "x"}, {"id": ""}, {"id": None}]) == ["adhoc-0", "adhoc-1", "adhoc-2"]

    def test_duplicated_caller_ids_replaced(self):
        assert adhoc_ids([{"id": "x"}, {"id": "x"}]) == ["adhoc-0", "adhoc-1"]

    def test_fallback_avoids_caller_ids(self):
        ids = adhoc_ids([{"id": "adhoc-1"}, {"text": "bez id"}])
        assert ids == ["adhoc-1", "_adhoc-1"]
        assert len(set(ids)) == 2


class TestRefreshLockRegistry:
    """Tests for per-key refresh locks."""

    def test_key_released_after_hold(self):
        registry = RefreshLockRegistry()

        with registry.hold(("u1", "all", "24h")):
            assert len(registry) == 1
        assert len(registry) == 0

    def test_key_released_after_error(self):
        registry = RefreshLockRegistry()

        with pytest.raises(RuntimeError):
            with registry.hold(("u1", "all", "24h")):
                raise RuntimeError("boom")
        assert len(registry) == 0

    def test_refresh_leaves_no_locks(self, build_orchestrator, make_comments):
        orchestrator = build_orchestrator(instagram=StubInstagramCollector(make_comments(2)))

        for time_range in ("24h", "7d", "28d"):
            orchestrator.get_comments("u1", "all", time_range, refresh=True)

        assert len(orchestrator.locks) == 0
