"""
Tests for content identity resolution and dedup helpers.
"""

import pytest
from datetime import timedelta

from models.content_record import ContentRecord
from services.dedup import ProcessedIdTracker, remove_duplicate_comments
from services.identity_resolver import IdentityResolver


@pytest.fixture
def records(fixed_now):
    # Od najnowszych, tak jak zwraca ContentStore
    return [
        ContentRecord(
            id="new", owner_id="u1", platform="instagram", title="Nowy post",
            created_at=fixed_now - timedelta(hours=1),
            remote_media_id="m-shared", permalink_url="https://instagram.com/p/new",
        ),
        ContentRecord(
            id="old", owner_id="u1", platform="instagram", caption="Stary podpis",
            created_at=fixed_now - timedelta(hours=5),
            remote_media_id="m-shared", platform_post_id="post-old",
            media_url="https://cdn.example.com/old.jpg",
        ),
    ]


class TestIdentityResolver:
    """Tests for IdentityResolver."""

    def test_match_by_remote_media_id(self, records):
        resolved = IdentityResolver(records).resolve("instagram", "m-shared")
        assert resolved.matched
        assert resolved.content_id == "new"
        assert resolved.content_title == "Nowy post"
        assert resolved.content_url == "https://instagram.com/p/new"

    def test_newest_record_wins_on_collision(self, records):
        resolver = IdentityResolver(records)
        assert resolver.index["m-shared"].id == "new"
        assert resolver.index["post-old"].id == "old"

    def test_match_by_permalink(self, records):
        resolved = IdentityResolver(records).resolve(
            "instagram", "unknown-id", permalink="https://instagram.com/p/new"
        )
        assert resolved.content_id == "new"

    def test_match_falls_back_to_media_url(self, records):
        resolved = IdentityResolver(records).resolve("instagram", "post-old")
        assert resolved.content_id == "old"
        assert resolved.content_title == "Stary podpis"
        assert resolved.content_url == "https://cdn.example.com/old.jpg"

    def test_synthetic_record_uses_caption(self, records):
        caption = "x" * 120
        resolved = IdentityResolver(records).resolve(
            "instagram", "ig-999", permalink="https://instagram.com/p/999", caption=caption
        )
        assert not resolved.matched
        assert resolved.content_id == "instagram:ig-999"
        assert resolved.content_title == "x" * 80
        assert resolved.content_url == "https://instagram.com/p/999"

    @pytest.mark.parametrize("platform,title", [
        ("instagram", "Instagram post"),
        ("youtube", "YouTube video"),
    ])
    def test_synthetic_placeholder_title(self, platform, title):
        resolved = IdentityResolver([]).resolve(platform, "abc")
        assert resolved.content_title == title
        assert resolved.content_id == f"{platform}:abc"

    def test_untitled_record(self):
        record = ContentRecord(id="r", owner_id="u1", platform="youtube", remote_media_id="v")
        assert IdentityResolver([record]).resolve("youtube", "v").content_title == "Untitled"


class TestDedup:
    """Tests for ProcessedIdTracker and comment dedup."""

    def test_filter_new_skips_processed_and_repeats(self):
        tracker = ProcessedIdTracker()
        tracker.mark("a")
        assert tracker.filter_new(["a", "b", "c", "b", None]) == ["b", "c"]
        assert "a" in tracker
        assert len(tracker) == 1

    def test_remove_duplicate_comments_keeps_first(self, make_comment):
        first = make_comment("1", text="pierwszy")
        duplicate = make_comment("1", text="drugi")
        other = make_comment("2")

        unique = remove_duplicate_comments([first, duplicate, other])

        assert [c.text for c in unique] == ["pierwszy", "Komentarz 2"]
