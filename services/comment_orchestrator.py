"""
Orchestrator analizy komentarzy - odczyt z cache lub pełny przebieg:
kolektory → dopasowanie treści → klasyfikacja → podsumowanie → cache
"""
import threading
from collections import Counter
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional

from models.analysis_cache_entry import AnalysisCacheEntry
from models.comment import UnifiedComment
from services.account_store import AccountStore
from services.cache_policy import cutoff_for, is_stale
from services.cache_store import CacheStore
from services.classification_pipeline import CommentClassificationPipeline
from services.content_store import ContentStore
from services.dedup import ProcessedIdTracker
from services.errors import PlatformScopeError
from services.identity_resolver import IdentityResolver
from services.instagram_collector import InstagramCollector
from services.logger import LoggerService
from services.youtube_collector import YouTubeCollector
from utils.helpers import to_iso, utc_now

CONTENT_QUERY_LIMIT = 50

def adhoc_ids(comments: List[dict]) -> List[str]:
    """ID komentarzy ad-hoc: ID klienta tylko gdy jest unikalne, inaczej adhoc-{idx}"""
    given = [str(c.get("id")) if c.get("id") not in (None, "") else None for c in comments]
    counts = Counter(i for i in given if i is not None)
    taken = set(counts)

    ids = []
    for idx, comment_id in enumerate(given):
        if comment_id is not None and counts[comment_id] == 1:
            ids.append(comment_id)
            continue
        fallback = f"adhoc-{idx}"
        while fallback in taken:
            fallback = f"_{fallback}"
        taken.add(fallback)
        ids.append(fallback)
    return ids

class RefreshLockRegistry:
    """Blokady per (user, platforma, zakres) - jedno odświeżanie klucza naraz w procesie"""

    def __init__(self):
        # klucz → [blokada, liczba oczekujących/trzymających]
        self._locks: Dict[tuple, list] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, key: tuple):
        with self._guard:
            slot = self._locks.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        try:
            with slot[0]:
                yield
        finally:
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)


class CommentAnalysisOrchestrator:
    """Obsługuje zapytanie o analizę komentarzy dla użytkownika"""

    def __init__(
        self,
        cache_store: CacheStore,
        content_store: ContentStore,
        account_store: AccountStore,
        instagram_collector: Optional[InstagramCollector] = None,
        youtube_collector: Optional[YouTubeCollector] = None,
        classifier=None,
        summarizer=None,
        clock: Callable = utc_now
    ):
        self.cache_store = cache_store
        self.content_store = content_store
        self.account_store = account_store
        self.instagram_collector = instagram_collector or InstagramCollector()
        self.youtube_collector = youtube_collector or YouTubeCollector(account_store)
        self.classifier = classifier
        self.summarizer = summarizer
        self.clock = clock
        self.logger = LoggerService()
        self.locks = RefreshLockRegistry()

    def get_comments(self, user_id: str, platform: str, time_range: str, refresh: bool = False) -> dict:
        """Punkt wejścia: cache bez refresh, pełny przebieg z refresh"""
        self._log(f"Zapytanie: zakres={time_range}, platforma={platform}, refresh={refresh}")

        if not refresh:
            return self.read_cached(user_id, platform, time_range)

        return self.refresh(user_id, platform, time_range)

    def read_cached(self, user_id: str, platform: str, time_range: str) -> dict:
        """Zwraca wpis z cache (także nieaktualny) lub znacznik needsRefresh"""
        now = self.clock()
        entry = self.cache_store.get((user_id, platform, time_range), now=now)

        if entry:
            return {
                "success": True,
                "comments": [c.to_api_dict() for c in entry.comments],
                "summary": entry.summary.to_dict() if entry.summary else None,
                "refreshedAt": to_iso(entry.refreshed_at) if entry.refreshed_at else None,
                "expiresAt": to_iso(entry.expires_at) if entry.expires_at else None,
                "fromCache": True,
                "isStale": is_stale(entry, now),
                "isPartial": entry.is_partial(),
                "needsRefresh": False,
            }

        return {
            "success": True,
            "comments": [],
            "summary": None,
            "refreshedAt": None,
            "fromCache": True,
            "isStale": True,
            "needsRefresh": True,
            "message": "Brak analizy komentarzy w cache. Odśwież, aby pobrać najnowsze komentarze.",
        }

    def refresh(self, user_id: str, platform: str, time_range: str) -> dict:
        """Pełny przebieg pobierania i klasyfikacji"""
        with self.locks.hold((user_id, platform, time_range)):
            now = self.clock()
            cutoff = cutoff_for(time_range, now)

            contents = self.content_store.find_for_owner(
                user_id, platform=platform, status="published", since=cutoff, limit=CONTENT_QUERY_LIMIT
            )
            self._log(f"Wczytano {len(contents)} treści użytkownika")

            comments, platform_errors = self.collect(user_id, platform, contents, cutoff)

            pipeline = CommentClassificationPipeline(
                self.cache_store,
                classifier=self.classifier,
                summarizer=self.summarizer,
                clock=self.clock
            )
            result = pipeline.run(user_id, platform, time_range, comments)

        return self._fresh_response(result.entry, len(contents), result.truncated, platform_errors)

    def collect(self, user_id: str, platform: str, contents, cutoff) -> tuple[List[UnifiedComment], List[dict]]:
        """Uruchamia kolektory wg filtra platformy; błąd kolektora nie przerywa zapytania"""
        resolver = IdentityResolver(contents)
        tracker = ProcessedIdTracker()
        all_comments: List[UnifiedComment] = []
        platform_errors: List[dict] = []

        if platform in ("all", "instagram"):
            account = self.account_store.get(user_id, "instagram")
            all_comments.extend(self._run_collector(
                "instagram",
                lambda: self.instagram_collector.collect(account, resolver, cutoff),
                platform_errors
            ))

        if platform in ("all", "youtube"):
            account = self.account_store.get(user_id, "youtube")
            all_comments.extend(self._run_collector(
                "youtube",
                lambda: self.youtube_collector.collect(account, contents, resolver, cutoff, tracker),
                platform_errors
            ))

        self._log(f"Zebrano łącznie {len(all_comments)} komentarzy")
        return all_comments, platform_errors

    def invalidate(self, user_id: str, platform: Optional[str] = None) -> int:
        """Usuwa zapisane analizy użytkownika"""
        removed = self.cache_store.delete(user_id, platform if platform and platform != "all" else None)
        self._log(f"Usunięto {removed} wpisów cache dla platformy {platform or 'wszystkie'}")
        return removed

    def analyze_comments(self, comments: List[dict]) -> dict:
        """Analiza ad-hoc przekazanych komentarzy (bez zapisu do cache, bez deduplikacji)"""
        unified = [
            UnifiedComment(
                id=comment_id,
                text=c.get("text") or "",
                author=c.get("author") or "",
                timestamp=c.get("timestamp") or "",
                platform=c.get("platform") or "",
                content_id=c.get("contentId") or "",
                content_title=c.get("contentTitle") or "",
                content_url=c.get("contentUrl"),
            )
            for comment_id, c in zip(adhoc_ids(comments), comments)
        ]

        pipeline = CommentClassificationPipeline(
            None,
            classifier=self.classifier,
            summarizer=self.summarizer,
            clock=self.clock
        )
        classified, summary = pipeline.classify_all(unified)

        return {
            "success": True,
            "classifiedComments": [c.to_api_dict() for c in classified],
            "summary": summary.to_dict(),
        }

    def _run_collector(self, name: str, collect: Callable, platform_errors: List[dict]) -> list:
        try:
            return collect()
        except PlatformScopeError as e:
            self._log(f"Błąd uprawnień {name}: {e.message}", "ERROR")
            platform_errors.append(e.to_dict())
        except Exception as e:
            self._log(f"Kolektor {name} zakończył się błędem: {str(e)}", "ERROR")
        return []

    def _fresh_response(self, entry: AnalysisCacheEntry, total_contents: int, truncated: bool, platform_errors) -> dict:
        return {
            "success": True,
            "comments": [c.to_api_dict() for c in entry.comments],
            "summary": entry.summary.to_dict() if entry.summary else None,
            "refreshedAt": to_iso(entry.refreshed_at),
            "expiresAt": to_iso(entry.expires_at),
            "fromCache": False,
            "isStale": False,
            "needsRefresh": False,
            "totalContentsConsidered": total_contents,
            "truncated": truncated,
            "platformErrors": platform_errors,
        }

    def _log(self, message: str, level: str = "INFO"):
        self.logger.add_log(message, level, context="Comments API")
