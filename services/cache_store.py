"""
Cache analiz komentarzy - interfejs magazynu klucz-wartość z semantyką upsert
"""
import json
import threading
from datetime import datetime
from typing import Dict, Optional, Tuple

from models.analysis_cache_entry import AnalysisCacheEntry, CommentSummary
from models.comment import ClassifiedComment
from services.cache_policy import is_expired
from services.database_service import DatabaseService, to_db_datetime, from_db_datetime
from utils.helpers import utc_now

CacheKey = Tuple[str, str, str]  # (user_id, platform, time_range)

class CacheStore:
    """Interfejs magazynu analiz. Jeden żywy wpis na klucz, ostatni zapis wygrywa."""

    def get(self, key: CacheKey, now: Optional[datetime] = None) -> Optional[AnalysisCacheEntry]:
        """Zwraca wpis lub None (wpisy po expires_at traktowane jak brak)"""
        raise NotImplementedError

    def upsert(self, entry: AnalysisCacheEntry) -> None:
        raise NotImplementedError

    def delete(self, user_id: str, platform: Optional[str] = None) -> int:
        """Usuwa wpisy użytkownika (dla platformy lub wszystkie), zwraca liczbę usuniętych"""
        raise NotImplementedError

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        raise NotImplementedError


class InMemoryCacheStore(CacheStore):
    """Magazyn w pamięci (testy, uruchomienia lokalne)"""

    def __init__(self):
        self._entries: Dict[CacheKey, AnalysisCacheEntry] = {}
        self._lock = threading.Lock()
        self.write_history = []  # kolejne zapisy (checkpointy + wpis końcowy)

    def get(self, key: CacheKey, now: Optional[datetime] = None) -> Optional[AnalysisCacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
        if entry and is_expired(entry, now):
            return None
        return entry

    def upsert(self, entry: AnalysisCacheEntry) -> None:
        with self._lock:
            self._entries[entry.key] = entry
            self.write_history.append(entry)

    def delete(self, user_id: str, platform: Optional[str] = None) -> int:
        with self._lock:
            keys = [
                k for k in self._entries
                if k[0] == user_id and (platform is None or k[1] == platform)
            ]
            for k in keys:
                del self._entries[k]
            return len(keys)

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utc_now()
        with self._lock:
            keys = [k for k, e in self._entries.items() if is_expired(e, now)]
            for k in keys:
                del self._entries[k]
            return len(keys)


class SqliteCacheStore(CacheStore):
    """Magazyn w SQLite (tabela comment_analysis)"""

    def __init__(self, db: DatabaseService):
        self.db = db

    def get(self, key: CacheKey, now: Optional[datetime] = None) -> Optional[AnalysisCacheEntry]:
        rows = self.db.execute_query(
            "SELECT * FROM comment_analysis WHERE user_id = ? AND platform = ? AND time_range = ?",
            key
        )
        if not rows:
            return None

        entry = self._row_to_entry(rows[0])
        if is_expired(entry, now):
            return None
        return entry

    def upsert(self, entry: AnalysisCacheEntry) -> None:
        self.db.execute_update("""
            INSERT OR REPLACE INTO comment_analysis
            (user_id, platform, time_range, comments, summary, refreshed_at, expires_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            entry.user_id,
            entry.platform,
            entry.time_range,
            json.dumps([c.to_dict() for c in entry.comments], ensure_ascii=False),
            json.dumps(entry.summary.to_dict(), ensure_ascii=False) if entry.summary else None,
            to_db_datetime(entry.refreshed_at),
            to_db_datetime(entry.expires_at),
        ))

    def delete(self, user_id: str, platform: Optional[str] = None) -> int:
        if platform:
            return self.db.execute_update(
                "DELETE FROM comment_analysis WHERE user_id = ? AND platform = ?",
                (user_id, platform)
            )
        return self.db.execute_update("DELETE FROM comment_analysis WHERE user_id = ?", (user_id,))

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utc_now()
        return self.db.execute_update(
            "DELETE FROM comment_analysis WHERE expires_at <= ?",
            (to_db_datetime(now),)
        )

    def _row_to_entry(self, row) -> AnalysisCacheEntry:
        summary = json.loads(row['summary']) if row['summary'] else None
        return AnalysisCacheEntry(
            user_id=row['user_id'],
            platform=row['platform'],
            time_range=row['time_range'],
            comments=[ClassifiedComment.from_dict(c) for c in json.loads(row['comments'])],
            summary=CommentSummary.from_dict(summary) if summary else None,
            refreshed_at=from_db_datetime(row['refreshed_at']),
            expires_at=from_db_datetime(row['expires_at']),
        )
