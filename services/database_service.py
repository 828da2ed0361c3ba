"""
Serwis bazy danych SQLite - zarządzanie połączeniem i schematem
"""
import sqlite3
import os
from datetime import datetime, timezone
from typing import Optional
from contextlib import contextmanager

from config import DATABASE_PATH

class DatabaseService:
    """Serwis zarządzania bazą danych SQLite (ścieżka wstrzykiwana, bez singletona)"""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or DATABASE_PATH

        data_dir = os.path.dirname(self.db_path)
        if data_dir:
            os.makedirs(data_dir, exist_ok=True)

        # Inicjalizuj schemat
        self._init_schema()

    @contextmanager
    def get_connection(self):
        """Context manager dla połączenia z bazą danych"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row  # Umożliwia dostęp przez nazwy kolumn
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self):
        """Inicjalizuje schemat bazy danych"""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            # Tabela comment_analysis - jeden wpis na (user, platforma, zakres)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS comment_analysis (
                    user_id TEXT NOT NULL,
                    platform TEXT NOT NULL,
                    time_range TEXT NOT NULL,
                    comments TEXT NOT NULL,  -- JSON string
                    summary TEXT,  -- JSON string, NULL = checkpoint
                    refreshed_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, platform, time_range)
                )
            """)

            # Tabela content_records - opublikowane treści
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS content_records (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    platform TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'published',
                    title TEXT DEFAULT '',
                    caption TEXT DEFAULT '',
                    created_at TEXT NOT NULL,
                    remote_media_id TEXT,
                    remote_creation_id TEXT,
                    permalink_url TEXT,
                    media_url TEXT,
                    platform_post_id TEXT
                )
            """)

            # Tabela platform_accounts - tokeny OAuth
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS platform_accounts (
                    user_id TEXT NOT NULL,
                    platform TEXT NOT NULL,
                    connected INTEGER NOT NULL DEFAULT 1,
                    access_token TEXT,
                    refresh_token TEXT,
                    token_expires_at TEXT,
                    external_account_id TEXT,
                    PRIMARY KEY (user_id, platform)
                )
            """)

            # Indeksy dla lepszej wydajności
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_comment_analysis_expires_at ON comment_analysis(expires_at)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_content_records_owner ON content_records(owner_id, platform, status, created_at)")

            conn.commit()

    def execute_query(self, query: str, params: tuple = ()):
        """Wykonuje zapytanie i zwraca wyniki"""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def execute_update(self, query: str, params: tuple = ()):
        """Wykonuje zapytanie UPDATE/INSERT/DELETE"""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.rowcount


def to_db_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Zapis datetime jako ISO w UTC (porównywalne leksykograficznie)"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()

def from_db_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
