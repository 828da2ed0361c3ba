from datetime import datetime
from typing import List, Optional

from models.content_record import ContentRecord
from services.database_service import DatabaseService, to_db_datetime, from_db_datetime

class ContentStore:
    """Odczyt opublikowanych treści użytkownika (tabela content_records)"""

    def __init__(self, db: DatabaseService):
        self.db = db

    def find_for_owner(
        self,
        owner_id: str,
        platform: Optional[str] = None,
        status: str = "published",
        since: Optional[datetime] = None,
        limit: int = 50
    ) -> List[ContentRecord]:
        """Treści właściciela od `since`, od najnowszych (platform=None lub "all" = wszystkie)"""
        query = "SELECT * FROM content_records WHERE owner_id = ? AND status = ?"
        params = [owner_id, status]

        if platform and platform != "all":
            query += " AND platform = ?"
            params.append(platform)

        if since:
            query += " AND created_at >= ?"
            params.append(to_db_datetime(since))

        query += " ORDER BY created_at DESC LIMIT ?"
        params.append(limit)

        return [self._row_to_record(row) for row in self.db.execute_query(query, tuple(params))]

    def save(self, record: ContentRecord) -> None:
        """Zapisuje treść (używane przez skrypty i testy)"""
        self.db.execute_update("""
            INSERT OR REPLACE INTO content_records
            (id, owner_id, platform, status, title, caption, created_at,
             remote_media_id, remote_creation_id, permalink_url, media_url, platform_post_id)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            record.id,
            record.owner_id,
            record.platform,
            record.status,
            record.title,
            record.caption,
            to_db_datetime(record.created_at),
            record.remote_media_id,
            record.remote_creation_id,
            record.permalink_url,
            record.media_url,
            record.platform_post_id,
        ))

    def _row_to_record(self, row) -> ContentRecord:
        return ContentRecord(
            id=row['id'],
            owner_id=row['owner_id'],
            platform=row['platform'],
            status=row['status'],
            title=row['title'] or '',
            caption=row['caption'] or '',
            created_at=from_db_datetime(row['created_at']),
            remote_media_id=row['remote_media_id'],
            remote_creation_id=row['remote_creation_id'],
            permalink_url=row['permalink_url'],
            media_url=row['media_url'],
            platform_post_id=row['platform_post_id'],
        )
