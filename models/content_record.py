from dataclasses import dataclass
from datetime import datetime
from typing import Optional

@dataclass
class ContentRecord:
    """Model danych: opublikowany post/wideo zapisany w systemie"""
    id: str
    owner_id: str
    platform: str  # "instagram"/"youtube"
    status: str = "published"
    title: str = ""
    caption: str = ""
    created_at: Optional[datetime] = None
    remote_media_id: Optional[str] = None
    remote_creation_id: Optional[str] = None
    permalink_url: Optional[str] = None
    media_url: Optional[str] = None
    platform_post_id: Optional[str] = None

    def display_title(self) -> str:
        """Tytuł do wyświetlenia przy komentarzu"""
        return self.title or (self.caption or "")[:50] or "Untitled"

    def youtube_video_id(self) -> Optional[str]:
        """ID wideo YouTube (remote id ma pierwszeństwo)"""
        return self.remote_media_id or self.platform_post_id

    def to_dict(self):
        """Konwersja do słownika"""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "platform": self.platform,
            "status": self.status,
            "title": self.title,
            "caption": self.caption,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "remote_media_id": self.remote_media_id,
            "remote_creation_id": self.remote_creation_id,
            "permalink_url": self.permalink_url,
            "media_url": self.media_url,
            "platform_post_id": self.platform_post_id,
        }
