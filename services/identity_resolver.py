"""
Dopasowanie identyfikatorów media/wideo z API platform do zapisanych treści
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from models.content_record import ContentRecord
from services.logger import LoggerService
from utils.helpers import truncate_text

# Klucze kandydujące w kolejności priorytetu
KEY_EXTRACTORS: List[Callable[[ContentRecord], Optional[str]]] = [
    lambda record: record.remote_media_id,
    lambda record: record.platform_post_id,
    lambda record: record.remote_creation_id,
    lambda record: record.permalink_url,
    lambda record: record.media_url,
]

PLACEHOLDER_TITLES = {
    "instagram": "Instagram post",
    "youtube": "YouTube video",
}

SYNTHETIC_TITLE_LENGTH = 80

@dataclass
class ResolvedContent:
    """Tożsamość treści przypisywana do komentarzy"""
    content_id: str
    content_title: str
    content_url: Optional[str]
    matched: bool


class IdentityResolver:
    """Indeks klucz → treść budowany raz na zapytanie"""

    def __init__(self, records: List[ContentRecord], key_extractors=None):
        self.logger = LoggerService()
        self.key_extractors = key_extractors or KEY_EXTRACTORS
        self.index: Dict[str, ContentRecord] = {}

        for record in records:
            for extract in self.key_extractors:
                key = extract(record)
                # Rekordy są od najnowszych - przy kolizji wygrywa najnowszy
                if isinstance(key, str) and key:
                    self.index.setdefault(key, record)

        self.logger.add_log(f"Indeks treści: {len(self.index)} kluczy z {len(records)} rekordów",
                            "DEBUG", context="Identity")

    def match(self, external_id: Optional[str], permalink: Optional[str] = None) -> Optional[ContentRecord]:
        """Szuka po ID elementu, potem po permalinku"""
        for candidate in (external_id, permalink):
            if candidate and candidate in self.index:
                return self.index[candidate]
        return None

    def resolve(
        self,
        platform: str,
        external_id: str,
        permalink: Optional[str] = None,
        caption: Optional[str] = None
    ) -> ResolvedContent:
        """Zwraca tożsamość treści; przy braku dopasowania tworzy rekord syntetyczny"""
        record = self.match(external_id, permalink)

        if record:
            return ResolvedContent(
                content_id=record.id,
                content_title=record.display_title(),
                content_url=record.permalink_url or record.media_url or permalink,
                matched=True
            )

        self.logger.add_log(
            f"Brak dopasowania dla {platform}:{external_id} (permalink: {permalink or 'brak'}), "
            f"używam rekordu syntetycznego",
            "WARNING",
            context="Identity"
        )
        return ResolvedContent(
            content_id=f"{platform}:{external_id}",
            content_title=truncate_text(caption, SYNTHETIC_TITLE_LENGTH) or PLACEHOLDER_TITLES.get(platform, "Post"),
            content_url=permalink,
            matched=False
        )
