"""
Kolektor komentarzy Instagram (Graph API)
"""
from datetime import datetime
from typing import List, Optional

from models.comment import UnifiedComment
from models.platform_account import PlatformAccount
from services.base_collector import BaseCollector
from services.errors import CommentFetchError
from services.identity_resolver import IdentityResolver
from utils.helpers import parse_timestamp, to_iso

INSTAGRAM_API_BASE = "https://graph.facebook.com/v18.0"

class InstagramCollector(BaseCollector):
    """Pobiera media konta biznesowego i komentarze pod nimi"""
    platform = "instagram"
    log_context = "Instagram Comments"

    def __init__(self, http_client=None, timeout: float = None):
        super().__init__(http_client, timeout)

        # Limity pobierania
        self.max_media = 200  # Maksymalna liczba pobranych media
        self.max_media_with_comments = 20  # Dla ilu media pobieramy komentarze
        self.page_size = 100

    def collect(
        self,
        account: Optional[PlatformAccount],
        resolver: IdentityResolver,
        cutoff: datetime
    ) -> List[UnifiedComment]:
        """Główna funkcja: media → komentarze → UnifiedComment"""
        if not account or not account.has_access():
            self.log("Konto niepołączone lub brak tokenu", "WARNING")
            return []

        business_id = self.resolve_business_id(account)
        if not business_id:
            self.log("Nie udało się ustalić ID konta biznesowego", "WARNING")
            return []

        media_list = self.fetch_media_list(business_id, account.access_token)
        self.log(f"Pobrano {len(media_list)} media")

        # Tylko media z zakresu czasu (bez daty - zachowaj)
        in_range = [
            media for media in media_list
            if not media.get("timestamp") or self.within_cutoff(media.get("timestamp"), cutoff)
        ][:self.max_media_with_comments]

        if not in_range:
            self.log("Brak media w zakresie czasu", "WARNING")
            return []

        collected = []
        for media in in_range:
            media_id = media.get("id")
            try:
                comments = self.fetch_media_comments(media_id, account.access_token)
            except CommentFetchError as e:
                self.log(f"Błąd pobierania komentarzy dla media {media_id}: {str(e)}", "ERROR")
                continue

            self.log(f"Pobrano {len(comments)} komentarzy dla media {media_id}", "DEBUG")
            if comments:
                collected.extend(self._map_comments(media, comments, resolver, cutoff))

        self.log(f"Komentarze po filtrze daty: {len(collected)}")
        return collected

    def resolve_business_id(self, account: PlatformAccount) -> Optional[str]:
        """ID konta biznesowego: zapisane lub z /me dla tokenu"""
        if account.external_account_id:
            return account.external_account_id

        try:
            data = self.get_json(
                f"{INSTAGRAM_API_BASE}/me",
                params={"fields": "id", "access_token": account.access_token},
                label="/me"
            )
        except CommentFetchError as e:
            self.log(f"Nie udało się pobrać ID użytkownika z tokenu: {str(e)}", "ERROR")
            return None

        return data.get("id") or None

    def fetch_media_list(self, business_id: str, access_token: str) -> List[dict]:
        """Lista media z paginacją po kursorze (paging.next), max self.max_media"""
        media = []
        next_url = f"{INSTAGRAM_API_BASE}/{business_id}/media"
        params = {
            "fields": "id,caption,media_type,permalink,timestamp",
            "limit": self.page_size,
            "access_token": access_token,
        }

        while next_url:
            try:
                data = self.get_json(next_url, params=params, label=f"/{business_id}/media")
            except CommentFetchError as e:
                self.log(f"Błąd listy media: {str(e)}", "ERROR")
                break

            batch = data.get("data") or []
            media.extend(batch)

            next_url = (data.get("paging") or {}).get("next")
            # Link "next" zawiera już wszystkie parametry
            params = None

            if len(media) >= self.max_media:
                self.log(f"Osiągnięto limit {self.max_media} media", "INFO")
                break

        return media[:self.max_media]

    def fetch_media_comments(self, media_id: str, access_token: str) -> List[dict]:
        data = self.get_json(
            f"{INSTAGRAM_API_BASE}/{media_id}/comments",
            params={
                "fields": "id,text,username,timestamp,like_count",
                "access_token": access_token,
            },
            label=f"/{media_id}/comments"
        )
        return data.get("data") or []

    def _map_comments(
        self,
        media: dict,
        comments: List[dict],
        resolver: IdentityResolver,
        cutoff: datetime
    ) -> List[UnifiedComment]:
        identity = resolver.resolve(
            self.platform,
            media.get("id"),
            permalink=media.get("permalink"),
            caption=media.get("caption")
        )

        mapped = []
        for comment in comments:
            if not comment.get("id"):
                continue
            timestamp = parse_timestamp(comment.get("timestamp"))
            if not timestamp or timestamp < cutoff:
                continue

            mapped.append(UnifiedComment(
                id=str(comment.get("id")),
                text=comment.get("text") or "",
                author=comment.get("username") or "",
                timestamp=to_iso(timestamp),
                platform=self.platform,
                content_id=identity.content_id,
                content_title=identity.content_title,
                content_url=identity.content_url,
            ))

        return mapped
