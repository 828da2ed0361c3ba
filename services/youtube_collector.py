"""
Kolektor komentarzy YouTube (Data API v3)

Dwie ścieżki pobierania:
1. zapisane treści YouTube → ID wideo → wątki komentarzy
2. skan kanału (25 najnowszych wideo) dla wideo opublikowanych poza systemem;
   ID przetworzone w ścieżce 1 są pomijane (ProcessedIdTracker)
"""
from datetime import datetime, timedelta
from typing import List, Optional

import httpx

from config import YOUTUBE_CLIENT_ID, YOUTUBE_CLIENT_SECRET
from models.comment import UnifiedComment
from models.content_record import ContentRecord
from models.platform_account import PlatformAccount
from services.account_store import AccountStore
from services.base_collector import BaseCollector, safe_json
from services.dedup import ProcessedIdTracker
from services.errors import CommentFetchError, PlatformScopeError, TokenRefreshError
from services.identity_resolver import IdentityResolver
from utils.helpers import parse_timestamp, to_iso, utc_now

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

SCOPE_ERROR_MARKER = "insufficient authentication scopes"
SCOPE_ERROR_MESSAGE = (
    "Token YouTube nie ma wymaganych uprawnień. Odłącz i połącz ponownie konto YouTube "
    "w ustawieniach profilu, aby umożliwić dostęp do komentarzy."
)

def watch_url(video_id: str) -> str:
    return f"https://youtube.com/watch?v={video_id}"


class YouTubeCollector(BaseCollector):
    """Pobiera wątki komentarzy z wideo kanału"""
    platform = "youtube"
    log_context = "YouTube Comments"

    def __init__(
        self,
        account_store: AccountStore,
        http_client=None,
        timeout: float = None,
        client_id: str = None,
        client_secret: str = None
    ):
        super().__init__(http_client, timeout)
        self.account_store = account_store
        self.client_id = client_id or YOUTUBE_CLIENT_ID
        self.client_secret = client_secret or YOUTUBE_CLIENT_SECRET

        # Parametry skanu kanału
        self.channel_search_limit = 25
        self.channel_fetch_limit = 10
        self.max_threads_per_video = 100

    def collect(
        self,
        account: Optional[PlatformAccount],
        contents: List[ContentRecord],
        resolver: IdentityResolver,
        cutoff: datetime,
        tracker: Optional[ProcessedIdTracker] = None
    ) -> List[UnifiedComment]:
        """
        Zbiera komentarze z obu ścieżek.
        PlatformScopeError jest propagowany do wywołującego; błąd odświeżenia tokenu
        oznacza brak YouTube w tym przebiegu (pusta lista).
        """
        if not account or not account.has_access():
            self.log("Pomijam YouTube - brak tokenu dostępu", "WARNING")
            return []

        try:
            access_token = self.ensure_fresh_token(account)
        except TokenRefreshError as e:
            self.log(f"Nie udało się odświeżyć tokenu, YouTube niedostępny: {str(e)}", "ERROR")
            return []

        tracker = tracker if tracker is not None else ProcessedIdTracker()

        comments = self.collect_from_contents(contents, access_token, cutoff, tracker)
        self.log(f"Ścieżka treści: {len(comments)} komentarzy z {len(tracker)} wideo")

        channel_comments = self.collect_from_channel(account, access_token, resolver, cutoff, tracker)
        self.log(f"Skan kanału: {len(channel_comments)} komentarzy")

        return comments + channel_comments

    def ensure_fresh_token(self, account: PlatformAccount) -> str:
        """Odświeża wygasły token i zapisuje nowy w AccountStore"""
        if not account.is_token_expired():
            return account.access_token

        if not account.refresh_token:
            raise TokenRefreshError("Brak refresh tokenu")

        try:
            response = self.http.post(GOOGLE_TOKEN_URL, data={
                "client_id": self.client_id or "",
                "client_secret": self.client_secret or "",
                "refresh_token": account.refresh_token,
                "grant_type": "refresh_token",
            })
        except httpx.HTTPError as e:
            raise TokenRefreshError(f"Błąd połączenia z serwerem tokenów: {str(e)}") from e

        if response.status_code >= 400:
            raise TokenRefreshError(f"HTTP {response.status_code}: {safe_json(response)}")

        data = safe_json(response)
        access_token = data.get("access_token")
        if not access_token:
            raise TokenRefreshError("Odpowiedź bez access_token")

        expires_at = utc_now() + timedelta(seconds=int(data.get("expires_in", 3600)))
        account.access_token = access_token
        account.token_expires_at = expires_at
        self.account_store.update_tokens(account.user_id, self.platform, access_token, expires_at)

        self.log("Token dostępu odświeżony")
        return access_token

    def collect_from_contents(
        self,
        contents: List[ContentRecord],
        access_token: str,
        cutoff: datetime,
        tracker: ProcessedIdTracker
    ) -> List[UnifiedComment]:
        """Ścieżka 1: zapisane treści YouTube"""
        collected = []

        for content in contents:
            if content.platform != self.platform:
                continue

            video_id = content.youtube_video_id()
            if not video_id:
                self.log(f"Pomijam treść {content.id} bez ID wideo", "WARNING")
                continue

            if tracker.is_processed(video_id):
                continue
            tracker.mark(video_id)

            try:
                threads = self.fetch_comment_threads(video_id, access_token)
            except CommentFetchError as e:
                self.log(f"Błąd pobierania komentarzy dla wideo {video_id}: {str(e)}", "ERROR")
                continue

            collected.extend(self._map_threads(
                threads,
                cutoff,
                content_id=content.id,
                content_title=content.display_title(),
                content_url=content.permalink_url or watch_url(video_id)
            ))

        return collected

    def collect_from_channel(
        self,
        account: PlatformAccount,
        access_token: str,
        resolver: IdentityResolver,
        cutoff: datetime,
        tracker: ProcessedIdTracker
    ) -> List[UnifiedComment]:
        """Ścieżka 2: najnowsze wideo kanału, z pominięciem już przetworzonych"""
        if not account.external_account_id:
            self.log("Brak channelId na koncie, pomijam skan kanału", "WARNING")
            return []

        try:
            data = self.get_json(
                f"{YOUTUBE_API_BASE}/search",
                params={
                    "part": "id",
                    "channelId": account.external_account_id,
                    "order": "date",
                    "maxResults": self.channel_search_limit,
                    "type": "video",
                    "access_token": access_token,
                },
                label="search"
            )
        except CommentFetchError as e:
            self.log(f"Nie udało się pobrać listy wideo kanału: {str(e)}", "ERROR")
            return []

        found_ids = [
            (item.get("id") or {}).get("videoId")
            for item in data.get("items") or []
        ]
        video_ids = tracker.filter_new(found_ids)[:self.channel_fetch_limit]

        if not video_ids:
            self.log("Brak nowych wideo po odfiltrowaniu", "INFO")
            return []

        collected = []
        for video_id in video_ids:
            tracker.mark(video_id)
            try:
                threads = self.fetch_comment_threads(video_id, access_token)
            except CommentFetchError as e:
                self.log(f"Błąd pobierania komentarzy dla wideo kanału {video_id}: {str(e)}", "ERROR")
                continue

            identity = resolver.resolve(self.platform, video_id, permalink=watch_url(video_id))
            collected.extend(self._map_threads(
                threads,
                cutoff,
                content_id=identity.content_id,
                content_title=identity.content_title,
                content_url=identity.content_url or watch_url(video_id)
            ))

        return collected

    def fetch_comment_threads(self, video_id: str, access_token: str) -> List[dict]:
        data = self.get_json(
            f"{YOUTUBE_API_BASE}/commentThreads",
            params={
                "part": "snippet",
                "videoId": video_id,
                "maxResults": self.max_threads_per_video,
                "access_token": access_token,
            },
            label=f"commentThreads({video_id})"
        )
        return data.get("items") or []

    def check_error_response(self, status_code: int, error_body: dict) -> None:
        """403 z komunikatem o zakresach → PlatformScopeError"""
        error = error_body.get("error")
        message = error.get("message", "") if isinstance(error, dict) else str(error or "")

        if status_code == 403 and SCOPE_ERROR_MARKER in message.lower():
            self.log("Token nie ma wymaganych uprawnień - wymagane ponowne połączenie konta", "ERROR")
            raise PlatformScopeError(self.platform, SCOPE_ERROR_MESSAGE)

    def _map_threads(
        self,
        threads: List[dict],
        cutoff: datetime,
        content_id: str,
        content_title: str,
        content_url: str
    ) -> List[UnifiedComment]:
        mapped = []

        for thread in threads:
            snippet = ((thread.get("snippet") or {}).get("topLevelComment") or {}).get("snippet") or {}
            timestamp = parse_timestamp(snippet.get("publishedAt"))
            if not thread.get("id") or not timestamp or timestamp < cutoff:
                continue

            mapped.append(UnifiedComment(
                id=str(thread.get("id")),
                text=snippet.get("textDisplay") or snippet.get("textOriginal") or "",
                author=snippet.get("authorDisplayName") or "",
                timestamp=to_iso(timestamp),
                platform=self.platform,
                content_id=content_id,
                content_title=content_title,
                content_url=content_url,
            ))

        return mapped
