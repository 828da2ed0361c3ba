from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

@dataclass
class PlatformAccount:
    """Model danych: stan OAuth użytkownika dla platformy"""
    user_id: str
    platform: str  # "instagram"/"youtube"
    connected: bool = True
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    external_account_id: Optional[str] = None  # IG business id / YouTube channel id

    def is_token_expired(self, now: datetime = None) -> bool:
        """Sprawdza czy token wygasł (brak daty = ważny)"""
        if not self.token_expires_at:
            return False
        now = now or datetime.now(timezone.utc)
        return now > self.token_expires_at

    def has_access(self) -> bool:
        return bool(self.connected and self.access_token)
