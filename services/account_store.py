from datetime import datetime
from typing import Optional

from models.platform_account import PlatformAccount
from services.database_service import DatabaseService, to_db_datetime, from_db_datetime

class AccountStore:
    """Tokeny OAuth kont platform (tabela platform_accounts)"""

    def __init__(self, db: DatabaseService):
        self.db = db

    def get(self, user_id: str, platform: str) -> Optional[PlatformAccount]:
        rows = self.db.execute_query(
            "SELECT * FROM platform_accounts WHERE user_id = ? AND platform = ?",
            (user_id, platform)
        )
        if not rows:
            return None

        row = rows[0]
        return PlatformAccount(
            user_id=row['user_id'],
            platform=row['platform'],
            connected=bool(row['connected']),
            access_token=row['access_token'],
            refresh_token=row['refresh_token'],
            token_expires_at=from_db_datetime(row['token_expires_at']),
            external_account_id=row['external_account_id'],
        )

    def save(self, account: PlatformAccount) -> None:
        self.db.execute_update("""
            INSERT OR REPLACE INTO platform_accounts
            (user_id, platform, connected, access_token, refresh_token, token_expires_at, external_account_id)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            account.user_id,
            account.platform,
            1 if account.connected else 0,
            account.access_token,
            account.refresh_token,
            to_db_datetime(account.token_expires_at),
            account.external_account_id,
        ))

    def update_tokens(self, user_id: str, platform: str, access_token: str, expires_at: datetime) -> bool:
        """Zapisuje odświeżony token i jego ważność"""
        updated = self.db.execute_update(
            "UPDATE platform_accounts SET access_token = ?, token_expires_at = ? WHERE user_id = ? AND platform = ?",
            (access_token, to_db_datetime(expires_at), user_id, platform)
        )
        return updated > 0
