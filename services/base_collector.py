from datetime import datetime
from typing import Optional

import httpx

from config import HTTP_TIMEOUT
from services.errors import CommentFetchError
from services.logger import LoggerService
from utils.helpers import parse_timestamp

class BaseCollector:
    """Wspólna obsługa HTTP dla kolektorów komentarzy z platform"""
    platform = ""
    log_context = ""

    def __init__(self, http_client: Optional[httpx.Client] = None, timeout: float = None):
        self.http = http_client or httpx.Client(timeout=timeout or HTTP_TIMEOUT)
        self.logger = LoggerService()

    def get_json(self, url: str, params: dict = None, label: str = "") -> dict:
        """GET z limitem czasu; błędy sieci i HTTP zamieniane na CommentFetchError"""
        label = label or url
        try:
            response = self.http.get(url, params=params)
        except httpx.TimeoutException as e:
            raise CommentFetchError(f"Przekroczono limit czasu: {label}") from e
        except httpx.HTTPError as e:
            raise CommentFetchError(f"Błąd sieci dla {label}: {str(e)}") from e

        if response.status_code >= 400:
            error_body = safe_json(response)
            self.check_error_response(response.status_code, error_body)
            raise CommentFetchError(
                f"{label}: HTTP {response.status_code} {response.reason_phrase} - {error_body}"
            )

        return safe_json(response)

    def check_error_response(self, status_code: int, error_body: dict) -> None:
        """Hook dla błędów specyficznych dla platformy (np. brak uprawnień)"""
        return None

    def log(self, message: str, level: str = "INFO"):
        self.logger.add_log(message, level, context=self.log_context)

    @staticmethod
    def within_cutoff(timestamp, cutoff: datetime) -> bool:
        parsed = parse_timestamp(timestamp)
        return parsed is not None and parsed >= cutoff


def safe_json(response: httpx.Response) -> dict:
    """Parsuje JSON odpowiedzi, nie rzuca wyjątków"""
    try:
        data = response.json()
    except ValueError:
        return {"error": "Nie udało się sparsować odpowiedzi"}
    return data if isinstance(data, dict) else {"data": data}
