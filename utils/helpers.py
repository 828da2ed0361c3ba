from datetime import datetime, timezone
from typing import Optional
from dateutil import parser as date_parser

def utc_now() -> datetime:
    """Aktualny czas UTC (timezone-aware)"""
    return datetime.now(timezone.utc)

def parse_timestamp(value) -> Optional[datetime]:
    """Parsuje timestamp z API platformy do datetime UTC"""
    if value is None or value == "":
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        parsed = date_parser.parse(str(value))
    except (ValueError, OverflowError, TypeError):
        return None
    # Instagram zwraca "+0000", YouTube "Z"; brak strefy traktujemy jako UTC
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)

def to_iso(dt: datetime) -> str:
    """Formatuje datetime do ISO 8601 w UTC"""
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")

def truncate_text(text: Optional[str], max_length: int) -> str:
    """Obcina tekst do max_length znaków"""
    if not text:
        return ""
    return text[:max_length]

def timestamp_sort_key(timestamp: str) -> float:
    """Klucz sortowania po dacie (niepoprawne daty na końcu)"""
    parsed = parse_timestamp(timestamp)
    return parsed.timestamp() if parsed else float("-inf")
