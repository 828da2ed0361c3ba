"""
Polityka cache analizy komentarzy - TTL, próg nieaktualności i cutoff zakresu czasu
"""
from datetime import datetime, timedelta
from typing import Optional

from models.analysis_cache_entry import AnalysisCacheEntry, PLATFORM_FILTERS, TIME_RANGES
from utils.helpers import utc_now

# Czas życia wpisu w cache (minuty)
CACHE_TTL_MINUTES = {
    "24h": 30,
    "7d": 60,
    "28d": 120,
    "1y": 240,
    "5y": 480,
}

# Po tym czasie wpis jest oznaczany jako nieaktualny, ale nadal zwracany (minuty)
STALE_AFTER_MINUTES = {
    "24h": 15,
    "7d": 30,
    "28d": 60,
    "1y": 120,
    "5y": 240,
}

# Długość zakresu czasu
TIME_RANGE_DURATIONS = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "28d": timedelta(days=28),
    "1y": timedelta(days=365),
    "5y": timedelta(days=5 * 365),
}

DEFAULT_TIME_RANGE = "24h"


def ttl_for(time_range: str) -> timedelta:
    return timedelta(minutes=CACHE_TTL_MINUTES.get(time_range, 60))

def stale_threshold_for(time_range: str) -> timedelta:
    return timedelta(minutes=STALE_AFTER_MINUTES.get(time_range, 30))

def cutoff_for(time_range: str, now: Optional[datetime] = None) -> datetime:
    """Najwcześniejsza data komentarza uwzględniana dla zakresu"""
    now = now or utc_now()
    duration = TIME_RANGE_DURATIONS.get(time_range, TIME_RANGE_DURATIONS[DEFAULT_TIME_RANGE])
    return now - duration

def expiry_for(time_range: str, refreshed_at: datetime) -> datetime:
    """expires_at = refreshed_at + TTL(zakres)"""
    return refreshed_at + ttl_for(time_range)

def is_stale(entry: AnalysisCacheEntry, now: Optional[datetime] = None) -> bool:
    """Wpis nieaktualny: od odświeżenia minęło więcej niż próg dla zakresu"""
    if not entry.refreshed_at:
        return True
    now = now or utc_now()
    return (now - entry.refreshed_at) > stale_threshold_for(entry.time_range)

def is_expired(entry: AnalysisCacheEntry, now: Optional[datetime] = None) -> bool:
    if not entry.expires_at:
        return False
    now = now or utc_now()
    return now >= entry.expires_at
