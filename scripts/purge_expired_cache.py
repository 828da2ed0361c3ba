"""
Skrypt usuwania wygasłych analiz komentarzy z SQLite
Uruchom: python scripts/purge_expired_cache.py [ścieżka_do_bazy]
"""
import sys
import os

# Dodaj ścieżkę do projektu
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.cache_store import SqliteCacheStore
from services.database_service import DatabaseService
from utils.helpers import utc_now, to_iso

def purge_expired_cache(db_path: str = None, now=None) -> int:
    """Usuwa wpisy z expires_at w przeszłości, zwraca liczbę usuniętych"""
    db = DatabaseService(db_path)
    store = SqliteCacheStore(db)
    now = now or utc_now()

    print("Usuwanie wygasłych analiz komentarzy...")
    print(f"Baza danych SQLite: {db.db_path}")
    print(f"Czas odniesienia: {to_iso(now)}")
    print("-" * 50)

    try:
        removed = store.purge_expired(now)
    except Exception as e:
        print(f"  ❌ Błąd czyszczenia: {str(e)}")
        raise

    print(f"  ✅ Usunięto: {removed} wpisów")
    return removed

if __name__ == "__main__":
    purge_expired_cache(sys.argv[1] if len(sys.argv) > 1 else None)
