import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
YOUTUBE_CLIENT_ID = os.getenv("YOUTUBE_CLIENT_ID")
YOUTUBE_CLIENT_SECRET = os.getenv("YOUTUBE_CLIENT_SECRET")

# Flask Configuration
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
DEBUG = os.getenv("DEBUG", "False").lower() == "true"

# Baza danych
DATABASE_PATH = os.getenv(
    "DATABASE_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "comments.db")
)

# Użytkownicy z dostępem do /api/logs (lista ID oddzielonych przecinkami)
LOG_VIEWER_USER_IDS = [u.strip() for u in os.getenv("LOG_VIEWER_USER_IDS", "").split(",") if u.strip()]

# Limits
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "20"))
CLASSIFIER_BATCH_SIZE = int(os.getenv("CLASSIFIER_BATCH_SIZE", "10"))


def validate_config():
    """Sprawdza wymagane zmienne (wywoływane przy starcie aplikacji)"""
    if not GEMINI_API_KEY:
        raise ValueError("GEMINI_API_KEY nie jest ustawiony w zmiennych środowiskowych")
    if not YOUTUBE_CLIENT_ID or not YOUTUBE_CLIENT_SECRET:
        raise ValueError("YOUTUBE_CLIENT_ID/YOUTUBE_CLIENT_SECRET nie są ustawione w zmiennych środowiskowych")
