import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Base Paths
BASE_DIR = Path(__file__).parent.parent
DB_PATH = Path(os.getenv("CINEPLAY_DB_PATH", BASE_DIR / "cineplay.db"))
PROGRESS_PATH = Path(os.getenv("CINEPLAY_PROGRESS_PATH", BASE_DIR / "progress.json"))
CATALOG_PATH = Path(os.getenv("CINEPLAY_CATALOG_PATH", BASE_DIR / "catalog.json"))
LOG_PATH = Path(os.getenv("CINEPLAY_LOG_PATH", BASE_DIR / "logs" / "cineplay.log"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Local resume points live under a single namespaced key
PROGRESS_NAMESPACE = "seriesProgress"

# Playback Settings
HISTORY_DWELL_SECONDS = float(os.getenv("HISTORY_DWELL_SECONDS", "20"))
HISTORY_LOOKUP_TIMEOUT = float(os.getenv("HISTORY_LOOKUP_TIMEOUT", "5"))
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en")
LANGUAGE_LABELS = {
    "en": "Original",
    "es": "Español",
}

# Embedded viewer
VIEWER_URL_TEMPLATE = os.getenv(
    "VIEWER_URL_TEMPLATE", "https://drive.google.com/file/d/{video_id}/preview"
)

# Remote history
HISTORY_BACKEND = os.getenv("HISTORY_BACKEND", "sqlite")  # "sqlite" or "firebase"
FIREBASE_DB_URL = os.getenv("FIREBASE_DB_URL", "")
FIREBASE_AUTH_TOKEN = os.getenv("FIREBASE_AUTH_TOKEN", "")

# API Settings
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
