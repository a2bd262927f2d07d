import httpx
from datetime import datetime
from typing import Optional, List, Dict, Any
from ..database.db import DatabaseManager
from ..database.models import HistoryRecord, LastWatched
from ..config import HISTORY_BACKEND, DB_PATH, FIREBASE_DB_URL, FIREBASE_AUTH_TOKEN
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Firebase replaces this placeholder with its own clock on write
SERVER_TIMESTAMP = {".sv": "timestamp"}

class FirebaseHistoryLog:
    """Watch history stored in a Firebase Realtime Database through its REST API."""

    def __init__(self, base_url: str = FIREBASE_DB_URL, auth_token: str = FIREBASE_AUTH_TOKEN,
                 transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self._transport = transport
        self._timeout = timeout

    async def initialize(self):
        if not self.base_url:
            logger.error("FIREBASE_DB_URL not configured!")

    def _url(self, *parts: str) -> str:
        return f"{self.base_url}/{'/'.join(parts)}.json"

    def _params(self) -> Dict[str, str]:
        return {"auth": self.auth_token} if self.auth_token else {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    async def write_history(self, user_id: str, key: str, record: HistoryRecord):
        payload = record.to_dict()
        payload["viewedAt"] = SERVER_TIMESTAMP
        async with self._client() as client:
            response = await client.put(self._url("users", user_id, "history", key),
                                        params=self._params(), json=payload)
            response.raise_for_status()
        logger.debug(f"History {key} written to Firebase for user {user_id}")

    async def _fetch_history(self, user_id: str) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.get(self._url("users", user_id, "history"), params=self._params())
            response.raise_for_status()
            data = response.json()
        return data if isinstance(data, dict) else {}

    async def read_last_watched(self, user_id: str, series_id: str) -> Optional[LastWatched]:
        entries = [
            item for item in (await self._fetch_history(user_id)).values()
            if isinstance(item, dict) and item.get("type") == "series" and item.get("contentId") == series_id
        ]
        if not entries:
            return None
        latest = max(entries, key=lambda item: item.get("viewedAt") or 0)
        if latest.get("season") is None:
            return None
        return LastWatched(season=str(latest["season"]), last_episode=int(latest.get("lastEpisode") or 0))

    async def get_history(self, user_id: str) -> List[HistoryRecord]:
        records = []
        for item in (await self._fetch_history(user_id)).values():
            if not isinstance(item, dict):
                continue
            viewed_at = item.get("viewedAt")
            records.append(HistoryRecord(
                type=item.get("type", "movie"),
                content_id=item.get("contentId", ""),
                title=item.get("title", ""),
                poster=item.get("poster"),
                season=item.get("season"),
                last_episode=item.get("lastEpisode"),
                # Firebase server timestamps are milliseconds since the epoch
                viewed_at=datetime.fromtimestamp(viewed_at / 1000) if isinstance(viewed_at, (int, float)) else None
            ))
        records.sort(key=lambda r: r.viewed_at or datetime.min, reverse=True)
        return records

    async def remove_history(self, user_id: str, key: str):
        logger.info(f"Removing history entry {key} for user {user_id}")
        async with self._client() as client:
            response = await client.delete(self._url("users", user_id, "history", key), params=self._params())
            response.raise_for_status()

def create_history_log(backend: str = HISTORY_BACKEND):
    """History backend selected by configuration."""
    if backend == "firebase":
        logger.info(f"Using Firebase history backend: {FIREBASE_DB_URL}")
        return FirebaseHistoryLog()
    logger.info(f"Using SQLite history backend: {DB_PATH}")
    return DatabaseManager(str(DB_PATH))
