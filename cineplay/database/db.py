import aiosqlite
from typing import List, Optional
from datetime import datetime
from .models import HistoryRecord, LastWatched
from ..config import DB_PATH
from ..utils.logger import get_logger

logger = get_logger(__name__)

class DatabaseManager:
    """Per-user watch history kept in SQLite. One row per history key."""

    def __init__(self, db_path: str = str(DB_PATH)):
        self.db_path = db_path
        logger.debug(f"DatabaseManager initialized with path: {self.db_path}")

    async def initialize(self):
        logger.info("Initializing database...")
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS history (
                    user_id TEXT NOT NULL,
                    history_key TEXT NOT NULL,
                    type TEXT NOT NULL,
                    content_id TEXT NOT NULL,
                    title TEXT,
                    poster TEXT,
                    season TEXT,
                    last_episode INTEGER,
                    viewed_at TIMESTAMP NOT NULL,
                    PRIMARY KEY (user_id, history_key)
                )
            """)
            await db.execute(
                "CREATE INDEX IF NOT EXISTS idx_history_content ON history (user_id, content_id, viewed_at)"
            )
            await db.commit()

    # History Operations

    async def write_history(self, user_id: str, key: str, record: HistoryRecord):
        # viewed_at is stamped here at write time; the caller leaves it unset
        viewed_at = datetime.now()
        logger.debug(f"Writing history {key} for user {user_id}")
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT INTO history
                   (user_id, history_key, type, content_id, title, poster, season, last_episode, viewed_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(user_id, history_key) DO UPDATE SET
                   type = excluded.type,
                   content_id = excluded.content_id,
                   title = excluded.title,
                   poster = excluded.poster,
                   season = excluded.season,
                   last_episode = excluded.last_episode,
                   viewed_at = excluded.viewed_at""",
                (user_id, key, record.type, record.content_id, record.title, record.poster,
                 record.season, record.last_episode, viewed_at.isoformat())
            )
            await db.commit()
        record.viewed_at = viewed_at

    async def read_last_watched(self, user_id: str, series_id: str) -> Optional[LastWatched]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                """SELECT season, last_episode FROM history
                   WHERE user_id = ? AND type = 'series' AND content_id = ?
                   ORDER BY viewed_at DESC LIMIT 1""",
                (user_id, series_id)
            ) as cursor:
                row = await cursor.fetchone()
                if row and row['season'] is not None:
                    return LastWatched(season=row['season'], last_episode=row['last_episode'] or 0)
                return None

    async def get_history(self, user_id: str) -> List[HistoryRecord]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM history WHERE user_id = ? ORDER BY viewed_at DESC", (user_id,)
            ) as cursor:
                rows = await cursor.fetchall()
                logger.debug(f"Fetched {len(rows)} history entries for user {user_id}")
                return [HistoryRecord(
                    type=row['type'],
                    content_id=row['content_id'],
                    title=row['title'],
                    poster=row['poster'],
                    season=row['season'],
                    last_episode=row['last_episode'],
                    viewed_at=datetime.fromisoformat(row['viewed_at']) if isinstance(row['viewed_at'], str) else row['viewed_at']
                ) for row in rows]

    async def remove_history(self, user_id: str, key: str):
        logger.info(f"Removing history entry {key} for user {user_id}")
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM history WHERE user_id = ? AND history_key = ?", (user_id, key))
            await db.commit()
