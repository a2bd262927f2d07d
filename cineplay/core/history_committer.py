import asyncio
from typing import Optional, Set
from .timer import DeferredCall
from .catalog import Catalog
from .error_reporter import ErrorReporter
from ..database.models import PendingHistoryEntry, HistoryRecord, Movie
from ..config import HISTORY_DWELL_SECONDS
from ..utils.format_utils import format_history_title
from ..utils.logger import get_logger

logger = get_logger(__name__)

class HistoryCommitter:
    """
    Deferred "episode watched" writes to the remote history log.

    At most one entry is pending at a time. arm() replaces it and restarts the
    dwell timer, cancel_pending() drops it, flush_pending() writes it now.
    Writes are issued as background tasks and never awaited by callers.
    """

    def __init__(self, history_log, catalog: Catalog, reporter: ErrorReporter,
                 user_id: Optional[str] = None,
                 dwell_seconds: float = HISTORY_DWELL_SECONDS,
                 tasks: Optional[Set[asyncio.Task]] = None):
        self._history_log = history_log
        self._catalog = catalog
        self._reporter = reporter
        self.user_id = user_id
        self.dwell_seconds = dwell_seconds
        self._pending: Optional[PendingHistoryEntry] = None
        self._timer: Optional[DeferredCall] = None
        # Shared with the orchestrator so writes of closed sessions can still be drained
        self._tasks = tasks if tasks is not None else set()

    @property
    def pending(self) -> Optional[PendingHistoryEntry]:
        return self._pending

    def arm(self, entry: PendingHistoryEntry):
        self._cancel_timer()
        self._pending = entry
        self._timer = DeferredCall(self.dwell_seconds, self._on_dwell_elapsed)
        logger.debug(f"Armed history commit: {entry.series_id} season {entry.season} episode {entry.episode_index}")

    def cancel_pending(self):
        self._cancel_timer()
        if self._pending:
            logger.debug(f"Discarded pending history commit: {self._pending.series_id} episode {self._pending.episode_index}")
        self._pending = None

    def flush_pending(self):
        self._cancel_timer()
        entry, self._pending = self._pending, None
        if entry:
            self._commit_entry(entry)

    def _cancel_timer(self):
        if self._timer and self._timer.pending:
            self._timer.cancel()
        self._timer = None

    def _on_dwell_elapsed(self):
        self._timer = None
        entry, self._pending = self._pending, None
        if entry:
            logger.debug(f"Dwell time elapsed for {entry.series_id} episode {entry.episode_index}")
            self._commit_entry(entry)

    def _commit_entry(self, entry: PendingHistoryEntry):
        series = self._catalog.get_series(entry.series_id)
        if not series:
            logger.warning(f"Not recording history for unknown series {entry.series_id}")
            return
        poster = self._catalog.get_season_poster(entry.series_id, entry.season) or series.poster
        record = HistoryRecord(
            type="series",
            content_id=entry.series_id,
            title=format_history_title(series.title, entry.season),
            poster=poster,
            season=entry.season,
            last_episode=entry.episode_index
        )
        self._issue(record)

    def record_movie(self, movie: Movie):
        """Movies are recorded as soon as they start playing."""
        self._issue(HistoryRecord(type="movie", content_id=movie.id, title=movie.title, poster=movie.poster))

    def _issue(self, record: HistoryRecord):
        if not self.user_id:
            logger.debug(f"No signed-in user, skipping history for {record.key}")
            return
        task = asyncio.get_running_loop().create_task(self._write(self.user_id, record))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _write(self, user_id: str, record: HistoryRecord):
        try:
            await self._history_log.write_history(user_id, record.key, record)
            logger.info(f"History recorded: {record.key} (episode {record.last_episode})")
        except Exception as e:
            logger.error(f"Error writing history {record.key}: {e}")
            self._reporter.report(ErrorReporter.DATABASE)
