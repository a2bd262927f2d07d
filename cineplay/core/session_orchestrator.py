import asyncio
import random
from typing import Optional, Set
from .catalog import Catalog
from .progress_store import ProgressStore
from .history_committer import HistoryCommitter
from .playback_session import PlaybackSession
from .movie_playback import MoviePlayback
from .error_reporter import ErrorReporter
from ..database.models import LastWatched
from ..config import HISTORY_DWELL_SECONDS, HISTORY_LOOKUP_TIMEOUT
from ..utils.logger import get_logger

logger = get_logger(__name__)

class SessionOrchestrator:
    """
    Opens and closes playback sessions. Only one session is active at a time;
    opening another one closes the previous session, flushing its pending
    history commit.
    """

    def __init__(self, catalog: Catalog, progress: ProgressStore, history_log,
                 reporter: ErrorReporter,
                 dwell_seconds: float = HISTORY_DWELL_SECONDS,
                 lookup_timeout: float = HISTORY_LOOKUP_TIMEOUT,
                 rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.progress = progress
        self.history_log = history_log
        self.reporter = reporter
        self.dwell_seconds = dwell_seconds
        self.lookup_timeout = lookup_timeout
        self._rng = rng or random.Random()
        self._active: Optional[PlaybackSession] = None
        self._movie: Optional[MoviePlayback] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def active(self) -> Optional[PlaybackSession]:
        return self._active

    @property
    def movie(self) -> Optional[MoviePlayback]:
        return self._movie

    def _committer(self, user_id: Optional[str]) -> HistoryCommitter:
        return HistoryCommitter(self.history_log, self.catalog, self.reporter,
                                user_id=user_id, dwell_seconds=self.dwell_seconds,
                                tasks=self._tasks)

    def _start_session(self, series_id: str, user_id: Optional[str]) -> Optional[PlaybackSession]:
        series = self.catalog.get_series(series_id)
        if not series:
            logger.warning(f"Series not found: {series_id}")
            return None
        self.close()
        session = PlaybackSession(series, self.catalog.get_episodes(series_id),
                                  self.progress, self._committer(user_id))
        self._active = session
        return session

    async def _lookup_last_watched(self, user_id: Optional[str], series_id: str) -> Optional[LastWatched]:
        if not user_id:
            return None
        try:
            return await asyncio.wait_for(
                self.history_log.read_last_watched(user_id, series_id), self.lookup_timeout
            )
        except Exception as e:
            logger.warning(f"Could not read watch history for {series_id}, starting from the beginning: {e!r}")
            return None

    async def open_series(self, series_id: str, user_id: Optional[str] = None,
                          force_season_grid: bool = False) -> Optional[PlaybackSession]:
        session = self._start_session(series_id, user_id)
        if not session:
            return None

        if not session.seasons:
            logger.info(f"No episodes available for {series_id}")
            self.reporter.report(ErrorReporter.CONTENT, "No episodes are available for this series.")
            return session

        if force_season_grid and session.show_season_grid():
            return session

        last = await self._lookup_last_watched(user_id, series_id)
        if self._active is not session:
            # Another session was opened while the lookup was in flight
            return session

        if last:
            count = len(session.season_episodes(last.season))
            if count and session.open(last.season, min(max(last.last_episode, 0), count - 1)):
                logger.info(f"Resuming {series_id} at season {last.season} episode {session.state.episode_index}")
                return session
            logger.info(f"Watch history for {series_id} points at missing season {last.season}")

        session.open(session.default_season, 0)
        return session

    async def open_season(self, series_id: str, season: str,
                          user_id: Optional[str] = None) -> Optional[PlaybackSession]:
        if not self.catalog.get_episodes(series_id).get(str(season)):
            logger.debug(f"Ignoring jump to unknown season {season} of {series_id}")
            return None
        session = self._start_session(series_id, user_id)
        if session:
            session.open(season)
        return session

    async def open_episode(self, series_id: str, season: str, episode_index: int,
                           user_id: Optional[str] = None) -> Optional[PlaybackSession]:
        episodes = self.catalog.get_episodes(series_id).get(str(season)) or []
        if not 0 <= episode_index < len(episodes):
            logger.debug(f"Ignoring jump to episode {episode_index} of {series_id} season {season}")
            return None
        session = self._start_session(series_id, user_id)
        if session:
            session.open(season, episode_index)
        return session

    async def play_random_episode(self, series_id: str,
                                  user_id: Optional[str] = None) -> Optional[PlaybackSession]:
        all_episodes = [
            (season, index)
            for season, episodes in self.catalog.get_episodes(series_id).items()
            for index in range(len(episodes))
        ]
        if not all_episodes:
            self.reporter.report(ErrorReporter.CONTENT, "No episodes were found for this series.")
            return None
        season, index = self._rng.choice(all_episodes)
        logger.info(f"Random pick for {series_id}: season {season} episode {index}")
        return await self.open_episode(series_id, season, index, user_id)

    async def play_movie(self, movie_id: str, user_id: Optional[str] = None) -> Optional[MoviePlayback]:
        movie = self.catalog.get_movie(movie_id)
        if not movie:
            logger.error(f"Movie not found: {movie_id}")
            self.reporter.report(ErrorReporter.CONTENT, "Could not load the movie.")
            return None
        self.close()
        self._committer(user_id).record_movie(movie)
        self._movie = MoviePlayback(movie)
        return self._movie

    def close(self):
        if self._active:
            self._active.close()
            self._active = None
        self._movie = None

    async def drain(self):
        """Wait for every history write issued so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self):
        self.close()
        await self.drain()
