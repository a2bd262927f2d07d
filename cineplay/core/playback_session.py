from typing import Dict, List, Optional
from .progress_store import ProgressStore
from .history_committer import HistoryCommitter
from ..database.models import (Series, Episode, SessionMode, PlaybackSessionState, NavState,
                               PendingHistoryEntry, SeasonCard, EpisodeItem)
from ..config import DEFAULT_LANGUAGE, VIEWER_URL_TEMPLATE
from ..utils.format_utils import sort_seasons, first_season, season_number, progress_percent, format_episode_title
from ..utils.logger import get_logger

logger = get_logger(__name__)

def build_season_cards(series: Series, episodes: Dict[str, List[Episode]],
                       progress: ProgressStore) -> List[SeasonCard]:
    cards = []
    for key in sort_seasons(episodes.keys()):
        count = len(episodes[key])
        resume = progress.load_clamped(series.id, key, count)
        cards.append(SeasonCard(
            key=key,
            number=season_number(key),
            episode_count=count,
            poster=series.season_posters.get(key) or series.poster,
            progress_percent=progress_percent(resume, count)
        ))
    return cards

class PlaybackSession:
    """
    One open series-playback surface.

    The session only moves between episodes through open(); every move
    cancels the pending history commit, arms a new one, saves the resume
    point and recomputes what the player shows, in that order.
    """

    def __init__(self, series: Series, episodes: Dict[str, List[Episode]],
                 progress: ProgressStore, committer: HistoryCommitter,
                 language: str = DEFAULT_LANGUAGE):
        self.series = series
        self._episodes = episodes
        self._progress = progress
        self._committer = committer
        self._default_language = language
        self.seasons = sort_seasons(episodes.keys())
        self.mode = SessionMode.IDLE if self.seasons else SessionMode.NO_EPISODES
        self.state: Optional[PlaybackSessionState] = None
        self.nav = NavState()
        self.video_id: Optional[str] = None

    @property
    def series_id(self) -> str:
        return self.series.id

    @property
    def default_season(self) -> Optional[str]:
        return first_season(self.seasons)

    @property
    def closed(self) -> bool:
        return self.mode == SessionMode.CLOSED

    @property
    def committer(self) -> HistoryCommitter:
        return self._committer

    @property
    def language(self) -> str:
        return self.state.language if self.state else self._default_language

    def season_episodes(self, season: str) -> List[Episode]:
        return self._episodes.get(season, [])

    # Operations

    def open(self, season: str, episode_index: Optional[int] = None) -> bool:
        """
        Play `episode_index` of `season`, or the season's resume point when no
        index is given. Unknown seasons and out-of-range indexes are ignored.
        """
        if self.closed:
            return False
        season = str(season)
        episodes = self._episodes.get(season)
        if not episodes:
            logger.debug(f"Ignoring open of unknown or empty season {season} for {self.series_id}")
            return False
        if episode_index is None:
            episode_index = self._progress.load_clamped(self.series_id, season, len(episodes))
        if not 0 <= episode_index < len(episodes):
            logger.debug(f"Ignoring open of episode {episode_index} outside season {season} ({len(episodes)} episodes)")
            return False

        episode = episodes[episode_index]
        self._committer.cancel_pending()
        self._committer.arm(PendingHistoryEntry(
            series_id=self.series_id,
            season=season,
            episode_index=episode_index,
            title=episode.title
        ))
        self._progress.save(self.series_id, season, episode_index)

        self.state = PlaybackSessionState(
            series_id=self.series_id,
            season=season,
            episode_index=episode_index,
            language=self.language
        )
        self.mode = SessionMode.EPISODE_PLAYER
        self.nav = NavState(
            prev_enabled=episode_index != 0,
            next_enabled=episode_index != len(episodes) - 1
        )
        self.video_id = episode.video_id_for(self.state.language)
        logger.info(f"Playing {self.series_id} season {season} episode {episode_index} ({self.state.language})")
        return True

    def navigate(self, direction: int) -> bool:
        """Step to the previous (-1) or next (+1) episode, recording the one being left."""
        if direction not in (-1, 1):
            raise ValueError(f"direction must be -1 or 1, got {direction}")
        if self.mode != SessionMode.EPISODE_PLAYER:
            return False
        self._committer.flush_pending()
        new_index = self.state.episode_index + direction
        if not 0 <= new_index < len(self._episodes[self.state.season]):
            return False
        return self.open(self.state.season, new_index)

    def change_language(self, language: str) -> Optional[str]:
        if self.closed:
            return None
        if self.state:
            self.state.language = language
        else:
            self._default_language = language
        if self.mode == SessionMode.EPISODE_PLAYER:
            self.video_id = self.current_episode.video_id_for(language)
            logger.debug(f"Language switched to {language} for {self.series_id}")
        return self.video_id

    def show_season_grid(self) -> bool:
        """Detour to the season grid; only offered for series with several seasons."""
        if self.closed or len(self.seasons) <= 1:
            return False
        self.mode = SessionMode.SEASON_GRID
        self.video_id = None
        return True

    def select_season(self, season: str) -> bool:
        if self.closed or not self._episodes.get(str(season)):
            return False
        # A freshly picked season starts back on the default language
        if self.state:
            self.state.language = self._default_language
        return self.open(season)

    def close(self):
        if self.closed:
            return
        self._committer.flush_pending()
        self.mode = SessionMode.CLOSED
        self.state = None
        self.nav = NavState()
        self.video_id = None
        logger.info(f"Closed playback session for {self.series_id}")

    # Read-only views for the rendering layer

    @property
    def current_episode(self) -> Optional[Episode]:
        if self.mode != SessionMode.EPISODE_PLAYER:
            return None
        return self._episodes[self.state.season][self.state.episode_index]

    @property
    def title(self) -> Optional[str]:
        episode = self.current_episode
        if not episode:
            return None
        number = episode.episode_number or self.state.episode_index + 1
        return format_episode_title(self.state.season, number, episode.title)

    @property
    def embed_url(self) -> Optional[str]:
        return VIEWER_URL_TEMPLATE.format(video_id=self.video_id) if self.video_id else None

    def available_languages(self) -> List[str]:
        # Language controls follow the season's first episode
        if self.mode != SessionMode.EPISODE_PLAYER:
            return []
        first = self._episodes[self.state.season][0]
        return ["en", "es"] if first.video_ids.get("es") else []

    def episode_list(self) -> List[EpisodeItem]:
        if self.mode != SessionMode.EPISODE_PLAYER:
            return []
        return [EpisodeItem(
            index=index,
            label=f"{ep.episode_number or index + 1}. {ep.title}",
            thumbnail=ep.thumbnail,
            description=ep.description,
            active=index == self.state.episode_index
        ) for index, ep in enumerate(self._episodes[self.state.season])]

    def season_cards(self) -> List[SeasonCard]:
        return build_season_cards(self.series, self._episodes, self._progress)
