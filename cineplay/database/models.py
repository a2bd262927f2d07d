from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

@dataclass
class Episode:
    title: str = ""
    episode_number: Optional[int] = None
    thumbnail: Optional[str] = None
    description: str = ""
    video_ids: Dict[str, str] = field(default_factory=dict)  # 'default', 'en', 'es', ...

    def video_id_for(self, language: str) -> Optional[str]:
        """Language-specific id first, then the language-neutral one."""
        return self.video_ids.get(language) or self.video_ids.get("default")

@dataclass
class Series:
    id: str
    title: str
    poster: Optional[str] = None
    genres: str = ""
    season_posters: Dict[str, str] = field(default_factory=dict)

@dataclass
class Movie:
    id: str
    title: str
    poster: Optional[str] = None
    genres: str = ""
    video_ids: Dict[str, str] = field(default_factory=dict)

@dataclass
class PendingHistoryEntry:
    series_id: str
    season: str
    episode_index: int
    title: str = ""
    armed_at: datetime = field(default_factory=datetime.now)

@dataclass
class HistoryRecord:
    type: str  # 'series' or 'movie'
    content_id: str
    title: str
    poster: Optional[str] = None
    season: Optional[str] = None
    last_episode: Optional[int] = None
    viewed_at: Optional[datetime] = None  # None until the history backend stamps it

    @property
    def key(self) -> str:
        if self.type == "series":
            return f"{self.content_id}_{self.season}"
        return self.content_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "contentId": self.content_id,
            "title": self.title,
            "poster": self.poster,
            "viewedAt": self.viewed_at.isoformat() if self.viewed_at else None,
            "season": self.season,
            "lastEpisode": self.last_episode,
        }

@dataclass
class LastWatched:
    season: str
    last_episode: int

class SessionMode(str, Enum):
    IDLE = "idle"
    NO_EPISODES = "no_episodes"
    SEASON_GRID = "season_grid"
    EPISODE_PLAYER = "episode_player"
    CLOSED = "closed"

@dataclass
class PlaybackSessionState:
    series_id: str
    season: str
    episode_index: int
    language: str

@dataclass
class NavState:
    prev_enabled: bool = False
    next_enabled: bool = False

@dataclass
class SeasonCard:
    key: str
    number: int
    episode_count: int
    poster: Optional[str] = None
    progress_percent: int = 0

    @property
    def complete(self) -> bool:
        return self.progress_percent >= 100

@dataclass
class EpisodeItem:
    index: int
    label: str
    thumbnail: Optional[str] = None
    description: str = ""
    active: bool = False

@dataclass
class MovieView:
    movie_id: str
    title: str
    language: str
    video_id: Optional[str]
    languages: List[str] = field(default_factory=list)
