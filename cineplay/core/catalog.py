import json
import aiofiles
from typing import Dict, List, Optional, Any
from ..database.models import Series, Episode, Movie
from ..utils.logger import get_logger

logger = get_logger(__name__)

def _video_ids(data: Dict[str, Any], default_id: Optional[str] = None) -> Dict[str, str]:
    ids = {}
    default = (data.get("videoId") or default_id or "").strip()
    if default:
        ids["default"] = default
    for lang in ("en", "es"):
        value = (data.get(f"videoId_{lang}") or "").strip()
        if value:
            ids[lang] = value
    return ids

def _parse_episode(data: Dict[str, Any]) -> Episode:
    number = data.get("episodeNumber")
    return Episode(
        title=data.get("title") or "",
        episode_number=int(number) if number not in (None, "") else None,
        thumbnail=data.get("thumbnail"),
        description=data.get("description") or "",
        video_ids=_video_ids(data)
    )

class Catalog:
    """
    In-memory catalog, read-only once loaded.
    Accepts the same document layout the front end consumes: `series`,
    `seriesEpisodes` (series -> season -> episode list), `seasonPosters`, `movies`.
    """

    def __init__(self, series: Optional[Dict[str, Series]] = None,
                 episodes: Optional[Dict[str, Dict[str, List[Episode]]]] = None,
                 movies: Optional[Dict[str, Movie]] = None):
        self._series = series or {}
        self._episodes = episodes or {}
        self._movies = movies or {}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Catalog":
        posters = data.get("seasonPosters") or {}
        series = {}
        for series_id, info in (data.get("series") or {}).items():
            series[series_id] = Series(
                id=series_id,
                title=info.get("title") or series_id,
                poster=info.get("poster"),
                genres=info.get("genres") or "",
                season_posters=dict(posters.get(series_id) or {})
            )

        episodes = {}
        for series_id, seasons in (data.get("seriesEpisodes") or {}).items():
            episodes[series_id] = {}
            for season_key, raw_episodes in (seasons or {}).items():
                if isinstance(raw_episodes, dict):
                    raw_episodes = list(raw_episodes.values())
                parsed = [_parse_episode(ep) for ep in raw_episodes or [] if isinstance(ep, dict)]
                # Episodes without a number keep their listed position
                parsed = [ep for _, ep in sorted(
                    enumerate(parsed),
                    key=lambda pair: pair[1].episode_number if pair[1].episode_number is not None else pair[0] + 1
                )]
                episodes[series_id][str(season_key)] = parsed

        movies = {}
        for movie_id, info in (data.get("movies") or {}).items():
            movies[movie_id] = Movie(
                id=movie_id,
                title=info.get("title") or movie_id,
                poster=info.get("poster"),
                genres=info.get("genres") or "",
                video_ids=_video_ids(info, default_id=movie_id)
            )

        logger.info(f"Catalog loaded: {len(series)} series, {len(movies)} movies")
        return cls(series, episodes, movies)

    @classmethod
    async def load(cls, path) -> "Catalog":
        logger.info(f"Loading catalog from {path}")
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            content = await f.read()
        return cls.from_dict(json.loads(content))

    def get_series(self, series_id: str) -> Optional[Series]:
        return self._series.get(series_id)

    def get_episodes(self, series_id: str) -> Dict[str, List[Episode]]:
        return self._episodes.get(series_id, {})

    def get_season_poster(self, series_id: str, season: str) -> Optional[str]:
        series = self._series.get(series_id)
        if not series:
            return None
        return series.season_posters.get(str(season))

    def get_movie(self, movie_id: str) -> Optional[Movie]:
        return self._movies.get(movie_id)
