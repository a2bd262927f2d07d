from typing import List, Optional
from ..database.models import Movie, MovieView

class MoviePlayback:
    """Language selection for a single movie. English first, then Spanish, then the plain id."""

    def __init__(self, movie: Movie):
        self.movie = movie
        if movie.video_ids.get("en"):
            self.language = "en"
        elif movie.video_ids.get("es"):
            self.language = "es"
        else:
            self.language = "default"
        self.video_id = self._resolve(self.language)

    def _resolve(self, language: str) -> Optional[str]:
        return self.movie.video_ids.get(language) or self.movie.video_ids.get("default") or self.movie.id

    @property
    def languages(self) -> List[str]:
        # Switching is only offered when both dubs exist
        if self.movie.video_ids.get("en") and self.movie.video_ids.get("es"):
            return ["en", "es"]
        return []

    def change_language(self, language: str) -> Optional[str]:
        self.language = language
        self.video_id = self._resolve(language)
        return self.video_id

    def view(self) -> MovieView:
        return MovieView(
            movie_id=self.movie.id,
            title=self.movie.title,
            language=self.language,
            video_id=self.video_id,
            languages=self.languages
        )
