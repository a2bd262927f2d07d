import asyncio
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Tuple
from ..core.catalog import Catalog
from ..core.remote_history import create_history_log
from ..database.models import HistoryRecord
from ..config import CATALOG_PATH

@dataclass
class UserStats:
    movies_watched: int = 0
    series_watched: int = 0
    total_items: int = 0
    top_genres: List[Tuple[str, int]] = field(default_factory=list)

def compute_stats(history: List[HistoryRecord], catalog: Catalog, top: int = 5) -> UserStats:
    stats = UserStats(total_items=len(history))
    series_ids = set()
    genres = Counter()
    for record in history:
        if record.type == "movie":
            stats.movies_watched += 1
            content = catalog.get_movie(record.content_id)
        else:
            series_ids.add(record.content_id)
            content = catalog.get_series(record.content_id)
        if content and content.genres:
            for genre in content.genres.split(";"):
                genre = genre.strip()
                if genre:
                    genres[genre] += 1
    stats.series_watched = len(series_ids)
    stats.top_genres = genres.most_common(top)
    return stats

async def run_stats(user_id: str):
    history_log = create_history_log()
    await history_log.initialize()
    catalog = await Catalog.load(CATALOG_PATH) if CATALOG_PATH.exists() else Catalog()

    history = await history_log.get_history(user_id)
    if not history:
        print(f"No activity recorded for {user_id} yet.")
        return

    stats = compute_stats(history, catalog)
    print(f"\nWatch statistics for {user_id}")
    print("-" * 60)
    print(f"Movies watched:  {stats.movies_watched}")
    print(f"Series watched:  {stats.series_watched}")
    print(f"History entries: {stats.total_items}")

    if stats.top_genres:
        print("\nTop genres:")
        max_count = stats.top_genres[0][1]
        for genre, count in stats.top_genres:
            bar = "#" * round(count / max_count * 20)
            print(f"  {genre:<20} {bar} {count}")

    print("\nRecent activity:")
    for record in history[:10]:
        when = record.viewed_at.strftime("%Y-%m-%d %H:%M") if record.viewed_at else "?"
        episode = f" (episode {record.last_episode + 1})" if record.last_episode is not None else ""
        print(f"  {when}  {record.title}{episode}")

if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m cineplay.cli.stats <user_id>")
        sys.exit(1)

    asyncio.run(run_stats(sys.argv[1]))
