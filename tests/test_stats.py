from cineplay.cli.stats import compute_stats
from cineplay.database.models import HistoryRecord

def test_compute_stats(catalog):
    history = [
        HistoryRecord(type="series", content_id="show", title="The Show: T1", season="T1", last_episode=2),
        HistoryRecord(type="series", content_id="show", title="The Show: T2", season="T2", last_episode=0),
        HistoryRecord(type="movie", content_id="dubbed", title="Dubbed Movie"),
        HistoryRecord(type="series", content_id="gone", title="Removed: T1", season="T1", last_episode=0),
    ]
    stats = compute_stats(history, catalog)
    assert stats.movies_watched == 1
    assert stats.series_watched == 2
    assert stats.total_items == 4
    assert stats.top_genres == [("Drama", 2), ("Comedy", 2)]

def test_compute_stats_empty(catalog):
    stats = compute_stats([], catalog)
    assert stats.total_items == 0
    assert stats.top_genres == []
