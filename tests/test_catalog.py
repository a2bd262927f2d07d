import json
import pytest
from cineplay.core.catalog import Catalog

def test_parse_series(catalog):
    series = catalog.get_series("show")
    assert series.title == "The Show"
    assert series.season_posters == {"T2": "show-t2.jpg"}
    assert catalog.get_season_poster("show", "T2") == "show-t2.jpg"
    assert catalog.get_season_poster("show", "T1") is None
    assert catalog.get_series("missing") is None
    assert catalog.get_episodes("missing") == {}

def test_parse_episode_video_ids(catalog):
    episode = catalog.get_episodes("show")["T1"][0]
    assert episode.video_ids == {"default": "s1-0", "en": "s1-0-en", "es": "s1-0-es"}
    assert episode.video_id_for("es") == "s1-0-es"
    assert episode.video_id_for("fr") == "s1-0"

def test_episodes_sorted_by_number():
    catalog = Catalog.from_dict({
        "series": {"s": {"title": "S"}},
        "seriesEpisodes": {"s": {"T1": {
            "a": {"episodeNumber": 3, "title": "third", "videoId": "c"},
            "b": {"episodeNumber": 1, "title": "first", "videoId": "a"},
            "c": {"episodeNumber": 2, "title": "second", "videoId": " "},
        }}},
    })
    episodes = catalog.get_episodes("s")["T1"]
    assert [e.title for e in episodes] == ["first", "second", "third"]
    assert episodes[1].video_ids == {}
    assert episodes[1].video_id_for("en") is None

def test_movies(catalog):
    assert catalog.get_movie("plain").video_ids == {"default": "plain"}
    assert catalog.get_movie("dubbed").video_ids["es"] == "dub-es"

@pytest.mark.asyncio
async def test_load_from_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"series": {"s": {"title": "S", "poster": "s.jpg"}}}), encoding="utf-8")
    catalog = await Catalog.load(path)
    assert catalog.get_series("s").poster == "s.jpg"
