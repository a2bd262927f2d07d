from cineplay.utils.format_utils import (season_number, sort_seasons, first_season, season_label,
                                         format_episode_title, format_history_title, progress_percent)

def test_season_number_extracts_digits():
    assert season_number("T2") == 2
    assert season_number("Season 10") == 10
    assert season_number("Extras") == 0

def test_sort_seasons_numeric_order():
    assert sort_seasons(["T10", "T2", "T1"]) == ["T1", "T2", "T10"]

def test_sort_seasons_non_numeric_first():
    assert sort_seasons(["T2", "Extras", "T1"]) == ["Extras", "T1", "T2"]

def test_sort_seasons_ties_keep_order():
    assert sort_seasons(["Specials", "Extras", "T1"]) == ["Specials", "Extras", "T1"]

def test_first_season_prefers_numbered():
    assert first_season(["Extras", "T1", "T2"]) == "T1"
    assert first_season(["T3", "T2"]) == "T2"

def test_first_season_only_unnumbered():
    assert first_season(["Extras", "Specials"]) == "Extras"
    assert first_season([]) is None

def test_titles():
    assert season_label("T2") == "2"
    assert format_episode_title("T2", 4, "Pilot") == "T2 E4 - Pilot"
    assert format_history_title("The Show", "T3") == "The Show: T3"

def test_progress_percent():
    assert progress_percent(0, 5) == 0
    assert progress_percent(1, 4) == 50
    assert progress_percent(4, 5) == 100
    assert progress_percent(2, 0) == 0
