import re
from typing import Iterable, List, Optional

_NON_DIGITS = re.compile(r"\D")

def season_number(season_key) -> int:
    """Digits scraped out of a season key ("T2" -> 2); keys without digits count as 0."""
    digits = _NON_DIGITS.sub("", str(season_key))
    return int(digits) if digits else 0

def has_season_number(season_key) -> bool:
    return bool(_NON_DIGITS.sub("", str(season_key)))

def sort_seasons(season_keys: Iterable[str]) -> List[str]:
    # sorted() is stable, so equal numbers keep catalog order
    return sorted(season_keys, key=season_number)

def first_season(season_keys: Iterable[str]) -> Optional[str]:
    """
    Season a series opens on when there is no watch history.
    Keys without digits ("Extras") sort first in the grid, but playback
    starts on the lowest numbered season when one exists.
    """
    ordered = sort_seasons(season_keys)
    if not ordered:
        return None
    for key in ordered:
        if has_season_number(key):
            return key
    return ordered[0]

def season_label(season_key) -> str:
    return str(season_key).replace("T", "", 1)

def format_episode_title(season_key, episode_number: int, title: str) -> str:
    return f"T{season_label(season_key)} E{episode_number} - {title or ''}"

def format_history_title(series_title: str, season_key) -> str:
    return f"{series_title}: T{season_label(season_key)}"

def progress_percent(resume_index: int, episode_count: int) -> int:
    # A resume point of 0 is indistinguishable from "never opened"
    watched = resume_index + 1 if resume_index > 0 else 0
    if episode_count <= 0:
        return 0
    return int(watched * 100 / episode_count + 0.5)
