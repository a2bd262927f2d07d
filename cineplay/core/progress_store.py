import json
from typing import Dict
from ..database.local_store import LocalStore
from ..config import PROGRESS_NAMESPACE
from ..utils.logger import get_logger

logger = get_logger(__name__)

class ProgressStore:
    """
    Per-series, per-season resume points kept on the local device.

    Best effort: a failed save is logged and dropped, a failed or corrupted
    read yields episode 0.
    """

    def __init__(self, store: LocalStore, namespace: str = PROGRESS_NAMESPACE):
        self._store = store
        self._namespace = namespace

    def _load_all(self) -> Dict[str, Dict[str, int]]:
        raw = self._store.get_item(self._namespace)
        if not raw:
            return {}
        data = json.loads(raw)
        return data if isinstance(data, dict) else {}

    def save(self, series_id: str, season: str, episode_index: int):
        try:
            try:
                all_progress = self._load_all()
            except (ValueError, TypeError):
                logger.warning(f"Discarding corrupted progress map under '{self._namespace}'")
                all_progress = {}
            series_progress = all_progress.get(series_id)
            if not isinstance(series_progress, dict):
                series_progress = {}
                all_progress[series_id] = series_progress
            series_progress[str(season)] = episode_index
            self._store.set_item(self._namespace, json.dumps(all_progress))
            logger.debug(f"Saved progress: {series_id} season {season} -> episode {episode_index}")
        except Exception as e:
            logger.error(f"Error saving progress for {series_id} season {season}: {e}")

    def load(self, series_id: str, season: str) -> int:
        try:
            value = self._load_all().get(series_id, {}).get(str(season), 0)
        except Exception as e:
            logger.warning(f"Could not read progress for {series_id} season {season}: {e}")
            return 0
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return 0
        return value

    def load_clamped(self, series_id: str, season: str, episode_count: int) -> int:
        """Stored index, pulled back to the last episode if the season has since shrunk."""
        if episode_count <= 0:
            return 0
        index = self.load(series_id, season)
        if index >= episode_count:
            logger.info(f"Clamping stale resume point {index} for {series_id} season {season} to {episode_count - 1}")
            return episode_count - 1
        return index
