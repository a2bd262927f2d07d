import json
from pathlib import Path
from typing import Optional, Dict
from ..utils.logger import get_logger

logger = get_logger(__name__)

class LocalStore:
    """
    Device-local durable key/value store.
    Every key maps to a string value; the whole map is kept in one JSON file
    and rewritten on each set_item.
    """

    def __init__(self, path):
        self.path = Path(path)
        logger.debug(f"LocalStore initialized with path: {self.path}")

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Local store {self.path} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str):
        try:
            data = self._read_all()
        except ValueError as e:
            # An undecodable file is replaced so later writes can succeed again
            logger.warning(f"Local store {self.path} is corrupted, starting from an empty map: {e}")
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        tmp_path.replace(self.path)

