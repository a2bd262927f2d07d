import asyncio
import pytest
from cineplay.core.catalog import Catalog
from cineplay.core.error_reporter import ErrorReporter
from cineplay.core.history_committer import HistoryCommitter
from cineplay.core.progress_store import ProgressStore
from cineplay.core.session_orchestrator import SessionOrchestrator
from cineplay.database.local_store import LocalStore

def _episodes(count, prefix, spanish=False):
    episodes = []
    for i in range(count):
        ep = {
            "episodeNumber": i + 1,
            "title": f"{prefix} {i + 1}",
            "videoId": f"{prefix}-{i}",
        }
        if spanish:
            ep["videoId_en"] = f"{prefix}-{i}-en"
            ep["videoId_es"] = f"{prefix}-{i}-es"
        episodes.append(ep)
    return episodes

CATALOG_DATA = {
    "series": {
        "show": {"title": "The Show", "poster": "show.jpg", "genres": "Drama; Comedy"},
        "single": {"title": "Single Season", "poster": "single.jpg"},
        "empty": {"title": "Nothing Yet", "poster": "empty.jpg"},
    },
    "seriesEpisodes": {
        "show": {
            "Extras": _episodes(2, "extra"),
            "T1": _episodes(3, "s1", spanish=True),
            "T2": _episodes(5, "s2"),
        },
        "single": {
            "T1": _episodes(2, "single"),
        },
    },
    "seasonPosters": {
        "show": {"T2": "show-t2.jpg"},
    },
    "movies": {
        "dubbed": {"title": "Dubbed Movie", "poster": "dubbed.jpg", "videoId_en": "dub-en", "videoId_es": "dub-es"},
        "plain": {"title": "Plain Movie", "poster": "plain.jpg"},
    },
}

class FakeHistoryLog:
    """Remote history double that records every write."""

    def __init__(self, last_watched=None, fail_writes=False, fail_reads=False, read_delay=0):
        self.writes = []
        self.last_watched = last_watched or {}
        self.fail_writes = fail_writes
        self.fail_reads = fail_reads
        self.read_delay = read_delay

    async def initialize(self):
        pass

    async def write_history(self, user_id, key, record):
        if self.fail_writes:
            raise ConnectionError("history backend unavailable")
        self.writes.append((user_id, key, record))

    async def read_last_watched(self, user_id, series_id):
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.fail_reads:
            raise ConnectionError("history backend unavailable")
        return self.last_watched.get(series_id)

    async def get_history(self, user_id):
        return [record for uid, _, record in reversed(self.writes) if uid == user_id]

    async def remove_history(self, user_id, key):
        self.writes = [w for w in self.writes if not (w[0] == user_id and w[1] == key)]

    def episodes_written(self):
        return [record.last_episode for _, _, record in self.writes]

@pytest.fixture
def catalog():
    return Catalog.from_dict(CATALOG_DATA)

@pytest.fixture
def progress(tmp_path):
    return ProgressStore(LocalStore(tmp_path / "progress.json"))

@pytest.fixture
def reporter():
    return ErrorReporter()

@pytest.fixture
def history_log():
    return FakeHistoryLog()

@pytest.fixture
def write_tasks():
    return set()

@pytest.fixture
def drain(write_tasks):
    async def wait_for_writes():
        while write_tasks:
            await asyncio.gather(*list(write_tasks), return_exceptions=True)
    return wait_for_writes

@pytest.fixture
def make_committer(history_log, catalog, reporter, write_tasks):
    def factory(dwell_seconds=30.0, user_id="user-1"):
        return HistoryCommitter(history_log, catalog, reporter, user_id=user_id,
                                dwell_seconds=dwell_seconds, tasks=write_tasks)
    return factory

@pytest.fixture
def make_orchestrator(catalog, progress, reporter):
    def factory(history_log, dwell_seconds=30.0, lookup_timeout=1.0, rng=None):
        return SessionOrchestrator(catalog, progress, history_log, reporter,
                                   dwell_seconds=dwell_seconds, lookup_timeout=lookup_timeout, rng=rng)
    return factory
