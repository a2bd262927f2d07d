import asyncio
import pytest
from cineplay.core.history_committer import HistoryCommitter
from cineplay.core.timer import DeferredCall
from cineplay.database.models import PendingHistoryEntry

from conftest import FakeHistoryLog

def entry(index, season="T2"):
    return PendingHistoryEntry(series_id="show", season=season, episode_index=index, title=f"s2 {index + 1}")

@pytest.mark.asyncio
async def test_deferred_call_cancel():
    fired = []
    call = DeferredCall(0.01, lambda: fired.append(True))
    assert call.pending
    assert call.cancel()
    await asyncio.sleep(0.03)
    assert fired == []
    assert not call.cancel()

@pytest.mark.asyncio
async def test_commit_after_dwell(make_committer, history_log, drain):
    committer = make_committer(dwell_seconds=0.02)
    committer.arm(entry(3))
    assert history_log.writes == []

    await asyncio.sleep(0.06)
    await drain()

    assert len(history_log.writes) == 1
    user_id, key, record = history_log.writes[0]
    assert user_id == "user-1"
    assert key == "show_T2"
    assert record.type == "series"
    assert record.content_id == "show"
    assert record.title == "The Show: T2"
    assert record.poster == "show-t2.jpg"
    assert record.season == "T2"
    assert record.last_episode == 3
    assert committer.pending is None

@pytest.mark.asyncio
async def test_rearm_discards_previous(make_committer, history_log, drain):
    committer = make_committer(dwell_seconds=0.02)
    committer.arm(entry(1))
    committer.arm(entry(2))

    await asyncio.sleep(0.06)
    await drain()

    assert history_log.episodes_written() == [2]

@pytest.mark.asyncio
async def test_cancel_pending(make_committer, history_log, drain):
    committer = make_committer(dwell_seconds=0.02)
    committer.arm(entry(1))
    committer.cancel_pending()

    await asyncio.sleep(0.05)
    await drain()
    assert history_log.writes == []
    assert committer.pending is None

@pytest.mark.asyncio
async def test_flush_commits_once(make_committer, history_log, drain):
    committer = make_committer(dwell_seconds=0.02)
    committer.arm(entry(4))
    committer.flush_pending()
    await drain()
    assert history_log.episodes_written() == [4]

    # The flushed timer must not fire a second commit
    await asyncio.sleep(0.05)
    await drain()
    assert history_log.episodes_written() == [4]

@pytest.mark.asyncio
async def test_flush_without_pending_is_noop(make_committer, history_log, drain):
    committer = make_committer()
    committer.flush_pending()
    committer.flush_pending()
    await drain()
    assert history_log.writes == []

@pytest.mark.asyncio
async def test_flush_after_dwell_does_not_recommit(make_committer, history_log, drain):
    committer = make_committer(dwell_seconds=0.01)
    committer.arm(entry(0))
    await asyncio.sleep(0.04)
    committer.flush_pending()
    await drain()
    assert history_log.episodes_written() == [0]

@pytest.mark.asyncio
async def test_season_without_poster_uses_series_poster(make_committer, history_log, drain):
    committer = make_committer()
    committer.arm(entry(0, season="T1"))
    committer.flush_pending()
    await drain()
    assert history_log.writes[0][2].poster == "show.jpg"
    assert history_log.writes[0][1] == "show_T1"

@pytest.mark.asyncio
async def test_no_user_skips_commit(make_committer, history_log, drain):
    committer = make_committer(user_id=None)
    committer.arm(entry(0))
    committer.flush_pending()
    await drain()
    assert history_log.writes == []

@pytest.mark.asyncio
async def test_write_failure_is_reported(catalog, reporter, write_tasks, drain):
    committer = HistoryCommitter(FakeHistoryLog(fail_writes=True), catalog, reporter, user_id="user-1",
                                 tasks=write_tasks)
    committer.arm(entry(0))
    committer.flush_pending()
    await drain()

    assert reporter.last_notice is not None
    assert reporter.last_notice.kind == "database"

@pytest.mark.asyncio
async def test_record_movie(catalog, make_committer, history_log, drain):
    committer = make_committer()
    committer.record_movie(catalog.get_movie("dubbed"))
    await drain()

    _, key, record = history_log.writes[0]
    assert key == "dubbed"
    assert record.type == "movie"
    assert record.season is None
    assert record.last_episode is None
