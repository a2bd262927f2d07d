from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Optional
import logging

from fastapi import FastAPI, HTTPException, Header
from fastapi.middleware.cors import CORSMiddleware

from ..core.catalog import Catalog
from ..core.error_reporter import ErrorReporter
from ..core.progress_store import ProgressStore
from ..core.remote_history import create_history_log
from ..core.session_orchestrator import SessionOrchestrator
from ..core.playback_session import PlaybackSession, build_season_cards
from ..database.local_store import LocalStore
from ..database.models import SessionMode
from ..config import CATALOG_PATH, PROGRESS_PATH, VIEWER_URL_TEMPLATE, LANGUAGE_LABELS

logger = logging.getLogger("cineplay.Web")

def session_view(session: PlaybackSession) -> dict:
    """Everything the player surface needs to draw the current state."""
    view = {
        "series_id": session.series_id,
        "series_title": session.series.title,
        "mode": session.mode.value,
        "seasons": session.seasons,
        "season": None,
        "episode_index": None,
        "language": session.language,
        "languages": [{"code": lang, "label": LANGUAGE_LABELS.get(lang, lang)} for lang in session.available_languages()],
        "title": session.title,
        "video_id": session.video_id,
        "embed_url": session.embed_url,
        "prev_enabled": session.nav.prev_enabled,
        "next_enabled": session.nav.next_enabled,
        "episodes": [asdict(item) for item in session.episode_list()],
        "season_cards": [],
    }
    if session.state:
        view["season"] = session.state.season
        view["episode_index"] = session.state.episode_index
    if session.mode == SessionMode.SEASON_GRID:
        view["season_cards"] = [dict(asdict(card), complete=card.complete) for card in session.season_cards()]
    return view

async def _build_orchestrator() -> SessionOrchestrator:
    history_log = create_history_log()
    await history_log.initialize()
    if CATALOG_PATH.exists():
        catalog = await Catalog.load(CATALOG_PATH)
    else:
        logger.warning(f"Catalog not found at {CATALOG_PATH}, starting with an empty catalog")
        catalog = Catalog()
    return SessionOrchestrator(catalog, ProgressStore(LocalStore(PROGRESS_PATH)), history_log, ErrorReporter())

def create_app(orchestrator: Optional[SessionOrchestrator] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.orchestrator is None:
            app.state.orchestrator = await _build_orchestrator()
        logger.info("--- SERVER STARTING ---")
        yield
        await app.state.orchestrator.shutdown()

    app = FastAPI(title="cineplay API", lifespan=lifespan)
    app.state.orchestrator = orchestrator

    # Enable CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def active_session() -> PlaybackSession:
        session = app.state.orchestrator.active
        if not session:
            raise HTTPException(status_code=409, detail="No playback session is open")
        return session

    @app.get("/health")
    async def health():
        return {"status": "ok", "viewer": VIEWER_URL_TEMPLATE}

    # --- Catalog ---

    @app.get("/api/series/{series_id}/seasons")
    async def get_seasons(series_id: str):
        orch = app.state.orchestrator
        series = orch.catalog.get_series(series_id)
        if not series:
            raise HTTPException(status_code=404, detail="Series not found")
        cards = build_season_cards(series, orch.catalog.get_episodes(series_id), orch.progress)
        return [dict(asdict(card), complete=card.complete) for card in cards]

    # --- Series player ---

    @app.post("/api/player/series/{series_id}")
    async def open_series(series_id: str, request_data: Optional[dict] = None,
                          x_user_id: Optional[str] = Header(None)):
        orch = app.state.orchestrator
        data = request_data or {}
        if orch.catalog.get_series(series_id) is None:
            raise HTTPException(status_code=404, detail="Series not found")

        # Only a notice raised while handling this request explains a miss
        orch.reporter.clear()
        if data.get("random"):
            session = await orch.play_random_episode(series_id, x_user_id)
        elif data.get("season") is not None and data.get("episode_index") is not None:
            session = await orch.open_episode(series_id, str(data["season"]), int(data["episode_index"]), x_user_id)
        elif data.get("season") is not None:
            session = await orch.open_season(series_id, str(data["season"]), x_user_id)
        else:
            session = await orch.open_series(series_id, x_user_id, bool(data.get("force_season_grid")))

        if not session:
            notice = orch.reporter.last_notice
            raise HTTPException(status_code=404, detail=notice.message if notice else "Episode not found")
        return session_view(session)

    @app.get("/api/player")
    async def get_player():
        return session_view(active_session())

    @app.post("/api/player/navigate")
    async def navigate(request_data: dict):
        session = active_session()
        direction = request_data.get("direction")
        if direction not in (-1, 1):
            raise HTTPException(status_code=400, detail="direction must be -1 or 1")
        session.navigate(direction)
        return session_view(session)

    @app.post("/api/player/episode")
    async def open_episode(request_data: dict):
        session = active_session()
        season = request_data.get("season", session.state.season if session.state else None)
        if season is None or request_data.get("episode_index") is None:
            raise HTTPException(status_code=400, detail="Missing season or episode_index")
        session.open(str(season), int(request_data["episode_index"]))
        return session_view(session)

    @app.post("/api/player/language")
    async def change_language(request_data: dict):
        session = active_session()
        language = request_data.get("language")
        if not language:
            raise HTTPException(status_code=400, detail="Missing language")
        session.change_language(language)
        return session_view(session)

    @app.post("/api/player/grid")
    async def show_grid():
        session = active_session()
        session.show_season_grid()
        return session_view(session)

    @app.post("/api/player/season")
    async def select_season(request_data: dict):
        session = active_session()
        season = request_data.get("season")
        if season is None:
            raise HTTPException(status_code=400, detail="Missing season")
        session.select_season(str(season))
        return session_view(session)

    @app.delete("/api/player")
    async def close_player():
        app.state.orchestrator.close()
        return {"status": "closed"}

    # --- Movies ---

    @app.post("/api/movies/{movie_id}/play")
    async def play_movie(movie_id: str, x_user_id: Optional[str] = Header(None)):
        playback = await app.state.orchestrator.play_movie(movie_id, x_user_id)
        if not playback:
            raise HTTPException(status_code=404, detail="Movie not found")
        return asdict(playback.view())

    @app.post("/api/movies/language")
    async def change_movie_language(request_data: dict):
        playback = app.state.orchestrator.movie
        if not playback:
            raise HTTPException(status_code=409, detail="No movie is playing")
        language = request_data.get("language")
        if not language:
            raise HTTPException(status_code=400, detail="Missing language")
        playback.change_language(language)
        return asdict(playback.view())

    # --- History ---

    @app.get("/api/history")
    async def get_history(x_user_id: Optional[str] = Header(None)):
        if not x_user_id:
            raise HTTPException(status_code=401, detail="Sign in to see your history")
        records = await app.state.orchestrator.history_log.get_history(x_user_id)
        return [record.to_dict() for record in records]

    @app.delete("/api/history/{key}")
    async def remove_history(key: str, x_user_id: Optional[str] = Header(None)):
        if not x_user_id:
            raise HTTPException(status_code=401, detail="Sign in to edit your history")
        await app.state.orchestrator.history_log.remove_history(x_user_id, key)
        return {"status": "removed"}

    @app.get("/api/notice")
    async def get_notice():
        notice = app.state.orchestrator.reporter.last_notice
        if not notice:
            return None
        return {"kind": notice.kind, "message": notice.message, "created_at": notice.created_at.isoformat()}

    return app
