"""Entry point for the FastAPI-powered FlickFinder service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .auth import UserRepository
from .collection_store import CollectionName
from .config import settings
from .controller import AccountController, MovieController
from .database import Database
from .models import ActionResult
from .recommendations import RecommendationEngine
from .services.tmdb import TMDBClient
from .session import Session, SessionManager

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Token"

app: FastAPI


class Credentials(BaseModel):
    username: str
    password: str


class Selection(BaseModel):
    title: str | None = None


class LoginResponse(BaseModel):
    token: str
    user_id: int
    username: str


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url),
            timeout=httpx.Timeout(20.0, connect=10.0),
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    catalog = TMDBClient(settings, tmdb_http_client)
    sessions = SessionManager(ttl_seconds=settings.session_ttl_seconds)
    recommender = RecommendationEngine.from_settings(settings, catalog)

    fastapi_app.state.database = database
    fastapi_app.state.sessions = sessions
    fastapi_app.state.account_controller = AccountController(
        UserRepository(database.session_factory), sessions
    )
    fastapi_app.state.movie_controller = MovieController(
        catalog, recommender, recent_search_limit=settings.recent_search_limit
    )

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Search TMDB, keep favorites and a watchlist, get recommendations",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def _state(fastapi_app: FastAPI, name: str, expected: type):
    value = getattr(fastapi_app.state, name, None)
    if not isinstance(value, expected):
        raise RuntimeError(f"{name.replace('_', ' ').capitalize()} not initialised")
    return value


def get_account_controller(fastapi_app: FastAPI) -> AccountController:
    return _state(fastapi_app, "account_controller", AccountController)


def get_movie_controller(fastapi_app: FastAPI) -> MovieController:
    return _state(fastapi_app, "movie_controller", MovieController)


def get_sessions(fastapi_app: FastAPI) -> SessionManager:
    return _state(fastapi_app, "sessions", SessionManager)


def register_routes(fastapi_app: FastAPI) -> None:
    def _require_session(request: Request) -> Session:
        token = request.headers.get(SESSION_HEADER)
        session = get_sessions(fastapi_app).get(token)
        if session is None:
            raise HTTPException(status_code=401, detail="Not logged in")
        return session

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.post("/register", response_model=ActionResult)
    async def register(credentials: Credentials) -> ActionResult:
        accounts = get_account_controller(fastapi_app)
        return await accounts.register(credentials.username, credentials.password)

    @fastapi_app.post("/login", response_model=LoginResponse)
    async def login(credentials: Credentials) -> LoginResponse:
        accounts = get_account_controller(fastapi_app)
        session = await accounts.login(credentials.username, credentials.password)
        if session is None:
            raise HTTPException(status_code=401, detail="Invalid username or password.")
        return LoginResponse(
            token=session.token, user_id=session.user_id, username=session.username
        )

    @fastapi_app.post("/logout", response_model=ActionResult)
    async def logout(request: Request) -> ActionResult:
        session = _require_session(request)
        return get_account_controller(fastapi_app).logout(session.token)

    @fastapi_app.get("/search", response_model=ActionResult)
    async def search(request: Request, query: str = "") -> ActionResult:
        session = _require_session(request)
        return await get_movie_controller(fastapi_app).search(session, query)

    @fastapi_app.get("/trending", response_model=ActionResult)
    async def trending(request: Request) -> ActionResult:
        session = _require_session(request)
        return await get_movie_controller(fastapi_app).trending(session)

    @fastapi_app.get("/details", response_model=ActionResult)
    async def details(request: Request, title: str | None = None) -> ActionResult:
        session = _require_session(request)
        return await get_movie_controller(fastapi_app).details(session, title)

    def _register_collection_routes(name: CollectionName) -> None:
        @fastapi_app.get(f"/{name}", response_model=ActionResult, name=f"list_{name}")
        async def list_members(request: Request) -> ActionResult:
            session = _require_session(request)
            return get_movie_controller(fastapi_app).list_collection(session, name)

        @fastapi_app.post(f"/{name}", response_model=ActionResult, name=f"add_{name}")
        async def add_member(request: Request, selection: Selection) -> ActionResult:
            session = _require_session(request)
            return get_movie_controller(fastapi_app).add(session, name, selection.title)

        @fastapi_app.delete(
            f"/{name}/{{movie_id}}", response_model=ActionResult, name=f"remove_{name}"
        )
        async def remove_member(request: Request, movie_id: int) -> ActionResult:
            session = _require_session(request)
            return get_movie_controller(fastapi_app).remove(session, name, movie_id)

    _register_collection_routes("favorites")
    _register_collection_routes("watchlist")

    @fastapi_app.get("/recommendations", response_model=ActionResult)
    async def recommendations(request: Request) -> ActionResult:
        session = _require_session(request)
        return await get_movie_controller(fastapi_app).recommendations(session)

    @fastapi_app.get("/recent-searches")
    async def recent_searches(request: Request) -> dict[str, list[str]]:
        session = _require_session(request)
        return {"searches": get_movie_controller(fastapi_app).recent_searches(session)}


app = create_app()
