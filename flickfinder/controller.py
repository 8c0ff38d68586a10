"""Command handlers translating user actions into core calls."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .auth import UserRepository
from .collection_store import CollectionName
from .models import ActionResult, AddOutcome, RemoveOutcome
from .recommendations import RecommendationEngine
from .services.tmdb import TMDBClient
from .session import Session, SessionManager
from .utils import normalize_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _CollectionMessages:
    label: str
    added: str
    already_present: str
    removed: str
    not_present: str
    select_prompt: str


_MESSAGES: dict[str, _CollectionMessages] = {
    "favorites": _CollectionMessages(
        label="Favorites",
        added="{title} added to favorites!",
        already_present="{title} is already in favorites.",
        removed="{title} removed from favorites.",
        not_present="Movie is not in favorites.",
        select_prompt="Please select a movie to add to favorites.",
    ),
    "watchlist": _CollectionMessages(
        label="Watchlist",
        added="{title} added to your watchlist!",
        already_present="{title} is already in your watchlist.",
        removed="{title} removed from your watchlist.",
        not_present="Movie is not in your watchlist.",
        select_prompt="Please select a movie to add to your watchlist.",
    ),
}


class AccountController:
    """Login, registration and logout."""

    def __init__(self, users: UserRepository, sessions: SessionManager):
        self._users = users
        self._sessions = sessions

    async def register(self, username: str, password: str) -> ActionResult:
        if await self._users.register(username, password):
            return ActionResult.info("Registration successful! You can now log in.")
        return ActionResult.error("Registration failed. The username may already exist.")

    async def login(self, username: str, password: str) -> Session | None:
        if not await self._users.authenticate(username, password):
            logger.info("Rejected login for %s", username)
            return None
        user_id = await self._users.user_id(username)
        if user_id is None:
            logger.warning("Authenticated user %s has no id", username)
            return None
        return self._sessions.open(user_id, username)

    def logout(self, token: str | None) -> ActionResult:
        if self._sessions.close(token):
            return ActionResult.info("Logged out.")
        return ActionResult.error("No active session.")


class MovieController:
    """Search, details, collection and recommendation commands for a session."""

    def __init__(
        self,
        catalog: TMDBClient,
        recommender: RecommendationEngine,
        *,
        recent_search_limit: int = 10,
    ):
        self._catalog = catalog
        self._recommender = recommender
        self._recent_search_limit = recent_search_limit

    async def search(self, session: Session, query: str | None) -> ActionResult:
        normalized = normalize_query(query)
        if not normalized:
            return ActionResult.error("Please enter a movie name!")

        session.remember_search(normalized, limit=self._recent_search_limit)
        movies = await self._catalog.search(normalized)
        session.last_results = movies
        if not movies:
            return ActionResult.info("No movies found.")
        return ActionResult(movies=movies)

    async def trending(self, session: Session) -> ActionResult:
        movies = await self._catalog.trending()
        session.last_results = movies
        if not movies:
            return ActionResult.info("No trending movies found.")
        return ActionResult(movies=movies)

    async def details(self, session: Session, title: str | None) -> ActionResult:
        if not title:
            return ActionResult()
        movie = session.find_result(title)
        if movie is None:
            return ActionResult.error("Selected movie not found.")
        details = await self._catalog.details(movie.id)
        return ActionResult(
            ok=not details.is_error, movies=[movie], details=details.describe()
        )

    def add(
        self, session: Session, name: CollectionName, title: str | None
    ) -> ActionResult:
        messages = _MESSAGES[name]
        if not title:
            return ActionResult.info(messages.select_prompt)
        movie = session.find_result(title)
        if movie is None:
            return ActionResult.error("Selected movie not found.")

        outcome = session.collections.get(name).add(movie)
        template = (
            messages.added if outcome is AddOutcome.ADDED else messages.already_present
        )
        return ActionResult(
            message=template.format(title=movie.title),
            outcome=outcome.value,
            movies=[movie],
        )

    def remove(self, session: Session, name: CollectionName, movie_id: int) -> ActionResult:
        messages = _MESSAGES[name]
        collection = session.collections.get(name)
        movie = collection.get(movie_id)
        outcome = collection.remove(movie_id)
        if outcome is RemoveOutcome.NOT_PRESENT or movie is None:
            return ActionResult.info(
                messages.not_present, outcome=RemoveOutcome.NOT_PRESENT.value
            )
        return ActionResult(
            message=messages.removed.format(title=movie.title),
            outcome=outcome.value,
            movies=[movie],
        )

    def list_collection(self, session: Session, name: CollectionName) -> ActionResult:
        return ActionResult(movies=session.collections.get(name).list())

    async def recommendations(self, session: Session) -> ActionResult:
        movies = await self._recommender.recommend_for(session)
        if not movies:
            return ActionResult.info("No recommendations available")
        # Recommended titles become the selection list, like search results.
        session.last_results = movies
        return ActionResult(movies=movies)

    def recent_searches(self, session: Session) -> list[str]:
        return list(session.recent_searches)
