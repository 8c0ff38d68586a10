"""Filter a candidate pool down to titles that fit a user's profile."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Sequence

from .models import Movie
from .profile import DEFAULT_MIN_TOKEN_LENGTH, extract_profile
from .utils import fold_text, tokenize_all

if TYPE_CHECKING:
    from .config import Settings
    from .services.tmdb import TMDBClient
    from .session import Session

logger = logging.getLogger(__name__)


class RecommendationMode(str, Enum):
    """How to treat a profile with no tokens.

    ``PERSONALIZED`` returns nothing, since there is no signal to filter on.
    ``TRENDING_FALLBACK`` hands back the de-duplicated candidate pool instead.
    """

    PERSONALIZED = "personalized"
    TRENDING_FALLBACK = "trending-fallback"


def _matches(
    movie: Movie, profile: frozenset[str] | set[str], *, match_genres: bool
) -> bool:
    title = fold_text(movie.title)
    if any(token in title for token in profile):
        return True
    if not match_genres or not movie.genres:
        return False
    genre_tokens = tokenize_all(movie.genres, min_length=1)
    return any(token in genre for token in profile for genre in genre_tokens)


def recommend(
    profile: Iterable[str],
    candidates: Sequence[Movie],
    *,
    mode: RecommendationMode = RecommendationMode.PERSONALIZED,
    match_genres: bool = False,
) -> list[Movie]:
    """Return the candidates whose title contains any profile token.

    Output keeps candidate order and never repeats an identifier, even when
    the pool itself does.
    """

    tokens = frozenset(fold_text(token) for token in profile if token)
    if not tokens and mode is not RecommendationMode.TRENDING_FALLBACK:
        return []

    seen: set[int] = set()
    picked: list[Movie] = []
    for movie in candidates:
        if movie.id in seen:
            continue
        if tokens and not _matches(movie, tokens, match_genres=match_genres):
            continue
        seen.add(movie.id)
        picked.append(movie)
    return picked


class RecommendationEngine:
    """Combine a session's profile with the current trending pool."""

    def __init__(
        self,
        catalog: "TMDBClient",
        *,
        mode: RecommendationMode = RecommendationMode.PERSONALIZED,
        match_genres: bool = False,
        min_token_length: int = DEFAULT_MIN_TOKEN_LENGTH,
    ):
        self._catalog = catalog
        self.mode = mode
        self.match_genres = match_genres
        self.min_token_length = min_token_length

    @classmethod
    def from_settings(
        cls, settings: "Settings", catalog: "TMDBClient"
    ) -> "RecommendationEngine":
        return cls(
            catalog,
            mode=RecommendationMode(settings.recommendation_mode),
            match_genres=settings.recommend_by_genre,
            min_token_length=settings.profile_min_token_length,
        )

    def profile_for(self, session: "Session") -> frozenset[str]:
        collections = session.collections
        return extract_profile(
            collections.favorites.list(),
            collections.watchlist.list(),
            include_genres=self.match_genres,
            min_token_length=self.min_token_length,
        )

    async def recommend_for(self, session: "Session") -> list[Movie]:
        """Fetch a fresh trending pool and filter it by the session's profile."""

        profile = self.profile_for(session)
        if not profile and self.mode is RecommendationMode.PERSONALIZED:
            logger.debug("No profile tokens for %s, skipping trending fetch", session.username)
            return []

        candidates = await self._catalog.trending()
        return recommend(
            profile, candidates, mode=self.mode, match_genres=self.match_genres
        )
