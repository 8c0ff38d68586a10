from __future__ import annotations

import pytest

from flickfinder.models import Movie
from flickfinder.profile import extract_profile
from flickfinder.recommendations import RecommendationEngine, RecommendationMode, recommend
from flickfinder.session import Session


class FakeCatalog:
    """Stands in for the TMDB client and records trending fetches."""

    def __init__(self, trending: list[Movie]) -> None:
        self._trending = trending
        self.trending_calls = 0

    async def trending(self) -> list[Movie]:
        self.trending_calls += 1
        return list(self._trending)


CANDIDATES = [
    Movie(id=1, title="The Matrix", source="Trending"),
    Movie(id=2, title="Matrix Reloaded", source="Trending"),
    Movie(id=3, title="Titanic", source="Trending"),
]


def test_recommend_matches_title_substrings_in_candidate_order():
    result = recommend({"matrix"}, CANDIDATES)

    assert [movie.id for movie in result] == [1, 2]


def test_empty_profile_yields_nothing():
    assert recommend(set(), CANDIDATES) == []


def test_result_is_ordered_subset_without_duplicate_ids():
    pool = [
        Movie(id=2, title="Matrix Reloaded"),
        Movie(id=5, title="Heat"),
        Movie(id=2, title="Matrix Reloaded"),
        Movie(id=1, title="The Matrix"),
        Movie(id=1, title="The Matrix (re-release)"),
    ]

    result = recommend({"matrix", "heat"}, pool)

    assert [movie.id for movie in result] == [2, 5, 1]
    assert all(movie in pool for movie in result)


def test_profile_tokens_match_case_insensitively():
    result = recommend({"MATRIX"}, CANDIDATES)

    assert [movie.id for movie in result] == [1, 2]


def test_trending_fallback_returns_deduplicated_pool_for_empty_profile():
    pool = CANDIDATES + [CANDIDATES[0]]

    result = recommend(set(), pool, mode=RecommendationMode.TRENDING_FALLBACK)

    assert [movie.id for movie in result] == [1, 2, 3]


def test_trending_fallback_still_filters_when_profile_present():
    result = recommend({"titanic"}, CANDIDATES, mode=RecommendationMode.TRENDING_FALLBACK)

    assert [movie.id for movie in result] == [3]


def test_genre_matching_is_opt_in():
    pool = [Movie(id=9, title="Event Horizon", genres=("Horror", "Science Fiction"))]

    assert recommend({"horror"}, pool) == []
    assert recommend({"horror"}, pool, match_genres=True) == pool


@pytest.mark.anyio("asyncio")
async def test_engine_filters_trending_by_session_profile():
    catalog = FakeCatalog(CANDIDATES)
    engine = RecommendationEngine(catalog)  # type: ignore[arg-type]
    session = Session(token="t", user_id=1, username="neo")
    session.collections.favorites.add(Movie(id=1, title="The Matrix"))

    result = await engine.recommend_for(session)

    assert [movie.id for movie in result] == [1, 2]
    assert catalog.trending_calls == 1


@pytest.mark.anyio("asyncio")
async def test_engine_uses_watchlist_too():
    catalog = FakeCatalog(CANDIDATES)
    engine = RecommendationEngine(catalog)  # type: ignore[arg-type]
    session = Session(token="t", user_id=1, username="rose")
    session.collections.watchlist.add(Movie(id=77, title="Titanic II"))

    result = await engine.recommend_for(session)

    assert [movie.id for movie in result] == [3]


@pytest.mark.anyio("asyncio")
async def test_engine_skips_catalog_without_profile():
    catalog = FakeCatalog(CANDIDATES)
    engine = RecommendationEngine(catalog)  # type: ignore[arg-type]
    session = Session(token="t", user_id=1, username="new")

    assert await engine.recommend_for(session) == []
    assert catalog.trending_calls == 0


@pytest.mark.anyio("asyncio")
async def test_engine_fallback_mode_returns_trending():
    catalog = FakeCatalog(CANDIDATES)
    engine = RecommendationEngine(
        catalog, mode=RecommendationMode.TRENDING_FALLBACK  # type: ignore[arg-type]
    )
    session = Session(token="t", user_id=1, username="new")

    result = await engine.recommend_for(session)

    assert [movie.id for movie in result] == [1, 2, 3]


def test_favorite_with_superscript_title_matches_itself():
    favorite = Movie(id=8077, title="Alien³")
    profile = extract_profile([favorite], [])

    assert recommend(profile, [favorite]) == [favorite]


def test_accented_titles_match_case_insensitively():
    pool = [Movie(id=194, title="AMÉLIE"), Movie(id=5, title="Heat")]

    result = recommend(extract_profile([Movie(id=194, title="Amélie")], []), pool)

    assert [movie.id for movie in result] == [194]
