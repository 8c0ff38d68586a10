"""Client for the parts of The Movie Database (TMDB) API the app consumes."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..models import (
    DETAILS_SOURCE,
    SEARCH_SOURCE,
    TRENDING_SOURCE,
    FetchResult,
    Movie,
    MovieDetails,
    NetworkFailure,
    Ok,
    ParseFailure,
)
from ..utils import normalize_query

logger = logging.getLogger(__name__)


class TMDBClient:
    """Wrapper around the TMDB search, trending and details endpoints.

    The ``fetch_*`` methods report failures as :class:`NetworkFailure` or
    :class:`ParseFailure` values. ``search``, ``trending`` and ``details``
    collapse those into an empty list or the sentinel details record, so no
    exception escapes this class once it is constructed.
    """

    _SEARCH_PATH = "/search/movie"
    _TRENDING_PATH = "/trending/movie/day"
    _DETAILS_PATH = "/movie/{movie_id}"
    _GENRES_PATH = "/genre/movie/list"

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.tmdb_access_token:
            raise ValueError("TMDB access token is required when initialising TMDBClient")
        self._settings = settings
        self._client = http_client
        self._genre_names: dict[int, str] | None = None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.tmdb_access_token}",
            "Accept": "application/json",
            "User-Agent": f"{self._settings.app_name} (flickfinder)",
        }

    async def search(self, query: str | None) -> list[Movie]:
        """Return movies matching ``query``; empty on blank input or failure."""

        result = await self.fetch_search(query)
        return result.value if isinstance(result, Ok) else []

    async def trending(self) -> list[Movie]:
        """Return today's trending movies; empty on failure."""

        result = await self.fetch_trending()
        return result.value if isinstance(result, Ok) else []

    async def details(self, movie_id: int | None) -> MovieDetails:
        """Return details for ``movie_id`` or the sentinel record on failure."""

        result = await self.fetch_details(movie_id)
        if isinstance(result, Ok):
            return result.value
        return MovieDetails.unavailable()

    async def fetch_search(self, query: str | None) -> FetchResult:
        normalized = normalize_query(query)
        if not normalized:
            logger.debug("Skipping TMDB search for empty query")
            return Ok([])

        params = {
            "query": normalized,
            "include_adult": "false",
            "language": self._settings.tmdb_language,
            "page": 1,
        }
        payload = await self._get_json(self._SEARCH_PATH, params=params)
        if not isinstance(payload, Ok):
            return payload
        return await self._parse_movie_list(payload.value, source=SEARCH_SOURCE)

    async def fetch_trending(self) -> FetchResult:
        params = {"language": self._settings.tmdb_language}
        payload = await self._get_json(self._TRENDING_PATH, params=params)
        if not isinstance(payload, Ok):
            return payload
        return await self._parse_movie_list(payload.value, source=TRENDING_SOURCE)

    async def fetch_details(self, movie_id: int | None) -> FetchResult:
        if movie_id is None:
            return ParseFailure("No movie selected")

        path = self._DETAILS_PATH.format(movie_id=int(movie_id))
        payload = await self._get_json(
            path, params={"language": self._settings.tmdb_language}
        )
        if not isinstance(payload, Ok):
            return payload

        data = dict(payload.value)
        data["source"] = DETAILS_SOURCE
        try:
            movie = Movie.model_validate(data)
        except ValidationError as exc:
            logger.warning("TMDB details for %s were malformed: %s", movie_id, exc)
            return ParseFailure(f"Malformed details payload for movie {movie_id}")
        return Ok(MovieDetails.from_movie(movie))

    async def _get_json(
        self, path: str, *, params: dict[str, Any] | None = None
    ) -> FetchResult:
        """Issue a single GET and decode the JSON object it returns."""

        try:
            response = await self._client.get(path, headers=self._headers(), params=params)
        except httpx.HTTPError as exc:
            logger.warning("TMDB request to %s failed: %s", path, exc)
            return NetworkFailure(str(exc) or exc.__class__.__name__)

        if response.status_code >= 400:
            logger.warning(
                "TMDB request to %s returned %s: %s",
                path,
                response.status_code,
                response.text[:300],
            )
            return NetworkFailure(
                f"TMDB responded with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning("TMDB response from %s was not valid JSON", path)
            return ParseFailure("Response body is not valid JSON")
        if not isinstance(data, dict):
            logger.warning("TMDB response from %s was not a JSON object", path)
            return ParseFailure("Response body is not a JSON object")
        return Ok(data)

    async def _genre_lookup(self) -> dict[int, str]:
        """Return TMDB genre names by id, fetched once and then cached."""

        if self._genre_names is not None:
            return self._genre_names

        payload = await self._get_json(
            self._GENRES_PATH, params={"language": self._settings.tmdb_language}
        )
        if not isinstance(payload, Ok):
            return {}
        genres = payload.value.get("genres")
        if not isinstance(genres, list):
            logger.warning("TMDB genre list is missing a genres array")
            return {}

        names: dict[int, str] = {}
        for entry in genres:
            if not isinstance(entry, dict):
                continue
            genre_id, name = entry.get("id"), entry.get("name")
            if isinstance(genre_id, int) and isinstance(name, str) and name.strip():
                names[genre_id] = name.strip()
        self._genre_names = names
        return names

    async def _parse_movie_list(
        self, payload: dict[str, Any], *, source: str
    ) -> FetchResult:
        results = payload.get("results")
        if not isinstance(results, list):
            logger.warning("TMDB payload is missing a results array")
            return ParseFailure("Payload is missing a results array")

        entries = [entry for entry in results if isinstance(entry, dict)]
        genre_names: dict[int, str] = {}
        if any(entry.get("genre_ids") for entry in entries):
            genre_names = await self._genre_lookup()

        movies: list[Movie] = []
        for entry in entries:
            data = {**entry, "source": source}
            genre_ids = entry.get("genre_ids")
            if not entry.get("genres") and isinstance(genre_ids, list):
                data["genres"] = [
                    genre_names[genre_id]
                    for genre_id in genre_ids
                    if isinstance(genre_id, int) and genre_id in genre_names
                ]
            try:
                movie = Movie.model_validate(data)
            except ValidationError as exc:
                logger.debug("Skipping malformed TMDB entry %r: %s", entry.get("id"), exc)
                continue
            movies.append(movie)
        return Ok(movies)
