"""Per-session favorites and watchlist collections."""

from __future__ import annotations

import threading
from typing import Iterator, Literal

from .models import AddOutcome, Movie, RemoveOutcome

CollectionName = Literal["favorites", "watchlist"]
COLLECTION_NAMES: tuple[CollectionName, ...] = ("favorites", "watchlist")


class MovieCollection:
    """Insertion-ordered set of movies keyed by catalog identifier.

    The membership check and the mutation it guards run under one lock, so a
    double submission from the UI can never insert the same title twice.
    """

    def __init__(self, name: str):
        self.name = name
        self._movies: dict[int, Movie] = {}
        self._lock = threading.Lock()

    def add(self, movie: Movie) -> AddOutcome:
        with self._lock:
            if movie.id in self._movies:
                return AddOutcome.ALREADY_PRESENT
            self._movies[movie.id] = movie
            return AddOutcome.ADDED

    def remove(self, movie_id: int) -> RemoveOutcome:
        with self._lock:
            if self._movies.pop(movie_id, None) is None:
                return RemoveOutcome.NOT_PRESENT
            return RemoveOutcome.REMOVED

    def get(self, movie_id: int) -> Movie | None:
        with self._lock:
            return self._movies.get(movie_id)

    def contains(self, movie_id: int) -> bool:
        with self._lock:
            return movie_id in self._movies

    def list(self) -> list[Movie]:
        """Return a snapshot of the members in insertion order."""

        with self._lock:
            return list(self._movies.values())

    def clear(self) -> None:
        with self._lock:
            self._movies.clear()

    def __len__(self) -> int:
        return len(self._movies)

    def __iter__(self) -> Iterator[Movie]:
        return iter(self.list())

    def __contains__(self, movie_id: object) -> bool:
        return isinstance(movie_id, int) and self.contains(movie_id)


class CollectionStore:
    """The two named collections owned by one session."""

    def __init__(self) -> None:
        self.favorites = MovieCollection("favorites")
        self.watchlist = MovieCollection("watchlist")

    def get(self, name: CollectionName) -> MovieCollection:
        if name == "favorites":
            return self.favorites
        if name == "watchlist":
            return self.watchlist
        raise KeyError(f"Unknown collection {name!r}")

    def clear(self) -> None:
        self.favorites.clear()
        self.watchlist.clear()
