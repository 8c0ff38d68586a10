"""Derive a keyword profile from a user's favorites and watchlist."""

from __future__ import annotations

from typing import Iterable

from .models import Movie
from .utils import tokenize_all

DEFAULT_MIN_TOKEN_LENGTH = 3


def extract_profile(
    favorites: Iterable[Movie],
    watchlist: Iterable[Movie],
    *,
    include_genres: bool = False,
    min_token_length: int = DEFAULT_MIN_TOKEN_LENGTH,
) -> frozenset[str]:
    """Return the lowercase title tokens across both collections.

    Titles are split on non-alphanumeric boundaries and tokens shorter than
    ``min_token_length`` (never below three) are discarded. With
    ``include_genres`` the members' genre names contribute tokens as well.
    The result is a set, so the order of either collection never changes it.
    """

    texts: list[str] = []
    for movie in (*favorites, *watchlist):
        texts.append(movie.title)
        if include_genres:
            texts.extend(movie.genres)
    min_length = max(DEFAULT_MIN_TOKEN_LENGTH, min_token_length)
    return frozenset(tokenize_all(texts, min_length=min_length))
