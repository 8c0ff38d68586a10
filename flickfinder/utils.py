"""Utility helpers for the FlickFinder service."""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable

TOKEN_SPLIT_RE = re.compile(r"[\W_]+")
WHITESPACE_RE = re.compile(r"\s+")

POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"


def fold_text(text: str | None) -> str:
    """Return ``text`` NFKC-normalised and lowercased, as used for matching."""

    if not text:
        return ""
    return unicodedata.normalize("NFKC", text).lower()


def tokenize(text: str | None, *, min_length: int = 3) -> list[str]:
    """Split ``text`` on non-alphanumeric runs into lowercase tokens.

    Tokens shorter than ``min_length`` are dropped. Order of first appearance
    is kept so callers can display the result if they wish.
    """

    if not text:
        return []
    normalized = fold_text(text)
    tokens: list[str] = []
    for part in TOKEN_SPLIT_RE.split(normalized):
        if len(part) < min_length or part in tokens:
            continue
        tokens.append(part)
    return tokens


def tokenize_all(texts: Iterable[str | None], *, min_length: int = 3) -> set[str]:
    """Return the union of tokens across several strings."""

    collected: set[str] = set()
    for text in texts:
        collected.update(tokenize(text, min_length=min_length))
    return collected


def normalize_query(value: str | None) -> str:
    """Collapse whitespace in a search query; ``None`` becomes an empty string."""

    if value is None:
        return ""
    return WHITESPACE_RE.sub(" ", value).strip()


def build_image_url(path: str | None, base_url: str = POSTER_BASE_URL) -> str | None:
    if not path:
        return None
    if path.startswith("http"):
        return path
    return f"{base_url}{path}"
