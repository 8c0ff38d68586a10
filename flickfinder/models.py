"""Pydantic models and result types shared across the service."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)

from .utils import build_image_url

T = TypeVar("T")

SEARCH_SOURCE = "Search Result"
TRENDING_SOURCE = "Trending"
DETAILS_SOURCE = "Details"

UNKNOWN_RELEASE_DATE = "Unknown"
MISSING_OVERVIEW = "No description available."
DETAILS_ERROR_TEXT = "Error fetching movie details."


class Movie(BaseModel):
    """Immutable record describing a single catalog title."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str = Field(min_length=1)
    poster_path: str | None = None
    release_date: str = UNKNOWN_RELEASE_DATE
    overview: str = MISSING_OVERVIEW
    popularity: float = Field(default=0.0, ge=0)
    rating: float = Field(
        default=0.0,
        ge=0,
        le=10,
        validation_alias=AliasChoices("rating", "vote_average"),
    )
    source: str = SEARCH_SOURCE
    genres: tuple[str, ...] = ()

    @field_validator("poster_path", mode="before")
    @classmethod
    def _blank_poster(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("release_date", mode="before")
    @classmethod
    def _default_release_date(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNKNOWN_RELEASE_DATE
        return value

    @field_validator("overview", mode="before")
    @classmethod
    def _default_overview(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return MISSING_OVERVIEW
        return value

    @field_validator("popularity", "rating", mode="before")
    @classmethod
    def _default_number(cls, value: object) -> object:
        return 0.0 if value is None else value

    @field_validator("genres", mode="before")
    @classmethod
    def _coerce_genres(cls, value: object) -> object:
        """Accept plain names or TMDB ``{"id": .., "name": ..}`` objects."""

        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            names: list[str] = []
            for entry in value:
                if isinstance(entry, dict):
                    entry = entry.get("name")
                if isinstance(entry, str) and entry.strip():
                    names.append(entry.strip())
            return tuple(names)
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def poster_url(self) -> str | None:
        return build_image_url(self.poster_path)


class MovieDetails(BaseModel):
    """Details view of a title, or the sentinel returned when lookup fails."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    title: str = ""
    release_date: str = UNKNOWN_RELEASE_DATE
    rating: float = 0.0
    overview: str = MISSING_OVERVIEW
    genres: tuple[str, ...] = ()
    error: str | None = None

    @classmethod
    def from_movie(cls, movie: Movie) -> "MovieDetails":
        return cls(
            id=movie.id,
            title=movie.title,
            release_date=movie.release_date,
            rating=movie.rating,
            overview=movie.overview,
            genres=movie.genres,
        )

    @classmethod
    def unavailable(cls) -> "MovieDetails":
        """Return the sentinel record used when details cannot be fetched."""

        return cls(error=DETAILS_ERROR_TEXT)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def describe(self) -> str:
        """Return the text block shown in the details pane."""

        if self.error is not None:
            return self.error
        return (
            f"Title: {self.title}\n"
            f"Release Date: {self.release_date}\n"
            f"Rating: {self.rating}\n\n"
            f"{self.overview}"
        )


class AddOutcome(str, Enum):
    ADDED = "added"
    ALREADY_PRESENT = "already_present"


class RemoveOutcome(str, Enum):
    REMOVED = "removed"
    NOT_PRESENT = "not_present"


@dataclass(slots=True, frozen=True)
class Ok(Generic[T]):
    """Successful catalog response."""

    value: T


@dataclass(slots=True, frozen=True)
class NetworkFailure:
    """Transport error or non-2xx response from the catalog."""

    reason: str
    status_code: int | None = None


@dataclass(slots=True, frozen=True)
class ParseFailure:
    """The catalog answered, but not with the JSON shape we expect."""

    reason: str


FetchResult = Union[Ok[Any], NetworkFailure, ParseFailure]


class ActionResult(BaseModel):
    """Outcome of a single user command, ready for the presentation layer."""

    ok: bool = True
    message: str | None = None
    outcome: str | None = None
    movies: list[Movie] = Field(default_factory=list)
    details: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def titles(self) -> list[str]:
        return [movie.title for movie in self.movies]

    @classmethod
    def info(cls, message: str, **kwargs: Any) -> "ActionResult":
        return cls(message=message, **kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: Any) -> "ActionResult":
        return cls(ok=False, message=message, **kwargs)
