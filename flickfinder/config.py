"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

RecommendationModeName = Literal["personalized", "trending-fallback"]


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="FlickFinder", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_access_token: str | None = Field(
        default=None,
        alias="TMDB_ACCESS_TOKEN",
        validation_alias=AliasChoices("TMDB_ACCESS_TOKEN", "TMDB_API_TOKEN"),
    )
    tmdb_language: str = Field(default="en-US", alias="TMDB_LANGUAGE")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./flickfinder.db", alias="DATABASE_URL"
    )

    recommendation_mode: RecommendationModeName = Field(
        default="personalized", alias="RECOMMENDATION_MODE"
    )
    recommend_by_genre: bool = Field(default=False, alias="RECOMMEND_BY_GENRE")
    profile_min_token_length: int = Field(
        default=3, alias="PROFILE_MIN_TOKEN_LENGTH", ge=3, le=20
    )
    recent_search_limit: int = Field(
        default=10, alias="RECENT_SEARCH_LIMIT", ge=0, le=100
    )
    session_ttl_seconds: int = Field(
        default=28_800, alias="SESSION_TTL", ge=60
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("tmdb_access_token", mode="before")
    @classmethod
    def _strip_bearer_prefix(cls, value: object) -> str | None:
        """Accept tokens pasted with or without the ``Bearer`` scheme."""

        if value is None:
            return None
        token = str(value).strip()
        if token.lower().startswith("bearer "):
            token = token[len("bearer ") :].strip()
        return token or None

    @field_validator("recommendation_mode", mode="before")
    @classmethod
    def _normalise_mode(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        slug = value.strip().lower().replace("_", "-").replace(" ", "-")
        return slug or "personalized"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
