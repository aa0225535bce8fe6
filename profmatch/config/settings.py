"""
ProfMatch - Centralized Configuration
======================================
Uses ``pydantic-settings`` (``BaseSettings``) to load *all* configuration
from environment variables and the project-level ``.env`` file.

Security
--------
- ``GOOGLE_API_KEY`` is typed as ``SecretStr`` and has **no default value**.
  If the key is missing at startup, Pydantic will raise a ``ValidationError``
  with a clear error message.  The raw value is never exposed in repr,
  logs, or tracebacks.
- ``LANCEDB_API_KEY`` is an optional ``SecretStr``; it is only needed
  when ``LANCEDB_URI`` points at a LanceDB Cloud database (``db://...``).

Retrieval
---------
``SEARCH_TOP_K`` candidates are fetched from the index (pre-filtered to
``MIN_RATING``), re-ranked, and the best ``PROMPT_TOP_K`` are injected
into the prompt.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Every field is loaded from environment variables (or ``.env``).
    Fields *without* a default are **required**; the app will refuse
    to start until they are provided.

    Attributes
    ----------
    GOOGLE_API_KEY : SecretStr
        API key for Google AI Studio (Gemini embeddings + chat).  **Required.**
    LANCEDB_URI : str
        Local directory or ``db://`` cloud URI of the professor index.
    LANCEDB_API_KEY : SecretStr | None
        Credential for LanceDB Cloud.  Unused for local paths.
    LANCEDB_TABLE_NAME : str
        Table holding one row per professor.
    ENV : Literal["dev", "prod"]
        Environment mode controlling logging verbosity.
    LOG_LEVEL : str | None
        Explicit log level; overrides the ENV-derived default when set.
    LOG_FORMAT : str
        ``logging.Formatter`` format string for every handler.
    SEARCH_TOP_K : int
        Number of nearest neighbours requested from the index.
    PROMPT_TOP_K : int
        Number of ranked professors written into the prompt.
    MIN_RATING : float
        Index-side prefilter; professors rated below it are never retrieved.
    RANKING_ENABLED : bool
        Default for re-ranking; a request may override it.
    """

    # ── Resolved Absolute Paths ────────────────────────────────────────
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    LANCEDB_URI: str = str(BASE_DIR / "data" / "lancedb")

    # ── Environment Mode ───────────────────────────────────────────────
    ENV: Literal["dev", "prod"] = "dev"

    # ── Logging ────────────────────────────────────────────────────────
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None
    LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    # ── API Keys ───────────────────────────────────────────────────────
    GOOGLE_API_KEY: SecretStr
    LANCEDB_API_KEY: SecretStr | None = None

    # ── Model Configuration ────────────────────────────────────────────
    EMBEDDING_MODEL: str = "models/text-embedding-004"
    LLM_MODEL: str = "gemini-2.0-flash"
    LLM_TEMPERATURE: float = 0.3

    # ── LanceDB ────────────────────────────────────────────────────────
    LANCEDB_TABLE_NAME: str = "professors"

    # ── Retrieval & Ranking ────────────────────────────────────────────
    SEARCH_TOP_K: int = 10
    PROMPT_TOP_K: int = 5
    MIN_RATING: float = 3.5
    RANKING_ENABLED: bool = True

    # ── HTTP ───────────────────────────────────────────────────────────
    CORS_ORIGINS: list[str] = ["*"]

    # ── Validators ─────────────────────────────────────────────────────

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalise_log_level(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v


    @field_validator("SEARCH_TOP_K")
    @classmethod
    def _search_top_k_range(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError(f"SEARCH_TOP_K must be 1–100, got {v}")
        return v


    @field_validator("MIN_RATING")
    @classmethod
    def _min_rating_range(cls, v: float) -> float:
        if not 0.0 <= v <= 5.0:
            raise ValueError(f"MIN_RATING must be 0–5, got {v}")
        return v


    @field_validator("LLM_TEMPERATURE")
    @classmethod
    def _temperature_range(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"LLM_TEMPERATURE must be 0–2, got {v}")
        return v


    @model_validator(mode="after")
    def _prompt_top_k_within_search(self) -> "Settings":
        if not 1 <= self.PROMPT_TOP_K <= self.SEARCH_TOP_K:
            raise ValueError(f"PROMPT_TOP_K must be 1–{self.SEARCH_TOP_K} (SEARCH_TOP_K), got {self.PROMPT_TOP_K}")
        return self

    # ── Pydantic Settings Configuration ────────────────────────────────
    model_config = SettingsConfigDict(env_file=Path(__file__).resolve().parent.parent.parent / ".env", env_file_encoding="utf-8", extra="ignore")


# ── Singleton Instance ─────────────────────────────────────────────────
# Import this throughout the project:
#     from profmatch.config.settings import settings
settings = Settings()
