"""Load resolver and index settings from TOML (e.g. gazetteer.toml).

Config file is looked up in order:
  1. Path passed to load_config() (if given)
  2. Path in GAZETTEER_CONFIG env var (if set)
  3. gazetteer.toml in the current working directory

If no file is found, built-in defaults are used. Example::

    [resolver]
    default_limit = 10
    fuzzy_max_edits = 2
    ranking = ["population:desc", "score:desc"]

    [index]
    db_url = "sqlite:///data/gazetteer.db"
    max_expansions = 50
"""

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from gazetteer.ranking import DEFAULT_RANKING, RankingPolicy

CONFIG_ENV_VAR = "GAZETTEER_CONFIG"
DEFAULT_CONFIG_FILENAME = "gazetteer.toml"

DEFAULT_LIMIT = 10


class ResolverConfig(BaseModel, frozen=True):
    """How occurrences are matched and ranked.

    Attributes:
        default_limit: Result cap used when a search does not pass one
        fuzzy_max_edits: Largest edit distance a fuzzy term may absorb
        ranking: Sort keys applied to every search of a resolver
    """

    default_limit: int = Field(DEFAULT_LIMIT, gt=0, description="Result cap when none is given")
    fuzzy_max_edits: int = Field(2, ge=0, le=2, description="Maximum edit distance for fuzzy terms")
    ranking: RankingPolicy = Field(DEFAULT_RANKING, description="Sort keys for every search")

    @field_validator("ranking", mode="before")
    @classmethod
    def _parse_ranking(cls, value):
        # ranking = ["population:desc", ...] straight from TOML
        if isinstance(value, (list, tuple)):
            return {"sort_fields": value}
        return value


class IndexConfig(BaseModel, frozen=True):
    """Where the SQLite name index lives and how fuzzy terms are expanded."""

    db_url: str = Field("sqlite:///gazetteer.db", description="SQLAlchemy URL of the index database")
    max_expansions: int = Field(50, gt=0, description="Indexed terms a fuzzy term may expand to")
    min_term_length: int = Field(3, ge=1, description="Shorter fuzzy terms must match exactly")
    timeout: float = Field(5.0, gt=0, description="Seconds to wait on a locked database")


class GazetteerConfig(BaseModel, frozen=True):
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)


def _default_config_paths(path: str | Path | None = None) -> list[Path]:
    """Return paths to check for a config file (first existing wins)."""
    paths: list[Path] = []
    if path is not None:
        paths.append(Path(path))
    if os.environ.get(CONFIG_ENV_VAR):
        paths.append(Path(os.environ[CONFIG_ENV_VAR]))
    paths.append(Path.cwd() / DEFAULT_CONFIG_FILENAME)
    return paths


def load_config(path: str | Path | None = None) -> GazetteerConfig:
    """Load settings from the first config file found.

    Raises:
        pydantic.ValidationError: A setting in the file is invalid.
        tomllib.TOMLDecodeError: The file is not valid TOML.
    """
    for candidate in _default_config_paths(path):
        if candidate.is_file():
            with open(candidate, "rb") as f:
                data = tomllib.load(f)
            return GazetteerConfig(
                resolver=ResolverConfig(**data.get("resolver", {})),
                index=IndexConfig(**data.get("index", {})),
            )
    return GazetteerConfig()
