"""Ranking policies applied by the name index when ordering hits.

The default policy favours population: extracted mentions are usually short
and ambiguous ("Boston"), so the most populous matching place is the least
surprising answer. The cost is that a larger same-named place can beat a
smaller, correct one (Boston, US over Boston, PH); relevance score only
breaks ties between places of equal population.

A policy is a plain value. Each resolver holds its own, so changing the
ranking for one caller never affects another.
"""

from pydantic import BaseModel, Field, field_validator

POPULATION = "population"
SCORE = "score"


class SortField(BaseModel, frozen=True):
    """One sort key of a ranking policy."""

    field: str = Field(min_length=1, description="Index field to sort by, or 'score' for relevance.")
    descending: bool = Field(default=True, description="Sort largest values first.")

    @classmethod
    def parse(cls, spec: str) -> "SortField":
        """Parse ``"field"`` or ``"field:asc|desc"`` into a SortField."""
        field, _, direction = spec.strip().partition(":")
        direction = direction.strip().lower() or "desc"
        if not field.strip():
            raise ValueError(f"Missing field name in sort key {spec!r}")
        if direction not in ("asc", "desc"):
            raise ValueError(f"Unknown sort direction {direction!r} in {spec!r}")
        return cls(field=field.strip(), descending=direction == "desc")

    def __str__(self) -> str:
        return f"{self.field}:{'desc' if self.descending else 'asc'}"


class RankingPolicy(BaseModel, frozen=True):
    """Ordered sort keys; earlier keys take precedence."""

    sort_fields: tuple[SortField, ...] = Field(min_length=1)

    @field_validator("sort_fields", mode="before")
    @classmethod
    def _parse_strings(cls, value):
        if isinstance(value, (list, tuple)):
            return tuple(SortField.parse(v) if isinstance(v, str) else v for v in value)
        return value

    @field_validator("sort_fields")
    @classmethod
    def _unique_fields(cls, value: tuple[SortField, ...]) -> tuple[SortField, ...]:
        names = [f.field for f in value]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate sort fields in ranking policy: {names}")
        return value

    def __str__(self) -> str:
        return ", ".join(str(f) for f in self.sort_fields)


DEFAULT_RANKING = RankingPolicy(
    sort_fields=(
        SortField(field=POPULATION, descending=True),
        SortField(field=SCORE, descending=True),
    )
)
"""Population (descending), then relevance score (descending)."""
