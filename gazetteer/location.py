"""Index records and the resolved locations built from them."""

from pydantic import BaseModel, Field

from gazetteer.occurrence import LocationOccurrence


class IndexRecord(BaseModel, frozen=True):
    """One entry of the gazetteer name index.

    Only ``name`` and ``population`` matter to matching and ranking. The
    geographic columns are carried through untouched for the caller, and
    anything else the index stores lands in ``attributes``.
    """

    record_id: int = Field(description="Identifier of the record in the index.")
    name: str = Field(description="Normalized display name the index matches against.")
    population: int = Field(default=0, ge=0, description="Population count used for ranking.")
    country_code: str | None = Field(default=None, description="ISO-3166 alpha-2 country code.")
    admin1_code: str | None = Field(default=None, description="First-level administrative division code.")
    feature_class: str | None = Field(default=None, description="Feature class (e.g. 'P' for populated place).")
    feature_code: str | None = Field(default=None, description="Feature code (e.g. 'PPLA').")
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    attributes: dict = Field(
        default_factory=dict,
        description="Additional indexed attributes, opaque to the resolver.",
    )


class ResolvedLocation(BaseModel, frozen=True):
    """A ranked candidate match for a location occurrence.

    Its rank is its position in the list returned by a search; the object
    itself never changes after it is created.
    """

    occurrence: LocationOccurrence = Field(description="The occurrence this candidate resolves.")
    record: IndexRecord = Field(description="The matching index record.")
    matched_name: str = Field(description="The indexed name that matched the occurrence text.")
    fuzzy: bool = Field(
        default=False,
        description="True when the match came from the fuzzy (edit-distance) phase.",
    )
    confidence: float = Field(
        default=0.0,
        description="Relevance score reported by the index for this match; higher is better.",
    )

    @property
    def population(self) -> int:
        return self.record.population
