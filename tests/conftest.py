"""Test fixtures for the gazetteer resolver.

This module provides:
- A small set of sample gazetteer records covering the interesting cases
  (phrase containment, same-named places, diacritics, query syntax in names)
- A factory fixture that builds an in-memory SQLite FTS5 name index
- Scripted fake session providers for exercising failure and release paths
  without a real index
"""

from typing import Callable, Sequence

import pytest

from gazetteer.exceptions import ResourceAcquisitionError
from gazetteer.index.interfaces import IndexHit, IndexSession, IndexSessionProviderInterface, SearchHits
from gazetteer.index.sqlite import SQLiteNameIndex
from gazetteer.location import IndexRecord
from gazetteer.occurrence import LocationOccurrence
from gazetteer.query import NameQuery
from gazetteer.ranking import RankingPolicy

SAMPLE_RECORDS = (
    IndexRecord(record_id=1, name="City of New York", population=8_000_000, country_code="US", admin1_code="NY"),
    IndexRecord(record_id=2, name="New York Heights", population=500, country_code="US"),
    IndexRecord(record_id=3, name="Boston", population=600_000, country_code="US", admin1_code="MA"),
    IndexRecord(record_id=4, name="Boston", population=9_000, country_code="PH"),
    IndexRecord(record_id=5, name="A (B)", population=10),
    IndexRecord(
        record_id=6,
        name="Zürich",
        population=400_000,
        country_code="CH",
        latitude=47.37,
        longitude=8.54,
        attributes={"timezone": "Europe/Zurich"},
    ),
    IndexRecord(record_id=7, name="Springfield Township of West", population=100_000, country_code="US"),
    IndexRecord(record_id=8, name="Springfield", population=100_000, country_code="US", admin1_code="IL"),
)


def make_record(record_id: int, name: str, population: int = 0, **kwargs) -> IndexRecord:
    """Create an IndexRecord with sensible defaults."""
    return IndexRecord(record_id=record_id, name=name, population=population, **kwargs)


def make_hits(*names_and_populations: tuple[str, int], total_hits: int | None = None) -> SearchHits:
    """Create a SearchHits page from (name, population) pairs."""
    hits = tuple(
        IndexHit(record=make_record(i, name, population), score=1.0)
        for i, (name, population) in enumerate(names_and_populations, start=1)
    )
    return SearchHits(hits=hits, total_hits=len(hits) if total_hits is None else total_hits)


@pytest.fixture
def make_index() -> Callable[[Sequence[IndexRecord]], SQLiteNameIndex]:
    """Factory for in-memory name indexes seeded with the given records."""
    created: list[SQLiteNameIndex] = []

    def _make(records: Sequence[IndexRecord] = SAMPLE_RECORDS) -> SQLiteNameIndex:
        index = SQLiteNameIndex("sqlite://")
        index.create_schema()
        index.add_records(records)
        created.append(index)
        return index

    yield _make
    for index in created:
        index.close()


@pytest.fixture
def sample_index(make_index) -> SQLiteNameIndex:
    """In-memory name index holding SAMPLE_RECORDS."""
    return make_index(SAMPLE_RECORDS)


@pytest.fixture
def occurrence() -> Callable[..., LocationOccurrence]:
    """Factory for location occurrences."""

    def _make(text: str, position: int = 0) -> LocationOccurrence:
        return LocationOccurrence(text=text, position=position)

    return _make


# --- Scripted fakes ---


class ScriptedSession(IndexSession):
    """Session that replays a script of results (or raises scripted errors)."""

    def __init__(self, provider: "ScriptedIndex"):
        self.provider = provider
        self.closed = False

    def execute(self, query: NameQuery, max_results: int, ranking: RankingPolicy) -> SearchHits:
        self.provider.calls.append((query, max_results, ranking))
        outcome = self.provider.script.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class ScriptedIndex(IndexSessionProviderInterface):
    """Session provider that counts acquisitions and releases."""

    def __init__(self, *script: SearchHits | Exception, fail_acquire: bool = False):
        self.script = list(script)
        self.fail_acquire = fail_acquire
        self.calls: list[tuple[NameQuery, int, RankingPolicy]] = []
        self.acquired = 0
        self.released = 0

    def acquire(self) -> ScriptedSession:
        if self.fail_acquire:
            raise ResourceAcquisitionError("index unavailable")
        self.acquired += 1
        return ScriptedSession(self)

    def release(self, session: IndexSession) -> None:
        self.released += 1
        session.closed = True

    @property
    def queries(self) -> list[NameQuery]:
        return [call[0] for call in self.calls]
