"""Interfaces the resolver consumes from a full-text name index.

The index itself (its schema, how it is built, how records are stored) is
owned elsewhere. The resolver only needs three things from it:

- a way to acquire a read-only session and release it again,
- an ``execute`` operation on that session returning the capped, ordered
  page of hits together with the true total match count,
- a query language with phrases, fuzzy terms and escaping, which
  ``gazetteer.query`` targets.

Implementations wrap their own failures in the errors from
``gazetteer.exceptions`` so callers can tell a failed search from an empty
one.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

from pydantic import BaseModel, Field

from gazetteer.location import IndexRecord
from gazetteer.query import NameQuery
from gazetteer.ranking import RankingPolicy


class IndexHit(BaseModel, frozen=True):
    """A record returned by the index with its relevance score."""

    record: IndexRecord
    score: float = Field(default=0.0, description="Relevance score; higher is better.")


class SearchHits(BaseModel, frozen=True):
    """One page of ordered hits and the number of records that matched."""

    hits: tuple[IndexHit, ...] = ()
    total_hits: int = Field(
        default=0,
        ge=0,
        description="Total matching records, regardless of the page size.",
    )

    def __len__(self) -> int:
        return len(self.hits)


class IndexSession(ABC):
    """A read-only handle on the name index."""

    @abstractmethod
    def execute(self, query: NameQuery, max_results: int, ranking: RankingPolicy) -> SearchHits:
        """Run a query and return at most ``max_results`` hits.

        Args:
            query: The escaped name query to run.
            max_results: Maximum number of hits in the returned page.
            ranking: Sort keys applied before the page is cut.

        Returns:
            The ordered page of hits and the total number of matches.

        Raises:
            QueryConstructionError: The index could not parse the query.
            SearchExecutionError: The index failed while executing it.
        """


class IndexSessionProviderInterface(ABC):
    """Hands out sessions against the name index.

    Implementations must be safe for concurrent ``acquire`` calls if the
    resolver is shared between threads.
    """

    sortable_fields: frozenset[str] | None = None
    """Fields the index can sort hits by, or None when it accepts any field."""

    def check_ranking(self, ranking: RankingPolicy) -> None:
        """Raise ValueError if the index cannot sort by every key of ``ranking``."""
        if self.sortable_fields is None:
            return
        unknown = [f.field for f in ranking.sort_fields if f.field not in self.sortable_fields]
        if unknown:
            raise ValueError(
                f"Cannot sort the name index by {unknown}; sortable fields are {sorted(self.sortable_fields)}"
            )

    @abstractmethod
    def acquire(self) -> IndexSession:
        """Acquire a session.

        Raises:
            ResourceAcquisitionError: No session could be obtained.
        """

    @abstractmethod
    def release(self, session: IndexSession) -> None:
        """Release a session obtained from ``acquire``."""

    @contextmanager
    def session(self) -> Iterator[IndexSession]:
        """Acquire a session for the duration of a ``with`` block.

        The session is released however the block exits.
        """
        session = self.acquire()
        try:
            yield session
        finally:
            self.release(session)
