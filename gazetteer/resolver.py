"""Resolve location occurrences against a gazetteer name index.

Two strategies are used:

1. An exact phrase match on the occurrence text.
2. If that finds nothing and the caller allows it, a fuzzy (edit-distance)
   match on the same text.

Results are ranked by the resolver's ranking policy, by default population
first and relevance score second. This works well for names that are part
of a longer indexed name ("New York" in "City of New York") but carries a
population bias for names like Boston, US and Boston, Philippines.
Choosing between such candidates using document context is left to the
caller.

Typical usage:
    ```python
    index = SQLiteNameIndex("sqlite:///data/gazetteer.db")
    resolver = LocationNameIndex(index)

    candidates = resolver.search(LocationOccurrence(text="Bosten", position=42), use_fuzzy=True)
    best = candidates[0] if candidates else None
    ```
"""

from typing import Iterable

from gazetteer.config import ResolverConfig
from gazetteer.exceptions import GazetteerError
from gazetteer.index.interfaces import IndexSessionProviderInterface
from gazetteer.location import ResolvedLocation
from gazetteer.logging import setup_logging
from gazetteer.mapper import map_hits
from gazetteer.occurrence import LocationOccurrence
from gazetteer.ranking import RankingPolicy
from gazetteer.search import FallbackController, SearchExecutor

logger = setup_logging(__name__)


class LocationNameIndex:
    """Finds the gazetteer records that best match a location occurrence.

    The ranking policy is fixed per instance. Callers that need a different
    ranking build another resolver (see with_ranking()) instead of changing
    shared state. No resolutions are cached, every search reads the index.
    """

    def __init__(
        self,
        index: IndexSessionProviderInterface,
        config: ResolverConfig | None = None,
        ranking: RankingPolicy | None = None,
    ):
        self.index = index
        self.config = config or ResolverConfig()
        self.ranking = ranking or self.config.ranking
        index.check_ranking(self.ranking)
        self._controller = FallbackController(
            SearchExecutor(index),
            ranking=self.ranking,
            fuzzy_max_edits=self.config.fuzzy_max_edits,
        )

    @property
    def default_limit(self) -> int:
        return self.config.default_limit

    def with_ranking(self, ranking: RankingPolicy) -> "LocationNameIndex":
        """Return a resolver over the same index that ranks with ``ranking``."""
        return LocationNameIndex(self.index, config=self.config, ranking=ranking)

    def search(
        self,
        occurrence: LocationOccurrence,
        *,
        use_fuzzy: bool = False,
        limit: int | None = None,
    ) -> list[ResolvedLocation]:
        """Return the ranked candidates that best match an occurrence.

        Args:
            occurrence: The location occurrence found in a document.
            use_fuzzy: Whether to fall back to fuzzy matching when the exact
                phrase matches nothing.
            limit: Maximum number of candidates; the configured default
                when None.

        Returns:
            Up to ``limit`` candidates, best first. Empty when nothing
            matched.

        Raises:
            TypeError: ``limit`` is not an int.
            ValueError: ``limit`` is less than 1.
            QueryConstructionError: The occurrence text could not be queried.
            SearchExecutionError: The index failed while searching.
            ResourceAcquisitionError: No index session could be obtained.
        """
        if limit is None:
            limit = self.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise TypeError(f"limit must be an int, got {limit!r}")
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        try:
            outcome = self._controller.resolve(occurrence, limit, allow_fuzzy=use_fuzzy)
        except GazetteerError as exc:
            logger.error("Resolving %r failed: %s", occurrence.text, exc)
            raise
        logger.debug(
            "Resolved %r to %d of %d matches (fuzzy=%s)",
            occurrence.text,
            len(outcome.hits),
            outcome.hits.total_hits,
            outcome.used_fuzzy,
        )
        return map_hits(occurrence, outcome.hits.hits, outcome.used_fuzzy)

    def search_all(
        self,
        occurrences: Iterable[LocationOccurrence],
        *,
        use_fuzzy: bool = False,
        limit: int | None = None,
    ) -> list[list[ResolvedLocation]]:
        """Resolve several occurrences, returning one candidate list for each, in input order."""
        return [self.search(occurrence, use_fuzzy=use_fuzzy, limit=limit) for occurrence in occurrences]

