"""Query execution and the exact-then-fuzzy fallback strategy.

Resolution runs as a small state machine::

    EXACT_ATTEMPTED --(zero hits and fuzzy allowed)--> FUZZY_ATTEMPTED --> DONE
           \\-------------------(otherwise)-------------------------------/

Exact hits always win. The fuzzy phase only runs when the exact phase
matched nothing at all (judged on the total match count, not on the size
of the returned page), and it replaces the empty exact result outright
rather than merging with it.
"""

from enum import Enum

from pydantic import BaseModel

from gazetteer.index.interfaces import IndexSessionProviderInterface, SearchHits
from gazetteer.logging import setup_logging
from gazetteer.occurrence import LocationOccurrence
from gazetteer.query import NameQuery, build_exact_query, build_fuzzy_query
from gazetteer.ranking import DEFAULT_RANKING, RankingPolicy

logger = setup_logging(__name__)


class SearchPhase(str, Enum):
    """States of the exact-then-fuzzy resolution strategy."""

    EXACT_ATTEMPTED = "exact_attempted"
    FUZZY_ATTEMPTED = "fuzzy_attempted"
    DONE = "done"


def next_phase(phase: SearchPhase, total_hits: int, allow_fuzzy: bool) -> SearchPhase:
    """Return the phase that follows ``phase`` given its outcome.

    The only transition that does not lead to DONE is a fruitless exact
    phase with fuzzy matching allowed.
    """
    if phase is SearchPhase.EXACT_ATTEMPTED and total_hits == 0 and allow_fuzzy:
        return SearchPhase.FUZZY_ATTEMPTED
    return SearchPhase.DONE


class PhaseOutcome(BaseModel, frozen=True):
    """The hits produced by the last phase that ran, and which phase it was."""

    hits: SearchHits
    used_fuzzy: bool = False


class SearchExecutor:
    """Runs name queries against the index, one session per search."""

    def __init__(self, index: IndexSessionProviderInterface):
        self.index = index

    def search(self, query: NameQuery, limit: int, ranking: RankingPolicy = DEFAULT_RANKING) -> SearchHits:
        """Execute ``query`` returning at most ``limit`` hits sorted by ``ranking``.

        The session is released before this returns or raises.
        """
        with self.index.session() as session:
            return session.execute(query, limit, ranking)


class FallbackController:
    """Drives the exact-then-fuzzy state machine for one occurrence at a time."""

    def __init__(self, executor: SearchExecutor, ranking: RankingPolicy = DEFAULT_RANKING, fuzzy_max_edits: int = 2):
        self.executor = executor
        self.ranking = ranking
        self.fuzzy_max_edits = fuzzy_max_edits

    def run_phase(self, phase: SearchPhase, occurrence: LocationOccurrence, limit: int) -> SearchHits:
        """Build and execute the query belonging to ``phase``."""
        if phase is SearchPhase.EXACT_ATTEMPTED:
            query = build_exact_query(occurrence.text)
        elif phase is SearchPhase.FUZZY_ATTEMPTED:
            query = build_fuzzy_query(occurrence.text, self.fuzzy_max_edits)
        else:
            raise ValueError(f"Nothing to execute in phase {phase.value!r}")
        return self.executor.search(query, limit, self.ranking)

    def resolve(self, occurrence: LocationOccurrence, limit: int, allow_fuzzy: bool) -> PhaseOutcome:
        phase = SearchPhase.EXACT_ATTEMPTED
        outcome = PhaseOutcome(hits=self.run_phase(phase, occurrence, limit))
        while True:
            phase = next_phase(phase, outcome.hits.total_hits, allow_fuzzy)
            if phase is SearchPhase.DONE:
                return outcome
            logger.debug("No exact match for %r, retrying with fuzzy matching", occurrence.text)
            outcome = PhaseOutcome(hits=self.run_phase(phase, occurrence, limit), used_fuzzy=True)
