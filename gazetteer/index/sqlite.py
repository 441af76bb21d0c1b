"""
SQLite FTS5 implementation of the name index interfaces.

Records live in the ``location`` table; their names are indexed in the
``location_fts`` FTS5 table under the same rowid. Names are tokenized with
``unicode61 remove_diacritics 2``, so matching ignores case and diacritics.
An ``fts5vocab`` table over the index lists every indexed term, which is
what fuzzy terms are expanded against.
"""

import json
from typing import Iterable, Optional

from rapidfuzz.distance import Levenshtein
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

from gazetteer.config import IndexConfig
from gazetteer.exceptions import QueryConstructionError, ResourceAcquisitionError, SearchExecutionError
from gazetteer.index.interfaces import IndexHit, IndexSession, IndexSessionProviderInterface, SearchHits
from gazetteer.index.models import LocationRow
from gazetteer.location import IndexRecord
from gazetteer.logging import setup_logging
from gazetteer.query import NameQuery, quote
from gazetteer.ranking import POPULATION, SCORE, RankingPolicy

logger = setup_logging(__name__)

FTS_TABLE = "location_fts"
VOCAB_TABLE = "location_fts_vocab"

# Terms at least this long may be expanded by two edits, shorter ones by one.
TWO_EDIT_MIN_LENGTH = 6

_SORT_COLUMNS = {
    POPULATION: "l.population",
    SCORE: "score",
    "name": "l.name",
    "record_id": "l.id",
    "country_code": "l.country_code",
}

_COUNT_SQL = f"SELECT count(*) FROM {FTS_TABLE} WHERE {FTS_TABLE} MATCH :match"

_SEARCH_SQL = f"""
    SELECT
      l.id, l.name, l.population, l.country_code, l.admin1_code,
      l.feature_class, l.feature_code, l.latitude, l.longitude, l.attributes,
      -bm25({FTS_TABLE}) AS score
    FROM {FTS_TABLE}
    JOIN location AS l ON l.id = {FTS_TABLE}.rowid
    WHERE {FTS_TABLE} MATCH :match
    ORDER BY {{order_by}}
    LIMIT :limit
"""

_VOCAB_SQL = f"SELECT term FROM {VOCAB_TABLE} WHERE length(term) BETWEEN :shortest AND :longest"


def order_by_clause(ranking: RankingPolicy) -> str:
    """Translate a ranking policy into an ORDER BY clause.

    Record id is appended as a final key so equal-ranked hits come back in
    a stable order.
    """
    keys = []
    for sort_field in ranking.sort_fields:
        column = _SORT_COLUMNS.get(sort_field.field)
        if column is None:
            raise ValueError(f"Cannot sort the name index by unknown field {sort_field.field!r}")
        keys.append(f"{column} {'DESC' if sort_field.descending else 'ASC'}")
    if not any(f.field == "record_id" for f in ranking.sort_fields):
        keys.append("l.id ASC")
    return ", ".join(keys)


def _is_query_syntax_error(exc: OperationalError) -> bool:
    message = str(exc.orig).lower()
    return "fts5: syntax error" in message or "unterminated string" in message


def _to_record(row) -> IndexRecord:
    return IndexRecord(
        record_id=row["id"],
        name=row["name"],
        population=row["population"] or 0,
        country_code=row["country_code"],
        admin1_code=row["admin1_code"],
        feature_class=row["feature_class"],
        feature_code=row["feature_code"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        attributes=json.loads(row["attributes"]) if row["attributes"] else {},
    )


class SQLiteIndexSession(IndexSession):
    """A session over one SQLAlchemy connection. Only ever issues SELECTs."""

    def __init__(self, connection: Connection, max_expansions: int = 50, min_term_length: int = 3):
        self._connection = connection
        self.max_expansions = max_expansions
        self.min_term_length = min_term_length

    def edit_budget(self, term: str, max_edits: int) -> int:
        """How many edits a fuzzy term may absorb, given its length."""
        if len(term) < self.min_term_length:
            return 0
        if len(term) < TWO_EDIT_MIN_LENGTH:
            return min(max_edits, 1)
        return max_edits

    def expand_term(self, term: str, max_edits: int) -> list[str]:
        """Return indexed terms within the term's edit budget, closest first."""
        budget = self.edit_budget(term, max_edits)
        if budget == 0:
            return [term]
        rows = self._connection.execute(
            text(_VOCAB_SQL),
            {"shortest": len(term) - budget, "longest": len(term) + budget},
        )
        scored = []
        for (candidate,) in rows:
            distance = Levenshtein.distance(term, candidate, score_cutoff=budget)
            if distance <= budget:
                scored.append((distance, candidate))
        scored.sort()
        return [candidate for _, candidate in scored[: self.max_expansions]]

    def _fuzzy_expression(self, query: NameQuery) -> Optional[str]:
        groups = []
        for term in query.terms:
            expansions = self.expand_term(term, query.max_edits)
            if not expansions:
                # Terms are ANDed, one term without a match rules out every record.
                return None
            groups.append("(" + " OR ".join(quote(t) for t in expansions) + ")")
        return " AND ".join(groups)

    def execute(self, query: NameQuery, max_results: int, ranking: RankingPolicy) -> SearchHits:
        if max_results < 1:
            raise ValueError(f"max_results must be at least 1, got {max_results}")
        if query.is_empty:
            return SearchHits()
        order_by = order_by_clause(ranking)
        try:
            match = self._fuzzy_expression(query) if query.is_fuzzy else query.expression
            if match is None:
                return SearchHits()
            logger.debug("MATCH %s ORDER BY %s LIMIT %d", match, order_by, max_results)
            total = self._connection.execute(text(_COUNT_SQL), {"match": match}).scalar_one()
            rows = (
                self._connection.execute(
                    text(_SEARCH_SQL.format(order_by=order_by)),
                    {"match": match, "limit": max_results},
                )
                .mappings()
                .all()
            )
        except OperationalError as exc:
            if _is_query_syntax_error(exc):
                raise QueryConstructionError(f"Name index rejected query {query.expression!r}: {exc.orig}") from exc
            raise SearchExecutionError(f"Name index search failed: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise SearchExecutionError(f"Name index search failed: {exc}") from exc
        hits = tuple(IndexHit(record=_to_record(row), score=row["score"]) for row in rows)
        return SearchHits(hits=hits, total_hits=total)

    def close(self) -> None:
        self._connection.close()


class SQLiteNameIndex(IndexSessionProviderInterface):
    """
    Name index stored in a SQLite database with the FTS5 extension.

    Each acquired session holds its own connection from the engine's pool,
    so concurrent searches never share one. ``sqlite://`` and
    ``sqlite:///:memory:`` URLs share a single in-memory database across
    sessions.
    """

    sortable_fields = frozenset(_SORT_COLUMNS)

    def __init__(
        self,
        db_url: str = "sqlite:///gazetteer.db",
        engine: Engine | None = None,
        max_expansions: int = 50,
        min_term_length: int = 3,
        timeout: float = 5.0,
    ):
        if engine is None:
            engine = self._create_engine(db_url, timeout)
        self.engine = engine
        self.max_expansions = max_expansions
        self.min_term_length = min_term_length

    @classmethod
    def from_config(cls, config: IndexConfig) -> "SQLiteNameIndex":
        return cls(
            config.db_url,
            max_expansions=config.max_expansions,
            min_term_length=config.min_term_length,
            timeout=config.timeout,
        )

    @staticmethod
    def _create_engine(db_url: str, timeout: float) -> Engine:
        # Sessions may be acquired from any thread.
        connect_args = {"check_same_thread": False, "timeout": timeout}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            return create_engine(db_url, connect_args=connect_args, poolclass=StaticPool)
        return create_engine(db_url, connect_args=connect_args)

    def acquire(self) -> SQLiteIndexSession:
        try:
            connection = self.engine.connect()
        except SQLAlchemyError as exc:
            raise ResourceAcquisitionError(f"Could not open the name index at {self.engine.url}: {exc}") from exc
        return SQLiteIndexSession(connection, self.max_expansions, self.min_term_length)

    def release(self, session: SQLiteIndexSession) -> None:
        session.close()

    def create_schema(self) -> None:
        """Create the record, FTS5 and vocabulary tables if missing."""
        SQLModel.metadata.create_all(self.engine, tables=[LocationRow.__table__])
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    f"""
                    CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE}
                    USING fts5(name, tokenize = 'unicode61 remove_diacritics 2')
                    """
                )
            )
            conn.execute(text(f"CREATE VIRTUAL TABLE IF NOT EXISTS {VOCAB_TABLE} USING fts5vocab({FTS_TABLE}, 'row')"))

    def add_records(self, records: Iterable[IndexRecord]) -> int:
        """Insert records and index their names. Returns the number added."""
        count = 0
        with Session(self.engine) as session:
            for record in records:
                session.add(
                    LocationRow(
                        id=record.record_id,
                        name=record.name,
                        population=record.population,
                        country_code=record.country_code,
                        admin1_code=record.admin1_code,
                        feature_class=record.feature_class,
                        feature_code=record.feature_code,
                        latitude=record.latitude,
                        longitude=record.longitude,
                        attributes=json.dumps(record.attributes) if record.attributes else None,
                    )
                )
                session.flush()
                session.connection().execute(
                    text(f"INSERT INTO {FTS_TABLE}(rowid, name) VALUES (:rowid, :name)"),
                    {"rowid": record.record_id, "name": record.name},
                )
                count += 1
            session.commit()
        logger.info("Indexed %d gazetteer records", count)
        return count

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        self.engine.dispose()
