"""Build injection-safe name queries from raw occurrence text.

Every piece of extracted text is escaped before it reaches the index, on
every call. Text is only ever embedded inside FTS5 string literals, where
the double quote is the one syntax-significant character; doubling it
leaves parentheses, operators, ``*``, ``^`` and column filters inert, so
searching for ``A (B)`` looks for the literal tokens ``a`` and ``b``.

Two queries are built from the same normalized text:

- an **exact** query, the whole text as a single phrase, so multi-token
  names match as a unit rather than as independent ORed/ANDed tokens;
- a **fuzzy** query, the same text split into terms that the index may
  expand to any indexed term within an edit-distance budget.
"""

import re
import unicodedata
from enum import Enum

from pydantic import BaseModel, Field

from gazetteer.exceptions import QueryConstructionError

_TOKEN_RE = re.compile(r"[^\W_]+", flags=re.UNICODE)


class MatchKind(str, Enum):
    """Which matching strategy a query uses."""

    EXACT = "exact"
    FUZZY = "fuzzy"


class NameQuery(BaseModel, frozen=True):
    """A query against the name field of the index.

    ``expression`` is ready to hand to the FTS5 MATCH operator. For fuzzy
    queries the index rewrites each term of ``terms`` into its edit-distance
    expansion before executing.
    """

    kind: MatchKind
    text: str = Field(description="Lower-cased occurrence text the query was built from.")
    expression: str = Field(description="Escaped FTS5 query expression.")
    terms: tuple[str, ...] = Field(
        default=(),
        description="Analyzed terms, as the index tokenizer would produce them.",
    )
    max_edits: int = Field(default=0, ge=0, le=2)

    @property
    def is_fuzzy(self) -> bool:
        return self.kind is MatchKind.FUZZY

    @property
    def is_empty(self) -> bool:
        """True when the text holds no searchable tokens at all."""
        return not self.terms


def escape_query_text(text: str) -> str:
    """Escape text for use inside an FTS5 string literal."""
    return text.replace('"', '""')


def quote(text: str) -> str:
    """Wrap text as an escaped FTS5 string, i.e. a phrase."""
    return f'"{escape_query_text(text)}"'


def fold(text: str) -> str:
    """Lower-case text and strip diacritics (``"Zürich"`` -> ``"zurich"``)."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def analyze(text: str) -> tuple[str, ...]:
    """Split text into terms the way the index tokenizer does.

    Mirrors ``unicode61 remove_diacritics 2``: case and diacritics are
    folded and anything that is not a letter or digit separates terms.
    """
    return tuple(_TOKEN_RE.findall(fold(text)))


def _normalize(text: str) -> str:
    if not isinstance(text, str):
        raise QueryConstructionError(f"Occurrence text must be a string, got {type(text).__name__}")
    # The name field is case-folded at index time.
    return text.strip().lower()


def build_exact_query(text: str) -> NameQuery:
    """Build a single-phrase query for the whole occurrence text."""
    normalized = _normalize(text)
    return NameQuery(
        kind=MatchKind.EXACT,
        text=normalized,
        expression=quote(normalized),
        terms=analyze(normalized),
    )


def build_fuzzy_query(text: str, max_edits: int = 2) -> NameQuery:
    """Build an edit-distance tolerant query for the occurrence text.

    Every term must match (terms are ANDed), each within its own edit
    budget, so a one-letter typo in one word does not widen the match to
    every place that shares the other words.
    """
    normalized = _normalize(text)
    terms = analyze(normalized)
    return NameQuery(
        kind=MatchKind.FUZZY,
        text=normalized,
        expression=" AND ".join(quote(term) for term in terms),
        terms=terms,
        max_edits=max_edits,
    )
