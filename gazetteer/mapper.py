"""Turn raw index hits into resolved locations."""

from typing import Iterable

from gazetteer.index.interfaces import IndexHit
from gazetteer.location import ResolvedLocation
from gazetteer.occurrence import LocationOccurrence


def map_hits(occurrence: LocationOccurrence, hits: Iterable[IndexHit], used_fuzzy: bool) -> list[ResolvedLocation]:
    """Build one ResolvedLocation per hit.

    Hits arrive already ranked; their order is kept exactly. Duplicate
    records are not collapsed, that is left to the caller.
    """
    return [
        ResolvedLocation(
            occurrence=occurrence,
            record=hit.record,
            matched_name=hit.record.name,
            fuzzy=used_fuzzy,
            confidence=hit.score,
        )
        for hit in hits
    ]
