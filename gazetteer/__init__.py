"""
Gazetteer name resolution - match extracted place names to gazetteer records.

Resolves a free-text location occurrence into ranked candidate records from
a full-text name index: an exact phrase match first, an edit-distance
tolerant match when that finds nothing, ranked by population and then by
relevance.

    from gazetteer import LocationNameIndex, LocationOccurrence
    from gazetteer.index import SQLiteNameIndex

    resolver = LocationNameIndex(SQLiteNameIndex("sqlite:///data/gazetteer.db"))
    resolver.search(LocationOccurrence(text="Boston"), use_fuzzy=True)
"""

from gazetteer.config import GazetteerConfig, IndexConfig, ResolverConfig, load_config
from gazetteer.exceptions import (
    GazetteerError,
    QueryConstructionError,
    ResourceAcquisitionError,
    SearchExecutionError,
)
from gazetteer.location import IndexRecord, ResolvedLocation
from gazetteer.occurrence import LocationOccurrence
from gazetteer.ranking import DEFAULT_RANKING, RankingPolicy, SortField
from gazetteer.resolver import LocationNameIndex

__all__ = [
    "DEFAULT_RANKING",
    "GazetteerConfig",
    "GazetteerError",
    "IndexConfig",
    "IndexRecord",
    "LocationNameIndex",
    "LocationOccurrence",
    "QueryConstructionError",
    "RankingPolicy",
    "ResolvedLocation",
    "ResolverConfig",
    "ResourceAcquisitionError",
    "SearchExecutionError",
    "SortField",
    "load_config",
]

__version__ = "0.1.0"
