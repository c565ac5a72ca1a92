"""Search-box query interpretation and CQL filter construction."""

from mapengine.query import cql
from mapengine.query.interpreter import (
    LAYER_KEYWORDS,
    QueryIntent,
    QueryInterpreter,
    QueryOutcome,
    QueryStatus,
    deep_search_filter,
    parse,
)

__all__ = [
    "LAYER_KEYWORDS",
    "QueryIntent",
    "QueryInterpreter",
    "QueryOutcome",
    "QueryStatus",
    "cql",
    "deep_search_filter",
    "parse",
]
