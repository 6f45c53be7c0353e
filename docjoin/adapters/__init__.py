"""
Consumption adapters for docjoin.

Each adapter wraps one retrieval primitive of a caller-supplied source and
routes every produced document through the orchestrators before releasing
it to the consumer:

- BulkAdapter: to_list() -> joined list (ArrayOrchestrator)
- ScalarAdapter: next() / iteration / each() -> joined document
- LookupAdapter: find_one() -> joined document or None
- StreamAdapter: on('data', ...) -> joined documents, in source order

Usage:
    from docjoin.adapters import ScalarAdapter

    adapter = ScalarAdapter(cursor, orchestrator, registry.list())
    for document in adapter:
        ...

Adapters are normally created through JoinSession.wrap_*().
"""

from docjoin.adapters.base import (
    Adapter,
    AdapterState,
    PullAdapter,
    split_continuation,
)
from docjoin.adapters.bulk import BulkAdapter
from docjoin.adapters.lookup import LookupAdapter
from docjoin.adapters.scalar import ScalarAdapter
from docjoin.adapters.stream import StreamAdapter

__all__ = [
    "Adapter",
    "AdapterState",
    "PullAdapter",
    "split_continuation",
    "BulkAdapter",
    "LookupAdapter",
    "ScalarAdapter",
    "StreamAdapter",
]
