"""
docjoin - Client-side joins for schemaless document stores

Augments documents read from one collection with documents looked up in
other collections, keyed by field equality, without the store supporting
joins. Joins are applied transparently to bulk (to_list), scalar (next),
lookup (find_one) and streaming reads.
"""

__version__ = "0.1.0"
__author__ = "Local Pipeline Team"


__all__ = [
    "JoinSession",
    "JoinBuilder",
    "JoinSpecification",
    "JoinSpecRegistry",
    "DocjoinConfig",
    "load_config",
    "get_docjoin_home",
]

from .config import DocjoinConfig, load_config, get_docjoin_home
from .schemas import JoinSpecification
from .registry import JoinSpecRegistry
from .session import JoinSession
from .builder import JoinBuilder
