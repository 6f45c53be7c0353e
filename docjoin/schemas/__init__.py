"""
docjoin.schemas - Schema definitions for join orchestration.

JoinSpecification is the single normalized shape every registration style
(keyword, mapping, builder quadruples, config.yaml) is converted into before
orchestration runs.
"""

from .join_spec import JoinSpecification, FIELD_ALIASES, REQUIRED_FIELDS

__all__ = [
    "JoinSpecification",
    "FIELD_ALIASES",
    "REQUIRED_FIELDS",
]
