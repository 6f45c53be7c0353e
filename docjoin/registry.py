"""
JoinSpecRegistry - ordered collection of join specifications.

The registry provides:
- Registration from a JoinSpecification, a mapping, or keyword fields
- Validation of required fields (raises ConfigurationError)
- Defaulting of result_field and is_identifier_lookup
- A read-only, registration-ordered view for the orchestrators
"""

from typing import Any, Iterator, Mapping, Optional, Union

from docjoin.errors import ConfigurationError
from docjoin.schemas import JoinSpecification

SpecLike = Union[JoinSpecification, Mapping[str, Any]]


def normalize_spec(spec: Optional[SpecLike] = None, **fields: Any) -> JoinSpecification:
    """
    Normalize any accepted registration shape into a JoinSpecification.

    Args:
        spec: JoinSpecification or mapping (long names or short aliases)
        **fields: Keyword fields, used when spec is omitted or merged over
            a mapping spec

    Returns:
        The normalized JoinSpecification

    Raises:
        ConfigurationError: If required fields are missing or the input
            is not a recognised shape
    """
    if isinstance(spec, JoinSpecification):
        if fields:
            raise ConfigurationError(
                "Keyword fields cannot be combined with a JoinSpecification"
            )
        return spec
    if spec is None:
        return JoinSpecification.from_dict(fields)
    if isinstance(spec, Mapping):
        return JoinSpecification.from_dict({**spec, **fields})
    raise ConfigurationError(
        f"Join specification must be a JoinSpecification or mapping, got {type(spec).__name__}"
    )


class JoinSpecRegistry:
    """
    Registry of join specifications for one session.

    Specifications are evaluated in registration order. Later specifications
    may overwrite fields written by earlier ones when result fields collide.

    Usage:
        registry = JoinSpecRegistry()
        registry.register({"field": "author", "to": "_id", "from": "authors"})
        registry.register(source_field="tag", target_field="slug",
                          target_collection="tags", result_field="tag_doc")

        for spec in registry.list():
            ...
    """

    def __init__(self, specs: Optional[list[SpecLike]] = None) -> None:
        """Initialize the registry, optionally with initial specifications."""
        self._specs: list[JoinSpecification] = []
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: Optional[SpecLike] = None, **fields: Any) -> "JoinSpecRegistry":
        """
        Register a join specification.

        Args:
            spec: JoinSpecification or mapping
            **fields: Keyword fields (source_field, target_field, ...)

        Returns:
            This registry, for chaining

        Raises:
            ConfigurationError: If source_field, target_field or
                target_collection is missing
        """
        self._specs.append(normalize_spec(spec, **fields))
        return self

    def list(self) -> tuple[JoinSpecification, ...]:
        """
        Get the registered specifications in registration order.

        Returns:
            Immutable snapshot of the specifications
        """
        return tuple(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[JoinSpecification]:
        return iter(self.list())

    def __repr__(self) -> str:
        return f"JoinSpecRegistry(specs={len(self._specs)})"
