"""
Error classes for docjoin.

These error types separate configuration problems from join failures:
- ConfigurationError: Malformed join specification (raised at registration)
- JoinResolutionError: A secondary lookup failed while joining a document

Join failures are hard errors. They stop the remaining specifications for the
current document and the remaining documents of the current batch. Each one
carries the partial result produced before the failure, so callers can keep
the correctly joined prefix while knowing the result is incomplete.

A soft miss (no reference value, or no matching secondary document) is not an
error and never raises.
"""

from typing import Any, Optional


class DocJoinError(Exception):
    """Base exception for docjoin."""
    pass


class ConfigurationError(DocJoinError):
    """
    Malformed or incomplete join specification.

    Examples:
    - Missing 'source_field', 'target_field' or 'target_collection'
    - Builder-style registration with mismatched on/to/from/as counts
    - Invalid join entries in config.yaml
    """
    pass


class JoinResolutionError(DocJoinError):
    """
    A join specification could not be resolved against a document.

    Attributes:
        partial: The partially joined result at the time of failure. A single
            document for scalar calls, the joined prefix list for batches.
        spec: The JoinSpecification that failed (None if unknown)
    """

    def __init__(self, message: str, partial: Any = None, spec: Optional[Any] = None):
        super().__init__(message)
        self.partial = partial
        self.spec = spec


class InvalidIdentifierError(JoinResolutionError):
    """
    Foreign-key value could not be coerced to the store's identifier type.

    Raised only when the specification is in identifier-lookup mode.
    """
    pass


class StoreError(JoinResolutionError):
    """
    Collection-handle resolution or the equality lookup failed.

    The core does not retry. The 'transient' flag records the store
    boundary's classification so callers can decide for themselves:
    - transient=True: timeouts, reconnects, connection failures
    - transient=False: auth failures, bad queries, unknown errors
    """

    def __init__(
        self,
        message: str,
        partial: Any = None,
        spec: Optional[Any] = None,
        transient: bool = False,
    ):
        super().__init__(message, partial=partial, spec=spec)
        self.transient = transient
