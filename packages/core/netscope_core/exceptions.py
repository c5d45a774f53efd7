"""Error taxonomy for schematic queries."""


class SchematicError(Exception):
    """Base class for errors raised by the schematic core.

    Each subclass carries a ``category`` that callers use to build error
    payloads (not_found, bad_request, internal).
    """

    category = "internal"


class InvalidArgumentError(SchematicError):
    """Raised when an identifier is missing or malformed.

    This can happen when:
    - No source node is given for a connected search
    - A path query is missing its from/to endpoint
    - A limit is not a positive integer
    """

    category = "bad_request"


class NotFoundError(SchematicError):
    """Raised when a design, node, pin, net or part does not exist."""

    category = "not_found"


class StoreUnavailableError(SchematicError):
    """Raised when the graph store is unreachable or a store query failed."""

    category = "internal"


class ResourceExceededError(SchematicError):
    """Raised inside the traversal engine when a bound is hit.

    Never surfaced to callers: the engine turns it into a truncated,
    best-effort result.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
