"""Shared name normalization helpers for schematic identifiers."""

from __future__ import annotations

from dataclasses import dataclass


def normalize_name(name: str | None) -> str:
    """Canonicalize an entity name for lookup and comparison.

    Rules:
    - ``None`` becomes ""
    - strip surrounding whitespace
    - upper-case
    """
    if name is None:
        return ""
    return name.strip().upper()


@dataclass(frozen=True)
class PinRef:
    """A ``NODE`` or ``NODE.PIN`` reference as supplied by a caller."""

    node: str
    pin: str | None = None

    @property
    def is_node_only(self) -> bool:
        return self.pin is None

    def __str__(self) -> str:
        if self.pin is None:
            return self.node
        return f"{self.node}.{self.pin}"


def parse_pin_ref(value: str | None) -> PinRef | None:
    """Parse ``NODE`` or ``NODE.PIN`` into a normalized :class:`PinRef`.

    The value is split on the first ``.``; an empty pin portion means the
    whole node. Returns None when no node name is present.
    """
    normalized = normalize_name(value)
    node, _, pin = normalized.partition(".")
    node = node.strip()
    pin = pin.strip()
    if not node:
        return None
    return PinRef(node=node, pin=pin or None)


def split_query(query: str | None) -> tuple[str, str]:
    """Split a search query into its node and pin portions."""
    normalized = normalize_name(query)
    node, _, pin = normalized.partition(".")
    return node.strip(), pin.strip()
