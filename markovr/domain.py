"""
Core Domain Objects for the markovr engine.

Every query and training call is expressed in these types. Invariants
are enforced at construction time; a value that exists is a valid value.

Domain Objects:
    Known         — A context slot holding an observed element
    UNKNOWN       — The single "not known" slot marker
    ContextWindow — An ordered tuple of slots, one per chain order
    ChainConfig   — Order and wildcard layout of one chain
    MarkovError   — Base of every error the engine raises
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable, Iterable, Optional, Union


# =============================================================================
# ERROR SYSTEM
# =============================================================================

class ErrorKind(Enum):
    """
    Failure categories.

    "No data" is never one of these: an unseen context yields None or
    a zero probability on the success path.
    """
    INVALID_CONFIGURATION = "invalid_configuration"
    MALFORMED_CONTEXT = "malformed_context"
    INVALID_WEIGHT = "invalid_weight"
    INVALID_OUTCOME = "invalid_outcome"
    INVALID_SNAPSHOT = "invalid_snapshot"
    INVALID_DRAW = "invalid_draw"


class MarkovError(Exception):
    """Raised when a caller hands the engine input it cannot accept."""

    # Subclasses fix their kind; the base carries none unless given one
    kind: Optional[ErrorKind] = None

    def __init__(self, reason: str, kind: Optional[ErrorKind] = None):
        if kind is not None:
            self.kind = kind
        self.reason = reason
        if self.kind is None:
            super().__init__(reason)
        else:
            super().__init__(f"[{self.kind.value}] {reason}")


class InvalidConfiguration(MarkovError):
    """Order or wildcard dimensions are unusable. Fatal at construction."""
    kind = ErrorKind.INVALID_CONFIGURATION


class MalformedContext(MarkovError):
    """Wrong window length, or an unknown slot where one is not allowed."""
    kind = ErrorKind.MALFORMED_CONTEXT


class InvalidWeight(MarkovError):
    """Training weight is not a positive integer."""
    kind = ErrorKind.INVALID_WEIGHT


class InvalidOutcome(MarkovError):
    """Outcome is None or cannot be hashed."""
    kind = ErrorKind.INVALID_OUTCOME


class InvalidSnapshot(MarkovError):
    """Snapshot data cannot reconstruct a chain."""
    kind = ErrorKind.INVALID_SNAPSHOT


class InvalidDraw(MarkovError):
    """Explicit draw is not a non-negative integer."""
    kind = ErrorKind.INVALID_DRAW


# =============================================================================
# CONTEXT SLOTS
# =============================================================================

class Unknown(Enum):
    """Marker type for a slot whose element is not known."""
    UNKNOWN = "unknown"

    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN = Unknown.UNKNOWN


@dataclass(frozen=True)
class Known:
    """A slot holding an observed element."""
    value: Hashable

    def __repr__(self) -> str:
        return f"Known({self.value!r})"


Slot = Union[Known, Unknown]


def to_slot(value: Any) -> Slot:
    """
    Lift a raw value into a slot.

    Slots pass through unchanged. A plain None reads as UNKNOWN;
    every other value is wrapped in Known.
    """
    if isinstance(value, (Known, Unknown)):
        return value
    if value is None:
        return UNKNOWN
    return Known(value)


@dataclass(frozen=True)
class ContextWindow:
    """
    An ordered, fixed-length view of prior elements.

    Two windows are equal iff every slot is equal, unknown-ness included.
    """
    slots: tuple[Slot, ...]

    @classmethod
    def of(cls, values: Iterable[Any]) -> ContextWindow:
        """Build a window from raw values, slots, or a mix of both."""
        return cls(tuple(to_slot(v) for v in values))

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self):
        return iter(self.slots)

    def is_fully_known(self) -> bool:
        return all(isinstance(s, Known) for s in self.slots)

    def unknown_indices(self) -> tuple[int, ...]:
        return tuple(i for i, s in enumerate(self.slots) if s is UNKNOWN)

    def values(self) -> tuple[Hashable, ...]:
        """
        Raw elements of a fully known window.

        Raises:
            MalformedContext: If any slot is UNKNOWN
        """
        if not self.is_fully_known():
            raise MalformedContext(
                f"window has unknown slots at {list(self.unknown_indices())}"
            )
        return tuple(s.value for s in self.slots)

    def __repr__(self) -> str:
        inner = ", ".join(
            "?" if s is UNKNOWN else repr(s.value) for s in self.slots
        )
        return f"ContextWindow([{inner}])"


# =============================================================================
# CHAIN CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class ChainConfig:
    """
    Shape of one chain, fixed for its lifetime.

    order:
        Number of context slots. 1 is the classic Markov chain that
        looks back one element; 0 is a single weighted die.
    wildcard_dimensions:
        Slot indices allowed to be UNKNOWN at query time. Stored sorted.
    sliding_window:
        When True, windows longer than `order` keep their trailing
        `order` slots instead of being rejected.
    """
    order: int
    wildcard_dimensions: tuple[int, ...] = ()
    sliding_window: bool = False

    def __post_init__(self):
        """Enforce configuration invariants at construction time."""
        if isinstance(self.order, bool) or not isinstance(self.order, int):
            raise InvalidConfiguration(
                f"order must be an int, got {type(self.order).__name__}"
            )
        if self.order < 0:
            raise InvalidConfiguration(
                f"order must be non-negative, got {self.order}"
            )

        dims = tuple(self.wildcard_dimensions)
        for index in dims:
            if isinstance(index, bool) or not isinstance(index, int):
                raise InvalidConfiguration(
                    f"wildcard dimension must be an int, got {index!r}"
                )
            if not (0 <= index < self.order):
                raise InvalidConfiguration(
                    f"wildcard dimension {index} is outside [0, {self.order})"
                )
        if len(set(dims)) != len(dims):
            raise InvalidConfiguration(
                f"wildcard dimensions contain duplicates: {list(dims)}"
            )

        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "wildcard_dimensions", tuple(sorted(dims)))

    @property
    def fixed_dimensions(self) -> tuple[int, ...]:
        """Slot indices that must always be known."""
        wild = set(self.wildcard_dimensions)
        return tuple(i for i in range(self.order) if i not in wild)

    def project(self, values: tuple[Hashable, ...]) -> tuple[Hashable, ...]:
        """Keep only the elements in non-wildcard slots."""
        return tuple(values[i] for i in self.fixed_dimensions)
