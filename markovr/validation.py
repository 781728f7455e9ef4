"""
Validation and Normalization for the markovr engine.

Every public chain operation funnels its raw arguments through these
helpers before touching the context store. The store itself only ever
sees validated, normalized tuples.

Training windows must be fully known. Query windows may hold UNKNOWN
only in the chain's wildcard dimensions.
"""

from __future__ import annotations

from typing import Any, Hashable, Sequence

from .domain import (
    UNKNOWN,
    ChainConfig,
    ContextWindow,
    InvalidDraw,
    InvalidOutcome,
    InvalidWeight,
    Known,
    MalformedContext,
)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Weight applied by train() and train_sequence() when none is given
DEFAULT_WEIGHT = 1


# =============================================================================
# ELEMENT VALIDATION
# =============================================================================

def _check_hashable(value: Any, what: str) -> None:
    try:
        hash(value)
    except TypeError:
        raise MalformedContext(
            f"{what} {value!r} is not hashable"
        ) from None


def validate_weight(weight: Any) -> int:
    """
    Validate a training weight.

    Raises:
        InvalidWeight: If weight is not a positive int
    """
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise InvalidWeight(
            f"weight must be an int, got {type(weight).__name__}"
        )
    if weight <= 0:
        raise InvalidWeight(f"weight must be positive, got {weight}")
    return weight


def validate_draw(draw: Any) -> int:
    """
    Validate an explicit sampling draw.

    Raises:
        InvalidDraw: If draw is not a non-negative int
    """
    if isinstance(draw, bool) or not isinstance(draw, int):
        raise InvalidDraw(f"draw must be an int, got {type(draw).__name__}")
    if draw < 0:
        raise InvalidDraw(f"draw must be non-negative, got {draw}")
    return draw


def validate_outcome(outcome: Any) -> Hashable:
    """
    Validate a training outcome.

    None is reserved: generation returns it to signal "no result".

    Raises:
        InvalidOutcome: If outcome is None or unhashable
    """
    if outcome is None or outcome is UNKNOWN:
        raise InvalidOutcome("outcome must be a known element, got None")
    try:
        hash(outcome)
    except TypeError:
        raise InvalidOutcome(f"outcome {outcome!r} is not hashable") from None
    return outcome


# =============================================================================
# WINDOW NORMALIZATION
# =============================================================================

def _fit_length(config: ChainConfig, values: Sequence[Any]) -> Sequence[Any]:
    """Check window length against the order, truncating if allowed."""
    length = len(values)
    if length == config.order:
        return values
    if config.sliding_window and length > config.order:
        return values[length - config.order:]
    raise MalformedContext(
        f"window has {length} slots, chain order is {config.order}"
    )


def normalize_training_context(
    config: ChainConfig,
    context: Sequence[Any],
) -> tuple[Hashable, ...]:
    """
    Normalize a training window into a store key.

    Raises:
        MalformedContext: If the length is wrong or any slot is unknown
    """
    window = ContextWindow.of(_fit_length(config, list(context)))
    if not window.is_fully_known():
        raise MalformedContext(
            "training windows must be fully known; unknown slots at "
            f"{list(window.unknown_indices())}"
        )
    values = window.values()
    for value in values:
        _check_hashable(value, "context element")
    return values


def normalize_query_context(
    config: ChainConfig,
    context: Sequence[Any],
) -> ContextWindow:
    """
    Normalize a query window.

    Raises:
        MalformedContext: If the length is wrong, or a non-wildcard
            slot is unknown
    """
    window = ContextWindow.of(_fit_length(config, list(context)))
    wild = set(config.wildcard_dimensions)
    illegal = [i for i in window.unknown_indices() if i not in wild]
    if illegal:
        raise MalformedContext(
            f"slots {illegal} are unknown but are not wildcard dimensions "
            f"(wildcards: {list(config.wildcard_dimensions)})"
        )
    for slot in window:
        if isinstance(slot, Known):
            _check_hashable(slot.value, "context element")
    return window
