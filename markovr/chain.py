"""
Variable-order Markov chain.

A chain learns, for every window of `order` prior elements, a weighted
distribution over the element that follows. Queries may leave wildcard
slots UNKNOWN; those are answered by summing over every trained window
that agrees on the remaining slots.

Typical use:

    chain = MarkovChain(1)
    chain.train_sequence("abcdefghijklmnopqrstuvwxyz")
    chain.generate(["y"])            # -> "z"
    chain.probability(["a"], "z")    # -> 0.0

Mutation happens only through train(); every other operation only
reads, so concurrent queries are fine once training has stopped.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Hashable, Iterable, Iterator, Optional, Sequence

from .distribution import OutcomeDistribution
from .domain import ChainConfig, ContextWindow, Known
from .resolution.context_store import ContextKey, ContextStore, Resolution
from .validation import (
    DEFAULT_WEIGHT,
    normalize_query_context,
    normalize_training_context,
    validate_draw,
    validate_outcome,
    validate_weight,
)

logger = logging.getLogger(__name__)


class MarkovChain:
    """
    The top-level handle: configuration plus the context store.

    Args:
        order: Number of context slots (0 makes a single weighted die)
        wildcard_dimensions: Slot indices that may be UNKNOWN in queries
        sliding_window: Accept longer windows and keep their tail
        rng: Random source for generate(); module-level random if None

    Raises:
        InvalidConfiguration: On a negative order, or wildcard indices
            that are out of range or duplicated
    """

    def __init__(
        self,
        order: int,
        wildcard_dimensions: Iterable[int] = (),
        *,
        sliding_window: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._config = ChainConfig(
            order=order,
            wildcard_dimensions=tuple(wildcard_dimensions),
            sliding_window=sliding_window,
        )
        self._store = ContextStore(self._config)
        self.rng = rng

    @classmethod
    def from_config(
        cls,
        config: ChainConfig,
        rng: Optional[random.Random] = None,
    ) -> MarkovChain:
        return cls(
            config.order,
            config.wildcard_dimensions,
            sliding_window=config.sliding_window,
            rng=rng,
        )

    @property
    def config(self) -> ChainConfig:
        return self._config

    @property
    def order(self) -> int:
        return self._config.order

    @property
    def wildcard_dimensions(self) -> tuple[int, ...]:
        return self._config.wildcard_dimensions

    # =========================================================================
    # TRAINING
    # =========================================================================

    def train(
        self,
        context: Sequence[Any],
        outcome: Hashable,
        weight: int = DEFAULT_WEIGHT,
    ) -> None:
        """
        Add `weight` to `outcome` following the fully known `context`.

        Training the same triple twice doubles its contribution.

        Raises:
            MalformedContext: Wrong length or an unknown slot
            InvalidWeight: Non-positive weight
            InvalidOutcome: None or unhashable outcome
        """
        key = normalize_training_context(self._config, context)
        validate_weight(weight)
        validate_outcome(outcome)
        self._store.add(key, outcome, weight)

    def train_sequence(
        self,
        sequence: Iterable[Hashable],
        weight: int = DEFAULT_WEIGHT,
    ) -> int:
        """
        Train every `order`-long window of `sequence` onto its successor.

        Returns the number of transitions trained.
        """
        elements = list(sequence)
        order = self._config.order
        trained = 0
        for i in range(order, len(elements)):
            self.train(elements[i - order:i], elements[i], weight)
            trained += 1
        logger.debug(
            "trained %d transition(s) from a sequence of %d",
            trained, len(elements),
        )
        return trained

    # =========================================================================
    # QUERYING
    # =========================================================================

    def resolve(self, context: Sequence[Any]) -> Resolution:
        """
        Resolve a (possibly partial) window to its distribution.

        Raises:
            MalformedContext: Wrong length, or UNKNOWN outside the
                wildcard dimensions
        """
        window = normalize_query_context(self._config, context)
        return self._store.resolve(window)

    def generate(self, context: Sequence[Any]) -> Optional[Hashable]:
        """
        Sample the next element after a fully known window.

        Returns None when nothing was trained for the window.
        """
        key = normalize_training_context(self._config, context)
        # values are already known; to_slot would read a None as UNKNOWN
        window = ContextWindow(tuple(Known(v) for v in key))
        return self._roll(self._store.resolve(window))

    def generate_from_partial(
        self,
        context: Sequence[Any],
    ) -> Optional[Hashable]:
        """Sample the next element; wildcard slots may be UNKNOWN."""
        return self._roll(self.resolve(context))

    def generate_deterministic(
        self,
        context: Sequence[Any],
        rank: int = 0,
    ) -> Optional[Hashable]:
        """
        Pick the `rank`-th most likely next element, without randomness.

        Rank 0 is the heaviest outcome; ties keep first-seen order.
        """
        resolution = self.resolve(context)
        if not resolution.found:
            return None
        return resolution.distribution.sample_deterministic(rank)

    def generate_from_draw(
        self,
        context: Sequence[Any],
        draw: int,
    ) -> Optional[Hashable]:
        """
        Sample with a caller supplied draw, wrapped to the total weight.

        Raises:
            InvalidDraw: If draw is not a non-negative int
        """
        validate_draw(draw)
        resolution = self.resolve(context)
        if not resolution.found:
            return None
        return resolution.distribution.sample(draw)

    def probability(self, context: Sequence[Any], outcome: Any) -> float:
        """
        Probability of `outcome` following `context`, in [0, 1].

        0.0 when the window or the outcome was never seen.
        """
        resolution = self.resolve(context)
        if not resolution.found:
            return 0.0
        return resolution.distribution.probability(outcome)

    def _roll(self, resolution: Resolution) -> Optional[Hashable]:
        if not resolution.found:
            return None
        return resolution.distribution.roll(self.rng)

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def distribution_for(
        self,
        context: Sequence[Any],
    ) -> Optional[OutcomeDistribution]:
        """The distribution trained under exactly this window, if any."""
        return self._store.get(normalize_training_context(self._config, context))

    def contexts(self) -> Iterator[tuple[ContextKey, OutcomeDistribution]]:
        """Every trained window with its distribution."""
        return self._store.items()

    def __len__(self) -> int:
        return len(self._store)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MarkovChain):
            return NotImplemented
        return self._store == other._store

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"MarkovChain(order={self.order}, "
            f"wildcard_dimensions={list(self.wildcard_dimensions)}, "
            f"contexts={len(self)})"
        )
