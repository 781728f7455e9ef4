"""
Outcome Distribution — the weighted successor set for one context.

Each observed element owns a weight bucket. Repeated adds for the same
element accumulate into its bucket; they never append a second entry.

Query costs:
    sample(draw)             O(log N) binary search over prefix sums
    sample_deterministic(k)  O(1) after the ranking is cached
    weight_of / probability  O(1) dict lookup

Prefix sums and the rank ordering are rebuilt lazily on the first read
after a mutation and cached until the next one.
"""

from __future__ import annotations

import random
from bisect import bisect_right
from itertools import accumulate
from typing import Hashable, Iterator, Optional

from .validation import validate_draw, validate_outcome, validate_weight


class OutcomeDistribution:
    """
    A weighted die over successor elements.

    Buckets are kept in first-insertion order. The cumulative weight
    sequence over that order is strictly increasing because every
    added weight is positive.
    """

    __slots__ = ("_weights", "_elements", "_cumulative", "_ranked")

    def __init__(self) -> None:
        self._weights: dict[Hashable, int] = {}
        self._elements: list[Hashable] = []
        self._cumulative: Optional[list[int]] = None
        self._ranked: Optional[list[Hashable]] = None

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------
    def add(self, element: Hashable, weight: int) -> None:
        """
        Add weight to an element's bucket, creating it if needed.

        Raises:
            InvalidWeight: If weight is not a positive int
            InvalidOutcome: If element is None or unhashable
        """
        validate_weight(weight)
        validate_outcome(element)
        self._weights[element] = self._weights.get(element, 0) + weight
        self._cumulative = None
        self._ranked = None

    def merge(self, other: OutcomeDistribution) -> None:
        """Add every bucket of `other` into this distribution."""
        for element, weight in other.items():
            self.add(element, weight)

    # ------------------------------------------------------------------
    # cached views
    # ------------------------------------------------------------------
    def _prefix_sums(self) -> list[int]:
        if self._cumulative is None:
            self._elements = list(self._weights)
            self._cumulative = list(accumulate(self._weights.values()))
        return self._cumulative

    def _ranking(self) -> list[Hashable]:
        if self._ranked is None:
            # sorted() is stable, so equal weights keep insertion order
            self._ranked = sorted(
                self._weights, key=lambda e: self._weights[e], reverse=True
            )
        return self._ranked

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    @property
    def total_weight(self) -> int:
        cumulative = self._prefix_sums()
        return cumulative[-1] if cumulative else 0

    def sample(self, draw: int) -> Optional[Hashable]:
        """
        Return the element whose cumulative bucket contains `draw`.

        Draws at or past the total weight roll over (modulo the total).
        Returns None when the distribution is empty.

        Raises:
            InvalidDraw: If draw is not a non-negative int
        """
        validate_draw(draw)
        total = self.total_weight
        if total == 0:
            return None
        position = draw % total
        index = bisect_right(self._prefix_sums(), position)
        return self._elements[index]

    def roll(self, rng: Optional[random.Random] = None) -> Optional[Hashable]:
        """Sample with a uniform random draw in [0, total_weight)."""
        total = self.total_weight
        if total == 0:
            return None
        source = rng if rng is not None else random
        return self.sample(source.randrange(total))

    def sample_deterministic(self, rank: int) -> Optional[Hashable]:
        """
        Return the element at `rank` in descending-weight order.

        Ties are broken by first insertion. Ranks wrap modulo the number
        of distinct elements, so -1 is the least likely element.
        """
        ranking = self._ranking()
        if not ranking:
            return None
        return ranking[rank % len(ranking)]

    def ranked(self) -> list[tuple[Hashable, int]]:
        """(element, weight) pairs in deterministic rank order."""
        return [(e, self._weights[e]) for e in self._ranking()]

    def weight_of(self, element: Hashable) -> int:
        try:
            return self._weights.get(element, 0)
        except TypeError:
            return 0

    def probability(self, element: Hashable) -> float:
        """weight_of(element) / total_weight, or 0.0 when either is 0."""
        total = self.total_weight
        if total == 0:
            return 0.0
        return self.weight_of(element) / total

    def items(self) -> list[tuple[Hashable, int]]:
        """(element, weight) pairs in first-insertion order."""
        return list(self._weights.items())

    def __len__(self) -> int:
        return len(self._weights)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._weights)

    def __contains__(self, element: object) -> bool:
        return self.weight_of(element) > 0  # type: ignore[arg-type]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OutcomeDistribution):
            return NotImplemented
        return self._weights == other._weights

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{e!r}: {w}" for e, w in self._weights.items())
        return f"OutcomeDistribution({{{inner}}})"
