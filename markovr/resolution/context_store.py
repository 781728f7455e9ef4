"""
Context Store for the markovr engine.

Maps fully known training windows to their Outcome Distributions, and
resolves query windows (possibly holding UNKNOWN in wildcard slots)
to the distribution that answers them.

Resolution order:
    1. EXACT     — every slot known and the window was trained
    2. MARGINAL  — sum over every trained window that agrees on the
                   non-wildcard slots, whatever its wildcard slots hold
    3. NO_DATA   — nothing agrees; callers get None / 0.0, not an error

Marginal distributions are maintained incrementally at training time,
one per projection onto the non-wildcard slots, so resolution never
scans the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, Iterator, Optional

from ..distribution import OutcomeDistribution
from ..domain import ChainConfig, ContextWindow, Known, MalformedContext

logger = logging.getLogger(__name__)

ContextKey = tuple[Hashable, ...]


# =============================================================================
# RESOLUTION RESULT
# =============================================================================

class ResolutionMode(Enum):
    """How a query window was answered."""
    EXACT = "exact"
    MARGINAL = "marginal"
    NO_DATA = "no_data"


@dataclass(frozen=True)
class Resolution:
    """
    Result of resolving one query window.

    `matched` counts the trained windows that contributed; it is 1 for
    an exact hit and 0 when there is no data.
    """
    mode: ResolutionMode
    distribution: Optional[OutcomeDistribution] = None
    matched: int = 0

    @property
    def found(self) -> bool:
        return self.distribution is not None


NO_DATA = Resolution(mode=ResolutionMode.NO_DATA)


# =============================================================================
# CONTEXT STORE
# =============================================================================

class ContextStore:
    """
    Associative table from training windows to distributions.

    Grows monotonically: entries are never removed and weights only
    increase. Not safe for concurrent mutation.
    """

    def __init__(self, config: ChainConfig) -> None:
        self._config = config
        self._exact: dict[ContextKey, OutcomeDistribution] = {}
        # projection onto non-wildcard slots -> aggregated distribution
        self._marginal: dict[ContextKey, OutcomeDistribution] = {}
        self._members: dict[ContextKey, int] = {}

    @property
    def config(self) -> ChainConfig:
        return self._config

    @property
    def _has_wildcards(self) -> bool:
        return bool(self._config.wildcard_dimensions)

    # ------------------------------------------------------------------
    # training path
    # ------------------------------------------------------------------
    def add(self, key: ContextKey, outcome: Hashable, weight: int) -> None:
        """Add weight to `outcome` under an already validated key."""
        distribution = self._exact.get(key)
        is_new = distribution is None
        if is_new:
            distribution = OutcomeDistribution()
        distribution.add(outcome, weight)
        if is_new:
            self._exact[key] = distribution

        if self._has_wildcards:
            projection = self._config.project(key)
            marginal = self._marginal.get(projection)
            if marginal is None:
                marginal = self._marginal[projection] = OutcomeDistribution()
            marginal.add(outcome, weight)
            if is_new:
                self._members[projection] = self._members.get(projection, 0) + 1

        logger.debug(
            "context %r: %r +%d (total %d)",
            key, outcome, weight, distribution.total_weight,
        )

    # ------------------------------------------------------------------
    # query path
    # ------------------------------------------------------------------
    def resolve(self, window: ContextWindow) -> Resolution:
        """
        Resolve an already validated query window.

        Non-wildcard slots are known by the time a window gets here.
        """
        if window.is_fully_known():
            key = window.values()
            distribution = self._exact.get(key)
            if distribution is not None:
                logger.debug("resolved %r exactly", window)
                return Resolution(ResolutionMode.EXACT, distribution, 1)
            if not self._has_wildcards:
                logger.debug("no data for %r", window)
                return NO_DATA

        projection = tuple(
            self._slot_value(window, i) for i in self._config.fixed_dimensions
        )
        marginal = self._marginal.get(projection)
        if marginal is None:
            logger.debug("no data for %r", window)
            return NO_DATA

        matched = self._members.get(projection, 0)
        logger.debug(
            "resolved %r by marginal over %d context(s)", window, matched,
        )
        return Resolution(ResolutionMode.MARGINAL, marginal, matched)

    @staticmethod
    def _slot_value(window: ContextWindow, index: int) -> Hashable:
        slot = window.slots[index]
        if not isinstance(slot, Known):
            raise MalformedContext(f"non-wildcard slot {index} is unknown")
        return slot.value

    # ------------------------------------------------------------------
    # introspection
    # ------------------------------------------------------------------
    def get(self, key: ContextKey) -> Optional[OutcomeDistribution]:
        return self._exact.get(key)

    def items(self) -> Iterator[tuple[ContextKey, OutcomeDistribution]]:
        return iter(self._exact.items())

    def keys(self) -> Iterator[ContextKey]:
        return iter(self._exact)

    def __len__(self) -> int:
        return len(self._exact)

    def __contains__(self, key: object) -> bool:
        return key in self._exact

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContextStore):
            return NotImplemented
        return self._config == other._config and self._exact == other._exact

    __hash__ = None  # type: ignore[assignment]
