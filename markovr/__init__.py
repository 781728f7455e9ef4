# markovr — Higher-Order Markov Chain Engine

"""
Learns weighted successor distributions over fixed-length context
windows, then samples, ranks, or scores from them. Query windows may
leave wildcard slots UNKNOWN; those are answered by the marginal over
every trained window that agrees on the remaining slots.
"""

from .chain import MarkovChain
from .distribution import OutcomeDistribution
from .domain import (
    UNKNOWN,
    ChainConfig,
    ContextWindow,
    ErrorKind,
    InvalidConfiguration,
    InvalidDraw,
    InvalidOutcome,
    InvalidSnapshot,
    InvalidWeight,
    Known,
    MalformedContext,
    MarkovError,
)
from .resolution.context_store import Resolution, ResolutionMode

__version__ = "0.1.0"

__all__ = [
    "UNKNOWN",
    "ChainConfig",
    "ContextWindow",
    "ErrorKind",
    "InvalidConfiguration",
    "InvalidDraw",
    "InvalidOutcome",
    "InvalidSnapshot",
    "InvalidWeight",
    "Known",
    "MalformedContext",
    "MarkovChain",
    "MarkovError",
    "OutcomeDistribution",
    "Resolution",
    "ResolutionMode",
]
