"""
Demo Harnesses for the markovr engine.

Each demo trains a chain on bundled sample data and generates from it,
using nothing but the public chain API.

Demos:
    alphabet — order-1 chain over a..z, walked from 'a' until None
    months   — month names from several calendars, wildcard first letter
    tilemap  — wavefunction-collapse style box-drawing map, restarted
               from scratch whenever generation hits a dead end
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Hashable, Optional

from ..chain import MarkovChain
from ..domain import UNKNOWN

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

DEFAULT_MAX_ATTEMPTS = 100

# Month names shorter than this are thrown away and regenerated
MIN_MONTH_LENGTH = 4
MAX_MONTH_LENGTH = 16

# Marks the end of a month name in the training data
END_OF_NAME = " "

DEFAULT_TILEMAP_WIDTH = 32
DEFAULT_TILEMAP_HEIGHT = 8

# The empty tile surrounding every map
BLANK_TILE = " "


# =============================================================================
# SAMPLE DATA
# =============================================================================

ALPHABET = "abcdefghijklmnopqrstuvwxyz"

SAMPLE_MONTH_NAMES = """
january february march april may june july august september october
november december nisan iyar sivan tammuz av elul tishri marcheshvan
kislev tevet shevat adar muharram safar rajab shaban ramadan shawwal
caitra vaikasi jyestha ashada sravana bhadrapada asvina kartika
maargazhi pausa magha chet vaisakh jeth harth sawan bhadon assu katak
maghar poh magh phagun gormanuour ylir morsugur porri goa einmanuour
harpa skerpla solmanuour heyannir tvimanuour haustmanuour thout paopi
hathor koiak tooba emshir paremhat paremoude pashons paoni epip mesori
vendemiarie brumaire frimaire nivose pluviose ventose germinal floreal
prairial messidor thermidor fructidor
""".split()

SAMPLE_TILEMAP = """\

 ┏━━━━┳━━━━━━┓ ┏━┳━━┳━━━━━━━━━━┓
 ┃    ┃ ┏━┓  ┃ ┃ ┃  ┃          ┃
 ┣━━━━╋━╋━╋━━┫ ┃ ┃ ┏╋━━━━┓     ┃
 ┃    ┃ ┗━┛  ┃ ┃ ┃ ┗╋━━━━┛     ┃
 ┗━━━━┻━━━━━━┛ ┗━┻━━┻━━━━━━━━━━┛

"""


# =============================================================================
# ALPHABET
# =============================================================================

def build_alphabet_chain(rng: Optional[random.Random] = None) -> MarkovChain:
    """First-order chain where every letter is followed by the next one."""
    chain = MarkovChain(1, rng=rng)
    chain.train_sequence(ALPHABET)
    return chain


def walk(chain: MarkovChain, start: Hashable, limit: int = 1000) -> list[Hashable]:
    """
    Follow a first-order chain from `start` until it returns None.

    Stops after `limit` elements so cyclic chains terminate.
    """
    path = [start]
    current: Optional[Hashable] = start
    while len(path) < limit:
        current = chain.generate([current])
        if current is None:
            break
        path.append(current)
    return path


# =============================================================================
# MONTHS
# =============================================================================

def build_months_chain(
    names: Optional[list[str]] = None,
    rng: Optional[random.Random] = None,
) -> MarkovChain:
    """
    First-order character chain over month names.

    Slot 0 is a wildcard so the first letter can be drawn from the
    marginal over every trained context.
    """
    chain = MarkovChain(1, wildcard_dimensions=[0], rng=rng)
    for name in names if names is not None else SAMPLE_MONTH_NAMES:
        chain.train_sequence(name + END_OF_NAME)
    return chain


def generate_month_name(
    chain: MarkovChain,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Optional[str]:
    """
    Generate one plausible month name.

    Names that end too early or run too long are discarded and the
    whole name is retried. Returns None if every attempt fails.
    """
    for attempt in range(1, max_attempts + 1):
        letters: list[str] = []
        current = chain.generate_from_partial([UNKNOWN])
        while current is not None and current != END_OF_NAME:
            letters.append(current)
            if len(letters) > MAX_MONTH_LENGTH:
                break
            current = chain.generate([current])

        if MIN_MONTH_LENGTH <= len(letters) <= MAX_MONTH_LENGTH:
            return "".join(letters)
        logger.info("attempt %d: discarded %r", attempt, "".join(letters))

    return None


# =============================================================================
# TILEMAP
# =============================================================================

def _pad_grid(text: str) -> list[list[str]]:
    """Split sample text into equal-width rows of tiles."""
    rows = [list(line) for line in text.splitlines()]
    width = max((len(r) for r in rows), default=0)
    return [r + [BLANK_TILE] * (width - len(r)) for r in rows]


def _neighbors(grid: list[list[str]], r: int, c: int) -> tuple[str, str, str]:
    """(up-left, up, left) — the context for the tile at (r, c)."""
    return grid[r - 1][c - 1], grid[r - 1][c], grid[r][c - 1]


def build_tilemap_chain(
    sample: str = SAMPLE_TILEMAP,
    rng: Optional[random.Random] = None,
) -> MarkovChain:
    """
    Third-order chain from each tile's (up-left, up, left) neighbors.

    The diagonal neighbor is a wildcard: when an exact neighborhood was
    never seen, the tile is drawn from every neighborhood sharing the
    same up and left tiles.
    """
    chain = MarkovChain(3, wildcard_dimensions=[0], rng=rng)
    grid = _pad_grid(sample)
    for r in range(1, len(grid)):
        for c in range(1, len(grid[r])):
            chain.train(_neighbors(grid, r, c), grid[r][c])
    return chain


@dataclass
class TilemapResult:
    """A generated map and how many fills it took."""
    rows: list[str]
    attempts: int

    def render(self) -> str:
        return "\n".join(self.rows)


def _fill(chain: MarkovChain, width: int, height: int) -> Optional[list[str]]:
    grid = [[BLANK_TILE] * (width + 1) for _ in range(height + 1)]
    for r in range(1, height + 1):
        for c in range(1, width + 1):
            tile = chain.generate(_neighbors(grid, r, c))
            if tile is None:
                logger.info("dead end at row %d, column %d", r, c)
                return None
            grid[r][c] = tile
    return ["".join(row[1:]) for row in grid[1:]]


def generate_tilemap(
    chain: MarkovChain,
    width: int = DEFAULT_TILEMAP_WIDTH,
    height: int = DEFAULT_TILEMAP_HEIGHT,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Optional[TilemapResult]:
    """
    Fill a width x height map row by row.

    The map is framed by blank tiles. A dead end restarts the whole fill;
    None means every attempt hit one.
    """
    for attempt in range(1, max_attempts + 1):
        rows = _fill(chain, width, height)
        if rows is not None:
            return TilemapResult(rows=rows, attempts=attempt)
    return None
