"""
markovr CLI — Demo Harness for the Markov Chain Engine.

Commands:
    markovr alphabet          — Walk the alphabet chain from 'a'
    markovr months            — Invent month names
    markovr tilemap           — Generate a box-drawing tile map
    markovr inspect <path>    — Show the contents of a saved snapshot

Every demo command accepts --save PATH to write its trained chain as a
JSON snapshot that `inspect` can read back.

The CLI only calls the public chain API. It adds no engine behavior.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Optional

from ..chain import MarkovChain
from ..distribution import OutcomeDistribution
from ..domain import InvalidSnapshot
from .. import snapshot
from .demos import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_TILEMAP_HEIGHT,
    DEFAULT_TILEMAP_WIDTH,
    build_alphabet_chain,
    build_months_chain,
    build_tilemap_chain,
    generate_month_name,
    generate_tilemap,
    walk,
)

# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_distribution_row(context: tuple, distribution: OutcomeDistribution) -> str:
    """Format one trained context and its ranked outcomes."""
    total = distribution.total_weight
    outcomes = ", ".join(
        f"{element!r}: {weight}/{total}"
        for element, weight in distribution.ranked()
    )
    return f"{list(context)!r} -> {outcomes}"


def _make_rng(args: argparse.Namespace) -> random.Random:
    return random.Random(args.seed)


def _maybe_save(chain: MarkovChain, args: argparse.Namespace) -> None:
    if args.save:
        path = snapshot.save(chain, args.save)
        print(f"Snapshot written to: {path}")


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_alphabet(args: argparse.Namespace) -> int:
    """Walk the alphabet chain and show two probabilities."""
    chain = build_alphabet_chain(rng=_make_rng(args))

    print(" ".join(walk(chain, "a")))
    print(f"P(z | y) = {chain.probability(['y'], 'z'):g}")
    print(f"P(z | a) = {chain.probability(['a'], 'z'):g}")

    _maybe_save(chain, args)
    return 0


def cmd_months(args: argparse.Namespace) -> int:
    """Generate month names."""
    chain = build_months_chain(rng=_make_rng(args))

    for _ in range(args.count):
        name = generate_month_name(chain, max_attempts=args.max_attempts)
        if name is None:
            print(f"ERROR: no month name after {args.max_attempts} attempts")
            return 1
        print(name)

    _maybe_save(chain, args)
    return 0


def cmd_tilemap(args: argparse.Namespace) -> int:
    """Generate a tile map, restarting on dead ends."""
    chain = build_tilemap_chain(rng=_make_rng(args))

    result = generate_tilemap(
        chain,
        width=args.width,
        height=args.height,
        max_attempts=args.max_attempts,
    )
    if result is None:
        print(f"ERROR: every fill hit a dead end ({args.max_attempts} attempts)")
        return 1

    print(result.render())
    print()
    print(f"Attempts: {result.attempts}")

    _maybe_save(chain, args)
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Print every context stored in a snapshot file."""
    try:
        chain = snapshot.load(args.path)
    except (OSError, InvalidSnapshot) as e:
        print("ERROR: Could not load snapshot")
        print(f"Reason: {e}")
        return 1

    print(f"Order: {chain.order}")
    print(f"Wildcard dimensions: {list(chain.wildcard_dimensions)}")
    print(f"Contexts: {len(chain)}")
    print("=" * 50)
    for context, distribution in chain.contexts():
        print(format_distribution_row(context, distribution))

    return 0


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="markovr",
        description="markovr — higher-order Markov chain demos",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible generation",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log engine activity to stderr",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Alphabet command
    alphabet_parser = subparsers.add_parser(
        "alphabet",
        help="Walk the alphabet chain from 'a'",
    )
    alphabet_parser.add_argument("--save", help="Write the chain snapshot here")
    alphabet_parser.set_defaults(func=cmd_alphabet)

    # Months command
    months_parser = subparsers.add_parser(
        "months",
        help="Invent month names",
    )
    months_parser.add_argument(
        "-n", "--count",
        type=int,
        default=1,
        help="Number of names to generate",
    )
    months_parser.add_argument(
        "--max-attempts",
        type=int,
        default=DEFAULT_MAX_ATTEMPTS,
    )
    months_parser.add_argument("--save", help="Write the chain snapshot here")
    months_parser.set_defaults(func=cmd_months)

    # Tilemap command
    tilemap_parser = subparsers.add_parser(
        "tilemap",
        help="Generate a box-drawing tile map",
    )
    tilemap_parser.add_argument("--width", type=int, default=DEFAULT_TILEMAP_WIDTH)
    tilemap_parser.add_argument("--height", type=int, default=DEFAULT_TILEMAP_HEIGHT)
    tilemap_parser.add_argument(
        "--max-attempts",
        type=int,
        default=DEFAULT_MAX_ATTEMPTS,
    )
    tilemap_parser.add_argument("--save", help="Write the chain snapshot here")
    tilemap_parser.set_defaults(func=cmd_tilemap)

    # Inspect command
    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show the contents of a snapshot file",
    )
    inspect_parser.add_argument(
        "path",
        help="Snapshot JSON file",
    )
    inspect_parser.set_defaults(func=cmd_inspect)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
