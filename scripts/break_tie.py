#!/usr/bin/env python3
"""
Break a tie, or order a list of choices, using ballots from a DuckDB file.
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from counting import (  # noqa: E402
    BallotCounter,
    ListUntier,
    TieBreakConfig,
    TieBreakError,
    TieBreaker,
    TieBreakMethod,
    load_config,
)
from data.ballot_set import BallotSet  # noqa: E402
from data.database import BallotDatabase  # noqa: E402

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_config(args) -> TieBreakConfig:
    """Config file settings, overridden by command line flags."""
    config = load_config(args.config) if args.config else TieBreakConfig()
    changes = {}
    if args.method:
        changes["method"] = args.method
    if args.fallback_precedence:
        changes["fallback_precedence"] = True
    if args.precedence_file:
        changes["precedence_file"] = args.precedence_file
    return replace(config, **changes)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Break a tie between choices")
    parser.add_argument("--db", required=True, help="DuckDB file with ballots_long")
    parser.add_argument("--config", help="JSON file with tie-break settings")
    parser.add_argument("--method", help="Tie-break method (overrides config)")
    parser.add_argument(
        "--fallback-precedence",
        action="store_true",
        help="Resolve remaining ties by precedence",
    )
    parser.add_argument("--precedence-file", help="Precedence file to use")
    parser.add_argument("--active", help="Comma separated active choices")
    parser.add_argument(
        "--untie",
        metavar="RANKING",
        help="Order the choices by this ranking instead of breaking a tie",
    )
    parser.add_argument(
        "--untie-secondary",
        metavar="RANKING",
        default="precedence",
        help="Secondary ranking for --untie (default: precedence)",
    )
    parser.add_argument("choices", nargs="*", help="Tied choices")

    args = parser.parse_args(argv)

    if not Path(args.db).exists():
        logger.error(f"Database file not found: {args.db}")
        return 1

    try:
        with BallotDatabase(args.db) as db:
            ballot_set = BallotSet.from_database(db)

        counter = BallotCounter(ballot_set)
        if args.active:
            counter.set_active([c.strip() for c in args.active.split(",") if c.strip()])
        tiebreaker = TieBreaker(counter, build_config(args))

        if args.untie:
            untier = ListUntier(tiebreaker)
            if args.choices:
                ordered = untier.untie_list(
                    args.untie, args.choices, args.untie_secondary
                )
            else:
                ordered = untier.untie_active(args.untie, args.untie_secondary)
            print("\n=== Ordered Choices ===")
            for position, choice in enumerate(ordered, 1):
                print(f"  {position:2d}. {choice}")
            return 0

        if not args.choices:
            logger.error("No tied choices given")
            return 1

        method = tiebreaker.config.method
        if method in (TieBreakMethod.ALL, TieBreakMethod.NONE):
            kept = tiebreaker.break_tie(method, counter.active, args.choices)
        else:
            result = tiebreaker.resolve_tie(method, counter.active, args.choices)
            print(f"\n{result.trace}")
            kept = result.choices

        print("\n=== Result ===")
        if not kept:
            print("All tied choices eliminated")
        elif len(kept) == 1:
            print(f"Winner: {kept[0]}")
        else:
            print(f"Still tied: {', '.join(kept)}")
        return 0

    except (TieBreakError, FileNotFoundError) as e:
        logger.error(f"Error breaking tie: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
