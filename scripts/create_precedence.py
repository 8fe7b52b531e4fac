#!/usr/bin/env python3
"""
Create the reproducible precedence file for an election.

The order is seeded with the number of ballots cast, so anyone holding
the same ballots can regenerate and check it.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from counting import generate_precedence  # noqa: E402
from data.ballot_set import BallotSet  # noqa: E402
from data.database import BallotDatabase  # noqa: E402

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create a precedence file")
    parser.add_argument("--db", required=True, help="DuckDB file with ballots_long")
    parser.add_argument(
        "--output",
        default="precedence.txt",
        help="Where to write the precedence file (default: precedence.txt)",
    )

    args = parser.parse_args(argv)

    if not Path(args.db).exists():
        logger.error(f"Database file not found: {args.db}")
        return 1

    with BallotDatabase(args.db) as db:
        if not db.table_exists("ballots_long"):
            logger.error("Required table 'ballots_long' not found")
            return 1
        ballot_set = BallotSet.from_database(db)

    logger.info(
        f"Seeding precedence with {ballot_set.votes_cast} ballots cast "
        f"over {len(ballot_set.choices)} choices"
    )
    order = generate_precedence(ballot_set.choices, ballot_set.votes_cast, args.output)

    print("\n=== Precedence Order ===")
    for position, choice in enumerate(order, 1):
        print(f"  {position:2d}. {choice}")
    print(f"\n✓ Precedence written to: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
