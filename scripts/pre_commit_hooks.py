#!/usr/bin/env python3
"""
Custom pre-commit hooks for ranked-elections-tiebreak.

These hooks perform election-specific validation that runs before commits.
"""

import sys
import tempfile
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def check_golden_datasets():
    """Validate the structure of the golden tie-break datasets."""
    print("🗳️  Validating golden datasets...")

    try:
        import json

        from counting import TieBreakMethod

        golden_dir = Path(__file__).parent.parent / "tests" / "golden" / "micro"

        for golden_file in sorted(golden_dir.glob("*.json")):
            print(f"   📊 Checking {golden_file.name}...")

            with open(golden_file) as f:
                dataset = json.load(f)

            for key in ("choices", "ballots", "ties"):
                assert key in dataset, f"Missing {key} in {golden_file.name}"

            choices = set(dataset["choices"])
            for ballot in dataset["ballots"]:
                unknown = set(ballot["votes"]) - choices
                assert not unknown, f"Unknown choices {unknown} in {golden_file.name}"

            if "precedence" in dataset:
                assert sorted(dataset["precedence"]) == sorted(
                    choices
                ), f"Precedence must list every choice once in {golden_file.name}"

            for tie in dataset["ties"]:
                TieBreakMethod.parse(tie["method"])
                assert set(tie["expected"]) <= set(
                    tie["tied"]
                ), f"Expected result outside tied set in {golden_file.name}"

        print("   ✅ All golden datasets valid")
        return True

    except Exception as e:
        print(f"   ❌ Golden dataset validation failed: {e}")
        return False


def check_rank_invariants():
    """Rank groups must partition the choices with contiguous positions."""
    print("🧮 Testing rank invariants...")

    try:
        from counting import RankCount

        cases = [
            {"A": 10, "B": 10, "C": 5},
            {"A": 1},
            {"A": 3, "B": 2, "C": 1, "D": 2},
        ]
        for raw in cases:
            ranking = RankCount.rank(raw)
            groups = ranking.by_rank
            assert sorted(groups) == list(range(1, len(groups) + 1)), "Gap in ranks"
            members = [c for group in groups.values() for c in group]
            assert sorted(members) == sorted(raw), "Choices not partitioned"

        print("   ✅ All rank invariants pass")
        return True

    except Exception as e:
        print(f"   ❌ Rank invariant test failed: {e}")
        return False


def check_precedence_reproducible():
    """Generated precedence must be identical across runs."""
    print("🎲 Testing precedence reproducibility...")

    try:
        from counting import generate_precedence

        choices = [f"Choice {n}" for n in range(12)]
        with tempfile.TemporaryDirectory() as tmp:
            first = Path(tmp) / "first.txt"
            second = Path(tmp) / "second.txt"
            order_1 = generate_precedence(choices, 4321, first)
            order_2 = generate_precedence(reversed(choices), 4321, second)
            assert order_1 == order_2, "Precedence order differs between runs"
            assert first.read_bytes() == second.read_bytes(), "Precedence files differ"

        print("   ✅ Precedence is reproducible")
        return True

    except Exception as e:
        print(f"   ❌ Precedence reproducibility test failed: {e}")
        return False


def main():
    """Run all pre-commit election-specific hooks."""
    print("🚀 Running election-specific pre-commit hooks...")

    all_passed = True

    checks = [
        check_rank_invariants,
        check_precedence_reproducible,
        check_golden_datasets,
    ]

    for check in checks:
        if not check():
            all_passed = False

    if all_passed:
        print("✅ All election-specific pre-commit hooks passed!")
        return 0
    else:
        print("❌ Some pre-commit hooks failed!")
        return 1


if __name__ == "__main__":
    sys.exit(main())
