"""
Unit tests for precedence loading, generation and resolution.
"""

import pytest

import counting.precedence as precedence_module
from counting import (
    InvalidConfigurationError,
    MissingChoiceError,
    PrecedenceStore,
    generate_precedence,
)
from counting.precedence import read_precedence_file, write_precedence_file

CHOICES = ["Alice", "Bob", "Charlie", "Diana", "Eve", "Frank", "Grace", "Heidi"]


@pytest.mark.unit
class TestPrecedenceFile:
    """Reading and writing the flat precedence file."""

    def test_round_trip(self, tmp_path):
        path = write_precedence_file(["A", "B", "C"], tmp_path / "p.txt")
        store = PrecedenceStore(["A", "B", "C"], votes_cast=3, path=path)

        assert store.load() == ["A", "B", "C"]
        assert store.sort(["C", "A", "B"]) == ["A", "B", "C"]
        assert path.read_text() == "A\nB\nC\n"

    def test_incidental_whitespace_stripped(self, tmp_path):
        path = tmp_path / "p.txt"
        path.write_text("  A \n\nB\t\nMary Jane\n")

        assert read_precedence_file(path) == ["A", "B", "Mary Jane"]

    def test_duplicate_choice_rejected(self, tmp_path):
        path = tmp_path / "p.txt"
        path.write_text("A\nB\nA\n")

        with pytest.raises(InvalidConfigurationError):
            read_precedence_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_precedence_file(tmp_path / "absent.txt")


@pytest.mark.unit
class TestPrecedenceStore:
    """Loading, memoizing and resolving precedence."""

    def test_missing_choice_fails_even_if_inactive(self, precedence_file):
        path = precedence_file(["A", "B"])
        store = PrecedenceStore(["A", "B", "C"], votes_cast=3, path=path)

        with pytest.raises(MissingChoiceError, match="Choice C missing"):
            store.load()

    def test_extra_choices_in_file_allowed(self, precedence_file):
        path = precedence_file(["Z", "B", "A"])
        store = PrecedenceStore(["A", "B"], votes_cast=2, path=path)

        assert store.sort(["A", "B"]) == ["B", "A"]

    def test_sort_unknown_choice_fails(self, precedence_file):
        path = precedence_file(["A", "B"])
        store = PrecedenceStore(["A", "B"], votes_cast=2, path=path)

        with pytest.raises(MissingChoiceError):
            store.sort(["A", "Q"])

    def test_resolve_picks_highest(self, precedence_file):
        path = precedence_file(["C", "A", "B"])
        store = PrecedenceStore(["A", "B", "C"], votes_cast=3, path=path)

        assert store.resolve(["B", "A"]) == "A"
        assert store.resolve(["B", "C", "A"]) == "C"

    def test_order_is_memoized_until_invalidated(self, precedence_file):
        path = precedence_file(["A", "B"])
        store = PrecedenceStore(["A", "B"], votes_cast=2, path=path)
        assert store.order() == ["A", "B"]

        path.write_text("B\nA\n")
        assert store.order() == ["A", "B"]
        assert store.is_cached

        store.invalidate()
        assert not store.is_cached
        assert store.order() == ["B", "A"]

    def test_set_path_invalidates(self, tmp_path):
        first = write_precedence_file(["A", "B"], tmp_path / "first.txt")
        second = write_precedence_file(["B", "A"], tmp_path / "second.txt")
        store = PrecedenceStore(["A", "B"], votes_cast=2, path=first)
        assert store.resolve(["A", "B"]) == "A"

        store.set_path(second)
        assert store.resolve(["A", "B"]) == "B"

    def test_generates_default_file_when_no_path(self, tmp_path):
        default = tmp_path / "auto" / "precedence.txt"
        store = PrecedenceStore(CHOICES, votes_cast=77, default_path=default)

        order = store.order()

        assert default.exists()
        assert read_precedence_file(default) == order
        assert sorted(order) == sorted(CHOICES)
        assert store.path is None
        assert store.generated_path == default

    def test_invalidate_regenerates_instead_of_reading_shared_file(self, tmp_path):
        shared = tmp_path / "precedence.txt"
        store = PrecedenceStore(CHOICES, votes_cast=5, default_path=shared)
        mine = store.order()

        # Another run writes a different order to the same default path.
        write_precedence_file(list(reversed(mine)), shared)
        store.invalidate()

        assert store.order() == mine
        assert store.path is None

    def test_ranking_follows_precedence(self, precedence_file):
        path = precedence_file(["B", "C", "A"])
        store = PrecedenceStore(["A", "B", "C"], 3, path=path)
        ranking = store.ranking(["A", "C"])

        assert ranking.ordered == {"C": 1, "A": 2}


@pytest.mark.unit
@pytest.mark.invariant
class TestPrecedenceGeneration:
    """Predictable pseudo-random generation."""

    def test_generation_is_deterministic(self, tmp_path):
        first = tmp_path / "first.txt"
        second = tmp_path / "second.txt"

        order_1 = generate_precedence(CHOICES, 1234, first)
        order_2 = generate_precedence(list(reversed(CHOICES)), 1234, second)

        assert order_1 == order_2
        assert first.read_bytes() == second.read_bytes()

    def test_every_choice_exactly_once(self, tmp_path):
        path = tmp_path / "p.txt"
        order = generate_precedence(CHOICES, 99, path)

        assert sorted(order) == sorted(CHOICES)
        assert read_precedence_file(path) == order

    def test_seed_changes_order(self, tmp_path):
        order_1 = generate_precedence(CHOICES, 1000, tmp_path / "a.txt")
        order_2 = generate_precedence(CHOICES, 1001, tmp_path / "b.txt")

        assert order_1 != order_2

    def test_collision_redraws_same_choice(self, tmp_path, monkeypatch):
        class ScriptedRandomState:
            draws = iter([5, 5, 3, 7])

            def __init__(self, seed):
                self.seed = seed

            def randint(self, low, high):
                return next(self.draws)

        monkeypatch.setattr(
            precedence_module.np.random, "RandomState", ScriptedRandomState
        )

        order = generate_precedence(["C", "A", "B"], 3, tmp_path / "p.txt")

        # A draws 5, B collides on 5 and redraws 3, C draws 7.
        assert order == ["B", "A", "C"]
