"""Tests for sheetcalc.calc dependency graph."""

from __future__ import annotations

import pytest
from sheetcalc._errors import ArgumentNullError
from sheetcalc.calc._graph import DependencyGraph


class TestSize:
    def test_empty(self) -> None:
        g = DependencyGraph()
        assert g.size == 0
        assert len(g) == 0

    def test_duplicate_add_counts_once(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.add_dependency("a", "b")
        assert g.size == 1

    def test_reverse_pair_is_distinct(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.add_dependency("b", "a")
        assert g.size == 2

    def test_shared_endpoints_count_each_pair(self) -> None:
        """a->b and c->d exist; a->d is still a new pair."""
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.add_dependency("c", "d")
        g.add_dependency("a", "d")
        assert g.size == 3

    def test_remove_twice_is_idempotent(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.add_dependency("a", "c")
        g.remove_dependency("a", "b")
        g.remove_dependency("a", "b")
        assert g.size == 1

    def test_remove_absent_pair_with_known_endpoints(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.add_dependency("c", "d")
        g.remove_dependency("a", "d")
        assert g.size == 2
        assert ("a", "b") in g
        assert ("c", "d") in g

    def test_many_pairs(self) -> None:
        g = DependencyGraph()
        for i in range(100):
            for j in range(5):
                g.add_dependency(f"s{i}", f"t{j}")
        assert g.size == 500
        for i in range(0, 100, 2):
            for j in range(5):
                g.remove_dependency(f"s{i}", f"t{j}")
        assert g.size == 250
        assert g.check_invariants()


class TestQueries:
    def test_dependents_and_dependees(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.add_dependency("a", "c")
        g.add_dependency("d", "c")
        assert g.dependents("a") == {"b", "c"}
        assert g.dependees("c") == {"a", "d"}
        assert g.dependees("a") == set()
        assert g.dependents("zzz") == set()

    def test_has_dependents_and_dependees(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        assert g.has_dependents("a")
        assert not g.has_dependees("a")
        assert g.has_dependees("b")
        assert not g.has_dependents("b")

    def test_last_edge_removal_drops_key(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.remove_dependency("a", "b")
        assert not g.has_dependents("a")
        assert not g.has_dependees("b")

    def test_empty_string_is_a_normal_key(self) -> None:
        g = DependencyGraph()
        assert not g.has_dependents("")
        g.add_dependency("", "x")
        assert g.has_dependents("")
        assert g.dependees("x") == {""}

    def test_returned_sets_are_copies(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.dependents("a").add("zzz")
        assert g.dependents("a") == {"b"}

    @pytest.mark.parametrize(
        "method", ["has_dependents", "has_dependees", "dependents", "dependees"]
    )
    def test_none_rejected(self, method: str) -> None:
        g = DependencyGraph()
        with pytest.raises(ArgumentNullError):
            getattr(g, method)(None)

    def test_none_rejected_on_mutation(self) -> None:
        g = DependencyGraph()
        with pytest.raises(ArgumentNullError):
            g.add_dependency("a", None)
        with pytest.raises(ArgumentNullError):
            g.remove_dependency(None, "a")
        with pytest.raises(ArgumentNullError):
            g.replace_dependents("a", None)
        with pytest.raises(ArgumentNullError):
            g.replace_dependees(None, [])

    def test_argument_null_is_a_type_error(self) -> None:
        g = DependencyGraph()
        with pytest.raises(TypeError):
            g.dependents(None)

    def test_contains_edge(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        assert ("a", "b") in g
        assert ("b", "a") not in g
        assert "a" not in g


class TestReplace:
    def test_replace_dependents(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.add_dependency("a", "c")
        g.replace_dependents("a", ["c", "d", "e"])
        assert g.dependents("a") == {"c", "d", "e"}
        assert g.dependees("b") == set()
        assert g.size == 3

    def test_replace_dependees(self) -> None:
        g = DependencyGraph()
        g.add_dependency("x", "t")
        g.add_dependency("y", "t")
        g.add_dependency("x", "u")
        g.replace_dependees("t", {"z"})
        assert g.dependees("t") == {"z"}
        assert g.dependents("x") == {"u"}
        assert not g.has_dependents("y")
        assert g.size == 2

    def test_replace_with_empty(self) -> None:
        g = DependencyGraph()
        g.add_dependency("x", "t")
        g.replace_dependees("t", [])
        assert g.size == 0
        assert not g.has_dependees("t")
        assert not g.has_dependents("x")

    def test_replace_accepts_generator(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g.replace_dependents("a", (name for name in ["c", "d"]))
        assert g.dependents("a") == {"c", "d"}

    def test_replace_with_duplicates(self) -> None:
        g = DependencyGraph()
        g.replace_dependents("a", ["b", "b", "c"])
        assert g.size == 2


class TestCopy:
    def test_copy_is_independent(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        h = g.copy()
        h.add_dependency("a", "c")
        g.remove_dependency("a", "b")
        assert g.size == 0
        assert h.dependents("a") == {"b", "c"}
        assert h.check_invariants()


class TestInvariants:
    def test_detects_out_of_sync_indexes(self) -> None:
        g = DependencyGraph()
        g.add_dependency("a", "b")
        g._dependees["b"].discard("a")  # noqa: SLF001
        with pytest.raises(AssertionError):
            g.check_invariants()
