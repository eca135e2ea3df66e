"""Dependency graph over cell names with dual adjacency indexes."""

from __future__ import annotations

from collections.abc import Iterable

from sheetcalc._errors import ArgumentNullError


class DependencyGraph:
    """A set of ordered pairs ``(s, t)`` meaning "t's formula reads s".

    ``t`` is a *dependent* of ``s`` and ``s`` is a *dependee* of ``t``.
    Both directions are indexed, so dependent and dependee queries are
    dictionary lookups.  Each ordered pair is stored at most once.
    """

    __slots__ = ("_dependents", "_dependees", "_size")

    def __init__(self) -> None:
        # s -> cells whose formulas read s
        self._dependents: dict[str, set[str]] = {}
        # t -> cells that t's formula reads
        self._dependees: dict[str, set[str]] = {}
        self._size = 0

    @property
    def size(self) -> int:
        """Number of distinct ordered pairs in the graph."""
        return self._size

    def __len__(self) -> int:
        return self._size

    def __contains__(self, edge: object) -> bool:
        if not isinstance(edge, tuple) or len(edge) != 2:
            return False
        s, t = edge
        return t in self._dependents.get(s, ())

    def __repr__(self) -> str:
        return f"<DependencyGraph size={self._size}>"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def has_dependents(self, s: str) -> bool:
        _require(s)
        return s in self._dependents

    def has_dependees(self, s: str) -> bool:
        _require(s)
        return s in self._dependees

    def dependents(self, s: str) -> set[str]:
        """All ``t`` such that ``(s, t)`` is in the graph."""
        _require(s)
        return set(self._dependents.get(s, ()))

    def dependees(self, t: str) -> set[str]:
        """All ``s`` such that ``(s, t)`` is in the graph."""
        _require(t)
        return set(self._dependees.get(t, ()))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_dependency(self, s: str, t: str) -> None:
        """Add ``(s, t)``; does nothing if the pair is already present."""
        _require(s, t)
        targets = self._dependents.setdefault(s, set())
        if t not in targets:
            targets.add(t)
            self._dependees.setdefault(t, set()).add(s)
            self._size += 1
        assert self._check_pair(s, t)

    def remove_dependency(self, s: str, t: str) -> None:
        """Remove ``(s, t)``; does nothing if the pair is absent."""
        _require(s, t)
        targets = self._dependents.get(s)
        if targets is not None and t in targets:
            _discard(self._dependents, s, t)
            _discard(self._dependees, t, s)
            self._size -= 1
        assert self._check_pair(s, t)

    def replace_dependents(self, s: str, new_dependents: Iterable[str]) -> None:
        """Replace every ``(s, *)`` pair with ``(s, t)`` for each new ``t``."""
        _require(s, new_dependents)
        new_dependents = list(new_dependents)
        for t in self.dependents(s):
            self.remove_dependency(s, t)
        for t in new_dependents:
            self.add_dependency(s, t)

    def replace_dependees(self, t: str, new_dependees: Iterable[str]) -> None:
        """Replace every ``(*, t)`` pair with ``(s, t)`` for each new ``s``."""
        _require(t, new_dependees)
        new_dependees = list(new_dependees)
        for s in self.dependees(t):
            self.remove_dependency(s, t)
        for s in new_dependees:
            self.add_dependency(s, t)

    def copy(self) -> DependencyGraph:
        """Return an independent graph with the same pairs."""
        other = DependencyGraph()
        other._dependents = {s: set(ts) for s, ts in self._dependents.items()}
        other._dependees = {t: set(ss) for t, ss in self._dependees.items()}
        other._size = self._size
        return other

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def _check_pair(self, s: str, t: str) -> bool:
        """Both indexes agree on ``(s, t)`` and keep no empty set for s or t."""
        forward = t in self._dependents.get(s, ())
        backward = s in self._dependees.get(t, ())
        if forward != backward:
            raise AssertionError(f"dependency indexes disagree on ({s!r}, {t!r})")
        if self._dependents.get(s) == set() or self._dependees.get(t) == set():
            raise AssertionError("empty adjacency set retained")
        return True

    def check_invariants(self) -> bool:
        """Both indexes mirror each other and hold no empty sets.

        Walks the whole graph; mutations only check the pair they touch.
        """
        forward = {(s, t) for s, ts in self._dependents.items() for t in ts}
        backward = {(s, t) for t, ss in self._dependees.items() for s in ss}
        if forward != backward:
            raise AssertionError("dependency indexes are out of sync")
        if len(forward) != self._size:
            raise AssertionError(
                f"pair count {self._size} != stored pairs {len(forward)}"
            )
        if any(not ts for ts in self._dependents.values()) or any(
            not ss for ss in self._dependees.values()
        ):
            raise AssertionError("empty adjacency set retained")
        return True


def _require(*args: object) -> None:
    if any(arg is None for arg in args):
        raise ArgumentNullError("Argument cannot be None")


def _discard(index: dict[str, set[str]], key: str, value: str) -> None:
    """Drop *value* under *key*, deleting the key once its set is empty."""
    members = index[key]
    members.discard(value)
    if not members:
        del index[key]
