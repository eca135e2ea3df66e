"""Recalculation order: which cells to re-evaluate after a change, and when."""

from __future__ import annotations

from collections.abc import Iterator

from sheetcalc._errors import ArgumentNullError, CircularDependencyError
from sheetcalc.calc._graph import DependencyGraph


def recalculation_order(graph: DependencyGraph, *names: str) -> list[str]:
    """Return *names* plus every cell that depends on them, in evaluation order.

    A cell never appears before a cell whose value it reads, and each name
    appears exactly once.  Walks dependents depth-first; reaching a cell
    that is still on the current path raises ``CircularDependencyError``.

    Example: if B1 reads A1 and C1 reads B1 and A1, then
    ``recalculation_order(graph, "A1") == ["A1", "B1", "C1"]``.
    """
    if any(name is None for name in names):
        raise ArgumentNullError("Cell name cannot be None")

    finished: set[str] = set()
    on_path: set[str] = set()
    # Built in post-order; reversed at the end.
    order: list[str] = []

    for start in names:
        if start in finished:
            continue
        on_path.add(start)
        stack: list[tuple[str, Iterator[str]]] = [
            (start, iter(sorted(graph.dependents(start))))
        ]
        while stack:
            cell, pending = stack[-1]
            for dep in pending:
                if dep in finished:
                    continue
                if dep in on_path:
                    raise CircularDependencyError(dep)
                on_path.add(dep)
                stack.append((dep, iter(sorted(graph.dependents(dep)))))
                break
            else:
                stack.pop()
                on_path.discard(cell)
                finished.add(cell)
                order.append(cell)

    order.reverse()
    return order
