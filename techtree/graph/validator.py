"""
Whole-graph validation of tech prerequisites.

Each ``find_*`` check returns the first violation it finds as an error value,
or ``None`` when the graph satisfies it. ``validate`` runs the checks in
dependency order (a missing prerequisite makes cycle detection meaningless,
and closures need an acyclic graph) and raises the first error.
"""

import heapq
import logging
from collections.abc import Iterable, Mapping

from techtree.graph.errors import (
    CyclicDependencyError,
    DuplicateTechError,
    RedundantDependencyError,
    TechGraphError,
    UnknownCategoryError,
    UnknownPrerequisiteError,
)
from techtree.models import Tech

logger = logging.getLogger(__name__)

_WHITE, _GRAY, _BLACK = 0, 1, 2


def find_duplicate_tech(techs: Iterable[Tech]) -> DuplicateTechError | None:
    seen: set[str] = set()
    for tech in techs:
        if tech.name in seen:
            return DuplicateTechError(tech.name)
        seen.add(tech.name)
    return None


def find_unknown_category(
    techs: Mapping[str, Tech], categories: Iterable[str]
) -> UnknownCategoryError | None:
    known = set(categories)
    for name in sorted(techs):
        if techs[name].category not in known:
            return UnknownCategoryError(name, techs[name].category)
    return None


def find_unknown_prerequisite(
    techs: Mapping[str, Tech],
) -> UnknownPrerequisiteError | None:
    """Report the first tech requiring a tech that does not exist."""
    errors = [
        UnknownPrerequisiteError(name, prereq)
        for name in sorted(techs)
        for prereq in sorted(techs[name].prerequisites)
        if prereq not in techs
    ]
    for error in errors:
        logger.error("%s", error)
    return errors[0] if errors else None


def derive_unlocked_techs(techs: Mapping[str, Tech]) -> dict[str, frozenset[str]]:
    """Map every tech to the names of the techs listing it as a prerequisite."""
    unlocked: dict[str, set[str]] = {name: set() for name in techs}
    for name, tech in techs.items():
        for prereq in tech.prerequisites:
            if prereq in unlocked:
                unlocked[prereq].add(name)
    return {name: frozenset(names) for name, names in unlocked.items()}


def find_dependency_cycle(techs: Mapping[str, Tech]) -> CyclicDependencyError | None:
    """
    Depth-first search along prerequisite -> dependent edges.

    Techs currently on the search path are gray; reaching a gray tech again
    closes a cycle, which is returned from that tech back to itself.
    """
    dependents = derive_unlocked_techs(techs)
    colour = dict.fromkeys(techs, _WHITE)

    for root in sorted(techs):
        if colour[root] != _WHITE:
            continue

        colour[root] = _GRAY
        path = [root]
        stack = [iter(sorted(dependents[root]))]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                colour[path.pop()] = _BLACK
                continue

            if colour[child] == _GRAY:
                start = path.index(child)
                return CyclicDependencyError((*path[start:], child))
            if colour[child] == _WHITE:
                colour[child] = _GRAY
                path.append(child)
                stack.append(iter(sorted(dependents[child])))

    return None


def topological_order(techs: Mapping[str, Tech]) -> list[str]:
    """
    Order techs so every tech follows all of its prerequisites.

    Ties are broken by name. The graph must be acyclic and closed over its
    prerequisites.
    """
    dependents = derive_unlocked_techs(techs)
    waiting = {name: len(tech.prerequisites) for name, tech in techs.items()}
    ready = [name for name, count in waiting.items() if count == 0]
    heapq.heapify(ready)

    order: list[str] = []
    while ready:
        name = heapq.heappop(ready)
        order.append(name)
        for child in dependents[name]:
            waiting[child] -= 1
            if waiting[child] == 0:
                heapq.heappush(ready, child)

    if len(order) != len(techs):
        raise ValueError("Cannot order a tech graph that contains a cycle")
    return order


def prerequisite_closures(
    techs: Mapping[str, Tech], order: list[str] | None = None
) -> dict[str, frozenset[str]]:
    """Compute every tech's transitive prerequisites, each exactly once."""
    if order is None:
        order = topological_order(techs)

    closures: dict[str, frozenset[str]] = {}
    for name in order:
        closure: set[str] = set()
        for prereq in techs[name].prerequisites:
            closure.add(prereq)
            closure |= closures[prereq]
        closures[name] = frozenset(closure)
    return closures


def find_redundant_dependency(
    techs: Mapping[str, Tech], closures: Mapping[str, frozenset[str]]
) -> RedundantDependencyError | None:
    """
    Find a direct prerequisite that is also implied by another one.

    Every pair of distinct direct prerequisites of a tech is compared, so
    ``A --> C`` is redundant whenever some other direct prerequisite ``B`` of
    ``C`` already has ``A`` among its own transitive prerequisites.
    """
    for name in sorted(techs):
        prereqs = sorted(techs[name].prerequisites)
        for prereq in prereqs:
            for other in prereqs:
                if other != prereq and prereq in closures[other]:
                    return RedundantDependencyError(prereq, name, other)
    return None


def validate(
    techs: Iterable[Tech], categories: Iterable[str]
) -> dict[str, frozenset[str]]:
    """
    Validate a complete batch of techs.

    Returns the transitive prerequisite closure of every tech, or raises the
    first ``TechGraphError`` found.
    """
    techs = list(techs)
    error: TechGraphError | None = find_duplicate_tech(techs)
    if error is not None:
        raise error

    by_name = {tech.name: tech for tech in techs}
    error = find_unknown_category(by_name, categories)
    if error is None:
        error = find_unknown_prerequisite(by_name)
    if error is None:
        error = find_dependency_cycle(by_name)
    if error is not None:
        raise error

    closures = prerequisite_closures(by_name)
    error = find_redundant_dependency(by_name, closures)
    if error is not None:
        raise error

    logger.debug("Validated %d techs", len(by_name))
    return closures
