"""Research progression queries over a validated tech graph."""

import heapq
import logging
from collections.abc import Iterable

from techtree.graph.tech_manager import TechManager
from techtree.models import PathStatus, ResearchPath, Tech

logger = logging.getLogger(__name__)


def _cost_key(tech: Tech) -> tuple[float, str]:
    return (tech.research_cost, tech.name)


class ProgressionResolver:
    """
    Answers "what next" questions for a set of known techs.

    The resolver keeps no state between calls. Every query takes the caller's
    known tech names, reads them without modifying them, and ignores names the
    manager does not know.
    """

    def __init__(self, manager: TechManager):
        self.manager = manager

    def frontier(self, known: Iterable[str]) -> list[Tech]:
        """All techs that can be researched right now, sorted by name."""
        known = set(known)
        return [
            tech
            for tech in self.manager
            if tech.researchable
            and tech.name not in known
            and tech.prerequisites <= known
        ]

    def cheapest_frontier(self, known: Iterable[str]) -> Tech | None:
        """The cheapest tech that can be researched right now."""
        return min(self.frontier(known), key=_cost_key, default=None)

    def frontier_towards(self, known: Iterable[str], goal: str) -> ResearchPath:
        """Techs that can be researched right now and progress toward goal."""
        known = set(known)
        result, required = self._required_techs(known, goal)
        if result is not None:
            return result

        techs = [
            self.manager.lookup(name)
            for name in sorted(required)
            if not self.manager.lookup(name).prerequisites & required
        ]
        return ResearchPath(goal, PathStatus.FOUND, tuple(techs))

    def cheapest_frontier_towards(self, known: Iterable[str], goal: str) -> Tech | None:
        return min(self.frontier_towards(known, goal).techs, key=_cost_key, default=None)

    def path_towards(self, known: Iterable[str], goal: str) -> ResearchPath:
        """
        Every tech still needed to research goal, in a valid research order.

        Techs are grouped by the length of the longest chain of still-required
        prerequisites below them; within a group cheaper techs come first,
        then by name.
        """
        known = set(known)
        result, required = self._required_techs(known, goal)
        if result is not None:
            return result

        depth: dict[str, int] = {}
        for name in sorted(required, key=lambda n: (len(self.manager.closure(n)), n)):
            prereqs = self.manager.lookup(name).prerequisites & required
            depth[name] = 1 + max((depth[p] for p in prereqs), default=-1)

        techs = sorted(
            (self.manager.lookup(name) for name in required),
            key=lambda tech: (depth[tech.name], *_cost_key(tech)),
        )
        return ResearchPath(goal, PathStatus.FOUND, tuple(techs))

    def cheapest_path_towards(self, known: Iterable[str], goal: str) -> ResearchPath:
        """
        Every tech still needed to research goal, cheapest available first.

        At each step the cheapest tech whose prerequisites are all satisfied
        is taken next, as a player spending points turn by turn would.
        """
        known = set(known)
        result, required = self._required_techs(known, goal)
        if result is not None:
            return result

        waiting = {
            name: len(self.manager.lookup(name).prerequisites & required)
            for name in required
        }
        ready = [
            _cost_key(self.manager.lookup(name))
            for name, count in waiting.items()
            if count == 0
        ]
        heapq.heapify(ready)

        techs: list[Tech] = []
        while ready:
            _, name = heapq.heappop(ready)
            tech = self.manager.lookup(name)
            techs.append(tech)
            for child in tech.unlocked_techs & required:
                waiting[child] -= 1
                if waiting[child] == 0:
                    heapq.heappush(ready, _cost_key(self.manager.lookup(child)))

        return ResearchPath(goal, PathStatus.FOUND, tuple(techs))

    def _required_techs(
        self, known: set[str], goal: str
    ) -> tuple[ResearchPath | None, set[str]]:
        """
        Collect the unknown techs goal depends on, goal included.

        Walks back from goal and stops at known techs, whose own
        prerequisites are therefore never required. Returns a finished result
        instead when the goal is unknown, already known, or unreachable.
        """
        if goal not in self.manager:
            logger.debug("No tech named %s", goal)
            return ResearchPath(goal, PathStatus.UNKNOWN_TECH), set()
        if goal in known:
            return ResearchPath(goal, PathStatus.FOUND), set()

        required: set[str] = set()
        pending = [goal]
        while pending:
            name = pending.pop()
            if name in required or name in known:
                continue
            required.add(name)
            pending.extend(self.manager.lookup(name).prerequisites)

        blocked = sorted(
            name for name in required if not self.manager.lookup(name).researchable
        )
        if blocked:
            logger.debug("%s is blocked by unresearchable techs: %s", goal, blocked)
            return (
                ResearchPath(goal, PathStatus.UNREACHABLE, blocked_by=tuple(blocked)),
                required,
            )
        return None, required
