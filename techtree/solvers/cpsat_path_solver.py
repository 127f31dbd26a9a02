"""CP-SAT solver for research order optimization using OR-Tools."""

import logging
from collections.abc import Iterable

from ortools.sat.python import cp_model

from techtree.graph.tech_manager import TechManager
from techtree.models import PathStatus, ResearchPath
from techtree.solvers.progression import ProgressionResolver

logger = logging.getLogger(__name__)


class CPSATPathSolver:
    """OR-Tools CP-SAT solver for the research order toward a goal tech."""

    def __init__(
        self,
        manager: TechManager,
        known: Iterable[str],
        goal: str,
        max_time_seconds: float = 10.0,
        cost_scale: int = 100,  # research points are scaled to integers
    ):
        self.manager = manager
        self.known = frozenset(known)
        self.goal = goal
        self.max_time_seconds = max_time_seconds
        self.cost_scale = cost_scale
        self.model = cp_model.CpModel()

    def solve(self) -> ResearchPath | None:
        """
        Order the techs needed for the goal on a single research queue.

        Key modeling decisions:
        - Each tech is an interval as long as its scaled research cost
        - Intervals never overlap (one research queue)
        - A tech starts only after its required prerequisites end
        - Objective is the sum of completion times, so techs become
          available as early as possible on average
        - The greedy cheapest-first order is given as a hint
        """
        greedy = ProgressionResolver(self.manager).cheapest_path_towards(
            self.known, self.goal
        )
        if not greedy.found or not greedy.techs:
            return greedy

        self.model = cp_model.CpModel()
        required = {tech.name for tech in greedy.techs}
        horizon = 0
        task_vars = {}

        for tech in greedy.techs:
            duration = int(round(tech.research_cost * self.cost_scale))
            horizon += duration
            task_vars[tech.name] = {"duration": duration}

        for tech in greedy.techs:
            task = task_vars[tech.name]
            task["start"] = self.model.NewIntVar(0, horizon, f"start_{tech.name}")
            task["end"] = self.model.NewIntVar(0, horizon, f"end_{tech.name}")
            task["interval"] = self.model.NewIntervalVar(
                task["start"], task["duration"], task["end"], f"interval_{tech.name}"
            )

        # Prerequisites must finish first
        for tech in greedy.techs:
            for prereq in tech.prerequisites & required:
                self.model.Add(task_vars[tech.name]["start"] >= task_vars[prereq]["end"])

        self.model.AddNoOverlap([task["interval"] for task in task_vars.values()])
        self.model.Minimize(sum(task["end"] for task in task_vars.values()))

        elapsed = 0
        for tech in greedy.techs:
            task = task_vars[tech.name]
            self.model.AddHint(task["start"], elapsed)
            elapsed += task["duration"]
            self.model.AddHint(task["end"], elapsed)

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.max_time_seconds
        solver.parameters.num_workers = 1
        solver.parameters.random_seed = 0

        status = solver.Solve(self.model)

        if status not in [cp_model.OPTIMAL, cp_model.FEASIBLE]:
            logger.warning("No research order found for %s", self.goal)
            return None

        if status != cp_model.OPTIMAL:
            logger.info("Research order for %s may not be optimal", self.goal)

        # Zero-cost techs share start times with their dependents
        ordered = sorted(
            greedy.techs,
            key=lambda tech: (
                solver.Value(task_vars[tech.name]["start"]),
                len(self.manager.closure(tech.name)),
                tech.name,
            ),
        )
        path = ResearchPath(self.goal, PathStatus.FOUND, tuple(ordered))

        # Costs too small for the integer scale all collapse to zero length
        if path.completion_cost > greedy.completion_cost:
            logger.debug("Keeping greedy research order for %s", self.goal)
            return greedy
        return path
