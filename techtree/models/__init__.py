"""Data models for the tech tree."""

from dataclasses import dataclass
from enum import Enum

from techtree.models.technology import ItemSpec, Tech, TechType, UnlockableItemType

__all__ = [
    "ItemSpec",
    "PathStatus",
    "ResearchPath",
    "Tech",
    "TechCategory",
    "TechType",
    "UnlockableItemType",
]


@dataclass(frozen=True)
class TechCategory:
    """A named grouping of techs, used for classification and display."""

    name: str
    graphic: str = ""
    colour: tuple[int, int, int, int] = (255, 255, 255, 255)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Tech category name must not be empty")
        if len(self.colour) != 4 or not all(0 <= c <= 255 for c in self.colour):
            raise ValueError(f"Invalid colour for category {self.name}: {self.colour}")


class PathStatus(Enum):
    """Outcome of a goal-directed query."""

    FOUND = "found"
    UNKNOWN_TECH = "unknown_tech"  # no such tech
    UNREACHABLE = "unreachable"  # can never be researched


@dataclass(frozen=True)
class ResearchPath:
    """Ordered techs still to research before a goal, plus the query status."""

    goal: str
    status: PathStatus
    techs: tuple[Tech, ...] = ()
    blocked_by: tuple[str, ...] = ()  # non-researchable techs in the way

    @property
    def found(self) -> bool:
        return self.status is PathStatus.FOUND

    @property
    def names(self) -> list[str]:
        return [tech.name for tech in self.techs]

    @property
    def total_cost(self) -> float:
        return sum(tech.research_cost for tech in self.techs)

    @property
    def min_turns(self) -> int:
        """Turns needed if every tech is researched one after another."""
        return sum(tech.research_turns for tech in self.techs)

    @property
    def completion_cost(self) -> float:
        """
        Sum of the cumulative cost at which each tech completes.

        Lower values mean techs become available earlier on average when the
        sequence is researched on a single queue.
        """
        spent = 0.0
        total = 0.0
        for tech in self.techs:
            spent += tech.research_cost
            total += spent
        return total

    def __str__(self) -> str:
        if not self.found:
            return f"{self.goal}: {self.status.value}"
        return " → ".join(self.names) if self.techs else f"{self.goal}: known"
