"""Technology data models."""

import math
from dataclasses import dataclass, field
from enum import Enum


class TechType(Enum):
    """Kind of tech; informational only."""

    THEORY = "theory"
    APPLICATION = "application"
    REFINEMENT = "refinement"


class UnlockableItemType(Enum):
    """Kinds of game content a tech can unlock."""

    BUILDING = "building"
    SHIP_PART = "ship_part"
    SHIP_HULL = "ship_hull"
    SHIP_DESIGN = "ship_design"
    TECH = "tech"


_ITEM_TYPE_NAMES = {
    UnlockableItemType.BUILDING: "Building",
    UnlockableItemType.SHIP_PART: "ShipPart",
    UnlockableItemType.SHIP_HULL: "ShipHull",
    UnlockableItemType.SHIP_DESIGN: "ShipDesign",
    UnlockableItemType.TECH: "Tech",
}


@dataclass(frozen=True)
class ItemSpec:
    """A single item of game content unlocked by a tech, e.g. a building."""

    type: UnlockableItemType
    name: str

    def dump(self) -> str:
        return f'Item type = {_ITEM_TYPE_NAMES[self.type]} name = "{self.name}"'


@dataclass(frozen=True)
class Tech:
    """
    Represents a technology that can be researched.

    ``unlocked_techs`` is derived by the tech manager from the prerequisites
    of every other tech; loaders leave it empty.
    """

    name: str
    category: str
    type: TechType = TechType.THEORY
    research_cost: float = 0.0
    research_turns: int = 1
    researchable: bool = True
    prerequisites: frozenset[str] = frozenset()
    unlocked_items: tuple[ItemSpec, ...] = ()
    effects: tuple[str, ...] = ()  # opaque effect group identifiers
    description: str = ""
    short_description: str = ""
    graphic: str = ""
    unlocked_techs: frozenset[str] = field(default=frozenset(), compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Tech name must not be empty")
        if not math.isfinite(self.research_cost) or self.research_cost < 0:
            raise ValueError(
                f"Tech {self.name} has invalid research cost: {self.research_cost}"
            )
        if (
            isinstance(self.research_turns, bool)
            or not isinstance(self.research_turns, int)
            or self.research_turns < 1
        ):
            raise ValueError(
                f"Tech {self.name} has invalid research turns: {self.research_turns}"
            )

        # Accept any iterable of names for the set-valued fields
        object.__setattr__(self, "prerequisites", frozenset(self.prerequisites))
        object.__setattr__(self, "unlocked_techs", frozenset(self.unlocked_techs))
        object.__setattr__(self, "unlocked_items", tuple(self.unlocked_items))
        object.__setattr__(self, "effects", tuple(self.effects))

    @property
    def per_turn_cost(self) -> float:
        """Maximum research points that may be spent on this tech per turn."""
        return self.research_cost / self.research_turns

    @property
    def research_time(self) -> int:
        """Minimum number of turns to research, even with unlimited points."""
        return self.research_turns

    def dump(self) -> str:
        """Return the content-file representation of this tech."""
        lines = [
            "Tech",
            f'    name = "{self.name}"',
            f'    description = "{self.description}"',
            f'    short_description = "{self.short_description}"',
            f'    category = "{self.category}"',
            f"    researchcost = {self.research_cost:g}",
            f"    researchturns = {self.research_turns}",
        ]
        if not self.researchable:
            lines.append("    Unresearchable")

        prereqs = sorted(self.prerequisites)
        if len(prereqs) == 1:
            lines.append(f'    prerequisites = "{prereqs[0]}"')
        elif prereqs:
            lines.append("    prerequisites = [")
            lines.extend(f'        "{name}"' for name in prereqs)
            lines.append("    ]")

        if len(self.unlocked_items) == 1:
            lines.append(f"    unlock = {self.unlocked_items[0].dump()}")
        elif self.unlocked_items:
            lines.append("    unlock = [")
            lines.extend(f"        {item.dump()}" for item in self.unlocked_items)
            lines.append("    ]")

        if self.graphic:
            lines.append(f'    graphic = "{self.graphic}"')
        return "\n".join(lines) + "\n"
