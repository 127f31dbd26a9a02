"""Errors raised when a tech graph fails validation."""


class TechGraphError(Exception):
    """Base class for tech graph construction failures."""

    invariant = "valid tech graph"


class DuplicateTechError(TechGraphError):
    invariant = "unique tech names"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Tech "{name}" is defined more than once')


class UnknownCategoryError(TechGraphError):
    invariant = "known categories"

    def __init__(self, tech: str, category: str):
        self.tech = tech
        self.category = category
        super().__init__(f'Tech "{tech}" belongs to unknown category "{category}"')


class UnknownPrerequisiteError(TechGraphError):
    invariant = "known prerequisites"

    def __init__(self, tech: str, prerequisite: str):
        self.tech = tech
        self.prerequisite = prerequisite
        super().__init__(
            f'Tech "{tech}" requires a missing or malformed tech "{prerequisite}" '
            "as its prerequisite"
        )


class CyclicDependencyError(TechGraphError):
    invariant = "acyclic prerequisites"

    def __init__(self, cycle: tuple[str, ...]):
        self.cycle = tuple(cycle)
        super().__init__(
            "Tech dependency cycle found (A <-- B means A is a prerequisite of B): "
            + " <-- ".join(f'"{name}"' for name in self.cycle)
        )


class RedundantDependencyError(TechGraphError):
    invariant = "no redundant prerequisites"

    def __init__(self, prerequisite: str, dependent: str, via: str):
        self.prerequisite = prerequisite
        self.dependent = dependent
        self.via = via
        super().__init__(
            f'Redundant dependency found (A <-- B means A is a prerequisite of B): '
            f'"{prerequisite}" <-- "{dependent}" is implied by '
            f'"{prerequisite}" <-- ... <-- "{via}" <-- "{dependent}"'
        )

    @property
    def edge(self) -> tuple[str, str]:
        return (self.prerequisite, self.dependent)
