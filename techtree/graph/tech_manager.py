"""Index of all techs, by name and by category."""

import dataclasses
import logging
from collections.abc import Iterable, Iterator

from techtree.graph import validator
from techtree.models import Tech, TechCategory

logger = logging.getLogger(__name__)


class TechManager:
    """
    Holds all techs. Techs may be looked up by name and by category.

    Construction validates the whole batch and either succeeds completely or
    raises a ``TechGraphError``; a manager is never left partially built.
    After construction nothing is mutated, so a manager can be shared freely
    between readers.
    """

    def __init__(
        self,
        techs: Iterable[Tech],
        categories: Iterable[TechCategory],
    ):
        """Validate and index techs and categories."""
        techs = list(techs)
        categories = list(categories)

        self._categories: dict[str, TechCategory] = {}
        for category in categories:
            if category.name in self._categories:
                raise ValueError(f"Duplicate tech category: {category.name}")
            self._categories[category.name] = category

        self._closures = validator.validate(techs, self._categories)

        by_name = {tech.name: tech for tech in techs}
        unlocked = validator.derive_unlocked_techs(by_name)
        self._techs: dict[str, Tech] = {
            name: dataclasses.replace(by_name[name], unlocked_techs=unlocked[name])
            for name in sorted(by_name)
        }

        self._by_category: dict[str, list[str]] = {name: [] for name in self._categories}
        for name, tech in self._techs.items():
            self._by_category[tech.category].append(name)

        logger.info(
            "Loaded %d techs in %d categories", len(self._techs), len(self._categories)
        )

    def __len__(self) -> int:
        return len(self._techs)

    def __contains__(self, name: object) -> bool:
        return name in self._techs

    def __iter__(self) -> Iterator[Tech]:
        """Iterate over all techs in name order."""
        return iter(self._techs.values())

    def lookup(self, name: str) -> Tech | None:
        """Get the tech called name, or None if there is no such tech."""
        return self._techs.get(name)

    def get_category(self, name: str) -> TechCategory | None:
        return self._categories.get(name)

    def category_names(self) -> list[str]:
        return sorted(self._categories)

    def all_names(self) -> list[str]:
        return list(self._techs)

    def names_in_category(self, category: str) -> list[str]:
        return list(self._by_category.get(category, []))

    def techs_in_category(self, category: str) -> list[Tech]:
        return [self._techs[name] for name in self._by_category.get(category, [])]

    def closure(self, name: str) -> frozenset[str]:
        """Names of every direct and indirect prerequisite of a tech."""
        return self._closures.get(name, frozenset())

    def recursive_prereqs(self, name: str) -> list[str]:
        """
        Names of every prerequisite of a tech, recursively.

        Ordered by research cost, then name, so cheaper foundations come first.
        """
        return sorted(
            self.closure(name),
            key=lambda prereq: (self._techs[prereq].research_cost, prereq),
        )

    def recursive_unlocks(self, name: str) -> list[str]:
        """Names of every tech that directly or indirectly requires a tech."""
        if name not in self._techs:
            return []

        found: set[str] = set()
        pending = [name]
        while pending:
            for child in self._techs[pending.pop()].unlocked_techs:
                if child not in found:
                    found.add(child)
                    pending.append(child)
        return sorted(found)
