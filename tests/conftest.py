from __future__ import annotations

from pathlib import Path

import pytest

from techtree.graph.tech_manager import TechManager
from techtree.models import Tech, TechCategory
from techtree.solvers.progression import ProgressionResolver
from techtree.utils.tech_loader import load_tech_manager

DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "techs.json"

CATEGORIES = [TechCategory("GROWTH_CATEGORY"), TechCategory("LEARNING_CATEGORY")]


def make_tech(name, prerequisites=(), cost=10.0, **kwargs) -> Tech:
    kwargs.setdefault("category", "GROWTH_CATEGORY")
    return Tech(name=name, prerequisites=frozenset(prerequisites), research_cost=cost, **kwargs)


def build(*techs: Tech) -> TechManager:
    return TechManager(techs, CATEGORIES)


@pytest.fixture
def growth_manager() -> TechManager:
    return build(
        make_tech("Growth", cost=10),
        make_tech("Biology", ["Growth"], cost=20),
        make_tech("Genetics", ["Biology"], cost=30),
    )


@pytest.fixture
def sample_manager() -> TechManager:
    return load_tech_manager(DATA_PATH)


@pytest.fixture
def sample_resolver(sample_manager) -> ProgressionResolver:
    return ProgressionResolver(sample_manager)
