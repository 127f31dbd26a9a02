from __future__ import annotations

import pytest

from conftest import build, make_tech
from techtree.models import PathStatus
from techtree.solvers.progression import ProgressionResolver

KNOWN_SETS = [
    set(),
    {"LRN_ALGO_ELEGANCE"},
    {"GRO_GENETIC_ENG", "GRO_PLANET_ECOL", "PRO_ROBOTIC_PROD"},
    {"LRN_ALGO_ELEGANCE", "LRN_PHYS_BRAIN", "LRN_NASCENT_AI", "PRO_ROBOTIC_PROD"},
    {"LRN_PHYS_BRAIN", "NOT_A_TECH"},
]


def _names(techs):
    return [tech.name for tech in techs]


def test_growth_scenario(growth_manager):
    resolver = ProgressionResolver(growth_manager)

    assert _names(resolver.frontier(set())) == ["Growth"]
    assert _names(resolver.frontier({"Growth"})) == ["Biology"]

    path = resolver.path_towards(set(), "Genetics")
    assert path.status is PathStatus.FOUND
    assert path.names == ["Growth", "Biology", "Genetics"]


def test_empty_known_frontier_is_every_root(sample_resolver):
    assert _names(sample_resolver.frontier([])) == [
        "GRO_GENETIC_ENG",
        "GRO_PLANET_ECOL",
        "LRN_ALGO_ELEGANCE",
        "PRO_ROBOTIC_PROD",
    ]


@pytest.mark.parametrize("known", KNOWN_SETS)
def test_frontier_only_has_unknown_satisfied_researchable_techs(sample_resolver, known):
    for tech in sample_resolver.frontier(known):
        assert tech.name not in known
        assert tech.prerequisites <= known
        assert tech.researchable


def test_frontier_skips_unresearchable_techs(sample_resolver):
    known = {"LRN_ALGO_ELEGANCE", "LRN_PHYS_BRAIN", "LRN_NASCENT_AI"}

    assert "LRN_XENOARCHAEOLOGY" not in _names(sample_resolver.frontier(known))


def test_queries_do_not_modify_known(sample_resolver):
    known = {"LRN_ALGO_ELEGANCE"}

    sample_resolver.frontier(known)
    sample_resolver.path_towards(known, "PRO_ADAPTIVE_AUTOMATION")
    sample_resolver.cheapest_path_towards(known, "PRO_ADAPTIVE_AUTOMATION")

    assert known == {"LRN_ALGO_ELEGANCE"}


def test_cheapest_frontier(sample_resolver):
    assert sample_resolver.cheapest_frontier(set()).name == "GRO_GENETIC_ENG"


def test_cheapest_frontier_breaks_ties_by_name():
    resolver = ProgressionResolver(build(make_tech("Beta", cost=5), make_tech("Alpha", cost=5)))

    assert resolver.cheapest_frontier(set()).name == "Alpha"


def test_cheapest_frontier_empty():
    resolver = ProgressionResolver(build(make_tech("A")))

    assert resolver.cheapest_frontier({"A"}) is None


@pytest.mark.parametrize("known", KNOWN_SETS)
@pytest.mark.parametrize("query", ["path_towards", "cheapest_path_towards"])
def test_paths_are_valid_research_orders(sample_manager, sample_resolver, known, query):
    for goal in sample_manager.all_names():
        path = getattr(sample_resolver, query)(known, goal)
        if goal in known:
            assert path.found and path.techs == ()
            continue
        if not sample_manager.lookup(goal).researchable:
            assert path.status is PathStatus.UNREACHABLE
            continue

        assert path.found
        assert path.names[-1] == goal
        assert len(set(path.names)) == len(path.names)
        researched = set(known)
        for tech in path.techs:
            assert tech.name not in known
            assert tech.prerequisites <= researched
            researched.add(tech.name)


def test_path_stops_at_known_techs(sample_resolver):
    path = sample_resolver.path_towards({"LRN_PHYS_BRAIN"}, "LRN_NASCENT_AI")

    assert path.names == ["LRN_NASCENT_AI"]


def test_path_orders_by_depth_then_cost(sample_resolver):
    path = sample_resolver.path_towards(set(), "GRO_SUBTER_HAB")

    assert path.names == [
        "GRO_GENETIC_ENG",
        "GRO_PLANET_ECOL",
        "PRO_ROBOTIC_PROD",
        "CON_ORBITAL_CON",
        "GRO_SYMBIOTIC_BIO",
        "GRO_SUBTER_HAB",
    ]
    assert path.total_cost == 9 + 10 + 48 + 75 + 90 + 120


def test_cheapest_path_takes_cheapest_available_first():
    resolver = ProgressionResolver(
        build(
            make_tech("Big", cost=100),
            make_tech("Small", cost=1),
            make_tech("Mid", ["Small"], cost=1),
            make_tech("Goal", ["Big", "Mid"], cost=5),
        )
    )

    assert resolver.path_towards(set(), "Goal").names == ["Small", "Big", "Mid", "Goal"]
    assert resolver.cheapest_path_towards(set(), "Goal").names == [
        "Small",
        "Mid",
        "Big",
        "Goal",
    ]


def test_goal_already_known(sample_resolver):
    for query in (
        sample_resolver.path_towards,
        sample_resolver.cheapest_path_towards,
        sample_resolver.frontier_towards,
    ):
        path = query({"GRO_GENETIC_ENG"}, "GRO_GENETIC_ENG")
        assert path.found
        assert path.techs == ()


def test_unknown_goal_is_reported(sample_resolver):
    for query in (
        sample_resolver.path_towards,
        sample_resolver.cheapest_path_towards,
        sample_resolver.frontier_towards,
    ):
        path = query(set(), "LRN_TIME_TRAVEL")
        assert path.status is PathStatus.UNKNOWN_TECH
        assert not path.found

    assert sample_resolver.cheapest_frontier_towards(set(), "LRN_TIME_TRAVEL") is None


def test_unresearchable_goal_is_unreachable(sample_resolver):
    path = sample_resolver.path_towards(set(), "LRN_XENOARCHAEOLOGY")

    assert path.status is PathStatus.UNREACHABLE
    assert path.blocked_by == ("LRN_XENOARCHAEOLOGY",)
    assert path.techs == ()


def test_unresearchable_prerequisite_blocks_goal():
    resolver = ProgressionResolver(
        build(make_tech("Relic", researchable=False), make_tech("Study", ["Relic"]))
    )

    blocked = resolver.cheapest_path_towards(set(), "Study")
    assert blocked.status is PathStatus.UNREACHABLE
    assert blocked.blocked_by == ("Relic",)

    assert resolver.path_towards({"Relic"}, "Study").names == ["Study"]


def test_frontier_towards_goal(sample_resolver):
    result = sample_resolver.frontier_towards(set(), "GRO_SUBTER_HAB")

    assert result.found
    assert result.names == ["GRO_GENETIC_ENG", "GRO_PLANET_ECOL", "PRO_ROBOTIC_PROD"]
    assert (
        sample_resolver.cheapest_frontier_towards(set(), "GRO_SUBTER_HAB").name
        == "GRO_GENETIC_ENG"
    )
    assert sample_resolver.cheapest_frontier_towards(
        {"PRO_ROBOTIC_PROD"}, "PRO_EXOBOTS"
    ).name == "CON_ORBITAL_CON"


def test_queries_are_deterministic(sample_resolver):
    known = {"LRN_ALGO_ELEGANCE", "PRO_ROBOTIC_PROD"}

    assert sample_resolver.frontier(known) == sample_resolver.frontier(known)
    assert sample_resolver.path_towards(known, "PRO_ADAPTIVE_AUTOMATION") == (
        sample_resolver.path_towards(known, "PRO_ADAPTIVE_AUTOMATION")
    )
    assert sample_resolver.cheapest_path_towards(known, "GRO_SUBTER_HAB") == (
        sample_resolver.cheapest_path_towards(known, "GRO_SUBTER_HAB")
    )
