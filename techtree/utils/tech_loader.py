"""Technology data loader."""

import json
import logging
from pathlib import Path
from typing import Any

from techtree.graph.errors import TechGraphError
from techtree.graph.tech_manager import TechManager
from techtree.models import (
    ItemSpec,
    Tech,
    TechCategory,
    TechType,
    UnlockableItemType,
)

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path(__file__).parent.parent.parent / "data" / "techs.json"


def _require_dict(entry: Any, what: str) -> dict[str, Any]:
    if not isinstance(entry, dict):
        raise ValueError(f"{what} must be a JSON object: {entry!r}")
    return entry


def _require_list(entry: dict[str, Any], key: str) -> list:
    value = entry.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"Field '{key}' must be a list in entry: {entry!r}")
    return value


def _require_str(entry: dict[str, Any], key: str, default: str | None = None) -> str:
    value = entry.get(key, default)
    if not isinstance(value, str):
        raise ValueError(f"Field '{key}' must be a string in entry: {entry!r}")
    return value


def parse_category(entry: dict[str, Any]) -> TechCategory:
    """
    Parse a category entry.

    Example:
        {"name": "LEARNING_CATEGORY", "graphic": "learning.png",
         "colour": [54, 202, 229, 255]}
    """
    entry = _require_dict(entry, "Category entry")
    colour = entry.get("colour", [255, 255, 255, 255])
    if not isinstance(colour, list) or not all(isinstance(c, int) for c in colour):
        raise ValueError(f"Invalid colour in category entry: {entry!r}")

    return TechCategory(
        name=_require_str(entry, "name"),
        graphic=_require_str(entry, "graphic", ""),
        colour=tuple(colour),
    )


def parse_item_spec(entry: dict[str, Any]) -> ItemSpec:
    entry = _require_dict(entry, "Unlocked item")
    try:
        item_type = UnlockableItemType(entry["type"])
    except (KeyError, ValueError) as e:
        raise ValueError(f"Invalid unlocked item: {entry!r}") from e
    return ItemSpec(type=item_type, name=_require_str(entry, "name"))


def parse_tech(entry: dict[str, Any]) -> Tech:
    """Parse a tech entry. ``unlocked_techs`` is derived later, never read."""
    entry = _require_dict(entry, "Tech entry")
    name = _require_str(entry, "name")

    try:
        tech_type = TechType(entry.get("type", TechType.THEORY.value))
    except ValueError as e:
        raise ValueError(f"Tech {name} has unknown type: {entry.get('type')!r}") from e

    cost = entry.get("research_cost", 0)
    turns = entry.get("research_turns", 1)
    if isinstance(cost, bool) or not isinstance(cost, (int, float)):
        raise ValueError(f"Tech {name} has non-numeric research cost: {cost!r}")
    if isinstance(turns, bool) or not isinstance(turns, int):
        raise ValueError(f"Tech {name} has non-integer research turns: {turns!r}")

    researchable = entry.get("researchable", True)
    if not isinstance(researchable, bool):
        raise ValueError(
            f"Tech {name} has non-boolean researchable flag: {researchable!r}"
        )

    prerequisites = entry.get("prerequisites", [])
    if not isinstance(prerequisites, list) or not all(
        isinstance(p, str) for p in prerequisites
    ):
        raise ValueError(f"Tech {name} has invalid prerequisites: {prerequisites!r}")
    if len(set(prerequisites)) != len(prerequisites):
        logger.warning("Tech %s lists a prerequisite more than once", name)

    return Tech(
        name=name,
        category=_require_str(entry, "category"),
        type=tech_type,
        research_cost=float(cost),
        research_turns=turns,
        researchable=researchable,
        prerequisites=frozenset(prerequisites),
        unlocked_items=tuple(
            parse_item_spec(item) for item in _require_list(entry, "unlocked_items")
        ),
        effects=tuple(entry.get("effects", [])),
        description=_require_str(entry, "description", ""),
        short_description=_require_str(entry, "short_description", ""),
        graphic=_require_str(entry, "graphic", ""),
    )


def load_tech_data(
    json_path: Path | None = None,
) -> tuple[list[Tech], list[TechCategory]]:
    """Load tech and category records from a JSON file."""
    if json_path is None:
        json_path = DEFAULT_DATA_PATH

    with open(json_path) as f:
        data = json.load(f)
    data = _require_dict(data, f"Tech data in {json_path}")

    categories = [parse_category(entry) for entry in _require_list(data, "categories")]
    techs = [parse_tech(entry) for entry in _require_list(data, "techs")]

    logger.debug(
        "Read %d techs and %d categories from %s", len(techs), len(categories), json_path
    )
    return techs, categories


def load_tech_manager(json_path: Path | None = None) -> TechManager:
    """Load all techs and build a validated tech manager."""
    techs, categories = load_tech_data(json_path)
    try:
        return TechManager(techs, categories)
    except TechGraphError as e:
        logger.error("Tech graph is invalid (%s): %s", e.invariant, e)
        raise
