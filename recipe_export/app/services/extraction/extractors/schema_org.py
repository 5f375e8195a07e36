"""Schema.org JSON-LD recipe extraction."""

import json
import logging
from typing import List, Optional

from bs4 import BeautifulSoup

from recipe_export.app.services.extraction.models import Nutrition, Recipe
from recipe_export.app.services.extraction.parsing_utils import (
    coerce_text,
    extract_image,
    extract_string_list,
    normalize_instructions,
)

logger = logging.getLogger(__name__)

NUTRITION_KEYS = {
    "calories": "calories",
    "protein": "proteinContent",
    "carbohydrate": "carbohydrateContent",
    "fat": "fatContent",
}


def _is_recipe(obj) -> bool:
    if not isinstance(obj, dict):
        return False
    obj_type = obj.get("@type")
    if not obj_type:
        return False
    types = [obj_type] if isinstance(obj_type, str) else obj_type
    return any(str(t).lower() == "recipe" for t in types)


def _candidates(data) -> List:
    candidates: List = []
    if isinstance(data, list):
        candidates.extend(data)
    elif isinstance(data, dict):
        candidates.append(data)
        graph = data.get("@graph")
        if isinstance(graph, list):
            candidates.extend(graph)
    return candidates


def find_recipe_block(soup: BeautifulSoup) -> Optional[dict]:
    """Return the first JSON-LD object declaring ``@type: Recipe``.

    Blocks that fail to parse are logged and skipped.
    """
    scripts = soup.find_all("script", attrs={"type": "application/ld+json"})
    logger.info("Found %d JSON-LD script blocks", len(scripts))

    for idx, script in enumerate(scripts):
        raw_json = script.string or script.get_text()
        if not raw_json or not raw_json.strip():
            logger.debug("JSON-LD block %d is empty", idx)
            continue
        try:
            data = json.loads(raw_json)
        except json.JSONDecodeError as exc:
            logger.warning(
                "JSON-LD block %d failed to parse: %s (first 200 chars: %s)",
                idx,
                exc,
                raw_json[:200],
            )
            continue

        for obj in _candidates(data):
            if _is_recipe(obj):
                logger.info("Using Recipe object from JSON-LD block %d", idx)
                return obj
    return None


def _nutrition_from(data) -> Nutrition:
    if not isinstance(data, dict):
        return Nutrition()
    return Nutrition(
        **{field: coerce_text(data.get(key)) for field, key in NUTRITION_KEYS.items()}
    )


def recipe_from_schema_org(obj: Optional[dict], split_narrative: bool = True) -> Recipe:
    """Project a JSON-LD Recipe object onto the canonical fields.

    A missing object yields a record whose fields are all empty.
    """
    if not obj:
        return Recipe()
    return Recipe(
        name=coerce_text(obj.get("name")),
        description=coerce_text(obj.get("description")),
        image=extract_image(obj.get("image")),
        prep_time=coerce_text(obj.get("prepTime")),
        cook_time=coerce_text(obj.get("cookTime")),
        total_time=coerce_text(obj.get("totalTime")),
        serving_size=coerce_text(obj.get("recipeYield")),
        ingredients=extract_string_list(obj.get("recipeIngredient")),
        instructions=normalize_instructions(
            obj.get("recipeInstructions"), split_narrative=split_narrative
        ),
        nutrition=_nutrition_from(obj.get("nutrition")),
    )


def extract_structured_recipe(soup: BeautifulSoup, split_narrative: bool = True) -> Recipe:
    return recipe_from_schema_org(find_recipe_block(soup), split_narrative=split_narrative)
