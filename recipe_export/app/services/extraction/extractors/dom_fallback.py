"""Positional DOM extraction used when structured data is missing or incomplete."""

import logging
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel

from recipe_export.app.services.extraction.models import Nutrition, Recipe, Step
from recipe_export.app.services.extraction.parsing_utils import (
    SERVING_LABELS,
    TIME_LABELS,
    clean_text,
    normalize_label,
    nutrient_field,
    to_duration,
)

logger = logging.getLogger(__name__)

SUBHEADING_TAGS = {"h3", "h4", "h5", "h6"}


class FallbackSelectors(BaseModel):
    """CSS selectors registered for each fallback field."""

    name: str = "h1"
    description: str = "p"
    image: str = 'img[alt]:not([alt=""])'
    ingredients: str = "section.ingredients ul li"
    instructions_heading_tag: str = "h2"
    instructions_heading_text: str = "cooking instructions"
    instruction_sections: str = "section.instructions .instruction-section"
    instruction_section_title: str = "h3"
    instruction_section_items: str = ".content p"
    instruction_container: str = "section.instructions"
    serving_option: str = 'input[type="radio"][checked]'
    serving_option_label: str = '[data-testid$="-label"]'
    info_label: str = 'span[data-testid="recipe-details-info-name"]'
    nutrition_rows: str = "table.nutrition tr"


DEFAULT_SELECTORS = FallbackSelectors()


def _first_text(soup: BeautifulSoup, selector: str) -> str:
    node = soup.select_one(selector)
    return clean_text(node.get_text(" ")) if node else ""


def fallback_image(soup: BeautifulSoup, selectors: FallbackSelectors) -> str:
    node = soup.select_one(selectors.image)
    if node is None:
        return ""
    return (node.get("src") or "").strip()


def fallback_ingredients(soup: BeautifulSoup, selectors: FallbackSelectors) -> List[str]:
    items = [clean_text(li.get_text(" ")) for li in soup.select(selectors.ingredients)]
    return [item for item in items if item]


def _find_instructions_heading(soup: BeautifulSoup, selectors: FallbackSelectors) -> Optional[Tag]:
    wanted = selectors.instructions_heading_text.lower()
    for heading in soup.find_all(selectors.instructions_heading_tag):
        if clean_text(heading.get_text(" ")).lower() == wanted:
            return heading
    return None


def _collect_block(element: Tag, steps: List[Step]) -> None:
    if element.name in SUBHEADING_TAGS:
        steps.append(Step(title=clean_text(element.get_text(" "))))
        return
    if element.name in {"li", "p"}:
        text = clean_text(element.get_text(" "))
        if text:
            if not steps:
                steps.append(Step())
            steps[-1].items.append(text)
        return
    children = element.find_all(True, recursive=False)
    if not children:
        text = clean_text(element.get_text(" "))
        if text:
            if not steps:
                steps.append(Step())
            steps[-1].items.append(text)
        return
    for child in children:
        _collect_block(child, steps)


def instructions_from_labeled_block(soup: BeautifulSoup, selectors: FallbackSelectors) -> List[Step]:
    """Read the text under the "Cooking instructions" heading.

    Everything up to the next heading of the same level belongs to the block;
    sub-headings open titled steps.
    """
    heading = _find_instructions_heading(soup, selectors)
    if heading is None:
        return []
    steps: List[Step] = []
    for sibling in heading.find_next_siblings():
        if sibling.name == heading.name:
            break
        _collect_block(sibling, steps)
    return [step for step in steps if step.items]


def instructions_from_container(soup: BeautifulSoup, selectors: FallbackSelectors) -> List[Step]:
    steps: List[Step] = []
    for section in soup.select(selectors.instruction_sections):
        title_node = section.select_one(selectors.instruction_section_title)
        items = [
            clean_text(p.get_text(" ")) for p in section.select(selectors.instruction_section_items)
        ]
        items = [item for item in items if item]
        if items:
            steps.append(
                Step(title=clean_text(title_node.get_text(" ")) if title_node else "", items=items)
            )
    if steps:
        return steps

    container = soup.select_one(selectors.instruction_container)
    if container is None:
        return []
    items = [clean_text(node.get_text(" ")) for node in container.find_all(["li", "p"])]
    items = [item for item in items if item]
    return [Step(items=items)] if items else []


def fallback_instructions(soup: BeautifulSoup, selectors: FallbackSelectors) -> List[Step]:
    return instructions_from_labeled_block(soup, selectors) or instructions_from_container(
        soup, selectors
    )


def fallback_serving_option(soup: BeautifulSoup, selectors: FallbackSelectors) -> str:
    """Label text of the selected serving option, if the page has one."""
    checked = soup.select_one(selectors.serving_option)
    if checked is None or checked.parent is None:
        return ""
    label = checked.parent.select_one(selectors.serving_option_label)
    return clean_text(label.get_text(" ")) if label else ""


def scan_info_region(soup: BeautifulSoup, selectors: FallbackSelectors) -> Dict[str, str]:
    """Collect labelled values (nutrition, timings, servings) from the page.

    Keys are Recipe/Nutrition field names; the first value seen for a key wins.
    """
    found: Dict[str, str] = {}

    def _record(label: str, value: str) -> None:
        value = clean_text(value)
        if not value:
            return
        key = normalize_label(label)
        field = nutrient_field(key)
        if field is None and key in TIME_LABELS:
            field = TIME_LABELS[key]
            value = to_duration(value)
        elif field is None and key in SERVING_LABELS:
            field = "serving_size"
        if field and field not in found:
            found[field] = value

    for label_node in soup.select(selectors.info_label):
        value_node = label_node.find_next_sibling()
        if value_node is not None:
            _record(label_node.get_text(" "), value_node.get_text(" "))

    for row in soup.select(selectors.nutrition_rows):
        cells = row.find_all(["th", "td"])
        if len(cells) >= 2:
            _record(cells[0].get_text(" "), cells[1].get_text(" "))

    return found


def extract_fallback_recipe(
    soup: BeautifulSoup, selectors: FallbackSelectors = DEFAULT_SELECTORS
) -> Recipe:
    """Build a Recipe purely from the rendered document structure."""
    info = scan_info_region(soup, selectors)
    nutrition = Nutrition(
        **{field: info.get(field, "") for field in Nutrition.model_fields}
    )
    recipe = Recipe(
        name=_first_text(soup, selectors.name),
        description=_first_text(soup, selectors.description),
        image=fallback_image(soup, selectors),
        prep_time=info.get("prep_time", ""),
        cook_time=info.get("cook_time", ""),
        total_time=info.get("total_time", ""),
        serving_size=fallback_serving_option(soup, selectors) or info.get("serving_size", ""),
        ingredients=fallback_ingredients(soup, selectors),
        instructions=fallback_instructions(soup, selectors),
        nutrition=nutrition,
    )
    logger.info(
        "DOM fallback: name=%s, ingredients=%d, instruction blocks=%d",
        recipe.name[:50] or "None",
        len(recipe.ingredients),
        len(recipe.instructions),
    )
    return recipe
