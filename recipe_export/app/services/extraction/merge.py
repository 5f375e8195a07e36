"""Field-by-field precedence between structured data and DOM fallback.

Each field resolves on its own: the structured value when it is non-empty,
otherwise the fallback value. Values are never combined within a field.
"""

from typing import List, TypeVar

from recipe_export.app.services.extraction.models import Nutrition, Recipe, Step

T = TypeVar("T")


def prefer(structured: T, fallback: T) -> T:
    return structured if structured else fallback


def resolve_name(structured: Recipe, fallback: Recipe) -> str:
    return prefer(structured.name, fallback.name)


def resolve_description(structured: Recipe, fallback: Recipe) -> str:
    return prefer(structured.description, fallback.description)


def resolve_image(structured: Recipe, fallback: Recipe) -> str:
    return prefer(structured.image, fallback.image)


def resolve_prep_time(structured: Recipe, fallback: Recipe) -> str:
    return prefer(structured.prep_time, fallback.prep_time)


def resolve_cook_time(structured: Recipe, fallback: Recipe) -> str:
    return prefer(structured.cook_time, fallback.cook_time)


def resolve_total_time(structured: Recipe, fallback: Recipe) -> str:
    return prefer(structured.total_time, fallback.total_time)


def resolve_serving_size(structured: Recipe, fallback: Recipe) -> str:
    return prefer(structured.serving_size, fallback.serving_size)


def resolve_ingredients(structured: Recipe, fallback: Recipe) -> List[str]:
    return list(prefer(structured.ingredients, fallback.ingredients))


def resolve_instructions(structured: Recipe, fallback: Recipe) -> List[Step]:
    chosen = prefer(structured.instructions, fallback.instructions)
    return [step.model_copy(deep=True) for step in chosen]


def resolve_nutrition(structured: Recipe, fallback: Recipe) -> Nutrition:
    """Each nutrient is its own field and resolves independently."""
    return Nutrition(
        **{
            key: prefer(getattr(structured.nutrition, key), getattr(fallback.nutrition, key))
            for key in Nutrition.model_fields
        }
    )


def merge_recipes(structured: Recipe, fallback: Recipe) -> Recipe:
    return Recipe(
        name=resolve_name(structured, fallback),
        description=resolve_description(structured, fallback),
        image=resolve_image(structured, fallback),
        prep_time=resolve_prep_time(structured, fallback),
        cook_time=resolve_cook_time(structured, fallback),
        total_time=resolve_total_time(structured, fallback),
        serving_size=resolve_serving_size(structured, fallback),
        ingredients=resolve_ingredients(structured, fallback),
        instructions=resolve_instructions(structured, fallback),
        nutrition=resolve_nutrition(structured, fallback),
    )
