"""Pydantic models for recipe extraction."""

from typing import List

from pydantic import BaseModel, Field


class Step(BaseModel):
    """A block of instructions, optionally titled (a recipe sub-section)."""

    title: str = ""
    items: List[str] = Field(default_factory=list)


class Nutrition(BaseModel):
    """Per-serving nutrition values as displayed on the page."""

    calories: str = ""
    protein: str = ""
    carbohydrate: str = ""
    fat: str = ""

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


class Recipe(BaseModel):
    """The canonical recipe record produced by merging all sources."""

    name: str = ""
    description: str = ""
    image: str = ""
    prep_time: str = ""
    cook_time: str = ""
    total_time: str = ""
    serving_size: str = ""
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[Step] = Field(default_factory=list)
    nutrition: Nutrition = Field(default_factory=Nutrition)


class ExtractedRecipe(BaseModel):
    """Sanitized HTML projection of a recipe plus its display name."""

    html: str
    name: str
