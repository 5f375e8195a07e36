from pydantic import BaseModel, ConfigDict, Field


class RecipeUrlRequest(BaseModel):
    url: str


class ConvertResponse(BaseModel):
    html: str


class GenerateRecipeResponse(BaseModel):
    url: str
    name: str


class GenerateStaticResponse(BaseModel):
    url: str
    message: str


class TriggerBuildResponse(BaseModel):
    message: str
    recipes_generated: int = Field(alias="recipesGenerated")

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    error_code: str
    error: str
