import re
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalText = Annotated[str, StringConstraints(strip_whitespace=True)] | None

_INGREDIENT_SPLIT = re.compile(r"[,\n]")


def split_ingredients(raw: str) -> list[str]:
    chunks = [item.strip() for item in _INGREDIENT_SPLIT.split(raw)]
    return [item for item in chunks if item]


def _require_ingredient(value: str) -> str:
    if not split_ingredients(value):
        raise PydanticCustomError("empty_list", "List should name at least one ingredient")
    return value


IngredientList = Annotated[NonEmptyText, AfterValidator(_require_ingredient)]


class RequestSchema(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ResponseSchema(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RecipeRequest(RequestSchema):
    ingredients: IngredientList = Field(
        description="A comma-separated list of ingredients the user has available."
    )
    dietary_preferences: OptionalText = Field(
        default=None,
        description="Optional dietary preferences or restrictions (e.g., vegetarian, gluten-free).",
    )

    @property
    def ingredient_list(self) -> list[str]:
        return split_ingredients(self.ingredients)


class RecipeResponse(ResponseSchema):
    title: NonEmptyText = Field(description="The title of the recipe.")
    ingredients: tuple[NonEmptyText, ...] = Field(
        min_length=1, description="An array of ingredients required for the recipe."
    )
    instructions: tuple[NonEmptyText, ...] = Field(
        min_length=1,
        description="An array of step-by-step instructions for preparing the recipe.",
    )
    nutritional_information: OptionalText = Field(
        default=None, description="Optional nutritional information for the recipe, if available."
    )


class ModificationRequest(RequestSchema):
    recipe: NonEmptyText = Field(description="The original recipe to modify.")
    dietary_restrictions: NonEmptyText = Field(
        description="Dietary restrictions or ingredient substitutions to apply."
    )


class ModificationResponse(ResponseSchema):
    modified_recipe: NonEmptyText = Field(
        description="The modified recipe based on the input dietary restrictions."
    )


class RecipeNameRequest(RequestSchema):
    ingredients: IngredientList = Field(description="The main ingredients of the dish.")
    dietary_preferences: OptionalText = Field(
        default=None, description="Optional dietary preferences the dish follows."
    )
    cuisine: OptionalText = Field(default=None, description="Optional cuisine or style.")


class RecipeNameResponse(ResponseSchema):
    recipe_name: NonEmptyText = Field(description="A short, appetizing name for the recipe.")


class RecipeSuggestion(ResponseSchema):
    name: NonEmptyText = Field(description="The name of the suggested recipe.")
    description: NonEmptyText = Field(description="A one-sentence description of the dish.")


class RecipeSuggestionsRequest(RequestSchema):
    ingredients: IngredientList = Field(
        description="A comma-separated list of ingredients the user has available."
    )
    dietary_preferences: OptionalText = Field(
        default=None, description="Optional dietary preferences or restrictions."
    )


class RecipeSuggestionsResponse(ResponseSchema):
    recipes: tuple[RecipeSuggestion, ...] = Field(
        min_length=1, description="An array of recipe suggestions, best match first."
    )


class RecipeDetailsRequest(RequestSchema):
    recipe_name: NonEmptyText = Field(description="The name of the recipe to detail.")
    ingredients: OptionalText = Field(
        default=None, description="Optional comma-separated ingredients to build around."
    )
    dietary_preferences: OptionalText = Field(
        default=None, description="Optional dietary preferences or restrictions."
    )


class RecipeDetailsResponse(RecipeResponse):
    prep_time: OptionalText = Field(default=None, description="Preparation time, e.g. 15 minutes.")
    cook_time: OptionalText = Field(default=None, description="Cooking time, e.g. 25 minutes.")
    servings: int | None = Field(default=None, gt=0, description="Number of servings.")
