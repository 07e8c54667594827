from collections.abc import Mapping
from dataclasses import dataclass
from string import Formatter
from typing import Any

from pydantic import BaseModel

from chefgpt.schemas.recipe import (
    ModificationResponse,
    RecipeDetailsResponse,
    RecipeNameResponse,
    RecipeResponse,
    RecipeSuggestionsResponse,
)


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    text: str
    output_schema: type[BaseModel]

    @property
    def placeholders(self) -> tuple[str, ...]:
        names = [field for _, field, _, _ in Formatter().parse(self.text) if field]
        return tuple(dict.fromkeys(names))


def _describe(prop: dict[str, Any], defs: dict[str, Any]) -> str:
    description = prop.get("description", "")
    ref = prop.get("items", {}).get("$ref")
    if ref:
        nested = defs.get(ref.rsplit("/", 1)[-1], {})
        keys = ", ".join(nested.get("properties", {}))
        description = f"{description} Each item is an object with the keys: {keys}."
    return description


def output_instructions(schema: type[BaseModel]) -> str:
    json_schema = schema.model_json_schema(by_alias=True)
    required = set(json_schema.get("required", []))
    defs = json_schema.get("$defs", {})
    lines = ["Format the response as a JSON object with the following keys:"]
    for key, prop in json_schema["properties"].items():
        marker = "" if key in required else " (optional)"
        lines.append(f"- {key}{marker}: {_describe(prop, defs)}")
    lines.append("Return only the JSON object, with no other keys and no surrounding text.")
    return "\n".join(lines)


def render(template: PromptTemplate, fields: Mapping[str, Any]) -> str:
    """Fill every placeholder of ``template`` and append its output instructions.

    Values are interpolated verbatim; ``None`` becomes an empty string. A
    placeholder without a matching field raises ``KeyError``.
    """
    values = {}
    for name in template.placeholders:
        if name not in fields:
            raise KeyError(f"{template.name} prompt is missing field {name!r}")
        value = fields[name]
        values[name] = "" if value is None else str(value)
    body = template.text.format(**values).rstrip()
    return f"{body}\n\n{output_instructions(template.output_schema)}\n"


GENERATE_RECIPE = PromptTemplate(
    name="generate_recipe",
    output_schema=RecipeResponse,
    text=(
        "You are a professional chef specializing in creating delicious recipes based on "
        "available ingredients.\n\n"
        "Generate a unique and detailed recipe based on the ingredients provided. If dietary "
        "preferences are specified, ensure the recipe adheres to those restrictions.\n\n"
        "Ingredients: {ingredients}\n"
        "Dietary Preferences: {dietaryPreferences}\n"
    ),
)

SUGGEST_RECIPE_MODIFICATIONS = PromptTemplate(
    name="suggest_recipe_modifications",
    output_schema=ModificationResponse,
    text=(
        "You are a recipe modification expert. Given a recipe and dietary restrictions, you "
        "will modify the recipe to adhere to the specified restrictions. Replace every "
        "ingredient that violates them instead of only mentioning it.\n\n"
        "Original Recipe: {recipe}\n"
        "Dietary Restrictions/Substitutions: {dietaryRestrictions}\n"
    ),
)

SUGGEST_RECIPE_NAME = PromptTemplate(
    name="suggest_recipe_name",
    output_schema=RecipeNameResponse,
    text=(
        "You are a creative chef naming dishes for a menu. Suggest one short, appetizing "
        "name for a dish made from the ingredients below.\n\n"
        "Ingredients: {ingredients}\n"
        "Dietary Preferences: {dietaryPreferences}\n"
        "Cuisine: {cuisine}\n"
    ),
)

SUGGEST_RECIPES = PromptTemplate(
    name="suggest_recipes",
    output_schema=RecipeSuggestionsResponse,
    text=(
        "You are a helpful home-cooking assistant. Suggest up to three recipes that can be "
        "made mostly from the ingredients below, best match first. If dietary preferences "
        "are specified, every suggestion must respect them.\n\n"
        "Ingredients: {ingredients}\n"
        "Dietary Preferences: {dietaryPreferences}\n"
    ),
)

GENERATE_RECIPE_DETAILS = PromptTemplate(
    name="generate_recipe_details",
    output_schema=RecipeDetailsResponse,
    text=(
        "You are a professional chef writing a cookbook entry. Write the full recipe for the "
        "dish named below, including quantities, timings and servings. Build around the "
        "listed ingredients when given, and respect any dietary preferences.\n\n"
        "Recipe Name: {recipeName}\n"
        "Ingredients: {ingredients}\n"
        "Dietary Preferences: {dietaryPreferences}\n"
    ),
)
