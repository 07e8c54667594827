import json
import re
from collections.abc import Callable, Mapping
from typing import Any

from chefgpt.schemas.recipe import split_ingredients
from chefgpt.services.client_base import ModelCall

_SUBSTITUTIONS: dict[str, dict[str, str]] = {
    "vegan": {
        "heavy cream": "cashew",
        "sour cream": "cashew yogurt",
        "cream": "cashew",
        "butter": "olive oil",
        "milk": "oat milk",
        "cheese": "nutritional yeast",
        "parmesan": "nutritional yeast",
        "eggs": "flax eggs",
        "egg": "flax egg",
        "honey": "maple syrup",
        "chicken": "chickpeas",
        "beef": "lentils",
        "bacon": "smoked tempeh",
    },
    "vegetarian": {
        "chicken": "chickpeas",
        "beef": "lentils",
        "bacon": "smoked tempeh",
        "fish sauce": "soy sauce",
    },
    "dairy-free": {
        "heavy cream": "coconut milk",
        "cream": "coconut milk",
        "butter": "olive oil",
        "milk": "oat milk",
        "cheese": "nutritional yeast",
    },
    "gluten-free": {
        "pasta": "gluten-free pasta",
        "flour": "rice flour",
        "bread": "gluten-free bread",
        "soy sauce": "tamari",
    },
}

_FREE_FROM = re.compile(r"([a-z]+)-free")


def _title_words(names: list[str]) -> str:
    return " & ".join(name.title() for name in names[:2])


def _recipe_payload(title: str, names: list[str]) -> dict[str, Any]:
    ingredients = [f"1 portion {name}" for name in names]
    ingredients += ["1 tbsp olive oil", "Salt and pepper to taste"]
    instructions = [f"Prepare the {name}." for name in names]
    instructions += [
        "Heat the olive oil in a large skillet over medium heat.",
        f"Cook the {', '.join(names)} until tender, about 10-12 minutes.",
        "Season with salt and pepper and serve warm.",
    ]
    return {"title": title, "ingredients": ingredients, "instructions": instructions}


def _prefix(preferences: str | None) -> str:
    return f"{preferences.strip().title()} " if preferences and preferences.strip() else ""


def _generate_recipe(fields: Mapping[str, Any]) -> dict[str, Any]:
    names = split_ingredients(fields["ingredients"])
    title = f"{_prefix(fields.get('dietaryPreferences'))}{_title_words(names)} Skillet"
    return _recipe_payload(title, names)


def _suggest_recipe_modifications(fields: Mapping[str, Any]) -> dict[str, Any]:
    restrictions = fields["dietaryRestrictions"].lower()
    rules: dict[str, str] = {}
    for keyword, substitutions in _SUBSTITUTIONS.items():
        if keyword in restrictions:
            rules.update(substitutions)
    # "cream-free", "egg-free": pull that ingredient's swaps from any table
    for word in _FREE_FROM.findall(restrictions):
        for substitutions in _SUBSTITUTIONS.values():
            rules.update({key: value for key, value in substitutions.items() if word in key.split()})

    modified = fields["recipe"]
    if rules:
        alternatives = "|".join(re.escape(word) for word in sorted(rules, key=len, reverse=True))
        pattern = re.compile(rf"\b({alternatives})(?:s|es|y|ed)?\b", re.IGNORECASE)
        modified = pattern.sub(lambda match: rules[match.group(1).lower()], modified)
    return {"modifiedRecipe": modified}


def _suggest_recipe_name(fields: Mapping[str, Any]) -> dict[str, Any]:
    names = split_ingredients(fields["ingredients"])
    cuisine = f"{fields['cuisine'].strip().title()} " if fields.get("cuisine") else ""
    return {"recipeName": f"{cuisine}{_title_words(names)} Skillet"}


def _suggest_recipes(fields: Mapping[str, Any]) -> dict[str, Any]:
    names = split_ingredients(fields["ingredients"])
    prefix = _prefix(fields.get("dietaryPreferences"))
    joined = ", ".join(names)
    recipes = [
        {"name": f"{prefix}{_title_words(names)} {dish}", "description": f"{style} with {joined}."}
        for dish, style in (
            ("Skillet", "A one-pan dinner"),
            ("Soup", "A warming broth"),
            ("Salad", "A bright, fresh bowl"),
        )
    ]
    return {"recipes": recipes}


def _generate_recipe_details(fields: Mapping[str, Any]) -> dict[str, Any]:
    names = split_ingredients(fields.get("ingredients") or "") or ["seasonal vegetables"]
    payload = _recipe_payload(f"{_prefix(fields.get('dietaryPreferences'))}{fields['recipeName']}", names)
    payload.update({"prepTime": "10 minutes", "cookTime": "15 minutes", "servings": 2})
    return payload


_HANDLERS: dict[str, Callable[[Mapping[str, Any]], dict[str, Any]]] = {
    "generate_recipe": _generate_recipe,
    "suggest_recipe_modifications": _suggest_recipe_modifications,
    "suggest_recipe_name": _suggest_recipe_name,
    "suggest_recipes": _suggest_recipes,
    "generate_recipe_details": _generate_recipe_details,
}


class StubModelClient:
    """Deterministic offline replies built from the call's input fields."""

    mode = "stub"

    async def complete(self, call: ModelCall) -> str | None:
        handler = _HANDLERS.get(call.capability)
        if handler is None:
            return None
        return json.dumps(handler(call.fields))
