import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Form, Request
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError as PydanticValidationError

from chefgpt.core.config import get_settings
from chefgpt.core.errors import GenerationError, ValidationError
from chefgpt.schemas.recipe import RecipeResponse, split_ingredients
from chefgpt.services.client_factory import get_model_client
from chefgpt.services.gateway import generate_recipe, suggest_recipe_modifications

router = APIRouter()
templates = Jinja2Templates(directory=Path(__file__).resolve().parent.parent / "templates")
logger = logging.getLogger(__name__)

_FIELD_MESSAGES = {
    "ingredients": "Please enter at least one ingredient.",
    "recipe": "There is no recipe to adapt yet.",
    "dietaryRestrictions": "Please describe the restrictions to apply.",
}


def _load_recipe(recipe_json: str) -> RecipeResponse | None:
    if not recipe_json:
        return None
    try:
        return RecipeResponse.model_validate_json(recipe_json)
    except PydanticValidationError:
        logger.info("ui_previous_recipe_discarded")
        return None


def recipe_as_text(recipe: RecipeResponse) -> str:
    lines = [recipe.title, "", "Ingredients:"]
    lines += [f"- {item}" for item in recipe.ingredients]
    lines += ["", "Instructions:"]
    lines += [f"{idx}. {step}" for idx, step in enumerate(recipe.instructions, start=1)]
    return "\n".join(lines)


def _page(
    request: Request,
    recipe: RecipeResponse | None,
    status_code: int = 200,
    **context: Any,
) -> Any:
    context.setdefault("form", {"ingredients": "", "dietaryPreferences": ""})
    context.setdefault("field_errors", {})
    context.setdefault("error_message", False)
    context.setdefault("modification", None)
    context["recipe"] = recipe
    context["recipe_json"] = recipe.model_dump_json(by_alias=True) if recipe else ""
    context["recipe_text"] = recipe_as_text(recipe) if recipe else ""
    return templates.TemplateResponse(request, "index.html", context, status_code=status_code)


def _field_errors(exc: ValidationError) -> dict[str, str]:
    return {
        issue.field: _FIELD_MESSAGES.get(issue.field, issue.message) for issue in exc.issues
    }


@router.get("/")
async def index(request: Request) -> Any:
    return _page(request, None)


@router.post("/ui/generate")
async def generate_from_form(
    request: Request,
    ingredients: str = Form(default=""),
    dietary_preferences: str = Form(default="", alias="dietaryPreferences"),
    previous_recipe_json: str = Form(default=""),
) -> Any:
    form = {"ingredients": ingredients, "dietaryPreferences": dietary_preferences}
    previous = _load_recipe(previous_recipe_json)
    settings = get_settings()
    try:
        recipe = await generate_recipe(
            {"ingredients": ingredients, "dietaryPreferences": dietary_preferences or None},
            client=get_model_client(settings),
            settings=settings,
        )
    except ValidationError as exc:
        return _page(request, previous, 422, form=form, field_errors=_field_errors(exc))
    except GenerationError as exc:
        logger.warning(
            "ui_recipe_generation",
            extra={
                "outcome": "failure",
                "generator_mode": settings.recipe_generator,
                "error_class": exc.error_class,
                "ingredients_count": len(split_ingredients(ingredients)),
                "has_dietary_preferences": bool(dietary_preferences),
            },
        )
        return _page(request, previous, 503, form=form, error_message=True)

    logger.info(
        "ui_recipe_generation",
        extra={
            "outcome": "success",
            "generator_mode": settings.recipe_generator,
            "ingredients_count": len(split_ingredients(ingredients)),
            "has_dietary_preferences": bool(dietary_preferences),
        },
    )
    return _page(request, recipe, form=form)


@router.post("/ui/modify")
async def modify_from_form(
    request: Request,
    dietary_restrictions: str = Form(default="", alias="dietaryRestrictions"),
    recipe_json: str = Form(default=""),
) -> Any:
    recipe = _load_recipe(recipe_json)
    settings = get_settings()
    try:
        result = await suggest_recipe_modifications(
            {
                "recipe": recipe_as_text(recipe) if recipe else "",
                "dietaryRestrictions": dietary_restrictions,
            },
            client=get_model_client(settings),
            settings=settings,
        )
    except ValidationError as exc:
        return _page(request, recipe, 422, field_errors=_field_errors(exc))
    except GenerationError as exc:
        logger.warning(
            "ui_recipe_modification",
            extra={
                "outcome": "failure",
                "generator_mode": settings.recipe_generator,
                "error_class": exc.error_class,
            },
        )
        return _page(request, recipe, 503, error_message=True)

    return _page(
        request,
        recipe,
        modification={"restrictions": dietary_restrictions, "text": result.modified_recipe},
    )
