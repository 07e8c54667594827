import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException

from chefgpt.core.config import get_settings
from chefgpt.core.errors import GenerationError, ValidationError
from chefgpt.schemas.recipe import (
    ModificationResponse,
    RecipeDetailsResponse,
    RecipeNameResponse,
    RecipeResponse,
    RecipeSuggestionsResponse,
)
from chefgpt.services.client_factory import get_model_client
from chefgpt.services.gateway import (
    Capability,
    generate_recipe,
    generate_recipe_details,
    suggest_recipe_modifications,
    suggest_recipe_name,
    suggest_recipes,
)

router = APIRouter()
logger = logging.getLogger(__name__)

generate_api_counters = {
    "success": 0,
    "failure": 0,
    "invalid": 0,
}

_GENERATION_UNAVAILABLE = {
    "code": "generation_unavailable",
    "message": "Recipe generation is temporarily unavailable. Please try again.",
}


async def _run(capability: Capability[Any, Any], payload: dict[str, Any]) -> Any:
    settings = get_settings()
    try:
        result = await capability(payload, client=get_model_client(settings), settings=settings)
    except ValidationError as exc:
        generate_api_counters["invalid"] += 1
        raise HTTPException(status_code=422, detail=exc.to_dict()) from exc
    except GenerationError as exc:
        generate_api_counters["failure"] += 1
        logger.warning(
            "api_recipe_generation",
            extra={
                "outcome": "failure",
                "capability": capability.name,
                "generator_mode": settings.recipe_generator,
                "error_class": exc.error_class,
            },
        )
        raise HTTPException(status_code=503, detail=_GENERATION_UNAVAILABLE) from exc

    generate_api_counters["success"] += 1
    logger.info(
        "api_recipe_generation",
        extra={
            "outcome": "success",
            "capability": capability.name,
            "generator_mode": settings.recipe_generator,
        },
    )
    return result


@router.post("/generate", response_model=RecipeResponse)
async def generate(payload: dict[str, Any] = Body()) -> Any:
    return await _run(generate_recipe, payload)


@router.post("/modify", response_model=ModificationResponse)
async def modify(payload: dict[str, Any] = Body()) -> Any:
    return await _run(suggest_recipe_modifications, payload)


@router.post("/suggest-name", response_model=RecipeNameResponse)
async def suggest_name(payload: dict[str, Any] = Body()) -> Any:
    return await _run(suggest_recipe_name, payload)


@router.post("/suggest-recipes", response_model=RecipeSuggestionsResponse)
async def suggest(payload: dict[str, Any] = Body()) -> Any:
    return await _run(suggest_recipes, payload)


@router.post("/details", response_model=RecipeDetailsResponse)
async def details(payload: dict[str, Any] = Body()) -> Any:
    return await _run(generate_recipe_details, payload)
