import pytest
from pydantic import ValidationError as PydanticValidationError

from chefgpt.core.errors import ValidationError
from chefgpt.schemas.recipe import (
    ModificationRequest,
    RecipeRequest,
    RecipeResponse,
    RecipeSuggestionsResponse,
    split_ingredients,
)
from chefgpt.schemas.validation import check, validate


def _recipe_payload() -> dict:
    return {
        "title": "Garlic Chicken & Broccoli",
        "ingredients": ["2 chicken breasts", "1 head broccoli", "3 cloves garlic"],
        "instructions": ["Slice the chicken.", "Stir-fry with broccoli and garlic."],
    }


def test_validate_accepts_camel_case_wire_names() -> None:
    request = validate(
        RecipeRequest, {"ingredients": "egg, rice", "dietaryPreferences": "vegetarian"}
    )

    assert request.ingredients == "egg, rice"
    assert request.dietary_preferences == "vegetarian"
    assert request.ingredient_list == ["egg", "rice"]


def test_validate_rejects_empty_ingredients_with_field_and_constraint() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate(RecipeRequest, {"ingredients": "   "})

    issue = excinfo.value.issues[0]
    assert issue.field == "ingredients"
    assert issue.constraint == "non_empty"
    assert excinfo.value.schema == "RecipeRequest"


def test_validate_enumerates_every_failing_field() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate(ModificationRequest, {"recipe": ""})

    constraints = {issue.field: issue.constraint for issue in excinfo.value.issues}
    assert constraints == {"recipe": "non_empty", "dietaryRestrictions": "required"}


def test_validate_rejects_unknown_request_keys() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate(RecipeRequest, {"ingredients": "egg", "servings": 4})

    assert excinfo.value.issues[0].field == "servings"
    assert excinfo.value.issues[0].constraint == "unexpected"


def test_validate_reports_wrong_shape_as_type() -> None:
    payload = _recipe_payload()
    payload["instructions"] = "Just cook it."

    outcome = check(RecipeResponse, payload)

    assert not outcome.ok
    assert outcome.issues[0].field == "instructions"
    assert outcome.issues[0].constraint == "type"


def test_validate_rejects_empty_instruction_sequence() -> None:
    payload = _recipe_payload()
    payload["instructions"] = []

    outcome = check(RecipeResponse, payload)

    assert not outcome.ok
    assert outcome.issues[0].constraint == "non_empty"


def test_response_ignores_extra_keys_and_keeps_order() -> None:
    payload = _recipe_payload()
    payload["cuisine"] = "Chinese"

    recipe = validate(RecipeResponse, payload)

    assert recipe.ingredients == ("2 chicken breasts", "1 head broccoli", "3 cloves garlic")
    assert recipe.nutritional_information is None


def test_validating_a_valid_response_twice_returns_equal_value() -> None:
    recipe = validate(RecipeResponse, _recipe_payload())

    again = validate(RecipeResponse, recipe)

    assert again == recipe
    assert again.model_dump(by_alias=True) == recipe.model_dump(by_alias=True)


def test_responses_are_immutable() -> None:
    recipe = validate(RecipeResponse, _recipe_payload())

    with pytest.raises(PydanticValidationError):
        recipe.title = "Changed"  # type: ignore[misc]


def test_check_reports_nested_suggestion_fields() -> None:
    outcome = check(RecipeSuggestionsResponse, {"recipes": [{"name": "Fried Rice"}]})

    assert not outcome.ok
    assert outcome.issues[0].field == "recipes.0.description"
    assert outcome.issues[0].constraint == "required"


def test_check_non_mapping_reports_root() -> None:
    outcome = check(RecipeResponse, None)

    assert not outcome.ok
    assert outcome.issues[0].field == "(root)"


def test_split_ingredients_handles_commas_and_newlines() -> None:
    assert split_ingredients("chicken,\nspinach , , lemon\n") == ["chicken", "spinach", "lemon"]


def test_check_rejects_ingredient_text_with_only_separators() -> None:
    outcome = check(RecipeRequest, {"ingredients": " , ,\n"})

    assert not outcome.ok
    assert outcome.issues[0].field == "ingredients"
    assert outcome.issues[0].constraint == "non_empty"
