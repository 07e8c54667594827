from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from chefgpt.core.errors import FieldIssue, ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_CONSTRAINTS = {
    "missing": "required",
    "string_too_short": "non_empty",
    "too_short": "non_empty",
    "empty_list": "non_empty",
    "extra_forbidden": "unexpected",
}


@dataclass(frozen=True)
class ValidationOutcome(Generic[SchemaT]):
    value: SchemaT | None = None
    issues: list[FieldIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None


def _constraint(error_type: str) -> str:
    if error_type in _CONSTRAINTS:
        return _CONSTRAINTS[error_type]
    if error_type.endswith("_type") or error_type.endswith("_parsing"):
        return "type"
    return error_type


def issues_from(exc: PydanticValidationError) -> list[FieldIssue]:
    issues = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error["loc"]) or "(root)"
        issues.append(
            FieldIssue(field=location, constraint=_constraint(error["type"]), message=error["msg"])
        )
    return issues


def check(schema: type[SchemaT], value: Any) -> ValidationOutcome[SchemaT]:
    if isinstance(value, BaseModel) and not isinstance(value, schema):
        value = value.model_dump(by_alias=True)
    try:
        return ValidationOutcome(value=schema.model_validate(value))
    except PydanticValidationError as exc:
        return ValidationOutcome(issues=issues_from(exc))


def validate(schema: type[SchemaT], value: Any) -> SchemaT:
    outcome = check(schema, value)
    if outcome.value is None:
        raise ValidationError(schema.__name__, outcome.issues)
    return outcome.value
