from dataclasses import dataclass


@dataclass(frozen=True)
class FieldIssue:
    field: str
    constraint: str
    message: str


class ChefGPTError(Exception):
    pass


class ValidationError(ChefGPTError, ValueError):
    """A payload failed its schema; ``issues`` lists every failing field."""

    def __init__(self, schema: str, issues: list[FieldIssue]) -> None:
        fields = ", ".join(f"{issue.field} ({issue.constraint})" for issue in issues)
        super().__init__(f"{schema} failed validation: {fields}")
        self.schema = schema
        self.issues = issues

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]

    def to_dict(self) -> dict[str, object]:
        return {
            "code": "invalid_request",
            "schema": self.schema,
            "issues": [
                {"field": issue.field, "constraint": issue.constraint, "message": issue.message}
                for issue in self.issues
            ],
        }


class GenerationError(ChefGPTError, RuntimeError):
    def __init__(self, capability: str, error_class: str, message: str) -> None:
        super().__init__(message)
        self.capability = capability
        self.error_class = error_class
