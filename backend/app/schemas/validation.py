"""
Schema Validation
Composable field rules on top of pydantic, and a non-raising
``validate_schema`` that returns typed data or a field error map.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, ValidationError
from pydantic_core import PydanticCustomError

T = TypeVar("T", bound=BaseModel)

# A check returns the messages for every rule the value violates
Check = Callable[[Any], List[str]]


def rule(predicate: Callable[[Any], bool], message: str) -> Check:
    """Single predicate with the message reported when it fails."""
    def check(value: Any) -> List[str]:
        return [] if predicate(value) else [message]
    return check


def enforce(*checks: Check) -> AfterValidator:
    """
    Run every check in order and fail with all collected messages.

    Messages travel in the error context so they can be reported one by one
    instead of as a single joined string.
    """
    def validator(value: Any) -> Any:
        messages: List[str] = []
        for check in checks:
            messages.extend(check(value))
        if messages:
            raise PydanticCustomError("rule_violation", "; ".join(messages), {"messages": messages})
        return value
    return AfterValidator(validator)


def format_validation_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Group pydantic errors by dot-joined field path, keeping rule order."""
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"]) or "body"
        messages = (err.get("ctx") or {}).get("messages") or [err["msg"]]
        errors.setdefault(path, []).extend(messages)
    return errors


@dataclass
class ValidationResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)


def validate_schema(schema: Type[T], data: Any) -> ValidationResult[T]:
    """
    Validate ``data`` against ``schema``.

    Validation failures are returned, never raised. Anything other than a
    pydantic ValidationError propagates.
    """
    try:
        return ValidationResult(success=True, data=schema.model_validate(data))
    except ValidationError as exc:
        return ValidationResult(success=False, errors=format_validation_errors(exc))
