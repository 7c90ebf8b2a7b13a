"""Request validation for QR code generation.

The request body is parsed into a pydantic model before anything else runs.
Both fields are checked independently so a caller sees every problem at once.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic_core import PydanticCustomError

from errors import RequestValidationError, ValidationIssue

logger = logging.getLogger(__name__)

MIN_SIZE = 128
MAX_SIZE = 1024
DEFAULT_SIZE = 320

URL_MESSAGE = "Please provide a valid URL (e.g., https://example.com)"
SIZE_NUMBER_MESSAGE = "Size must be a number"
SIZE_INTEGER_MESSAGE = "Size must be an integer"

_url_adapter = TypeAdapter(AnyUrl)

BODY_MESSAGE = "Request body must be a JSON object"

# pydantic's built-in error types, mapped onto the codes callers see.
_BUILTIN_ERRORS: Dict[str, Dict[str, str]] = {
    "missing": {"code": "invalid_type", "message": "Required"},
    "model_type": {"code": "invalid_type", "message": BODY_MESSAGE},
    "model_attributes_type": {"code": "invalid_type", "message": BODY_MESSAGE},
}


@dataclass(frozen=True)
class ValidatedRequest:
    text: str
    pixel_size: int = DEFAULT_SIZE


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    link: str
    size: int = DEFAULT_SIZE

    @field_validator("link", mode="before")
    @classmethod
    def _check_link(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise PydanticCustomError("invalid_type", "Link must be a string")
        text = value.strip()
        if not text:
            raise PydanticCustomError("invalid_string", URL_MESSAGE)
        try:
            url = _url_adapter.validate_python(text)
        except ValidationError:
            raise PydanticCustomError("invalid_string", URL_MESSAGE) from None
        if not url.host:
            raise PydanticCustomError("invalid_string", URL_MESSAGE)
        return text

    @field_validator("size", mode="before")
    @classmethod
    def _check_size(cls, value: Any) -> int:
        if value is None:
            return DEFAULT_SIZE
        number = _coerce_number(value)
        if isinstance(number, float):
            if not number.is_integer():
                raise PydanticCustomError("invalid_type", SIZE_INTEGER_MESSAGE)
            number = int(number)
        if number < MIN_SIZE:
            raise PydanticCustomError(
                "too_small", "Minimum size is {minimum}", {"minimum": MIN_SIZE}
            )
        if number > MAX_SIZE:
            raise PydanticCustomError(
                "too_big", "Maximum size is {maximum}", {"maximum": MAX_SIZE}
            )
        return number


def _coerce_number(value: Any):
    # bool is an int subclass; "true" is not a size.
    if isinstance(value, bool):
        raise PydanticCustomError("invalid_type", SIZE_NUMBER_MESSAGE)
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise PydanticCustomError("invalid_type", SIZE_NUMBER_MESSAGE) from None
    if not isinstance(value, (int, float)) or (isinstance(value, float) and math.isnan(value)):
        raise PydanticCustomError("invalid_type", SIZE_NUMBER_MESSAGE)
    return value


def _issue_from_error(error: Dict[str, Any]) -> ValidationIssue:
    path = ".".join(str(part) for part in error["loc"])
    builtin = _BUILTIN_ERRORS.get(error["type"])
    if builtin:
        return ValidationIssue(path=path, message=builtin["message"], code=builtin["code"])
    return ValidationIssue(path=path, message=error["msg"], code=error["type"])


def validate(payload: Optional[Any]) -> ValidatedRequest:
    """
    Check a decoded request body and return the normalized request.
    Raises RequestValidationError listing every rejected field.
    """
    try:
        parsed = GenerationRequest.model_validate(payload)
    except ValidationError as exc:
        issues = [_issue_from_error(error) for error in exc.errors()]
        summary = "; ".join(
            f"{issue.path or '<body>'}: {issue.message}" for issue in issues
        )
        logger.info("Rejected QR request: %s", summary)
        raise RequestValidationError(issues) from None
    return ValidatedRequest(text=parsed.link, pixel_size=parsed.size)
