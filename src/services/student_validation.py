"""
Validation gate for student creation payloads.

Wraps the StudentCreateRequest model and turns the first pydantic error
into a single human readable message that names the offending field, e.g.
'"enrollment_year" must be less than or equal to 2024'.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError as PydanticValidationError

from models.student import StudentCreateRequest
from utils.errors import ValidationError

logger = logging.getLogger(__name__)


def _describe(error: Dict[str, Any]) -> str:
    """Render one pydantic error entry as a field-qualified message"""
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else "value"
    error_type = error.get("type", "")
    ctx = error.get("ctx") or {}

    if error_type == "missing":
        return f'"{field}" is required'
    if error_type == "model_type":
        return '"value" must be of type object'
    if error_type == "extra_forbidden":
        return f'"{field}" is not allowed'
    if error_type == "string_type":
        return f'"{field}" must be a string'
    if error_type == "string_too_short":
        min_length = ctx.get("min_length", 1)
        if min_length <= 1:
            return f'"{field}" is not allowed to be empty'
        return f'"{field}" length must be at least {min_length} characters long'
    if error_type == "int_from_float":
        return f'"{field}" must be an integer'
    if error_type in ("int_parsing", "int_type", "int_parsing_size"):
        return f'"{field}" must be a number'
    if error_type == "greater_than_equal":
        return f'"{field}" must be greater than or equal to {ctx.get("ge")}'
    if error_type == "less_than_equal":
        return f'"{field}" must be less than or equal to {ctx.get("le")}'
    if error_type == "value_error":
        if field == "email":
            return '"email" must be a valid email'
        if field == "enrollment_year":
            return '"enrollment_year" must be a number'

    return f'"{field}" is invalid'


def validate_student_payload(payload: Any) -> StudentCreateRequest:
    """
    Validate a candidate creation payload.

    Args:
        payload: Decoded JSON body

    Returns:
        StudentCreateRequest with coerced values (content unchanged)

    Raises:
        ValidationError: naming the first offending field
    """
    try:
        return StudentCreateRequest.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = first.get("loc") or ()
        message = _describe(first)
        logger.debug(f"Creation payload rejected: {message}")
        raise ValidationError(message, field=str(loc[0]) if loc else None) from e
