"""Request body parsing and validation."""

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from fastapi import Request
from pydantic import ValidationError

from app.models.auth import Denial, RequestModel

logger = logging.getLogger("wellness")

M = TypeVar("M", bound=RequestModel)


@dataclass(frozen=True)
class Validated(Generic[M]):
    """A request body that passed validation."""

    data: M

    @property
    def fields_set(self) -> set[str]:
        """Names of the fields that were present in the body."""
        return set(self.data.model_fields_set)


ValidationResult = Union[Validated[M], Denial]


def format_errors(model: type[RequestModel], exc: ValidationError) -> dict[str, list[str]]:
    """
    Convert pydantic errors to ``{field: [message]}`` keyed by wire name.

    Only the first failure of each field is reported. A null string reads as
    a missing one.
    """
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "body"
        if field in errors:
            continue

        if err["type"] == "missing" or (err["type"] == "string_type" and err.get("input") is None):
            message = f"{model.label(field)} is required"
        elif err["type"] == "value_error" and "error" in err.get("ctx", {}):
            message = str(err["ctx"]["error"])
        else:
            message = err["msg"]
        errors[field] = [message]
    return errors


async def read_json(request: Request) -> Union[dict, Denial]:
    """Parse the request body as a JSON object."""
    try:
        payload = await request.json()
    except ValueError as e:
        logger.debug(f"Invalid JSON body: {e}")
        return Denial(status_code=400, error="Invalid request data")

    if not isinstance(payload, dict):
        return Denial(status_code=400, error="Invalid request data")
    return payload


async def validate_body(request: Request, model: type[M]) -> ValidationResult:
    """
    Parse and validate the JSON body against ``model``.

    Returns:
        Validated data, or a 400 denial listing per-field messages
    """
    payload = await read_json(request)
    if isinstance(payload, Denial):
        return payload

    try:
        return Validated(model.model_validate(payload))
    except ValidationError as e:
        errors = format_errors(model, e)
        logger.info(f"Validation failed for {request.url.path}: {errors}")
        return Denial(status_code=400, errors=errors)
