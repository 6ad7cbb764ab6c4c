"""Inbound request validation."""

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from seo_copilot.utils.exceptions import InvalidRequestError

M = TypeVar("M", bound=BaseModel)


def parse_request(model: Type[M], payload: Any, message: Optional[str] = None) -> M:
    """Validate an inbound payload into `model`.

    Args:
        model: Request model
        payload: Model instance or camelCase/snake_case mapping
        message: Human-readable message used instead of the pydantic one

    Raises:
        InvalidRequestError: payload is missing fields or carries bad values
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"]) or model.__name__
        raise InvalidRequestError(message or f"Invalid {field}: {first['msg']}")
