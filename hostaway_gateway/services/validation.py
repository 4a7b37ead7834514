"""Request body parsing; every failure here is a 400 raised before Hostaway is contacted."""
import json
from typing import Any, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from hostaway_gateway.core.errors import InvalidRequestError

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_json_body(request: Request) -> dict:
    raw = await request.body()
    try:
        data = json.loads(raw or b"{}")
    except ValueError:
        raise InvalidRequestError("Invalid JSON body")
    if not isinstance(data, dict):
        raise InvalidRequestError("Invalid JSON body")
    return data


def _translate(exc: ValidationError) -> InvalidRequestError:
    first = exc.errors()[0]
    if first["type"] == "missing":
        return InvalidRequestError(f"Missing field: {first['loc'][0]}")

    cause = first.get("ctx", {}).get("error")
    if isinstance(cause, Exception):
        return InvalidRequestError(str(cause), hint=getattr(cause, "hint", None))

    field = ".".join(str(part) for part in first["loc"]) or "body"
    return InvalidRequestError(f"Invalid field: {field}", details=first["msg"])


def parse_request(model: Type[ModelT], data: dict) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise _translate(exc)
