"""
Common schema types used across the API.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import AfterValidator, AnyUrl, BaseModel, TypeAdapter, ValidationError

from learnpath.kernel.exceptions import InvalidPayload

M = TypeVar("M", bound=BaseModel)

_url_adapter = TypeAdapter(AnyUrl)


def flatten_errors(errors: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into field/message/type triples."""
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in errors
    ]


def parse_payload(model: Type[M], payload: Union[M, Mapping[str, Any]]) -> M:
    """
    Validate a raw payload against ``model``.

    Already-validated instances pass through untouched so their
    ``model_fields_set`` survives.

    Raises:
        InvalidPayload: If validation fails
    """
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPayload("Validation error", errors=flatten_errors(exc.errors())) from exc


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps (SQLite drops the offset) and convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


def check_urls(urls: List[str]) -> List[str]:
    """Validate every entry as an absolute URL, keeping the caller's spelling."""
    for url in urls:
        try:
            _url_adapter.validate_python(url)
        except ValidationError:
            raise ValueError(f"Invalid url: {url!r}")
    return urls


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: Optional[str] = None
    errors: Optional[List[Dict[str, Any]]] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"
