"""Guard context managers for common validation patterns."""

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from cpa_auth.core.exceptions import InvalidRequestError, OAuthError

M = TypeVar("M", bound=BaseModel)


def describe_validation_error(err: ValidationError) -> str:
    """Summarize a pydantic validation error as a protocol error description."""
    messages = []
    for item in err.errors():
        field = ".".join(str(part) for part in item["loc"]) or "request"
        if item["type"] in ("missing", "string_too_short"):
            messages.append(f"Missing {field}")
        elif item["type"] == "extra_forbidden":
            messages.append(f"Unexpected parameter: {field}")
        else:
            messages.append(f"Invalid {field}: {item['msg']}")
    return "; ".join(messages)


@contextmanager
def guard_params(model: type[M], params: Mapping[str, Any]) -> Iterator[M]:
    """Guard that validates request parameters against a schema.

    Args:
        model: Pydantic model describing the parameters
        params: Raw query, form or JSON parameters

    Yields:
        The validated model instance

    Raises:
        InvalidRequestError: If the parameters do not match the schema

    Example:
        with guard_params(RefreshTokenGrant, params) as grant:
            ...
    """
    try:
        parsed = model.model_validate(dict(params))
    except ValidationError as err:
        raise InvalidRequestError(describe_validation_error(err)) from err
    yield parsed


@contextmanager
def guard_not_none(value: Optional[Any], error: OAuthError) -> Iterator[Any]:
    """Guard that ensures a lookup returned a value.

    Args:
        value: The value to check
        error: Protocol error raised if value is None

    Yields:
        Any: The non-None value

    Example:
        with guard_not_none(client, InvalidClientError("Unknown client")) as found:
            ...
    """
    if value is None:
        raise error
    yield value


@contextmanager
def guard_condition(condition: bool, error: OAuthError) -> Iterator[None]:
    """Guard that ensures a condition is true.

    Args:
        condition: The condition to check
        error: Protocol error raised if the condition is false
    """
    if not condition:
        raise error
    yield
