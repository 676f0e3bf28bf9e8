"""Request body parsing shared by the protocol endpoints."""

from typing import Dict

from starlette.requests import Request

from cpa_auth.core.exceptions import InvalidRequestError


async def read_form(request: Request) -> Dict[str, str]:
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


async def read_params(request: Request) -> Dict[str, str]:
    """Read a form-encoded or JSON request body as string parameters.

    JSON scalars are converted to strings so that both encodings validate
    against the same models; ``null`` values count as absent.

    Raises:
        InvalidRequestError: If a JSON body is malformed or not an object
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("application/json"):
        return await read_form(request)

    try:
        body = await request.json()
    except ValueError as err:
        raise InvalidRequestError("Malformed JSON body") from err

    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")

    return {key: str(value) for key, value in body.items() if value is not None}
