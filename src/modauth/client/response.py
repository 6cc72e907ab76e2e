"""Response decoding -- map :class:`httpx.Response` bodies onto models.

mod.io answers every request with JSON. Successful responses are
validated against the pydantic model the caller expects; failed ones carry
an error envelope::

    {"error": {"code": 401, "error_ref": 11005, "message": "..."}}

from which :func:`error_message` extracts the human-readable part.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from modauth.exceptions import ResponseDecodeError

M = TypeVar("M", bound=BaseModel)


def extract_response_data(response: httpx.Response) -> Any:
    """Return the JSON body of *response*, or ``None`` if it has none.

    Raises:
        ResponseDecodeError: If the body is present but not valid JSON.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise ResponseDecodeError(
            f"Response from {response.request.url.path} is not valid JSON: {exc}"
        ) from exc


def decode_payload(response: httpx.Response, model: type[M]) -> M:
    """Validate the JSON body of *response* into *model*.

    Raises:
        ResponseDecodeError: If the body is missing, not JSON, or does not
            match *model*.
    """
    data = extract_response_data(response)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ResponseDecodeError(
            f"Unexpected {model.__name__} payload from "
            f"{response.request.url.path}: {exc.error_count()} validation error(s)"
        ) from exc


def error_message(response: httpx.Response) -> str:
    """Best-effort human-readable message from an error response."""
    try:
        detail = response.json()
    except ValueError:
        return response.text[:200] if response.text else ""

    if isinstance(detail, dict):
        inner = detail.get("error")
        if isinstance(inner, dict):
            return str(inner.get("message") or "")
        return str(detail.get("message") or inner or "")
    return str(detail)


def retry_after(response: httpx.Response) -> Optional[int]:
    """Seconds the server asks us to wait before retrying, if it says."""
    for header in ("retry-after", "x-ratelimit-retryafter"):
        value = response.headers.get(header)
        if value is not None and value.strip().isdigit():
            return int(value.strip())
    return None
