"""Translation of Bot API responses into results or :class:`APIError`.

Any response whose envelope says ``"ok": false`` becomes an
:class:`~teleapi.exceptions.APIError`, regardless of the HTTP status it
arrived with.  Bodies that are not JSON, or JSON that is not an envelope,
surface as the decoder's or validator's own exception.
"""

from typing import Any, Mapping, Optional

import requests

from teleapi.exceptions import APIError
from teleapi.logger import get_logger
from teleapi.models import ResponseEnvelope

logger = get_logger("envelope")


def parse_envelope(response: requests.Response) -> ResponseEnvelope:
    """Decode and validate the JSON envelope carried by *response*.

    Raises:
        requests.HTTPError: Non-2xx response whose body is not JSON.
        requests.JSONDecodeError: 2xx response whose body is not JSON.
        pydantic.ValidationError: JSON body that is not a valid envelope.
    """
    try:
        body = response.json()
    except ValueError:
        response.raise_for_status()
        raise
    return ResponseEnvelope.model_validate(body)


def error_from_envelope(
    method: str,
    params: Optional[Mapping[str, Any]],
    envelope: ResponseEnvelope,
    status_code: Optional[int] = None,
) -> APIError:
    return APIError(
        method=method,
        params=params,
        message=envelope.description or "Unknown error",
        code=envelope.error_code,
        retry_after=envelope.retry_hint,
        migrate_to_chat_id=envelope.migration_hint,
        status_code=status_code,
        response_body=envelope.model_dump(exclude_unset=True),
    )


def translate(method: str, params: Optional[Mapping[str, Any]], response: requests.Response) -> Any:
    """Return the ``result`` of a successful call or raise :class:`APIError`."""
    envelope = parse_envelope(response)
    if not envelope.ok:
        logger.debug(
            "Bot API reported failure",
            extra={
                "api_method": method,
                "status_code": response.status_code,
                "error_code": envelope.error_code,
                "description": envelope.description,
            },
        )
        raise error_from_envelope(method, params, envelope, response.status_code)
    return envelope.result
