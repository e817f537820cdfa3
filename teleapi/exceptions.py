"""Exception hierarchy for the teleapi client.

Transport failures are not wrapped: anything raised by :mod:`requests`
(connection errors, timeouts, HTTP errors without a JSON body) reaches the
caller unchanged.  Only a response the Bot API itself marked as failed
becomes an :class:`APIError`.
"""

from typing import Any, Dict, Mapping, Optional


class APIError(Exception):
    """The Bot API answered with ``"ok": false``.

    Attributes:
        method: Name of the Bot API method that was called.
        params: The parameter mapping the call was made with.
        message: Human-readable ``description`` from the envelope.
        code: ``error_code`` from the envelope, or ``None``.
        retry_after: Flood-control hint in seconds, or ``None``.
        migrate_to_chat_id: Supergroup id the chat moved to, or ``None``.
        status_code: HTTP status code of the response.
        response_body: Raw envelope as a dict.
    """

    def __init__(
        self,
        method: str,
        params: Optional[Mapping[str, Any]],
        message: str,
        code: Optional[int] = None,
        retry_after: Optional[int] = None,
        migrate_to_chat_id: Optional[int] = None,
        status_code: Optional[int] = None,
        response_body: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.method = method
        self.params = dict(params or {})
        self.message = message
        self.code = code
        self.retry_after = retry_after
        self.migrate_to_chat_id = migrate_to_chat_id
        self.status_code = status_code
        self.response_body = response_body or {}
        if code is None:
            super().__init__(f"{method}: {message}")
        else:
            super().__init__(f"{method} failed with {code}: {message}")
