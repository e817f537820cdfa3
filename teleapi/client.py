"""TeleAPI -- a Bot API client bound to one bot token.

Every method named in the configured method table is exposed as an
awaitable callable, both through :attr:`TeleAPI.methods` and as an
attribute::

    api = TeleAPI(token)
    me = await api.getMe()
    await api.sendMessage({"chat_id": 42, "text": "hello"})
    await api.send_message(chat_id=42, text="hello")  # snake_case alias

Names outside the table go through :meth:`TeleAPI.call_method`.
Calls resolve to the envelope's ``result`` and raise either
:class:`~teleapi.exceptions.APIError` or the transport's own exception.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from teleapi import transport
from teleapi.config import Settings, load_settings
from teleapi.envelope import translate
from teleapi.logger import get_logger
from teleapi.models import ApiConfig
from teleapi.payload import normalize
from teleapi.registry import BoundMethod, alias_table, bind, resolve_config

logger = get_logger("client")


class TeleAPI:
    """Client-side wrapper for the Telegram Bot API.

    Args:
        token: Bot token.  An empty token is accepted; the Bot API rejects
            the calls made with it.
        config: Method table overriding the bundled one, either an
            :class:`ApiConfig` or a mapping with ``version`` and ``methods``.
        timeout: Per-request timeout in seconds handed to :mod:`requests`.
            ``None`` leaves the transport default in place.
    """

    def __init__(
        self,
        token: str = "",
        config: Union[ApiConfig, Mapping[str, Any], None] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._token = token
        self._timeout = timeout
        self._config = resolve_config(config)
        self._methods = bind(self._config.methods, self.call_method)
        self._aliases = alias_table(self._methods)
        logger.debug(
            "Client created",
            extra={"api_version": self._config.version, "method_count": len(self._methods)},
        )

    @classmethod
    def from_env(cls, settings: Settings | None = None, **kwargs: Any) -> "TeleAPI":
        """Create a client from :func:`~teleapi.config.load_settings`."""
        settings = settings or load_settings()
        kwargs.setdefault("timeout", settings.timeout)
        return cls(settings.bot_token, **kwargs)

    # ------------------------------------------------------------------
    #  Introspection
    # ------------------------------------------------------------------

    @property
    def token(self) -> str:
        return self._token

    @property
    def version(self) -> str:
        """Bot API version of the method table in use."""
        return self._config.version

    @property
    def config(self) -> ApiConfig:
        return self._config

    @property
    def methods(self) -> Mapping[str, BoundMethod]:
        """Read-only ``name -> BoundMethod`` table, in configuration order."""
        return self._methods

    def __getattr__(self, name: str) -> BoundMethod:
        # Only reached for names that are not regular attributes.
        if name.startswith("_"):
            raise AttributeError(name)
        methods = self.__dict__.get("_methods", {})
        aliases = self.__dict__.get("_aliases", {})
        if name in methods:
            return methods[name]
        if name in aliases:
            return methods[aliases[name]]
        raise AttributeError(f"{type(self).__name__!r} has no bound method {name!r}")

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._methods) | set(self._aliases))

    def __repr__(self) -> str:
        return f"TeleAPI(version={self.version!r}, methods={len(self._methods)})"

    # ------------------------------------------------------------------
    #  Requests
    # ------------------------------------------------------------------

    async def call_method(self, method: str, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Any:
        """Call any Bot API *method*, bound or not, and return its result.

        Raises:
            APIError: The Bot API answered with ``"ok": false``.
            requests.RequestException: On transport-level failures.
        """
        if kwargs:
            params = {**(params or {}), **kwargs}
        body = normalize(params)
        logger.debug(
            "Calling Bot API method",
            extra={"api_method": method, "multipart": body.is_multipart, "param_names": sorted(params or {})},
        )
        response = await transport.post(transport.method_url(self._token, method), body, timeout=self._timeout)
        result = translate(method, params, response)
        logger.debug("Bot API call succeeded", extra={"api_method": method, "status_code": response.status_code})
        return result

    async def open_file_stream(self, file_path: str) -> transport.FileStream:
        """Open a streaming download of *file_path* from the file endpoint.

        *file_path* is the ``file_path`` a ``getFile`` call returned.  The
        returned :class:`~teleapi.transport.FileStream` must be consumed or
        closed by the caller.  HTTP errors are not raised; check
        ``stream.ok`` or call ``stream.raise_for_status()``.  The request is made
        in a worker thread; reading the body afterwards is up to the caller
        (see :meth:`~teleapi.transport.FileStream.aread`).
        """
        return await transport.open_stream(transport.file_url(self._token, file_path), timeout=self._timeout)
