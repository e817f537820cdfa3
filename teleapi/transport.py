"""HTTP transport built on :mod:`requests`.

Blocking calls are offloaded with :func:`asyncio.to_thread` so awaiting a
Bot API method never blocks the event loop.  Transport-level failures
(``requests.RequestException`` and subclasses) are never caught here.
"""

import asyncio
from typing import Any, Dict, Iterator, Optional

import requests

from teleapi.logger import get_logger
from teleapi.payload import MultipartBody, NormalizedBody

API_URL = "https://api.telegram.org/bot"
FILE_URL = "https://api.telegram.org/file/bot"

_DEFAULT_CHUNK_SIZE = 64 * 1024

logger = get_logger("transport")


def method_url(token: str, method: str) -> str:
    return f"{API_URL}{token}/{method}"


def file_url(token: str, file_path: str) -> str:
    return f"{FILE_URL}{token}/{file_path.lstrip('/')}"


def body_kwargs(body: NormalizedBody) -> Dict[str, Any]:
    """Keyword arguments that make :mod:`requests` send *body*.

    Multipart bodies go through ``files=`` so :mod:`requests` writes the
    ``multipart/form-data`` content type and boundary; plain bodies are sent
    as JSON.
    """
    if isinstance(body, MultipartBody):
        return {"files": body.as_requests_files()}
    return {"json": body.fields}


async def make_request(method: str, url: str, **kwargs: Any) -> requests.Response:
    """Run a :mod:`requests` call inside a thread to keep the event loop free.

    *method* is the HTTP verb (``"get"``, ``"post"``, …).
    """
    func = getattr(requests, method.lower())
    return await asyncio.to_thread(func, url, **kwargs)


async def post(url: str, body: NormalizedBody, timeout: Optional[float] = None) -> requests.Response:
    """POST *body* to *url* and return the raw response."""
    return await make_request("post", url, timeout=timeout, **body_kwargs(body))


class FileStream:
    """Forward-only view of a streamed download.

    Wraps a ``requests`` response opened with ``stream=True``.  ``read`` and
    iteration pull from the same body, so a partial ``read`` followed by a
    loop yields the remaining bytes; once the body is drained both return
    nothing.  The caller owns the connection and must either consume the
    stream or close it; use it as a context manager to get both.  The HTTP
    status is exposed but not acted upon.

    ``read`` and iteration block on the socket.  Inside a coroutine use
    :meth:`aread`, which runs ``read`` in a worker thread.
    """

    def __init__(self, response: requests.Response) -> None:
        self._response = response
        self._exhausted = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def ok(self) -> bool:
        return self._response.ok

    @property
    def headers(self) -> Any:
        return self._response.headers

    @property
    def closed(self) -> bool:
        return bool(getattr(self._response.raw, "closed", False))

    def raise_for_status(self) -> None:
        self._response.raise_for_status()

    def read(self, size: Optional[int] = -1) -> bytes:
        """Read up to *size* bytes from the body (everything when negative)."""
        if self._exhausted:
            return b""
        if size is None or size < 0:
            self._exhausted = True
            return self._response.raw.read(decode_content=True)
        data = self._response.raw.read(size, decode_content=True)
        if not data:
            self._exhausted = True
        return data

    async def aread(self, size: Optional[int] = -1) -> bytes:
        """Like :meth:`read`, without blocking the event loop."""
        return await asyncio.to_thread(self.read, size)

    def iter_chunks(self, chunk_size: int = _DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        while True:
            chunk = self.read(chunk_size)
            if not chunk:
                return
            yield chunk

    def __iter__(self) -> Iterator[bytes]:
        return self.iter_chunks()

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> "FileStream":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


async def open_stream(url: str, timeout: Optional[float] = None) -> FileStream:
    """Issue a streaming GET against *url*.

    Returns once the response headers have arrived; the body is read lazily.
    """
    response = await make_request("get", url, stream=True, timeout=timeout)
    logger.debug("File stream opened", extra={"status_code": response.status_code})
    return FileStream(response)
