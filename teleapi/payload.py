"""Request-body normalization.

A parameter mapping is turned into one of two bodies:

* :class:`PlainBody` -- a flat mapping sent as JSON.  Scalars are kept as
  they are, structured values (dicts, lists, pydantic models, ``None``) are
  embedded as JSON text, which is how the Bot API expects nested objects
  such as ``reply_markup``.
* :class:`MultipartBody` -- an ordered list of form parts, selected as soon
  as a single value carries binary data.  Every field becomes its own part.

Values are first mapped onto a small tagged union (:class:`Scalar`,
:class:`Structured`, :class:`BinaryBuffer`, :class:`BinaryStream`) by
:func:`classify`; the encoding rules then only look at the variant.
"""

from __future__ import annotations

import dataclasses
import json
import os
import time
from typing import IO, Any, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel

from teleapi.sniff import OCTET_STREAM, sniff

JSON_CONTENT_TYPE = "application/json"

ScalarValue = Union[str, int, float, bool]


# ── Caller-facing file wrapper ───────────────────────────────────────────────


@dataclasses.dataclass(frozen=True)
class InputFile:
    """Binary payload with an explicit filename and/or MIME type.

    *value* is either raw bytes or a readable binary stream.
    """

    value: Union[bytes, bytearray, memoryview, IO[bytes]]
    filename: Optional[str] = None
    mime_type: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray, memoryview)) and not callable(
            getattr(self.value, "read", None)
        ):
            raise TypeError(
                f"InputFile value must be bytes or a readable stream, not {type(self.value).__name__}"
            )


# ── Field variants ───────────────────────────────────────────────────────────


@dataclasses.dataclass(frozen=True, slots=True)
class Scalar:
    value: ScalarValue


@dataclasses.dataclass(frozen=True, slots=True)
class Structured:
    value: Any


@dataclasses.dataclass(frozen=True, slots=True)
class BinaryBuffer:
    data: bytes
    filename: Optional[str] = None
    mime_type: Optional[str] = None


@dataclasses.dataclass(frozen=True, slots=True)
class BinaryStream:
    stream: IO[bytes]
    filename: Optional[str] = None
    mime_type: Optional[str] = None


Field = Union[Scalar, Structured, BinaryBuffer, BinaryStream]


# ── Normalized bodies ────────────────────────────────────────────────────────


@dataclasses.dataclass(frozen=True, slots=True)
class MultipartPart:
    """A single ``multipart/form-data`` part."""

    name: str
    content: Union[str, bytes, IO[bytes]]
    content_type: Optional[str] = None
    filename: Optional[str] = None


@dataclasses.dataclass(slots=True)
class PlainBody:
    fields: dict[str, Any] = dataclasses.field(default_factory=dict)

    is_multipart = False


@dataclasses.dataclass(slots=True)
class MultipartBody:
    parts: List[MultipartPart] = dataclasses.field(default_factory=list)

    is_multipart = True

    def as_requests_files(self) -> List[Tuple[str, tuple]]:
        """Render the parts in the ``files=`` shape :mod:`requests` encodes.

        Order is preserved; parts without a content type are emitted as
        two-tuples so no ``Content-Type`` header is written for them.
        """
        files: List[Tuple[str, tuple]] = []
        for part in self.parts:
            if part.content_type is None:
                files.append((part.name, (part.filename, part.content)))
            else:
                files.append((part.name, (part.filename, part.content, part.content_type)))
        return files


NormalizedBody = Union[PlainBody, MultipartBody]


# ── Classification ───────────────────────────────────────────────────────────


def _stream_name(stream: Any) -> Optional[str]:
    name = getattr(stream, "name", None)
    if isinstance(name, str) and name and not name.startswith("<"):
        return os.path.basename(name)
    return None


def classify(value: Any) -> Field:
    """Map a raw parameter value onto its :data:`Field` variant."""
    if isinstance(value, InputFile):
        if isinstance(value.value, (bytes, bytearray, memoryview)):
            return BinaryBuffer(bytes(value.value), value.filename, value.mime_type)
        return BinaryStream(value.value, value.filename or _stream_name(value.value), value.mime_type)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BinaryBuffer(bytes(value))
    if isinstance(value, (str, int, float)):
        return Scalar(value)
    if callable(getattr(value, "read", None)):
        return BinaryStream(value, _stream_name(value))
    return Structured(value)


def needs_multipart(fields: Mapping[str, Field]) -> bool:
    return any(isinstance(field, (BinaryBuffer, BinaryStream)) for field in fields.values())


# ── Encoding helpers ─────────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", exclude_none=True)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def to_json(value: Any) -> str:
    """Serialize a structured value the way ``JSON.stringify`` would."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=_json_default)


def _scalar_text(value: ScalarValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def generated_filename(extension: str) -> str:
    """``data-<unix millis>.<extension>`` for uploads that carry no name."""
    return f"data-{int(time.time() * 1000)}.{extension}"


def _buffer_part(name: str, field: BinaryBuffer) -> MultipartPart:
    sniffed_type, extension = sniff(field.data)
    return MultipartPart(
        name=name,
        content=field.data,
        content_type=field.mime_type or sniffed_type or OCTET_STREAM,
        filename=field.filename or generated_filename(extension),
    )


# ── Public entry point ───────────────────────────────────────────────────────


def normalize(params: Optional[Mapping[str, Any]]) -> NormalizedBody:
    """Turn a parameter mapping into a request body.

    An empty or missing mapping yields an empty :class:`PlainBody`.
    """
    fields = {name: classify(value) for name, value in (params or {}).items()}

    if not needs_multipart(fields):
        plain = PlainBody()
        for name, field in fields.items():
            if isinstance(field, Structured):
                plain.fields[name] = to_json(field.value)
            else:
                plain.fields[name] = field.value
        return plain

    body = MultipartBody()
    for name, field in fields.items():
        if isinstance(field, BinaryStream):
            body.parts.append(MultipartPart(name, field.stream, field.mime_type, field.filename))
        elif isinstance(field, BinaryBuffer):
            body.parts.append(_buffer_part(name, field))
        elif isinstance(field, Structured):
            body.parts.append(MultipartPart(name, to_json(field.value), JSON_CONTENT_TYPE))
        else:
            body.parts.append(MultipartPart(name, _scalar_text(field.value)))
    return body
