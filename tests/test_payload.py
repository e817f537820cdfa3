"""Tests for request-body normalization."""

import io
import json
import os
import re
import sys
from unittest.mock import patch

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from teleapi.models import ResponseParameters
from teleapi.payload import (
    BinaryBuffer,
    BinaryStream,
    InputFile,
    MultipartBody,
    PlainBody,
    Scalar,
    Structured,
    classify,
    normalize,
)

PNG_HEADER = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
)

GENERATED_NAME = re.compile(r"^data-\d{13}\.(\w*)$")


# ── classify ─────────────────────────────────────────────────────────────────


class TestClassify:
    """Each raw value maps onto exactly one variant."""

    @pytest.mark.parametrize("value", ["hi", 42, 3.5, True, False])
    def test_scalars(self, value) -> None:
        assert classify(value) == Scalar(value)

    @pytest.mark.parametrize("value", [{"a": 1}, [1, 2], (1, 2), None])
    def test_structured(self, value) -> None:
        assert isinstance(classify(value), Structured)

    def test_bytes_and_buffers(self) -> None:
        assert classify(b"abc") == BinaryBuffer(b"abc")
        assert classify(bytearray(b"abc")) == BinaryBuffer(b"abc")
        assert classify(memoryview(b"abc")) == BinaryBuffer(b"abc")

    def test_readable_object_is_stream(self) -> None:
        stream = io.BytesIO(b"abc")
        field = classify(stream)
        assert isinstance(field, BinaryStream)
        assert field.stream is stream
        assert field.filename is None

    def test_stream_name_is_passed_through(self, tmp_path) -> None:
        path = tmp_path / "report.pdf"
        path.write_bytes(b"%PDF-1.4")
        with open(path, "rb") as fh:
            field = classify(fh)
        assert field.filename == "report.pdf"

    def test_input_file_wraps_bytes(self) -> None:
        field = classify(InputFile(b"abc", filename="a.bin", mime_type="application/x-test"))
        assert field == BinaryBuffer(b"abc", "a.bin", "application/x-test")

    def test_input_file_wraps_stream(self) -> None:
        stream = io.BytesIO(b"abc")
        field = classify(InputFile(stream, mime_type="audio/ogg"))
        assert isinstance(field, BinaryStream)
        assert field.mime_type == "audio/ogg"

    def test_file_like_mapping_is_structured(self) -> None:
        wrapper = {"value": "AgACAgIAAxkBAAIB", "filename": "a.jpg", "mime": "image/jpeg"}
        assert classify(wrapper) == Structured(wrapper)
        assert not normalize({"photo": wrapper}).is_multipart

    @pytest.mark.parametrize("value", ["AgACAgIAAxkBAAIB", 42, None, {"value": b"abc"}])
    def test_input_file_rejects_non_binary(self, value) -> None:
        with pytest.raises(TypeError):
            InputFile(value)


# ── Plain bodies ─────────────────────────────────────────────────────────────


class TestPlainBody:
    """Parameter sets without binary data stay a flat mapping."""

    def test_empty_params(self) -> None:
        assert normalize({}) == PlainBody({})
        assert normalize(None) == PlainBody({})

    def test_scalars_kept_verbatim(self) -> None:
        body = normalize({"chat_id": 42, "text": "hello", "disable_notification": True})
        assert isinstance(body, PlainBody)
        assert body.is_multipart is False
        assert body.fields == {"chat_id": 42, "text": "hello", "disable_notification": True}

    def test_structured_values_become_json_text(self) -> None:
        markup = {"inline_keyboard": [[{"text": "Yes", "callback_data": "y"}]]}
        body = normalize({"chat_id": 1, "reply_markup": markup, "allowed_updates": ["message"]})
        assert json.loads(body.fields["reply_markup"]) == markup
        assert body.fields["allowed_updates"] == '["message"]'

    def test_order_preserved_and_nothing_dropped(self) -> None:
        params = {"z": 1, "a": {"k": "v"}, "m": "x"}
        assert list(normalize(params).fields) == ["z", "a", "m"]

    def test_none_serialised_as_null(self) -> None:
        assert normalize({"caption": None}).fields == {"caption": "null"}

    def test_pydantic_models_are_dumped(self) -> None:
        body = normalize({"parameters": ResponseParameters(retry_after=5)})
        assert json.loads(body.fields["parameters"]) == {"retry_after": 5}

    def test_non_ascii_kept(self) -> None:
        body = normalize({"options": ["да", "нет"]})
        assert body.fields["options"] == '["да","нет"]'

    def test_idempotent(self) -> None:
        params = {"chat_id": 1, "entities": [{"type": "bold", "offset": 0, "length": 2}]}
        assert normalize(params) == normalize(params)


# ── Multipart bodies ─────────────────────────────────────────────────────────


class TestMultipartBody:
    """A single binary value switches the whole body to multipart."""

    @patch("teleapi.payload.sniff", return_value=("image/png", "png"))
    def test_every_field_becomes_a_part(self, _sniff) -> None:
        body = normalize({
            "chat_id": 42,
            "photo": PNG_HEADER,
            "reply_markup": {"remove_keyboard": True},
            "disable_notification": True,
        })
        assert isinstance(body, MultipartBody)
        assert body.is_multipart is True
        assert [p.name for p in body.parts] == ["chat_id", "photo", "reply_markup", "disable_notification"]

        chat_id, photo, markup, flag = body.parts
        assert (chat_id.content, chat_id.content_type, chat_id.filename) == ("42", None, None)
        assert photo.content == PNG_HEADER
        assert photo.content_type == "image/png"
        assert GENERATED_NAME.match(photo.filename).group(1) == "png"
        assert markup.content == '{"remove_keyboard":true}'
        assert markup.content_type == "application/json"
        assert flag.content == "true"

    @patch("teleapi.payload.sniff", return_value=(None, ""))
    def test_unrecognised_bytes_fall_back(self, _sniff) -> None:
        body = normalize({"document": b"\x00\x01\x02"})
        part = body.parts[0]
        assert part.content_type == "application/octet-stream"
        assert GENERATED_NAME.match(part.filename).group(1) == ""

    @patch("teleapi.payload.sniff", return_value=("image/png", "png"))
    def test_declared_name_and_type_win(self, _sniff) -> None:
        body = normalize({"photo": InputFile(PNG_HEADER, filename="cat.png", mime_type="image/x-cat")})
        part = body.parts[0]
        assert part.filename == "cat.png"
        assert part.content_type == "image/x-cat"

    def test_stream_passed_through_untouched(self) -> None:
        stream = io.BytesIO(b"OggS....")
        body = normalize({"voice": stream, "chat_id": 1})
        part = body.parts[0]
        assert part.content is stream
        assert part.content_type is None
        assert part.filename is None

    def test_stream_with_declared_metadata(self) -> None:
        stream = io.BytesIO(b"OggS....")
        body = normalize({"voice": InputFile(stream, filename="note.ogg", mime_type="audio/ogg")})
        part = body.parts[0]
        assert (part.filename, part.content_type) == ("note.ogg", "audio/ogg")

    @patch("teleapi.payload.sniff", return_value=("image/png", "png"))
    def test_idempotent_apart_from_generated_names(self, _sniff) -> None:
        params = {"chat_id": 1, "photo": PNG_HEADER, "caption_entities": [{"type": "bold"}]}
        first, second = normalize(params), normalize(params)
        assert [(p.name, p.content, p.content_type) for p in first.parts] == \
               [(p.name, p.content, p.content_type) for p in second.parts]
        for part in (first.parts[1], second.parts[1]):
            assert GENERATED_NAME.match(part.filename)

    @patch("teleapi.payload.sniff", return_value=("image/png", "png"))
    def test_requests_encodes_parts_in_order(self, _sniff) -> None:
        body = normalize({"chat_id": 42, "photo": PNG_HEADER, "reply_markup": {"force_reply": True}})
        prepared = requests.Request(
            "POST", "https://api.telegram.org/botTOKEN/sendPhoto", files=body.as_requests_files(),
        ).prepare()

        assert prepared.headers["Content-Type"].startswith("multipart/form-data; boundary=")
        raw = prepared.body
        chat_pos = raw.index(b'name="chat_id"')
        photo_pos = raw.index(b'name="photo"; filename="data-')
        markup_pos = raw.index(b'name="reply_markup"')
        assert chat_pos < photo_pos < markup_pos
        assert b"Content-Type: image/png" in raw
        assert b"Content-Type: application/json" in raw
        assert PNG_HEADER in raw


# ── Content sniffing ─────────────────────────────────────────────────────────


class TestSniffing:
    """Real libmagic detection, skipped where libmagic is unavailable."""

    def test_png_detected(self) -> None:
        pytest.importorskip("magic")
        from teleapi.sniff import sniff

        assert sniff(PNG_HEADER) == ("image/png", "png")

    def test_empty_bytes_not_sniffed(self) -> None:
        from teleapi.sniff import sniff

        assert sniff(b"") == (None, "")
