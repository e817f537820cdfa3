"""Tests for the method table: bundled config, binding and aliases."""

import os
import sys
from typing import Any, Mapping, Optional

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from teleapi.models import ApiConfig
from teleapi.registry import (
    alias_table,
    bind,
    load_default_config,
    resolve_config,
    snake_case,
)


class _Recorder:
    """Stand-in for ``TeleAPI.call_method`` that records its arguments."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Optional[Mapping[str, Any]]]] = []

    async def __call__(self, name: str, params: Optional[Mapping[str, Any]] = None) -> str:
        self.calls.append((name, params))
        return name


class TestDefaultConfig:
    """The bundled api.json."""

    def test_loaded_once(self) -> None:
        assert load_default_config() is load_default_config()

    def test_contents(self) -> None:
        cfg = load_default_config()
        assert cfg.version == "5.0"
        assert cfg.methods[0] == "getUpdates"
        assert len(cfg.methods) == len(set(cfg.methods))
        for name in ("getMe", "sendMessage", "sendPhoto", "getFile", "answerCallbackQuery"):
            assert name in cfg.methods


class TestResolveConfig:
    def test_none_means_default(self) -> None:
        assert resolve_config(None) is load_default_config()

    def test_instance_passed_through(self) -> None:
        cfg = ApiConfig(version="x", methods=("getMe",))
        assert resolve_config(cfg) is cfg

    def test_mapping_replaces_default(self) -> None:
        cfg = resolve_config({"version": "1.0-custom", "methods": ["getMe"]})
        assert cfg == ApiConfig(version="1.0-custom", methods=("getMe",))


class TestBinding:
    @pytest.mark.asyncio
    async def test_bound_method_forwards_name_and_params(self) -> None:
        recorder = _Recorder()
        table = bind(("getMe", "sendMessage"), recorder)

        assert list(table) == ["getMe", "sendMessage"]
        assert await table["sendMessage"]({"chat_id": 1}, text="hi") == "sendMessage"
        assert await table["getMe"]() == "getMe"
        assert recorder.calls == [("sendMessage", {"chat_id": 1, "text": "hi"}), ("getMe", None)]

    def test_table_is_immutable(self) -> None:
        table = bind(("getMe",), _Recorder())
        with pytest.raises(TypeError):
            del table["getMe"]  # type: ignore[attr-defined]


class TestAliases:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("getMe", "get_me"),
            ("sendMessage", "send_message"),
            ("setChatAdministratorCustomTitle", "set_chat_administrator_custom_title"),
            ("close", "close"),
        ],
    )
    def test_snake_case(self, name: str, expected: str) -> None:
        assert snake_case(name) == expected

    def test_alias_table_skips_identical_names(self) -> None:
        table = bind(("close", "getMe"), _Recorder())
        assert dict(alias_table(table)) == {"get_me": "getMe"}
