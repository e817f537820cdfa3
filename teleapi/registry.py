"""Method table -- the bundled Bot API method list and bound callables.

The table is built once from an :class:`~teleapi.models.ApiConfig` and is
read-only afterwards.  Each entry is a :class:`BoundMethod` that forwards to
a single "call by name" coroutine, so every bound method behaves exactly
like ``client.call_method(name, ...)``.
"""

from __future__ import annotations

import dataclasses
import functools
import json
import re
from importlib import resources
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from teleapi.models import ApiConfig

CallFunc = Callable[[str, Optional[Mapping[str, Any]]], Awaitable[Any]]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@functools.lru_cache(maxsize=1)
def load_default_config() -> ApiConfig:
    """Load ``api.json`` shipped inside the package."""
    raw = resources.files("teleapi").joinpath("api.json").read_text(encoding="utf-8")
    return ApiConfig.model_validate(json.loads(raw))


def resolve_config(config: Union[ApiConfig, Mapping[str, Any], None]) -> ApiConfig:
    """Return *config* as an :class:`ApiConfig`; ``None`` means the bundled one.

    A supplied configuration replaces the bundled method list entirely.
    """
    if config is None:
        return load_default_config()
    if isinstance(config, ApiConfig):
        return config
    return ApiConfig.model_validate(dict(config))


def snake_case(name: str) -> str:
    """``sendMessage`` -> ``send_message``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


@dataclasses.dataclass(frozen=True, slots=True)
class BoundMethod:
    """Awaitable callable fixed to one Bot API method name.

    Parameters may be given as a mapping, as keyword arguments, or both;
    keyword arguments win on conflicting keys.
    """

    name: str
    _call: CallFunc = dataclasses.field(repr=False, compare=False)

    def __call__(self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Awaitable[Any]:
        if kwargs:
            params = {**(params or {}), **kwargs}
        return self._call(self.name, params)


def bind(methods: tuple[str, ...], call: CallFunc) -> Mapping[str, BoundMethod]:
    """Build the read-only ``name -> BoundMethod`` table for *methods*."""
    return MappingProxyType({name: BoundMethod(name, call) for name in methods})


def alias_table(methods: Mapping[str, BoundMethod]) -> Mapping[str, str]:
    """Map snake_case aliases onto the camelCase names they stand for."""
    aliases = {}
    for name in methods:
        alias = snake_case(name)
        if alias != name and alias not in methods:
            aliases[alias] = name
    return MappingProxyType(aliases)
