"""teleapi -- asynchronous Telegram Bot API client.

Usage::

    from teleapi import TeleAPI, InputFile, APIError

    api = TeleAPI(token)
    await api.sendPhoto(chat_id=42, photo=InputFile(data, filename="cat.png"))

``API_VERSION`` and ``API_METHODS`` describe the bundled method table.
"""

from teleapi.client import TeleAPI
from teleapi.exceptions import APIError
from teleapi.models import ApiConfig
from teleapi.payload import InputFile
from teleapi.registry import load_default_config

__version__ = "1.0.0"

API_VERSION: str = load_default_config().version
API_METHODS: tuple[str, ...] = load_default_config().methods

__all__ = [
    "TeleAPI",
    "APIError",
    "ApiConfig",
    "InputFile",
    "API_VERSION",
    "API_METHODS",
]
