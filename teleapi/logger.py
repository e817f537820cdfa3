"""TeleapiLogger -- JSON log output for the ``teleapi`` logger hierarchy.

Library modules log through :func:`get_logger`, which only hands out
children of the ``teleapi`` logger.  Nothing is printed until an
application calls :func:`configure_logging`; until then the package logger
carries a :class:`logging.NullHandler`.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import IO, Optional

ROOT_LOGGER_NAME = "teleapi"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class _JsonFormatter(logging.Formatter):
    """Format every log record as a single-line JSON object.

    Standard fields (timestamp, level, logger, message, module, func_name)
    are always present.  Key-value pairs passed through ``extra`` are merged
    into the object, so request context travels with the record::

        logger.debug("Request sent", extra={"api_method": "sendPhoto", "multipart": True})

    Produces::

        {"timestamp": "…", "level": "DEBUG", …, "api_method": "sendPhoto", "multipart": true}
    """

    # Keys that belong to the standard LogRecord; everything else is extra.
    _BUILTIN_ATTRS: frozenset[str] = frozenset(vars(logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None,
    ))) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func_name": record.funcName,
        }

        for key, value in record.__dict__.items():
            if key not in self._BUILTIN_ATTRS and key not in log_entry:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class TeleapiLogger:
    """Singleton that attaches JSON handlers to the ``teleapi`` logger.

    Usage::

        from teleapi.logger import TeleapiLogger

        TeleapiLogger(logging.DEBUG, log_file="logs/teleapi.log")
    """

    _instance: Optional["TeleapiLogger"] = None
    _logger: Optional[logging.Logger] = None

    # Rotation settings
    _MAX_BYTES: int = 5 * 1024 * 1024  # 5 MB
    _BACKUP_COUNT: int = 5

    def __new__(
        cls,
        level: int = logging.INFO,
        log_file: Optional[str] = None,
        stream: Optional[IO[str]] = None,
    ) -> "TeleapiLogger":
        """Ensure handlers are attached only once (Singleton)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init_logger(level, log_file, stream)
        else:
            cls._instance._set_level(level)
        return cls._instance

    def _init_logger(self, level: int, log_file: Optional[str], stream: Optional[IO[str]]) -> None:
        self._logger = logging.getLogger(ROOT_LOGGER_NAME)
        formatter = _JsonFormatter()

        # None means sys.stderr at the time of the call.
        stream_handler = logging.StreamHandler(stream)
        stream_handler.setFormatter(formatter)
        self._logger.addHandler(stream_handler)

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=self._MAX_BYTES,
                backupCount=self._BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            self._logger.addHandler(file_handler)

        self._set_level(level)

    def _set_level(self, level: int) -> None:
        assert self._logger is not None
        self._logger.setLevel(level)
        for handler in self._logger.handlers:
            handler.setLevel(level)

    def cleanup(self) -> None:
        """Flush, close and detach every handler this singleton added."""
        if self._logger is None:
            return
        for handler in list(self._logger.handlers):
            if isinstance(handler, logging.NullHandler):
                continue
            target = getattr(handler, "stream", None)
            if target is None or not getattr(target, "closed", False):
                handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
        TeleapiLogger._instance = None


def get_logger(name: str) -> logging.Logger:
    """Return the ``teleapi.<name>`` child logger."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    level: int | str = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """Attach JSON handlers to the package logger and return it.

    *level* may be a level number or a name such as ``"DEBUG"``.  Console
    output goes to *stream*, or to ``sys.stderr`` when it is ``None``.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    instance = TeleapiLogger(level, log_file, stream)
    assert instance._logger is not None  # guaranteed by __new__
    return instance._logger
