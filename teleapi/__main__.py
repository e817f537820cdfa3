"""Command line entry point: call one Bot API method or download a file.

Usage::

    python -m teleapi getMe
    python -m teleapi sendMessage -p chat_id=42 -p text=hello
    python -m teleapi sendMessage --json '{"chat_id": 42, "text": "hi"}'
    python -m teleapi --download photos/file_1.jpg -o cat.jpg

The token is read from ``TELEAPI_TOKEN`` (or ``BOT_TOKEN``), optionally via
a ``.env`` file.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from teleapi.client import TeleAPI
from teleapi.config import load_settings
from teleapi.exceptions import APIError
from teleapi.logger import configure_logging, get_logger

logger = get_logger("cli")

_CHUNK_SIZE = 64 * 1024


def _parse_params(pairs: List[str], raw_json: Optional[str]) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    if raw_json:
        loaded = json.loads(raw_json)
        if not isinstance(loaded, dict):
            raise ValueError("--json must be a JSON object")
        params.update(loaded)
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"expected key=value, got {pair!r}")
        params[key] = value
    return params


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="teleapi", description="Call a Telegram Bot API method.")
    parser.add_argument("method", nargs="?", help="Bot API method name, e.g. getMe")
    parser.add_argument("-p", "--param", action="append", default=[], metavar="KEY=VALUE",
                        help="string parameter; may be repeated")
    parser.add_argument("--json", dest="raw_json", metavar="OBJECT", help="parameters as a JSON object")
    parser.add_argument("--download", metavar="FILE_PATH", help="stream a file from the file endpoint")
    parser.add_argument("-o", "--output", metavar="PATH", help="where to write the download (stdout if omitted)")
    return parser


async def _download(api: TeleAPI, file_path: str, output: Optional[str]) -> int:
    with await api.open_file_stream(file_path) as stream:
        if not stream.ok:
            print(f"download failed with HTTP {stream.status_code}", file=sys.stderr)
            return 1
        sink = open(output, "wb") if output else sys.stdout.buffer
        try:
            while chunk := await stream.aread(_CHUNK_SIZE):
                sink.write(chunk)
        finally:
            if output:
                sink.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)
    api = TeleAPI.from_env(settings)

    try:
        if args.download:
            return asyncio.run(_download(api, args.download, args.output))
        if not args.method:
            print("a method name or --download is required", file=sys.stderr)
            return 2
        params = _parse_params(args.param, args.raw_json)
        result = asyncio.run(api.call_method(args.method, params))
    except APIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except (requests.RequestException, ValidationError) as exc:
        logger.error("Request failed", extra={"error": str(exc)})
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
