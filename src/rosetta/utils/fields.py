"""Small helpers for picking apart loosely-typed vendor payloads."""

from __future__ import annotations

import base64
import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

_KEY_SEPARATOR = re.compile(r"[-_](\w)")
_DATA_URL = re.compile(r"^data:([^;,]+)?(?:;base64)?,(.*)$", re.DOTALL)
_URL_PREFIXES = ("http://", "https://", "data:")


def normalize_key(key: str) -> str:
    """Convert a snake_case or kebab-case key to camelCase.

    ``tool_calls`` becomes ``toolCalls`` and ``image-url`` becomes ``imageUrl``.
    """
    return _KEY_SEPARATOR.sub(lambda m: m.group(1).upper(), key)


def normalize_keys(obj: Mapping[str, Any]) -> dict[str, Any]:
    """Shallow copy of *obj* with every key passed through :func:`normalize_key`."""
    return {normalize_key(key): value for key, value in obj.items()}


def parse_json_if_string(value: Any) -> Any:
    """Decode *value* as JSON when it is a string; otherwise return it unchanged.

    Strings that are not valid JSON are returned as-is.
    """
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def infer_modality(mime_type: str | None) -> str:
    """Map a MIME type to a canonical modality, defaulting to ``document``."""
    if not mime_type:
        return "document"
    for modality in ("image", "video", "audio"):
        if mime_type.startswith(f"{modality}/"):
            return modality
    return "document"


def is_url_string(value: str) -> bool:
    """True for ``http://``, ``https://`` and ``data:`` strings."""
    return value.startswith(_URL_PREFIXES)


def parse_data_url(url: str) -> tuple[str | None, str] | None:
    """Split a ``data:`` URL into ``(mime_type, payload)``.

    Returns ``None`` when *url* is not a data URL.
    """
    if not url.startswith("data:"):
        return None
    match = _DATA_URL.match(url)
    if match is None:
        return None
    return match.group(1) or None, match.group(2) or ""


def binary_to_base64(data: bytes | bytearray | memoryview) -> str:
    """Encode raw bytes as a base64 ASCII string."""
    return base64.b64encode(bytes(data)).decode("ascii")


def extract_extra_fields(obj: Mapping[str, Any], known_keys: Iterable[str]) -> dict[str, Any]:
    """Return the entries of *obj* whose keys are not in *known_keys*."""
    known = set(known_keys)
    return {key: value for key, value in obj.items() if key not in known}
