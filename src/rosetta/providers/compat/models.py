"""Permissive schema for message lists of unknown shape."""

from __future__ import annotations

from typing import Any, Union

from pydantic import TypeAdapter

CompatMessage = dict[str, Any]
CompatSystem = Union[str, dict[str, Any], list[dict[str, Any]]]

MESSAGE_LIST: TypeAdapter[list[CompatMessage]] = TypeAdapter(list[CompatMessage])
SYSTEM: TypeAdapter[CompatSystem] = TypeAdapter(CompatSystem)
