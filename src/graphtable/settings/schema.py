"""Schema helpers for the graphtable settings file."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import FETCH_CACHE_ENTRIES, FETCH_TIMEOUT_SEC, SETTINGS_SCHEMA_ID

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "graphtable/settings.schema.json",
    "type": "object",
    "required": ["schema", "table", "fetch"],
    "properties": {
        "schema": {"const": SETTINGS_SCHEMA_ID},
        "table": {
            "type": "object",
            "properties": {
                "group_by_field": {"type": ["string", "null"]},
                "sort_field": {"type": ["string", "null"]},
                "sort_ascending": {"type": "boolean"},
                "pictures_enabled": {"type": "boolean"},
                "subtitles_enabled": {"type": "boolean"},
            },
            "additionalProperties": True,
        },
        "fetch": {
            "type": "object",
            "properties": {
                "timeout_sec": {"type": "number", "exclusiveMinimum": 0},
                "cache_entries": {"type": "integer", "minimum": 0},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": SETTINGS_SCHEMA_ID,
    "table": {
        "group_by_field": "name",
        "sort_field": "name",
        "sort_ascending": True,
        "pictures_enabled": True,
        "subtitles_enabled": False,
    },
    "fetch": {
        "timeout_sec": FETCH_TIMEOUT_SEC,
        "cache_entries": FETCH_CACHE_ENTRIES,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)

# Sections merged key by key instead of being replaced wholesale.
_NESTED_SECTIONS = ("table", "fetch")


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _NESTED_SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults"]
