"""
Settings loading: maps a JSON or TOML settings file to catalogs of channels.

Example (JSON)::

    {
      "catalogs": {
        "/A/B/C": {
          "root": "DATA",
          "file_template": "%Y-%m/%Y-%m-%d_%H-%M-%S.dat",
          "chunk_duration": "00:10:00",
          "record_size": 8,
          "channels": [
            {"id": "WEA10_ACC_Y", "sample_rate": 25, "type": "float32",
             "offset": 0, "unit": " V", "groups": ["group-A"]}
          ]
        }
      }
    }

Catalog-level keys (root, file_template, chunk_duration, header_size,
record_size, byte_order) are shared by all channels of the catalog since
they are stored in the same chunk files. `root` is relative to the settings
file directory unless absolute.
"""
from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping
import json
import logging

import toml

from chunkseries.core import (
    Catalog,
    CatalogMeta,
    Channel,
    ChannelMeta,
    InvalidSettings,
    PathTemplate,
    RecordLayout,
)

logger = logging.getLogger(__name__)

DEFAULT_FILE_TEMPLATE = "%Y-%m/%Y-%m-%d_%H-%M-%S.dat"
DEFAULT_CHUNK_DURATION = timedelta(minutes=10)

_CATALOG_KEYS = {
    "root", "file_template", "chunk_duration", "header_size", "record_size",
    "byte_order", "description", "attrs", "channels",
}
_CHANNEL_KEYS = {
    "id", "sample_rate", "type", "offset", "unit", "groups", "description", "attrs",
}


def parse_duration(value: Any) -> timedelta:
    """Seconds (number) or "[D.]HH:MM:SS" string -> timedelta."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise InvalidSettings(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if isinstance(value, str):
        text = value.strip()
        days = 0
        if "." in text.split(":")[0]:
            day_part, text = text.split(".", 1)
            days = _parse_int(day_part, "duration days")
        parts = text.split(":")
        if len(parts) != 3:
            raise InvalidSettings(f"Invalid duration '{value}' (expected HH:MM:SS).")
        try:
            hours, minutes, seconds = int(parts[0]), int(parts[1]), float(parts[2])
        except ValueError as e:
            raise InvalidSettings(f"Invalid duration '{value}'.") from e
        return timedelta(days=days, hours=hours, minutes=minutes, seconds=seconds)
    raise InvalidSettings(f"Invalid duration: {value!r}")


def _parse_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise InvalidSettings(f"{what} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidSettings(f"{what} must be an integer, got {value!r}") from e


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidSettings(f"{what} must be a mapping.")
    return value


def _warn_unknown(keys: set[str], known: set[str], where: str) -> None:
    unknown = sorted(keys - known)
    if unknown:
        logger.warning("ignoring unknown settings keys in %s: %s", where, ", ".join(unknown))


def _parse_channel(raw: Any, catalog: Mapping[str, Any], root: Path, where: str) -> Channel:
    raw = _require_mapping(raw, where)
    _warn_unknown(set(raw), _CHANNEL_KEYS, where)

    if "id" not in raw:
        raise InvalidSettings(f"{where}: missing 'id'.")
    if "sample_rate" not in raw:
        raise InvalidSettings(f"{where}: missing 'sample_rate'.")

    layout = RecordLayout(
        sample_type=str(raw.get("type", "float32")),
        byte_order=str(catalog.get("byte_order", "little")),
        record_size=(
            _parse_int(catalog["record_size"], f"{where} record_size")
            if "record_size" in catalog else None
        ),
        offset=_parse_int(raw.get("offset", 0), f"{where} offset"),
        header_size=_parse_int(catalog.get("header_size", 0), f"{where} header_size"),
    )

    meta = ChannelMeta(
        unit=raw.get("unit"),
        groups=raw.get("groups") or (),
        description=raw.get("description"),
        attrs=dict(raw.get("attrs") or {}),
    )

    return Channel(
        id=str(raw["id"]),
        sample_rate=raw["sample_rate"],
        layout=layout,
        chunk_duration=parse_duration(catalog.get("chunk_duration", DEFAULT_CHUNK_DURATION)),
        root=root,
        naming=PathTemplate(str(catalog.get("file_template", DEFAULT_FILE_TEMPLATE))),
        meta=meta,
    )


def parse_settings(raw: Mapping[str, Any], base_dir: str | Path = ".") -> dict[str, Catalog]:
    """Build catalogs from an already-decoded settings mapping."""
    raw = _require_mapping(raw, "settings")
    catalogs_raw = _require_mapping(raw.get("catalogs"), "settings 'catalogs'")
    base = Path(base_dir)

    catalogs: dict[str, Catalog] = {}
    for catalog_id, entry in catalogs_raw.items():
        entry = _require_mapping(entry, f"catalog '{catalog_id}'")
        _warn_unknown(set(entry), _CATALOG_KEYS, f"catalog '{catalog_id}'")

        root = Path(entry.get("root", "."))
        if not root.is_absolute():
            root = base / root

        channels_raw = entry.get("channels")
        if not isinstance(channels_raw, list) or not channels_raw:
            raise InvalidSettings(f"catalog '{catalog_id}': 'channels' must be a non-empty list.")

        channels = [
            _parse_channel(ch, entry, root, f"catalog '{catalog_id}' channel #{i}")
            for i, ch in enumerate(channels_raw)
        ]

        catalogs[catalog_id] = Catalog.from_channels(
            catalog_id,
            channels,
            meta=CatalogMeta(
                description=entry.get("description"),
                source=str(root),
                attrs=dict(entry.get("attrs") or {}),
            ),
        )

    return catalogs


def load_settings(path: str | Path) -> dict[str, Catalog]:
    """Load a ``.json`` or ``.toml`` settings file."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"The settings file does not exist on path {path}.")

    try:
        if path.suffix.lower() == ".toml":
            raw = toml.load(str(path))
        else:
            raw = json.loads(path.read_text(encoding="utf-8"))
    except (toml.TomlDecodeError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidSettings(f"Cannot parse settings file {path}: {e}") from e

    catalogs = parse_settings(raw, base_dir=path.parent)
    logger.info("loaded %d catalog(s) from %s", len(catalogs), path)
    return catalogs
