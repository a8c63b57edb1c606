# chunkseries/io/load.py
from __future__ import annotations

from pathlib import Path

from chunkseries.io.settings import load_settings
from chunkseries.io.source import ChunkedSource


def load_source(path: str | Path, *, max_workers: int = 1) -> ChunkedSource:
    catalogs = load_settings(path)
    return ChunkedSource(catalogs, max_workers=max_workers)
