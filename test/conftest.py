# test/conftest.py
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np
import pytest

from chunkseries.core import Channel, ChannelMeta, PathTemplate, RecordLayout


RATE = 25                                   # Hz
CHUNK = timedelta(minutes=10)
SAMPLES_PER_CHUNK = 15000                   # 600 s * 25 Hz
TEMPLATE = "%Y-%m/%Y-%m-%d_%H-%M-%S.dat"
DAY = datetime(2015, 12, 10, tzinfo=timezone.utc)


def signal_y(n_start: int, n: int) -> np.ndarray:
    i = np.arange(n_start, n_start + n, dtype=np.float64)
    return (4.9 + 0.1 * np.sin(0.01 * i)).astype("<f4")


def signal_z(n_start: int, n: int) -> np.ndarray:
    i = np.arange(n_start, n_start + n, dtype=np.float64)
    return (-1.0 + 0.05 * np.cos(0.003 * i)).astype("<f4")


def write_chunk(root: Path, start: datetime, n_start: int, n: int = SAMPLES_PER_CHUNK) -> Path:
    """Two multiplexed little-endian float32 channels per 8-byte record."""
    records = np.empty(n, dtype=[("y", "<f4"), ("z", "<f4")])
    records["y"] = signal_y(n_start, n)
    records["z"] = signal_z(n_start, n)

    path = root / start.strftime(TEMPLATE)
    path.parent.mkdir(parents=True, exist_ok=True)
    records.tofile(path)
    return path


@pytest.fixture
def data_root(tmp_path) -> Path:
    """
    DATA/2015-12/
      2015-12-10_00-00-00.dat   good
      2015-12-10_00-10-00.dat   good
      2015-12-10_05-00-00.dat   truncated (one record short)
      notes.txt                 unrelated
    """
    root = tmp_path / "DATA"
    write_chunk(root, DAY, 0)
    write_chunk(root, DAY + CHUNK, SAMPLES_PER_CHUNK)
    write_chunk(root, DAY + timedelta(hours=5), 0, SAMPLES_PER_CHUNK - 1)
    (root / "2015-12" / "notes.txt").write_text("not a chunk")
    return root


@pytest.fixture
def channel_y(data_root) -> Channel:
    return Channel(
        id="WEA10_ACC_Y",
        sample_rate=RATE,
        layout=RecordLayout(sample_type="float32", record_size=8, offset=0),
        chunk_duration=CHUNK,
        root=data_root,
        naming=PathTemplate(TEMPLATE),
        meta=ChannelMeta(unit=" V", groups=("group-A",)),
    )


@pytest.fixture
def channel_z(data_root) -> Channel:
    return Channel(
        id="WEA10_ACC_Z",
        sample_rate=RATE,
        layout=RecordLayout(sample_type="float32", record_size=8, offset=4),
        chunk_duration=CHUNK,
        root=data_root,
        naming=PathTemplate(TEMPLATE),
        meta=ChannelMeta(unit=" V", groups=("group-A",)),
    )


@pytest.fixture
def settings_path(data_root) -> Path:
    settings = {
        "catalogs": {
            "/A/B/C": {
                "root": "DATA",
                "file_template": TEMPLATE,
                "chunk_duration": "00:10:00",
                "record_size": 8,
                "byte_order": "little",
                "channels": [
                    {"id": "WEA10_ACC_Y", "sample_rate": RATE, "type": "float32",
                     "offset": 0, "unit": " V", "groups": ["group-A"]},
                    {"id": "WEA10_ACC_Z", "sample_rate": RATE, "type": "float32",
                     "offset": 4, "unit": " V", "groups": ["group-A"]},
                ],
            }
        }
    }
    path = data_root.parent / "config.json"
    path.write_text(json.dumps(settings, indent=2))
    return path
