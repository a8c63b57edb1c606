# test/test_grid.py
from datetime import datetime, timedelta, timezone
from pathlib import Path, PurePosixPath

import pytest

from chunkseries.core import (
    ORIGIN,
    Channel,
    InvalidChannel,
    InvalidWindow,
    PathTemplate,
    TimeRange,
    enumerate_slots,
    slot_path,
    to_utc,
)


UTC = timezone.utc
D = timedelta(minutes=10)


@pytest.fixture
def channel(tmp_path):
    return Channel(
        id="x",
        sample_rate=25,
        chunk_duration=D,
        root=tmp_path,
        naming=PathTemplate("%Y-%m/%Y-%m-%d_%H-%M-%S.dat"),
    )


def test_full_day_has_144_slots(channel):
    begin = datetime(2015, 12, 10, tzinfo=UTC)
    grid = enumerate_slots(channel, begin, begin + timedelta(days=1))

    assert len(grid) == 144
    slots = list(grid)
    assert slots[0].start == begin
    assert slots[-1].end == begin + timedelta(days=1)
    assert all(s.expected_samples == 15000 for s in slots)


def test_slots_are_contiguous_and_grid_aligned(channel):
    begin = datetime(2015, 12, 10, 3, 17, 12, tzinfo=UTC)
    end = datetime(2015, 12, 10, 9, 1, tzinfo=UTC)
    slots = list(enumerate_slots(channel, begin, end))

    for s in slots:
        assert (s.start - ORIGIN) % D == timedelta(0)
        assert s.end - s.start == D
        assert s.index == (s.start - ORIGIN) // D
    for a, b in zip(slots, slots[1:]):
        assert a.end == b.start


def test_enumeration_is_deterministic_and_restartable(channel):
    begin = datetime(2015, 12, 10, 0, 5, tzinfo=UTC)
    end = datetime(2015, 12, 10, 2, 0, tzinfo=UTC)

    grid = enumerate_slots(channel, begin, end)
    first_pass = list(grid)
    second_pass = list(grid)

    assert first_pass == second_pass
    assert first_pass == list(enumerate_slots(channel, begin, end))


def test_unaligned_window_includes_enclosing_slots(channel):
    begin = datetime(2015, 12, 10, 0, 5, tzinfo=UTC)
    end = datetime(2015, 12, 10, 0, 25, tzinfo=UTC)
    slots = list(enumerate_slots(channel, begin, end))

    assert [s.start for s in slots] == [
        datetime(2015, 12, 10, 0, 0, tzinfo=UTC),
        datetime(2015, 12, 10, 0, 10, tzinfo=UTC),
        datetime(2015, 12, 10, 0, 20, tzinfo=UTC),
    ]


def test_slot_starting_at_end_is_excluded(channel):
    begin = datetime(2015, 12, 10, 0, 0, tzinfo=UTC)
    grid = enumerate_slots(channel, begin, begin + 2 * D)
    assert len(grid) == 2


def test_empty_window_yields_no_slots(channel):
    t = datetime(2015, 12, 10, 0, 5, tzinfo=UTC)
    grid = enumerate_slots(channel, t, t)
    assert len(grid) == 0
    assert list(grid) == []


def test_reversed_window_is_rejected(channel):
    t = datetime(2015, 12, 10, tzinfo=UTC)
    with pytest.raises(InvalidWindow):
        enumerate_slots(channel, t, t - D)


def test_naive_and_offset_datetimes_are_utc(channel):
    naive = datetime(2015, 12, 10, 1, 0)
    cet = datetime(2015, 12, 10, 2, 0, tzinfo=timezone(timedelta(hours=1)))

    a = list(enumerate_slots(channel, naive, naive + D))
    b = list(enumerate_slots(channel, cet, cet + D))
    assert a == b
    assert a[0].start == datetime(2015, 12, 10, 1, 0, tzinfo=UTC)


def test_grid_indexing_and_reverse(channel):
    begin = datetime(2015, 12, 10, tzinfo=UTC)
    grid = enumerate_slots(channel, begin, begin + 6 * D)

    assert grid[0].start == begin
    assert grid[-1].start == begin + 5 * D
    assert [s.start for s in grid[1:3]] == [begin + D, begin + 2 * D]
    assert list(reversed(grid)) == list(grid)[::-1]
    with pytest.raises(IndexError):
        grid[6]


def test_slots_before_the_epoch(channel):
    begin = datetime(1969, 12, 31, 23, 55, tzinfo=UTC)
    slots = list(enumerate_slots(channel, begin, ORIGIN + timedelta(minutes=1)))
    assert [s.index for s in slots] == [-1, 0]


def test_slot_path_uses_template(channel, tmp_path):
    start = datetime(2015, 12, 10, 0, 10, tzinfo=UTC)
    assert slot_path(channel, start) == tmp_path / "2015-12" / "2015-12-10_00-10-00.dat"

    slot = enumerate_slots(channel, start, start + D)[0]
    assert slot.path == slot_path(channel, start)


def test_slot_path_accepts_plain_callables(tmp_path):
    ch = Channel(
        id="x",
        sample_rate=25,
        root=tmp_path,
        naming=lambda t: f"{t:%Y%m%d}/{t:%H%M}.bin",
    )
    start = datetime(2015, 12, 10, 0, 10, tzinfo=UTC)
    assert slot_path(ch, start) == tmp_path / "20151210" / "0010.bin"


class TestPathTemplate:
    """Naming template formatting and parsing."""

    template = PathTemplate("%Y-%m/%Y-%m-%d_%H-%M-%S.dat")

    def test_format(self):
        t = datetime(2015, 12, 10, 0, 10, tzinfo=UTC)
        assert self.template(t) == "2015-12/2015-12-10_00-10-00.dat"

    def test_parse_round_trip(self):
        t = datetime(2015, 12, 10, 0, 10, tzinfo=UTC)
        assert self.template.parse(self.template(t)) == t
        assert self.template.parse(Path("2015-12") / "2015-12-10_00-10-00.dat") == t
        assert self.template.parse(PurePosixPath("2015-12/2015-12-10_00-10-00.dat")) == t

    def test_parse_rejects_wrong_folder(self):
        assert self.template.parse("2016-01/2015-12-10_00-10-00.dat") is None

    def test_parse_rejects_unrelated_names(self):
        assert self.template.parse("2015-12/notes.txt") is None
        assert self.template.parse("2015-12-10_00-10-00.dat") is None  # missing folder

    def test_parse_fields_split_across_folders(self):
        template = PathTemplate("%Y/%m/%d/%H-%M-%S.dat")
        t = datetime(2015, 12, 10, 0, 10, tzinfo=UTC)

        assert template(t) == "2015/12/10/00-10-00.dat"
        assert template.parse("2015/12/10/00-10-00.dat") == t
        assert template.parse("2015/02/30/00-10-00.dat") is None
        assert template.parse("2015/12/00-10-00.dat") is None

    def test_rejects_empty_pattern(self):
        with pytest.raises(InvalidChannel):
            PathTemplate("  ")


class TestTimeRange:

    def test_normalizes_to_utc_and_unpacks(self):
        tr = TimeRange(datetime(2015, 12, 10), datetime(2015, 12, 10, 0, 20))
        begin, end = tr
        assert begin.tzinfo == UTC
        assert end - begin == timedelta(minutes=20)
        assert tr.duration == timedelta(minutes=20)

    def test_rejects_reversed(self):
        with pytest.raises(InvalidWindow):
            TimeRange(datetime(2015, 12, 11), datetime(2015, 12, 10))

    def test_union(self):
        a = TimeRange(datetime(2015, 12, 10, 0, 0), datetime(2015, 12, 10, 0, 10))
        b = TimeRange(datetime(2015, 12, 10, 0, 30), datetime(2015, 12, 10, 0, 40))
        assert a.union(b) == TimeRange(datetime(2015, 12, 10, 0, 0), datetime(2015, 12, 10, 0, 40))


def test_to_utc_rejects_non_datetime():
    with pytest.raises(TypeError):
        to_utc("2015-12-10")  # type: ignore[arg-type]
