"""Tests for StageProfiler."""

import pytest

from violinkit.utils.profiling import StageProfiler


def test_stages_recorded_in_order():
    profiler = StageProfiler()
    with profiler.stage("aggregate"):
        pass
    with profiler.stage("layout"):
        pass
    names = [e.name for e in profiler.entries]
    assert names == ["aggregate", "layout"]
    for e in profiler.entries:
        assert e.duration_ms >= 0
        assert e.end >= e.start


def test_stage_recorded_when_block_raises():
    profiler = StageProfiler()
    with pytest.raises(RuntimeError):
        with profiler.stage("density"):
            raise RuntimeError("boom")
    assert [e.name for e in profiler.entries] == ["density"]


def test_total_ms_and_to_dict():
    profiler = StageProfiler()
    assert profiler.total_ms() == 0
    with profiler.stage("scales"):
        pass
    assert profiler.total_ms() == pytest.approx(profiler.entries[0].duration_ms)
    d = profiler.entries[0].to_dict()
    assert set(d) == {"name", "start", "end", "duration_ms"}
    assert d["name"] == "scales"
