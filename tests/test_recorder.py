"""Tests for trajectory recording."""

import csv
import json

import numpy as np
import pytest

from pkgs.engine_runtime import StateRecorder
from physics import ParticleState


@pytest.fixture
def recorder():
    rec = StateRecorder()
    rec.set_metadata(run="test")
    for step in range(3):
        state = ParticleState([float(step), 10.0, 1.5, 0.1 * step], [1.2, 0.0, 0.0, 0.04], 0.5 * step)
        rec.record_state(step, state, norm=-1.0)
    return rec


class TestRecording:
    """Test row collection."""

    def test_four_vectors_are_split(self, recorder):
        row = recorder.rows[1]
        for i in range(4):
            assert f"x_{i}" in row
            assert f"u_{i}" in row
        assert row['x_0'] == 1.0
        assert row['proper_time'] == 0.5
        assert row['norm'] == -1.0
        assert 'timestamp' in row

    def test_log_cleans_values(self):
        rec = StateRecorder()
        rec.log({'a': np.float32(1.5), 'b': np.array([[1.0]]), 'flag': True, 'name': None})
        row = rec.rows[0]
        assert row['a'] == 1.5 and isinstance(row['a'], float)
        assert row['b'] == 1.0
        assert row['flag'] is True
        assert row['name'] is None

    def test_disabled_records_nothing(self, tmp_path):
        rec = StateRecorder(enabled=False)
        rec.record_state(0, ParticleState([0, 0, 0, 0], [1, 0, 0, 0]))
        assert rec.rows == []
        assert rec.dump(str(tmp_path / "run"), ["csv", "jsonl"]) == []

    def test_summary(self, recorder):
        summary = recorder.get_summary()
        assert summary['row_count'] == 3
        assert summary['numeric_stats']['step']['max'] == 2.0
        assert summary['numeric_stats']['proper_time']['mean'] == pytest.approx(0.5)
        assert StateRecorder().get_summary() == {'row_count': 0}

    def test_clear(self, recorder):
        recorder.clear()
        assert recorder.rows == []
        assert recorder.metadata['run'] == "test"


class TestDump:
    """Test file output."""

    def test_csv_and_jsonl(self, recorder, tmp_path):
        written = recorder.dump(str(tmp_path / "out" / "run"), ["csv", "jsonl"])
        assert [p.rsplit(".", 1)[1] for p in written] == ["csv", "jsonl"]

        with open(written[0], newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 3
        assert float(rows[2]['x_3']) == pytest.approx(0.2)

        with open(written[1]) as f:
            lines = [json.loads(line) for line in f]
        assert lines[0]['_metadata']['run'] == "test"
        assert 'created_at' in lines[0]['_metadata']
        assert len(lines) == 4

    def test_parquet(self, recorder, tmp_path):
        pytest.importorskip("pandas")
        pq = pytest.importorskip("pyarrow.parquet")
        written = recorder.dump(str(tmp_path / "run"), ["parquet"])
        table = pq.read_table(written[0])
        assert table.num_rows == 3
        assert b'metadata' in table.schema.metadata

    def test_unknown_format(self, recorder, tmp_path):
        with pytest.raises(ValueError):
            recorder.dump(str(tmp_path / "run"), ["xlsx"])
