#!/usr/bin/env python3

"""
Pytest coverage for row formatting and output.
"""

# Standard Library
import io

# PIP3 modules
import pytest

from emitter import RowEmitter, format_row
from models import ResultRow

#============================================

def test_format_row_fields() -> None:
    row = ResultRow(frame_index=1, timestamp=1 / 30, medians=[76, 0, 255])
    assert format_row(row) == "0.03333333333,76,0,255"

#============================================

def test_format_row_custom_delimiter() -> None:
    row = ResultRow(frame_index=60, timestamp=2.0, medians=[1, 2])
    assert format_row(row, delimiter=";") == "2;1;2"

#============================================

def test_emitter_writes_one_line_per_row_without_header() -> None:
    stream = io.StringIO()
    emitter = RowEmitter(stream)
    rows = [
        ResultRow(frame_index=0, timestamp=0.0, medians=[10, 20]),
        ResultRow(frame_index=1, timestamp=0.5, medians=[11, 21]),
    ]
    assert emitter.emit_all(rows) == 2
    assert stream.getvalue() == "0,10,20\n0.5,11,21\n"
    assert emitter.rows_written == 2

#============================================

def test_emitter_keeps_rows_written_before_failure() -> None:
    def rows():
        yield ResultRow(frame_index=0, timestamp=0.0, medians=[1])
        raise RuntimeError("decoder died")

    stream = io.StringIO()
    emitter = RowEmitter(stream)
    with pytest.raises(RuntimeError):
        emitter.emit_all(rows())
    assert stream.getvalue() == "0,1\n"
    assert emitter.rows_written == 1

#============================================

def test_adjacent_frames_stay_distinct_after_hours() -> None:
    # frames 300000 and 300001 at 30 fps, about 2.8 hours in
    first = ResultRow(frame_index=300000, timestamp=300000 / 30, medians=[0])
    second = ResultRow(frame_index=300001, timestamp=300001 / 30, medians=[0])
    assert format_row(first) == "10000,0"
    assert format_row(second) == "10000.03333,0"
