import csv
import io

import pytest

from road_importer.errors import InputAccessError
from road_importer.io.csv_ingest import (
    EMPTY_MODE,
    INCORRECT_FIELD,
    INVALID_ENCODING,
    MALFORMED_RECORD,
    MISSING_FIELD,
    open_input,
    parse_float64,
    parse_int64,
    parse_rows,
)


def test_parse_rows_coerces_all_columns(csv_bytes):
    rows = list(parse_rows(csv_bytes("10,1,2,5.0,4.5,car,1.2")))
    assert len(rows) == 1
    r = rows[0]
    assert r.ok
    assert (r.edge_id, r.source_node, r.target_node) == (10, 1, 2)
    assert (r.edge_cost, r.edge_reverse_cost, r.edge_distance_km) == (5.0, 4.5, 1.2)
    assert r.edge_mode == "car"
    assert r.line == 1


def test_parse_error_stops_at_first_bad_column(csv_bytes, log_messages):
    (r,) = parse_rows(csv_bytes("10,1,2,notafloat,4.5,car,1.2"))
    assert r.error == INCORRECT_FIELD
    assert r.error_column == 3
    # columns after the failing one are not coerced
    assert r.edge_reverse_cost == 0.0
    assert r.edge_mode == ""
    assert r.edge_id == 10
    assert any("Unexpected type in column 3" in m for m in log_messages)


def test_empty_mode_is_rejected(csv_bytes, log_messages):
    (r,) = parse_rows(csv_bytes("10,1,2,5.0,4.5,,1.2"))
    assert r.error == EMPTY_MODE
    assert r.error_column == 5
    assert any("Unexpected type in column 5" in m for m in log_messages)


def test_header_is_data_by_default(csv_bytes):
    rows = list(parse_rows(csv_bytes("id,source,target,cost,reverse_cost,mode,km", "10,1,2,5.0,0,car,1.2")))
    assert [r.ok for r in rows] == [False, True]
    assert rows[0].error_column == 0


def test_skip_header(csv_bytes):
    rows = list(parse_rows(csv_bytes("id,source,target,cost,reverse_cost,mode,km", "10,1,2,5.0,0,car,1.2"), skip_header=True))
    assert len(rows) == 1
    assert rows[0].ok
    assert rows[0].line == 2


def test_short_row_rejected_by_default(csv_bytes, log_messages):
    (r,) = parse_rows(csv_bytes("10,1,2,5.0"))
    assert r.error == MISSING_FIELD
    assert r.error_column == 4
    assert any("Missing column 4" in m for m in log_messages)


def test_short_row_zero_filled_when_allowed(csv_bytes):
    (r,) = parse_rows(csv_bytes("10,1,2,5.0"), allow_short_rows=True)
    assert r.ok
    assert r.edge_cost == 5.0
    assert r.edge_reverse_cost == 0.0
    assert r.edge_mode == ""
    assert r.edge_distance_km == 0.0


def test_extra_columns_ignored(csv_bytes):
    (r,) = parse_rows(csv_bytes("10,1,2,5.0,0,car,1.2,extra,stuff"))
    assert r.ok
    assert r.edge_distance_km == 1.2


def test_blank_lines_skipped(csv_bytes):
    rows = list(parse_rows(csv_bytes("10,1,2,5.0,0,car,1.2", "", "11,2,3,1.0,0,bike,0.5")))
    assert [r.edge_id for r in rows] == [10, 11]
    assert rows[1].line == 3


def test_quoted_mode_and_utf8(csv_bytes):
    (r,) = parse_rows(csv_bytes('10,1,2,5.0,0,"vélo, rapide",1.2'))
    assert r.ok
    assert r.edge_mode == "vélo, rapide"


@pytest.mark.parametrize("value", ["", " 1", "1.0", "1_000", "0x10", "9223372036854775808"])
def test_parse_int64_rejects(value):
    with pytest.raises(ValueError):
        parse_int64(value)


def test_parse_int64_bounds():
    assert parse_int64("-9223372036854775808") == -(2**63)
    assert parse_int64("+42") == 42


@pytest.mark.parametrize("value", ["", "nan", "inf", "-Infinity", "1_0.5", " 1.0", "1e400", "abc"])
def test_parse_float64_rejects(value):
    with pytest.raises(ValueError):
        parse_float64(value)


@pytest.mark.parametrize("value,expected", [("5", 5.0), ("-0.5", -0.5), (".5", 0.5), ("3.", 3.0), ("1.5e3", 1500.0)])
def test_parse_float64_accepts(value, expected):
    assert parse_float64(value) == expected


def test_open_input_missing_file(tmp_path):
    with pytest.raises(InputAccessError):
        with open_input(tmp_path / "nope.csv"):
            pass


def test_non_utf8_row_is_marked_and_parsing_continues(log_messages):
    data = io.BytesIO(b"10,1,2,5.0,0,car,1.2\n11,2,3,5.0,0,v\xe9lo,1.0\n12,3,4,5.0,0,car,1.0\n")
    rows = list(parse_rows(data))
    assert [r.ok for r in rows] == [True, False, True]
    assert rows[1].error == INVALID_ENCODING
    assert rows[1].error_column == 5
    assert rows[1].line == 2
    assert rows[2].edge_id == 12
    assert any("Invalid UTF-8 in column 5" in m for m in log_messages)


def test_malformed_record_is_marked_and_parsing_continues(csv_bytes, log_messages):
    old_limit = csv.field_size_limit(20)
    try:
        rows = list(parse_rows(csv_bytes("10,1,2,5.0,0,car,1.2", "11,2,3,5.0,0," + "x" * 50 + ",1.0", "12,3,4,5.0,0,car,1.0")))
    finally:
        csv.field_size_limit(old_limit)
    assert [r.ok for r in rows] == [True, False, True]
    assert rows[1].error == MALFORMED_RECORD
    assert rows[2].edge_id == 12
    assert any("Malformed CSV record" in m for m in log_messages)
