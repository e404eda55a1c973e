from __future__ import annotations

import pandas as pd
import pytest

from churnmap.utils.file_utils import infer_columns, load_config, load_records, write_rows


def test_load_records_keeps_header_order_and_strings(write_csv):
    path = write_csv("d.csv", "child_commit_id,file_path,loc\nc1,src/A.java,007\n")

    records = load_records(path)

    assert records == [{"child_commit_id": "c1", "file_path": "src/A.java", "loc": "007"}]
    assert list(records[0]) == ["child_commit_id", "file_path", "loc"]


def test_load_records_pads_short_rows(write_csv):
    path = write_csv("d.csv", "a,b,c\n1,2,3\n4\n")

    records = load_records(path)

    assert records[1] == {"a": "4", "b": "", "c": ""}


def test_load_records_drops_fields_beyond_header(write_csv):
    path = write_csv("d.csv", "a,b\n1,2\n3,4,5,6\n")

    records = load_records(path)

    assert records == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]


def test_load_records_handles_quoted_fields(write_csv):
    path = write_csv("d.csv", 'a,b\n"x, y","multi\nline"\n')

    records = load_records(path)

    assert records == [{"a": "x, y", "b": "multi\nline"}]


def test_load_records_does_not_convert_na_strings(write_csv):
    path = write_csv("d.csv", "a,b\nNA,\n")

    assert load_records(path) == [{"a": "NA", "b": ""}]


def test_load_records_header_only(write_csv):
    path = write_csv("d.csv", "a,b,c\n")

    assert load_records(path) == []


def test_load_records_empty_file(write_csv):
    path = write_csv("d.csv", "")

    assert load_records(path) == []


def test_load_records_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_records(tmp_path / "missing.csv")


def test_infer_columns_first_seen_union():
    records = [{"a": "1", "b": "2"}, {"b": "3", "c": "4"}, {"d": "5", "a": "6"}]

    assert infer_columns(records) == ["a", "b", "c", "d"]


def test_write_rows_creates_parent_directory(tmp_path):
    out = tmp_path / "nested" / "dir" / "out.csv"

    write_rows(["commit_id", "file_path"], [["c1", "src/A.java"]], out)

    df = pd.read_csv(out, dtype=str, keep_default_na=False)
    assert list(df.columns) == ["commit_id", "file_path"]
    assert df.values.tolist() == [["c1", "src/A.java"]]


def test_write_rows_quotes_every_field(tmp_path):
    out = tmp_path / "out.csv"

    write_rows(["a"], [["1"]], out)

    assert out.read_text().splitlines() == ['"a"', '"1"']


def test_write_rows_header_only_when_no_rows(tmp_path):
    out = tmp_path / "out.csv"

    write_rows(["a", "b"], [], out, quote_all=False)

    assert out.read_text().splitlines() == ["a,b"]


def test_load_config_empty_yaml(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(path) == {}


def test_load_records_unterminated_quote_raises(write_csv):
    path = write_csv("d.csv", 'a,b\n"x,2\n')

    with pytest.raises(pd.errors.ParserError):
        load_records(path)
