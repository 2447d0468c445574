import pytest
from csv_file_iterator.reader import CsvFileIterator
from csv_file_iterator.errors import RowWidthError

def _write(tmp_path, name, text):
    p = tmp_path / name
    p.write_text(text, encoding="utf-8", newline="\n")
    return str(p)

# --- column names ---

def test_set_column_names_normalizes_and_chains(tmp_path):
    p = _write(tmp_path, "data.csv", "1,2,3,4\n")
    with CsvFileIterator(p) as reader:
        assert reader.get_column_names() == []
        assert reader.set_column_names(["id", "", "id", "name"]) is reader
        assert reader.get_column_names() == ["id", "COL_1", "id_2", "name"]

def test_set_column_names_noop_for_empty_or_non_sequence(tmp_path):
    p = _write(tmp_path, "data.csv", "1\n")
    with CsvFileIterator(p) as reader:
        reader.set_column_names(["a"])
        assert reader.set_column_names([]) is reader
        reader.set_column_names("abc")        # a string is not a list of names
        reader.set_column_names({"x": 1})     # neither is a dict
        assert reader.get_column_names() == ["a"]

def test_get_column_names_returns_a_copy(tmp_path):
    p = _write(tmp_path, "data.csv", "1\n")
    with CsvFileIterator(p) as reader:
        reader.set_column_names(["a"])
        reader.get_column_names().append("b")
        assert reader.get_column_names() == ["a"]

# --- header resolution ---

def test_header_round_trip_with_rename(tmp_path):
    p = _write(tmp_path, "h.csv", "a,b,c\n1,2,3\n4,5,6\n")
    with CsvFileIterator(p) as reader:
        reader.use_first_row_as_header({"b": "beta"})
        assert reader.get_column_names() == ["a", "beta", "c"]
        assert list(reader) == [
            {"a": "1", "beta": "2", "c": "3"},
            {"a": "4", "beta": "5", "c": "6"},
        ]

def test_header_fixes_empty_and_duplicate_names(tmp_path):
    p = _write(tmp_path, "h.csv", "id,,id,name\n1,2,3,4\n")
    with CsvFileIterator(p) as reader:
        reader.use_first_row_as_header()
        assert reader.get_column_names() == ["id", "COL_1", "id_2", "name"]

def test_header_rename_skips_empty_names(tmp_path):
    p = _write(tmp_path, "h.csv", "a,\n1,2\n")
    with CsvFileIterator(p) as reader:
        reader.use_first_row_as_header({"": "blank", "a": "alpha"})
        assert reader.get_column_names() == ["alpha", "COL_1"]

def test_header_restores_cursor(tmp_path):
    p = _write(tmp_path, "h.csv", "a\n1\n2\n3\n")
    with CsvFileIterator(p) as reader:
        reader.seek(2)
        reader.use_first_row_as_header()
        assert reader.current_index() == 2
        assert reader.current() == {"a": "2"}

def test_header_goes_through_value_filter(tmp_path):
    p = _write(tmp_path, "h.csv", "name,age\nann,30\n")
    seen = []

    def upper(value, context):
        seen.append((context["row"], context["column"]))
        return value.upper()

    with CsvFileIterator(p) as reader:
        reader.set_value_filter(upper)
        reader.use_first_row_as_header()
        assert reader.get_column_names() == ["NAME", "AGE"]
        # header context: row 0, positional column index
        assert seen == [(0, 0), (0, 1)]

def test_header_on_empty_file(tmp_path):
    p = _write(tmp_path, "empty.csv", "")
    with CsvFileIterator(p) as reader:
        assert reader.use_first_row_as_header() is reader
        assert reader.get_column_names() == []
        assert reader.current() == {}
        assert reader.count() == 0
        assert list(reader) == []

def test_header_only_file(tmp_path):
    p = _write(tmp_path, "h.csv", "a,b\n")
    with CsvFileIterator(p) as reader:
        reader.use_first_row_as_header()
        assert reader.count() == 0
        assert list(reader) == []
        assert reader.current() == {}

def test_rewind_keeps_header_skipped(tmp_path):
    p = _write(tmp_path, "h.csv", "a\n1\n")
    with CsvFileIterator(p) as reader:
        reader.use_first_row_as_header()
        reader.rewind()
        assert reader.current() == {"a": "1"}
        reader.seek(0)
        assert reader.current() == {"a": "1"}

# --- row materialization ---

def test_more_columns_than_values_pads_with_none(tmp_path):
    p = _write(tmp_path, "d.csv", "1\n")
    with CsvFileIterator(p) as reader:
        reader.set_column_names(["a", "b", "c"])
        assert reader.current() == {"a": "1", "b": None, "c": None}

def test_more_values_than_columns_adds_synthetic_names(tmp_path):
    p = _write(tmp_path, "d.csv", "1,2,3\n")
    with CsvFileIterator(p) as reader:
        reader.set_column_names(["a"])
        row = reader.current()
        assert row == {"a": "1", "COL_1": "2", "COL_2": "3"}
        assert list(row) == ["a", "COL_1", "COL_2"]
        assert reader.get_column_names() == ["a"]  # stored names unchanged

def test_no_column_names_uses_synthetic_names(tmp_path):
    p = _write(tmp_path, "d.csv", "x,y\n")
    with CsvFileIterator(p) as reader:
        assert reader.current() == {"COL_0": "x", "COL_1": "y"}

def test_current_is_not_cached(tmp_path):
    p = _write(tmp_path, "d.csv", "a,b\n")
    with CsvFileIterator(p) as reader:
        reader.set_column_names(["x", "y"])
        first = reader.current()
        assert reader.current() == first
        assert reader.current() is not first

        reader.set_value_filter(lambda value, context: value * 2)
        assert reader.current() == {"x": "aa", "y": "bb"}

        reader.set_column_names(["p", "q"])
        assert reader.current() == {"p": "aa", "q": "bb"}

        reader.set_value_filter(None)
        assert reader.current() == {"p": "a", "q": "b"}

def test_current_at_end_returns_empty(tmp_path):
    p = _write(tmp_path, "d.csv", "1\n")
    with CsvFileIterator(p) as reader:
        reader.advance()
        assert reader.at_end()
        assert reader.current() == {}

def test_filter_context_order(tmp_path):
    p = _write(tmp_path, "d.csv", "1,2\n3,4\n")
    seen = []

    def record(value, context):
        seen.append((context["row"], context["column"]))
        return value

    with CsvFileIterator(p) as reader:
        reader.set_column_names(["x", "y"])
        reader.set_value_filter(record)
        rows = list(reader)

    assert rows == [{"x": "1", "y": "2"}, {"x": "3", "y": "4"}]
    assert seen == [(0, "x"), (0, "y"), (1, "x"), (1, "y")]

def test_filter_sees_none_padding(tmp_path):
    p = _write(tmp_path, "d.csv", "1\n")
    with CsvFileIterator(p) as reader:
        reader.set_column_names(["a", "b"])
        reader.set_value_filter(lambda value, context: "missing" if value is None else value)
        assert reader.current() == {"a": "1", "b": "missing"}

def test_set_value_filter_rejects_non_callable(tmp_path):
    p = _write(tmp_path, "d.csv", "1\n")
    with CsvFileIterator(p) as reader:
        with pytest.raises(TypeError):
            reader.set_value_filter("upper")

def test_strict_mode_raises_on_width_mismatch(tmp_path):
    p = _write(tmp_path, "d.csv", "a,b\n1,2\n3\n")
    with CsvFileIterator(p, strict=True) as reader:
        reader.use_first_row_as_header()
        assert reader.current() == {"a": "1", "b": "2"}
        reader.advance()
        with pytest.raises(RowWidthError) as excinfo:
            reader.current()
    assert excinfo.value.row_index == 2
    assert excinfo.value.expected == 2
    assert excinfo.value.actual == 1

def test_strict_mode_without_names_is_lenient(tmp_path):
    p = _write(tmp_path, "d.csv", "1,2\n")
    with CsvFileIterator(p, strict=True) as reader:
        assert reader.current() == {"COL_0": "1", "COL_1": "2"}

# --- count ---

def test_count_mid_iteration_keeps_cursor(tmp_path):
    p = _write(tmp_path, "c.csv", "h\n1\n2\n3\n4\n5\n")
    with CsvFileIterator(p) as reader:
        reader.use_first_row_as_header()
        reader.seek(2)
        assert reader.count() == 5
        assert reader.current_index() == 2
        assert reader.current() == {"h": "2"}

def test_count_without_header_and_with_blank_lines(tmp_path):
    p = _write(tmp_path, "c.csv", "1\n\n2\n\n")
    with CsvFileIterator(p) as reader:
        assert reader.count() == 2
        assert reader.current_index() == 0

def test_iteration_is_repeatable(tmp_path):
    p = _write(tmp_path, "c.csv", "a\n1\n2\n")
    with CsvFileIterator(p) as reader:
        reader.use_first_row_as_header()
        assert list(reader) == list(reader) == [{"a": "1"}, {"a": "2"}]

def test_raw_width(tmp_path):
    p = _write(tmp_path, "c.csv", "1,2,3\n")
    with CsvFileIterator(p) as reader:
        assert reader.raw_width() == 3
        reader.advance()
        assert reader.raw_width() is None

def test_numeric_filter_turns_header_names_into_ints(tmp_path):
    p = _write(tmp_path, "n.csv", "1,2\n3,4\n")

    def to_int(value, context):
        return int(value)

    with CsvFileIterator(p) as reader:
        reader.set_value_filter(to_int)
        reader.use_first_row_as_header()
        assert reader.get_column_names() == [1, 2]
        assert list(reader) == [{1: 3, 2: 4}]
