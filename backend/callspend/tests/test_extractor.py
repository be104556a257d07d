import pytest

from callspend.errors import MalformedInputError
from callspend.services.extractor import extract_rows


def test_skips_fixed_header_block(make_workbook, sample_rows):
    rows = extract_rows(make_workbook(sample_rows))
    assert [row.number for row in rows] == [8, 9]
    assert rows[0].cells[:4] == ("2024-01-01", "111", "222", 10)
    assert rows[1].cells[5] == 2.5


def test_header_rows_are_dropped_even_when_they_look_like_data(make_workbook, sample_rows):
    payload = make_workbook(sample_rows, header_rows=0)
    assert extract_rows(payload) == []


def test_custom_header_size(make_workbook, sample_rows):
    rows = extract_rows(make_workbook(sample_rows, header_rows=2), header_rows=2)
    assert [row.number for row in rows] == [3, 4]


def test_blank_rows_are_skipped(make_workbook, sample_rows):
    payload = make_workbook([sample_rows[0], (None, "  ", None), sample_rows[1]])
    rows = extract_rows(payload)
    assert [row.number for row in rows] == [8, 10]


def test_header_only_file_yields_no_rows(make_workbook):
    assert extract_rows(make_workbook([])) == []


@pytest.mark.parametrize("payload", [b"", b"not a spreadsheet", b"PK\x03\x04broken"])
def test_unreadable_payload_is_malformed(payload):
    with pytest.raises(MalformedInputError):
        extract_rows(payload)


def test_trailing_padding_is_trimmed(make_workbook, sample_rows):
    payload = make_workbook(sample_rows + [("2024-01-02", "111", "444")])
    rows = extract_rows(payload)
    assert rows[0].cells == sample_rows[0]
    assert rows[2].cells == ("2024-01-02", "111", "444")


def test_inner_empty_cells_are_kept(make_workbook, sample_rows):
    payload = make_workbook(sample_rows + [("2024-01-02", "111", "444", 3, None, 0)])
    assert extract_rows(payload)[2].cells == ("2024-01-02", "111", "444", 3, None, 0)
