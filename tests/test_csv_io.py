import codecs

import pytest

from csvrecords import (
    CreateError,
    OpenError,
    RowParseError,
    load_csv_file,
    save_csv_file,
)
from records import BAR_HEADER, Bar, Note, make_bars

ROW = "IC2206,2022-06-06,6048.6,6186.4,6031.2,6157.8,90628,false\n"


def test_file_round_trip(tmp_path):
    path = tmp_path / "bars.csv"
    bars = make_bars()
    save_csv_file(path, bars)

    loaded = load_csv_file(path, Bar)
    assert [bar.inst for bar in loaded] == ["IC2206", "IF2206"]
    assert loaded[1].close == 4144.4
    assert all(bar.test_skip for bar in loaded)


def test_saved_file_has_no_bom(tmp_path):
    path = tmp_path / "bars.csv"
    save_csv_file(path, make_bars())
    assert path.read_bytes().startswith(BAR_HEADER.encode("utf-8"))


@pytest.mark.parametrize(
    "bom, encoding",
    [
        (codecs.BOM_UTF8, "utf-8"),
        (codecs.BOM_UTF16_LE, "utf-16-le"),
        (codecs.BOM_UTF16_BE, "utf-16-be"),
    ],
)
def test_bom_prefixed_files(tmp_path, bom, encoding):
    path = tmp_path / "bars.csv"
    path.write_bytes(bom + (BAR_HEADER + "\r\n" + ROW).encode(encoding))

    bars = load_csv_file(path, Bar)
    assert len(bars) == 1
    assert bars[0].inst == "IC2206"
    assert bars[0].test_skip is True


def test_configured_encoding(tmp_path):
    path = tmp_path / "notes.csv"
    path.write_bytes("title,body\nMontréal,été\n".encode("latin-1"))
    notes = load_csv_file(path, Note, encoding="latin-1")
    assert notes == [Note(title="Montréal", body="été")]


def test_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_bytes(b"")
    assert load_csv_file(path, Bar) == []


def test_missing_file(tmp_path):
    path = tmp_path / "missing.csv"
    with pytest.raises(OpenError) as exc_info:
        load_csv_file(path, Bar)
    assert exc_info.value.path == path


def test_row_error_carries_path(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text(BAR_HEADER + "\nIC2206,not-a-date,1,2,3,4,5,true\n", encoding="utf-8")
    with pytest.raises(RowParseError) as exc_info:
        load_csv_file(path, Bar)
    err = exc_info.value
    assert err.path == path
    assert err.row == 2
    assert err.field == "date"
    assert str(path) in str(err)


def test_create_failure(tmp_path):
    path = tmp_path / "no-such-dir" / "bars.csv"
    with pytest.raises(CreateError) as exc_info:
        save_csv_file(path, make_bars())
    assert exc_info.value.path == path


def test_save_truncates(tmp_path):
    path = tmp_path / "notes.csv"
    save_csv_file(path, [Note(title=str(i), body="x") for i in range(5)])
    save_csv_file(path, [Note(title="only", body="one")])
    assert load_csv_file(path, Note) == [Note(title="only", body="one")]


def test_quoting_fidelity_through_file(tmp_path):
    path = tmp_path / "notes.csv"
    notes = [Note(title='a, "quoted"\nline', body="plain")]
    save_csv_file(path, notes)
    assert load_csv_file(path, Note) == notes


def test_latin1_file_without_bom_is_detected(tmp_path):
    path = tmp_path / "notes.csv"
    path.write_bytes("title,body\nPaul,Montréal\n".encode("latin-1"))
    notes = load_csv_file(path, Note)
    assert notes[0].title == "Paul"
    assert "Montréal" in notes[0].body
