import codecs

import pytest

from csvrecords import DecodeError, OpenError
from csvrecords.decoding import decode_bytes, read_decoded, strip_bom


def test_strip_bom_utf8():
    encoding, payload = strip_bom(codecs.BOM_UTF8 + b"a,b\n")
    assert encoding == "utf-8"
    assert payload == b"a,b\n"


def test_strip_bom_prefers_utf32_over_utf16():
    raw = codecs.BOM_UTF32_LE + "a".encode("utf-32-le")
    encoding, payload = strip_bom(raw)
    assert encoding == "utf-32-le"
    assert payload == "a".encode("utf-32-le")


def test_strip_bom_without_bom():
    assert strip_bom(b"a,b") == (None, b"a,b")


def test_decode_utf16_with_bom():
    raw = codecs.BOM_UTF16_LE + "name,city\nPaul,Montréal\n".encode("utf-16-le")
    text, report = decode_bytes(raw)
    assert text == "name,city\nPaul,Montréal\n"
    assert report.bom is True
    assert report.encoding == "utf-16-le"


def test_decode_utf8_bom_is_not_delivered():
    text, report = decode_bytes(codecs.BOM_UTF8 + "inst,date\n".encode("utf-8"))
    assert text == "inst,date\n"
    assert report.bom is True


def test_decode_plain_utf8():
    text, report = decode_bytes("name\nZoë\n".encode("utf-8"))
    assert text == "name\nZoë\n"
    assert report.encoding == "utf-8"
    assert report.bom is False
    assert report.detected is None
    assert report.replacements == 0


def test_decode_detects_non_utf8():
    # Include a Latin-1 character to force detection
    raw = "name,city\nPaul,Montréal\n".encode("latin-1")
    text, report = decode_bytes(raw)
    assert report.detected is not None
    assert "Montréal" in text


def test_decode_with_configured_encoding():
    raw = "name,city\nPaul,Montréal\n".encode("latin-1")
    text, report = decode_bytes(raw, encoding="latin-1")
    assert text == "name,city\nPaul,Montréal\n"
    assert report.detected is None


def test_decode_is_lossy_not_strict():
    text, report = decode_bytes(b"ok\x80\n", encoding="utf-8")
    assert text == "ok\ufffd\n"
    assert report.replacements == 1


def test_decode_unknown_encoding():
    with pytest.raises(DecodeError):
        decode_bytes(b"a,b", encoding="no-such-codec")


def test_read_decoded_missing_file(tmp_path):
    path = tmp_path / "missing.csv"
    with pytest.raises(OpenError) as exc_info:
        read_decoded(path)
    assert exc_info.value.path == path
    assert "missing.csv" in str(exc_info.value)


def test_read_decoded_returns_stream(tmp_path):
    path = tmp_path / "bom.csv"
    path.write_bytes(codecs.BOM_UTF8 + b"a,b\r\n1,2\r\n")
    stream, report = read_decoded(path)
    assert stream.read() == "a,b\r\n1,2\r\n"
    assert report.bom is True
