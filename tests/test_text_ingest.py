import codecs

import pytest

from mcq_mock_test.services.text_ingest import (
    UnsupportedDocumentError,
    clean_text,
    decode_bytes,
    extract_text,
)


def test_plain_utf8_passthrough():
    assert extract_text("1. Café?\nA) a".encode("utf-8"), "quiz.txt") == "1. Café?\nA) a"


def test_utf8_bom_is_removed():
    assert decode_bytes(codecs.BOM_UTF8 + b"hello") == "hello"


def test_utf16_with_bom():
    assert decode_bytes("1. Q?".encode("utf-16")) == "1. Q?"


def test_invalid_utf8_falls_back_to_latin1():
    assert decode_bytes(b"caf\xe9") == "café"


def test_clean_text_strips_control_characters_and_normalizes_newlines():
    raw = "\u0000 1. Q?\r\nA) a\u001a\rB) b\u0003\u0007C) c\t"
    assert clean_text(raw) == "1. Q?\nA) a\nB) b C) c"


def test_empty_upload_rejected():
    with pytest.raises(UnsupportedDocumentError):
        extract_text(b"", "empty.txt")


@pytest.mark.parametrize("payload", [b"%PDF-1.7 ...", b"PK\x03\x04word/document.xml"])
def test_binary_documents_rejected(payload):
    with pytest.raises(UnsupportedDocumentError, match="plain text"):
        extract_text(payload, "exam.bin")


def test_text_named_doc_is_still_read():
    assert extract_text(b"1. Q?", "legacy.doc") == "1. Q?"
