"""
services/text_ingest.py

업로드된 파일 바이트 → 정리된 텍스트.
일반 텍스트만 지원한다. PDF/Word 같은 바이너리 문서는 디코딩하지 않고
"텍스트로 변환 후 업로드" 안내와 함께 거부한다.
"""

import codecs
import logging
import re

logger = logging.getLogger(__name__)

# 파일 시그니처
_BINARY_SIGNATURES = {
    b"%PDF": "PDF",
    b"PK\x03\x04": "DOCX",
    b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1": "DOC",
}

_CONTROL_CHARS_RE = re.compile(r"[\u0000-\u0009\u000b-\u001f\u007f-\u009f]")


class UnsupportedDocumentError(ValueError):
    """텍스트로 읽을 수 없는 업로드."""


def extract_text(file_bytes: bytes, filename: str = "") -> str:
    """
    파일 바이트를 디코딩하고 정리된 텍스트를 반환한다.

    Raises:
        UnsupportedDocumentError: 빈 파일이거나 바이너리 문서 형식인 경우.
    """
    if not file_bytes:
        raise UnsupportedDocumentError("The uploaded file is empty.")

    kind = _detect_binary_format(file_bytes)
    if kind:
        logger.warning(f"extract_text: 지원하지 않는 형식 ({kind}) - {filename}")
        raise UnsupportedDocumentError(
            f"{kind} files are not supported. Please convert the document to plain text (.txt) and upload again."
        )

    text = clean_text(decode_bytes(file_bytes))
    logger.info(f"extract_text: {filename or '(이름 없음)'} → {len(text)}자")
    return text


def decode_bytes(file_bytes: bytes) -> str:
    """BOM 우선, 그다음 UTF-8, 실패 시 Latin-1 (항상 성공)."""
    if file_bytes.startswith(codecs.BOM_UTF8):
        return file_bytes[len(codecs.BOM_UTF8):].decode("utf-8", errors="replace")
    if file_bytes.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return file_bytes.decode("utf-16", errors="replace")
    try:
        return file_bytes.decode("utf-8")
    except UnicodeDecodeError:
        logger.info("decode_bytes: UTF-8 디코딩 실패, Latin-1로 대체")
        return file_bytes.decode("latin-1")


def clean_text(text: str) -> str:
    """
    널/치환/ETX 문자 제거, 줄바꿈 통일, 남은 제어 문자는 공백으로 치환.
    """
    text = text.replace("\u0000", "").replace("\u001a", "").replace("\u0003", "")
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS_RE.sub(" ", text)
    return text.strip()


def _detect_binary_format(file_bytes: bytes) -> str:
    for signature, kind in _BINARY_SIGNATURES.items():
        if file_bytes.startswith(signature):
            return kind
    return ""
