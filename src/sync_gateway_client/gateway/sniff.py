"""Content-type detection for attachment uploads.

Implements a subset of the WHATWG MIME sniffing algorithm: at most the
first 512 bytes are inspected and matched against known markup and binary
signatures. Anything unrecognized is classified as plain text or as
``application/octet-stream`` depending on whether binary control bytes
are present.
"""

from __future__ import annotations

from typing import Final


__all__ = [
    "DEFAULT_BINARY_TYPE",
    "DEFAULT_TEXT_TYPE",
    "SNIFF_LENGTH",
    "detect_content_type",
]


SNIFF_LENGTH: Final = 512
DEFAULT_TEXT_TYPE: Final = "text/plain; charset=utf-8"
DEFAULT_BINARY_TYPE: Final = "application/octet-stream"

_WHITESPACE = b"\t\n\x0c\r "

# Matched case-insensitively after leading whitespace, and only when
# followed by a tag-terminating byte.
_HTML_PREFIXES: Final = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

# Exact prefixes, checked in order.
_PREFIXES: Final = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", "text/plain; charset=utf-8"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"ID3", "audio/mpeg"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"\x1a\x45\xdf\xa3", "video/webm"),
    (b"\x00\x01\x00\x00", "font/ttf"),
    (b"OTTO", "font/otf"),
    (b"ttcf", "font/collection"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"7z\xbc\xaf\x27\x1c", "application/x-7z-compressed"),
    (b"\x00asm", "application/wasm"),
)

# (container magic, format tag at offset 8) for RIFF/IFF containers.
_CONTAINERS: Final = (
    (b"RIFF", b"WEBPVP", "image/webp"),
    (b"RIFF", b"AVI ", "video/avi"),
    (b"RIFF", b"WAVE", "audio/wave"),
    (b"FORM", b"AIFF", "audio/aiff"),
)

_BINARY_BYTES: Final = frozenset(
    [*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)]
)


def _match_html(data: bytes) -> bool:
    for prefix in _HTML_PREFIXES:
        if len(data) <= len(prefix):
            continue
        if data[: len(prefix)].upper() != prefix:
            continue
        if data[len(prefix)] in b" >":
            return True
    return False


def _match_mp4(data: bytes) -> bool:
    """Match an ISO base media file whose brand starts with ``mp4``."""
    if len(data) < 12:  # noqa: PLR2004
        return False
    box_size = int.from_bytes(data[:4], "big")
    if box_size % 4 != 0 or len(data) < box_size or data[4:8] != b"ftyp":
        return False
    if data[8:11] == b"mp4":
        return True
    # Compatible brands follow the major brand and minor version.
    return any(data[st : st + 3] == b"mp4" for st in range(16, box_size, 4))


def detect_content_type(data: bytes) -> str:
    """Guess the MIME type of a payload from its leading bytes.

    Args:
        data: The payload. Only the first 512 bytes are examined.

    Returns:
        A MIME type, always valid for a ``Content-Type`` header. Empty
        content is reported as UTF-8 text.

    Example:
        >>> detect_content_type(b"\\x89PNG\\r\\n\\x1a\\n...")
        'image/png'
        >>> detect_content_type(b'{"x": 1}')
        'text/plain; charset=utf-8'
    """
    head = bytes(data[:SNIFF_LENGTH])

    markup = head.lstrip(_WHITESPACE)
    if _match_html(markup):
        return "text/html; charset=utf-8"
    if markup.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    for prefix, mime in _PREFIXES:
        if head.startswith(prefix):
            return mime

    for magic, tag, mime in _CONTAINERS:
        if head.startswith(magic) and head[8 : 8 + len(tag)] == tag:
            return mime

    if _match_mp4(head):
        return "video/mp4"

    if any(byte in _BINARY_BYTES for byte in head):
        return DEFAULT_BINARY_TYPE
    return DEFAULT_TEXT_TYPE
