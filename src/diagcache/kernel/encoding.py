"""Source text preparation for file-backed diagrams.

Detects a UTF-8, UTF-16LE or UTF-16BE byte order mark, strips it, decodes the
remaining bytes and removes trailing whitespace from every line.
"""

from typing import List, Optional, Tuple

from diagcache.errors import EncodingFailure

BOM_BYTES_UTF_8 = b"\xef\xbb\xbf"
BOM_BYTES_UTF_16LE = b"\xff\xfe"
BOM_BYTES_UTF_16BE = b"\xfe\xff"

DEFAULT_ENCODING = "utf-8"


def detect_bom(data: bytes) -> Tuple[str, int]:
    """Return the encoding implied by a leading BOM and the BOM length.

    Data without a BOM is assumed to be UTF-8 with a zero-length marker.
    """
    if data.startswith(BOM_BYTES_UTF_16LE):
        return "utf-16-le", len(BOM_BYTES_UTF_16LE)
    if data.startswith(BOM_BYTES_UTF_16BE):
        return "utf-16-be", len(BOM_BYTES_UTF_16BE)
    if data.startswith(BOM_BYTES_UTF_8):
        return "utf-8", len(BOM_BYTES_UTF_8)
    return DEFAULT_ENCODING, 0


def prepare_source_lines(data: bytes, path: Optional[str] = None) -> List[str]:
    """Decode raw source bytes into right-stripped lines.

    Args:
        data: Raw file contents
        path: File path, used only in error messages

    Returns:
        List of lines with trailing whitespace removed

    Raises:
        EncodingFailure: If the bytes are not valid in the detected encoding
    """
    if not data:
        return []

    encoding, bom_length = detect_bom(data)
    try:
        text = data[bom_length:].decode(encoding)
    except UnicodeDecodeError as e:
        raise EncodingFailure(encoding, path, str(e)) from e

    # Decode before splitting: UTF-16 newlines span two bytes
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip() for line in lines]
