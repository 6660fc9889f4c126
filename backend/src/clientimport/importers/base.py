"""Shared helpers for CSV importers."""

from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Tuple, Union

from ..schema import RawLine
from ..utils_date import clean_str, safe_float

FileSource = Union[BinaryIO, TextIO, bytes, str, Path]

ENCODINGS = ("utf-8", "latin1")


def decode_bytes(content: bytes) -> Tuple[Optional[str], Optional[str]]:
    """
    Decode with encoding fallback: utf-8 -> latin1.

    Returns:
        tuple: (text, encoding_used) or (None, None) if all fail
    """
    for encoding in ENCODINGS:
        try:
            decoded = content.decode(encoding)
        except UnicodeDecodeError:
            continue
        # Remove BOM if present
        if decoded.startswith("\ufeff"):
            decoded = decoded[1:]
        return decoded, encoding
    return None, None


def read_source(file: FileSource) -> Tuple[bytes, str]:
    """
    Read the original bytes and decoded text from a file-like, path or buffer.

    Raises:
        ValueError: If the content cannot be decoded
    """
    if isinstance(file, Path):
        raw: Union[bytes, str] = file.read_bytes()
    elif isinstance(file, (bytes, str)):
        raw = file
    else:
        # text-mode handles: read the underlying bytes, not the newline-translated text
        buffer = getattr(file, "buffer", None)
        raw = buffer.read() if buffer is not None else file.read()

    if isinstance(raw, str):
        text = raw[1:] if raw.startswith("\ufeff") else raw
        return raw.encode("utf-8"), text

    text, _ = decode_bytes(raw)
    if text is None:
        raise ValueError("Failed to read file with any supported encoding")
    return raw, text


def field_at(line: RawLine, index: Optional[int]) -> Optional[str]:
    """Trimmed cell at index; None when the column is absent or blank."""
    if index is None or index < 0 or index >= len(line):
        return None
    return clean_str(line[index])


def coerce_float(value: Optional[str], default: Optional[float] = None) -> Optional[float]:
    """Coerce a string value to float with validation."""
    return safe_float(value, default)
