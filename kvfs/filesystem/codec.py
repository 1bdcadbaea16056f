"""
Binary payload codec.

Binary file content is stored as standard, padded base64 text so it can
live in a string-only key-value store.
"""

import base64
import binascii
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


def binary_to_base64(data: BytesLike) -> str:
    """Encode raw bytes as base64 text."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"Binary content must be bytes-like, not {type(data).__name__}")
    return base64.b64encode(bytes(data)).decode('ascii')


def base64_to_binary(text: str) -> bytes:
    """
    Decode base64 text back to raw bytes.

    Raises:
        ValueError: If the text is not valid base64
    """
    try:
        return base64.b64decode(text.encode('ascii'), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
