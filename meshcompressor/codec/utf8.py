"""
UTF-8 based variable-length encoding of 16-bit words.

Each word is written as a single UTF-8 character, so small values take one
byte and the largest take three. Words that would land in the surrogate range
[0xD800, 0xE000) are shifted up by 0x800, which keeps the output valid UTF-8
text at the cost of the top 2048 code points.
"""

from typing import Iterable, List

import numpy as np

# Largest encodable word is MAX_WORD - 1
MAX_WORD = 0xF800

_SURROGATE_START = 0xD800
_SURROGATE_SHIFT = 0x0800


def encode_varint(word: int) -> bytes:
    """
    Encode a single 16-bit word.

    Args:
        word: Value in [0, 0xF800).

    Returns:
        One to three bytes.

    Raises:
        ValueError: If the word is outside the encodable range.
    """
    word = int(word)
    if word < 0 or word >= MAX_WORD:
        raise ValueError(f"Word {word} is outside the encodable range [0, {MAX_WORD})")
    if word >= _SURROGATE_START:
        word += _SURROGATE_SHIFT
    return chr(word).encode("utf-8")


def encode_varints(words: Iterable[int]) -> bytes:
    """
    Encode a sequence of 16-bit words into one byte string.

    Args:
        words: Values in [0, 0xF800), e.g. a numpy uint16 array.

    Returns:
        The concatenated encodings.

    Raises:
        ValueError: If any word is outside the encodable range.
    """
    words = np.asarray(words, dtype=np.int64).ravel()
    if words.size == 0:
        return b""
    if words.min() < 0 or words.max() >= MAX_WORD:
        bad = words[(words < 0) | (words >= MAX_WORD)][0]
        raise ValueError(f"Word {bad} is outside the encodable range [0, {MAX_WORD})")
    shifted = np.where(words >= _SURROGATE_START, words + _SURROGATE_SHIFT, words)
    return "".join(map(chr, shifted.tolist())).encode("utf-8")


def decode_varints(data: bytes) -> List[int]:
    """
    Decode every word in a byte string.

    Args:
        data: Concatenated encodings as produced by `encode_varints`.

    Returns:
        The decoded words in order.

    Raises:
        ValueError: If the data is not a valid encoding.
    """
    try:
        text = bytes(data).decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Malformed varint stream at byte {e.start}") from e
    words = []
    for ch in text:
        code = ord(ch)
        if code > 0xFFFF:
            raise ValueError(f"Code point {code:#x} is not a 16-bit word")
        if code >= _SURROGATE_START + _SURROGATE_SHIFT:
            code -= _SURROGATE_SHIFT
        words.append(code)
    return words
