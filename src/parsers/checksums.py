"""Across Lite checksums.

Every checksum in the format is built from one primitive: for each byte the
16-bit accumulator is rotated by one bit (the low bit wraps around to bit 15)
and the byte is added. Longer checksums chain the accumulator through several
regions of the file.
"""
from typing import Iterable, Sequence

from parsers.byte_cursor import encode_text

MASK = b"ICHEATED"

# header bytes covered by the header checksum
HEADER_CHECKED = slice(44, 52)


def checksum(data: Iterable[int], c: int = 0) -> int:
    for b in data:
        c = (((c >> 1) | ((c & 1) << 15)) + b) & 0xFFFF
    return c


def header_checksum(header: bytes) -> int:
    return checksum(header[HEADER_CHECKED])


def string_checksum(s: str, c: int) -> int:
    return checksum(encode_text(s), c)


def zstring_checksum(s: str, c: int) -> int:
    """Checksum of a NUL-terminated string; empty strings are skipped entirely"""
    if not s:
        return c
    return string_checksum(s + "\0", c)


def text_checksum(title: str, author: str, copyright: str, clues: Sequence[str],
                  notepad: str, version: str, c: int = 0) -> int:
    c = zstring_checksum(title, c)
    c = zstring_checksum(author, c)
    c = zstring_checksum(copyright, c)
    for clue in clues:
        c = string_checksum(clue, c)
    if version >= "1.3":
        c = zstring_checksum(notepad, c)
    return c


def magic_checksum(sums: Sequence[int]) -> int:
    """Mask four checksums (text, fill, solution, header) into one 64-bit value.

    High bytes land in the upper 32 bits in reverse order, low bytes in the
    lower 32 bits in forward order.
    """
    m = 0
    for i, c in enumerate(sums):
        m <<= 8
        m |= (MASK[7 - i] ^ (c >> 8)) << 32
        m |= MASK[3 - i] ^ (c & 0xFF)
    return m
