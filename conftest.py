"""
Shared fixtures: build .puz files in memory
"""

import os
import struct
from typing import List, Optional, Sequence, Tuple

import pytest

TESTDATA_DIR = os.path.join(os.path.dirname(__file__), "testdata")

MAGIC = b"ACROSS&DOWN\x00"

# 5x3 grid with black squares, numbered
#   1  2  .  3  4
#   5  .  6  .  .
#   .  .  7  .  .
SMALL_ROWS = ["AB.CD",
              "EFGHI",
              "J.KL."]
# clue text in file order: 1A 1D 2D 3A 3D 4D 5A 6D 7A
SMALL_CLUES = ["Across one", "Down one", "Down two", "Across three", "Down three",
               "Down four", "Across five", "Down six", "Across seven"]

LETTER_ROWS = ["CRANE",
               "HOVEL",
               "AWARE",
               "SEDAN",
               "EXTRA"]
LETTER_CLUES = ["Clue %d" % i for i in range(10)]


def cksum(data: bytes, c: int = 0) -> int:
    for b in data:
        if c & 1:
            c = (c >> 1) + 0x8000
        else:
            c = c >> 1
        c = (c + b) & 0xFFFF
    return c


def column_major(rows: Sequence[str]) -> List[Tuple[int, int]]:
    return [(x, y) for x in range(len(rows[0])) for y in range(len(rows)) if rows[y][x] != '.']


def scramble(plain: bytes, digits: Sequence[int]) -> bytes:
    """Forward transform, only needed to produce locked test puzzles"""
    n = len(plain)
    buf = plain
    for i in reversed(range(4)):
        buf = bytes(ord('A') + (c - ord('A') + digits[j % 4]) % 26 for j, c in enumerate(buf))
        k = digits[3 - i] % n
        buf = buf[k:] + buf[:k]
        m = n // 2
        out = bytearray(n)
        out[1::2] = buf[:m]
        out[0::2] = buf[m:]
        buf = bytes(out)
    return buf


def scramble_rows(rows: Sequence[str], key: int) -> Tuple[List[str], int]:
    """Scramble the letters of rows; returns the new rows and the plaintext checksum"""
    digits = [int(c) for c in "%04d" % key]
    cells = column_major(rows)
    plain = bytes(ord(rows[y][x]) for x, y in cells)
    locked = scramble(plain, digits)
    grid = [list(row) for row in rows]
    for (x, y), b in zip(cells, locked):
        grid[y][x] = chr(b)
    return ["".join(row) for row in grid], cksum(plain)


def placeholder_clues(rows: Sequence[str]) -> List[str]:
    """One clue per entry of the grid"""
    def open_square(x, y):
        return 0 <= y < len(rows) and 0 <= x < len(rows[0]) and rows[y][x] != '.'

    count = 0
    for y in range(len(rows)):
        for x in range(len(rows[0])):
            if not open_square(x, y):
                continue
            count += not open_square(x - 1, y) and open_square(x + 1, y)
            count += not open_square(x, y - 1) and open_square(x, y + 1)
    return ["Clue %d" % i for i in range(count)]


def extension(tag: bytes, data: bytes, check: Optional[int] = None) -> bytes:
    if check is None:
        check = cksum(data)
    return tag + struct.pack('<HH', len(data), check) + data + b"\0"


def build_puz(rows: Sequence[str] = SMALL_ROWS,
              clues: Sequence[str] = SMALL_CLUES,
              title: str = "Test Puzzle",
              author: str = "A. Setter",
              copyright: str = "© 2010",
              notepad: str = "",
              version: bytes = b"1.3",
              key: Optional[int] = None,
              extensions: Sequence[bytes] = (),
              prefix: bytes = b"") -> bytes:
    """Encode a puzzle with every checksum filled in"""
    width, height = len(rows[0]), len(rows)
    scrambled_sum = 0
    if key is not None:
        rows, scrambled_sum = scramble_rows(rows, key)

    solution = "".join(rows).encode('cp1252')
    fill = bytes(ord('.') if b == ord('.') else ord('-') for b in solution)

    tail = struct.pack('<BBHHH', width, height, len(clues), 1, 4 if key is not None else 0)
    cib = cksum(tail)

    def z(s: str) -> bytes:
        return s.encode('cp1252') + b"\0"

    text = 0
    for s in (title, author, copyright):
        if s:
            text = cksum(z(s), text)
    for clue in clues:
        text = cksum(clue.encode('cp1252'), text)
    if version >= b"1.3" and notepad:
        text = cksum(z(notepad), text)

    global_sum = cksum(fill, cksum(solution, cib))
    for s in (title, author, copyright):
        if s:
            global_sum = cksum(z(s), global_sum)
    for clue in clues:
        global_sum = cksum(clue.encode('cp1252'), global_sum)
    if version >= b"1.3" and notepad:
        global_sum = cksum(z(notepad), global_sum)

    sums = [text, cksum(fill), cksum(solution), cib]
    low = bytes(b"ICHE"[i] ^ (sums[3 - i] & 0xFF) for i in range(4))
    high = bytes(b"ATED"[i] ^ (sums[3 - i] >> 8) for i in range(4))

    header = (struct.pack('<H', global_sum) + MAGIC + struct.pack('<H', cib)
              + low + high + version + b"\0" + b"\0\0"
              + struct.pack('<H', scrambled_sum) + b"\0" * 12 + tail)
    assert len(header) == 52

    body = solution + fill + z(title) + z(author) + z(copyright)
    body += b"".join(z(clue) for clue in clues) + z(notepad)
    return prefix + header + body + b"".join(extensions)


def data_file(name: str) -> str:
    return os.path.join(TESTDATA_DIR, name)


def has_testdata(name: str) -> bool:
    return os.path.exists(data_file(name))


@pytest.fixture
def small_puz() -> bytes:
    return build_puz()


@pytest.fixture
def locked_puz() -> bytes:
    return build_puz(LETTER_ROWS, LETTER_CLUES, key=12)
