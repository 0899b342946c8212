import struct
from typing import Optional

from models.errors import FormatError

ENCODING = 'cp1252'  # used by the .puz format


def _code_page_table() -> dict:
    # cp1252 leaves five bytes undefined; map them to the same code point so
    # the text mapping is total and reversible
    table = {}
    for b in range(256):
        try:
            table[b] = bytes([b]).decode(ENCODING)
        except UnicodeDecodeError:
            table[b] = chr(b)
    return table


_DECODE = _code_page_table()
_ENCODE = {ch: b for b, ch in _DECODE.items()}


def decode_text(raw: bytes) -> str:
    """Map on-disk code page bytes to text"""
    return raw.decode('latin-1').translate(_DECODE)


def encode_text(text: str) -> bytes:
    """Map text back to the on-disk code page bytes"""
    try:
        return bytes(_ENCODE[ch] for ch in text)
    except KeyError as e:
        raise FormatError(f"character {e.args[0]!r} has no {ENCODING} encoding") from None


def read16(data: bytes, offset: int = 0) -> int:
    return struct.unpack_from('<H', data, offset)[0]


def read32(data: bytes, offset: int = 0) -> int:
    return struct.unpack_from('<I', data, offset)[0]


def read64(data: bytes, offset: int = 0) -> int:
    return struct.unpack_from('<Q', data, offset)[0]


class ByteCursor:
    """Sequential reader over a byte buffer"""

    def __init__(self, data: bytes, position: int = 0):
        self.data = bytes(data)
        self.position = position

    @property
    def remaining(self) -> int:
        return len(self.data) - self.position

    def read(self, count: int, what: Optional[str] = None) -> bytes:
        """Consume exactly count bytes"""
        if count < 0 or count > self.remaining:
            label = f"{what} " if what else ""
            raise FormatError(f"only {self.remaining} bytes of {label}data instead of {count}")
        chunk = self.data[self.position:self.position + count]
        self.position += count
        return chunk

    def read_raw_string(self) -> bytes:
        """Consume a NUL-terminated string, dropping the terminator.

        A final string may end at the end of the buffer without its NUL.
        """
        end = self.data.find(b'\0', self.position)
        if end < 0:
            raw = self.data[self.position:]
            self.position = len(self.data)
            return raw
        raw = self.data[self.position:end]
        self.position = end + 1
        return raw

    def read_string(self) -> str:
        return decode_text(self.read_raw_string())
