import logging
from dataclasses import dataclass
from typing import List, Optional

from models.errors import ChecksumError, FormatError, UnsupportedExtensionError
from parsers.byte_cursor import ByteCursor, read16
from parsers.checksums import checksum

logger = logging.getLogger(__name__)

SECTION_HEADER_LENGTH = 8

CIRCLES = "GEXT"
# Sections that carry no data this reader uses
IGNORED = frozenset(["GRBS", "RTBL", "LTIM", "RUSR"])


@dataclass
class Extension:
    tag: str
    data: bytes


class ExtensionReader:
    """Reads the tagged sections that follow the notepad"""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.circles: Optional[bytes] = None
        self.seen: List[str] = []

    def read_all(self, cursor: ByteCursor):
        """Read sections until fewer than a section header's worth of bytes remain"""
        while cursor.remaining >= SECTION_HEADER_LENGTH:
            self.handle(self.read_section(cursor))

    def read_section(self, cursor: ByteCursor) -> Extension:
        head = cursor.read(SECTION_HEADER_LENGTH)
        tag = head[0:4].decode('latin-1')
        count = read16(head, 4)
        check = read16(head, 6)
        if cursor.remaining < count + 1:
            raise FormatError(
                f"only {cursor.remaining} bytes of {tag} extension data instead of {count + 1}"
            )
        data = cursor.read(count)
        cursor.read(1)  # NUL terminator, not covered by the checksum
        calc = checksum(data)
        if calc != check:
            raise ChecksumError(f"{tag} extension", calc, check)
        logger.debug("%s extension: %d bytes", tag, count)
        return Extension(tag, data)

    def handle(self, extension: Extension):
        tag = extension.tag
        if tag == CIRCLES:
            n = self.width * self.height
            if len(extension.data) != n:
                raise FormatError(
                    f"{tag} extension contains {len(extension.data)} bytes of data instead of {n}"
                )
            self.circles = extension.data
        elif tag not in IGNORED:
            raise UnsupportedExtensionError(tag)
        self.seen.append(tag)
