import logging
from typing import List

from models.errors import ChecksumError, FormatError, StructuralError
from models.puzzle import (ACROSS, DOWN, Checksums, ComputedChecksums, Direction, Grid,
                           Position, Puzzle, make_number_grid)
from parsers.byte_cursor import ByteCursor, read16, read64
from parsers.checksums import (checksum, header_checksum, magic_checksum,
                               text_checksum)
from parsers.extensions import ExtensionReader

logger = logging.getLogger(__name__)

MAGIC = b"ACROSS&DOWN\x00"
# The header starts this many bytes before MAGIC
MAGIC_OFFSET = 2
HEADER_LENGTH = 52


def split_grid(raw: bytes, width: int, height: int) -> Grid:
    """Cut width*height bytes into rows"""
    return [bytearray(raw[y * width:(y + 1) * width]) for y in range(height)]


class PUZParser:
    """Parser for Across Lite .puz files"""

    def parse(self, file_path: str) -> Puzzle:
        """Parse a .puz file and return a Puzzle object"""
        with open(file_path, 'rb') as f:
            data = f.read()
        return self.decode(data)

    def decode(self, data: bytes) -> Puzzle:
        """Decode a complete .puz byte buffer"""
        puzzle = Puzzle()
        cursor = self._read_header(puzzle, data)
        w, h = puzzle.width, puzzle.height
        n = w * h

        try:
            solution = cursor.read(n, "solution grid")
        except FormatError as e:
            raise FormatError(f"malformed solution section in {w}×{h} puzzle: {e}") from None
        try:
            fill = cursor.read(n, "fill grid")
        except FormatError as e:
            raise FormatError(f"malformed fill section in {w}×{h} puzzle: {e}") from None
        puzzle.solution_grid = split_grid(solution, w, h)

        puzzle.title = cursor.read_string()
        puzzle.author = cursor.read_string()
        puzzle.copyright = cursor.read_string()
        puzzle.all_clues = [cursor.read_string() for _ in range(puzzle.num_clues)]

        self._index_clues(puzzle)
        puzzle.notepad = cursor.read_string()

        self._validate_checksums(puzzle, solution, fill)

        extensions = ExtensionReader(w, h)
        try:
            extensions.read_all(cursor)
        except FormatError as e:
            raise FormatError(f"malformed extension section in {w}×{h} puzzle: {e}") from None
        if extensions.circles is not None:
            puzzle.circles = split_grid(extensions.circles, w, h)

        puzzle.refresh_answers()
        logger.debug("decoded %d×%d puzzle %r (extensions: %s)",
                     w, h, puzzle.title, ", ".join(extensions.seen) or "none")
        return puzzle

    def _read_header(self, puzzle: Puzzle, data: bytes) -> ByteCursor:
        if len(data) < HEADER_LENGTH:
            raise FormatError(f"puzzle is only {len(data)} bytes long")
        start = data.find(MAGIC, MAGIC_OFFSET) - MAGIC_OFFSET
        if start < 0:
            raise FormatError(f"puzzle does not contain expected header {MAGIC!r}")
        end = start + HEADER_LENGTH
        if end > len(data):
            raise FormatError(f"header at offset {start} is truncated")
        if start > 0:
            logger.debug("header found at offset %d", start)

        header = bytes(data[start:end])
        check = read16(header, 14)
        calc = header_checksum(header)
        if calc != check:
            raise ChecksumError("header", calc, check)

        puzzle.header = header
        puzzle.checksums = Checksums(
            header=check,
            global_sum=read16(header, 0),
            magic=read64(header, 16),
            scrambled=read16(header, 30),
        )
        puzzle.version = header[24:27].decode('latin-1').rstrip('\0')
        puzzle.width = header[44]
        puzzle.height = header[45]
        puzzle.num_clues = read16(header, 46)
        puzzle.scrambled = read16(header, 50) != 0
        if puzzle.width == 0 or puzzle.height == 0:
            raise FormatError(f"invalid grid dimensions {puzzle.width}×{puzzle.height}")
        return ByteCursor(data, end)

    def _index_clues(self, puzzle: Puzzle):
        """Number the grid and assign clues to entries in row-major order"""
        w, h = puzzle.width, puzzle.height
        puzzle.numbers = make_number_grid(w, h)
        puzzle.across = Direction(ACROSS, start=make_number_grid(w, h))
        puzzle.down = Direction(DOWN, start=make_number_grid(w, h))

        clues = iter(puzzle.all_clues)
        number = 1
        for y in range(h):
            for x in range(w):
                if puzzle.is_black(x, y):
                    continue
                numbered = False
                if puzzle.is_black(x - 1, y) and not puzzle.is_black(x + 1, y):
                    self._add_entry(puzzle, puzzle.across, number, clues, self._walk(puzzle, x, y, 1, 0))
                    numbered = True
                if puzzle.is_black(x, y - 1) and not puzzle.is_black(x, y + 1):
                    self._add_entry(puzzle, puzzle.down, number, clues, self._walk(puzzle, x, y, 0, 1))
                    numbered = True
                if numbered:
                    puzzle.numbers[y][x] = number
                    number += 1

        n_across, n_down = len(puzzle.across), len(puzzle.down)
        if n_across + n_down != puzzle.num_clues:
            raise StructuralError(
                f"{n_across} {puzzle.across} + {n_down} {puzzle.down} clues "
                f"were indexed instead of {puzzle.num_clues}"
            )

    def _add_entry(self, puzzle: Puzzle, direction: Direction, number: int, clues, word: List[Position]):
        try:
            clue = next(clues)
        except StopIteration:
            raise StructuralError(
                f"grid has more entries than the {puzzle.num_clues} clues in the file"
            ) from None
        direction.add_entry(number, clue, word)

    def _walk(self, puzzle: Puzzle, x: int, y: int, dx: int, dy: int) -> List[Position]:
        """Squares from (x, y) up to the next black square or the edge"""
        word = []
        while not puzzle.is_black(x, y):
            word.append(Position(x, y))
            x += dx
            y += dy
        return word

    def _text_checksum(self, puzzle: Puzzle, c: int = 0) -> int:
        return text_checksum(puzzle.title, puzzle.author, puzzle.copyright,
                             puzzle.all_clues, puzzle.notepad, puzzle.version, c)

    def _validate_checksums(self, puzzle: Puzzle, solution: bytes, fill: bytes):
        computed = ComputedChecksums(
            header=header_checksum(puzzle.header),
            text=self._text_checksum(puzzle),
            solution=checksum(solution),
            fill=checksum(fill),
        )
        # header -> solution -> fill -> text, as one running sum
        c = checksum(fill, checksum(solution, computed.header))
        computed.global_sum = self._text_checksum(puzzle, c)
        computed.magic = magic_checksum((computed.text, computed.fill,
                                         computed.solution, computed.header))
        puzzle.computed = computed

        expected = puzzle.checksums
        if computed.global_sum != expected.global_sum:
            raise ChecksumError("global", computed.global_sum, expected.global_sum)
        if computed.magic != expected.magic:
            raise ChecksumError("magic", computed.magic, expected.magic, width=16)


def decode(data: bytes) -> Puzzle:
    """Decode a .puz byte buffer into a Puzzle"""
    return PUZParser().decode(data)
