from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional

from parsers.byte_cursor import decode_text
from services import descrambler

BLACK = ord('.')
CIRCLED = 0x80

ACROSS = "across"
DOWN = "down"

Grid = List[bytearray]
NumberGrid = List[List[int]]


def make_number_grid(width: int, height: int) -> NumberGrid:
    return [[0] * width for _ in range(height)]


class Position(NamedTuple):
    """Square coordinates, 0-indexed from the top left"""
    x: int
    y: int

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


Word = List[Position]


@dataclass
class Direction:
    """Clue information for one direction, indexed by entry number"""
    name: str
    numbers: List[int] = field(default_factory=list)
    indexes: Dict[int, int] = field(default_factory=dict)
    clues: Dict[int, str] = field(default_factory=dict)
    answers: Dict[int, str] = field(default_factory=dict)
    positions: Dict[int, Position] = field(default_factory=dict)
    words: Dict[int, Word] = field(default_factory=dict)
    # start[y][x] is the number of the entry passing through (x, y), or 0
    start: NumberGrid = field(default_factory=list)

    def __str__(self) -> str:
        return self.name.upper()

    def __len__(self) -> int:
        return len(self.numbers)

    def add_entry(self, number: int, clue: str, word: Word):
        """Record one entry; the first square of the word is its start position"""
        self.indexes[number] = len(self.numbers)
        self.numbers.append(number)
        self.clues[number] = clue
        self.positions[number] = word[0]
        self.words[number] = word
        for x, y in word:
            self.start[y][x] = number


@dataclass
class Checksums:
    """Checksums as stored in the file"""
    header: int = 0
    global_sum: int = 0
    magic: int = 0
    scrambled: int = 0


@dataclass
class ComputedChecksums:
    """Checksums recomputed from the decoded puzzle"""
    header: int = 0
    text: int = 0
    solution: int = 0
    fill: int = 0
    global_sum: int = 0
    magic: int = 0


@dataclass
class Puzzle:
    """A decoded Across Lite puzzle"""
    header: bytes = b""
    version: str = ""
    width: int = 0
    height: int = 0
    num_clues: int = 0
    scrambled: bool = False
    title: str = ""
    author: str = ""
    copyright: str = ""
    notepad: str = ""
    all_clues: List[str] = field(default_factory=list)
    solution_grid: Grid = field(default_factory=list)
    circles: Optional[Grid] = None
    numbers: NumberGrid = field(default_factory=list)
    across: Direction = field(default_factory=lambda: Direction(ACROSS))
    down: Direction = field(default_factory=lambda: Direction(DOWN))
    checksums: Checksums = field(default_factory=Checksums)
    computed: ComputedChecksums = field(default_factory=ComputedChecksums)

    def in_range(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_black(self, x: int, y: int) -> bool:
        """Squares off the grid count as black"""
        if not self.in_range(x, y):
            return True
        return self.solution_grid[y][x] == BLACK

    def is_circled(self, x: int, y: int) -> bool:
        if self.circles is None or not self.in_range(x, y):
            return False
        return bool(self.circles[y][x] & CIRCLED)

    def entry_number(self, x: int, y: int) -> int:
        """Number printed in square (x, y), or 0"""
        if not self.in_range(x, y):
            return 0
        return self.numbers[y][x]

    def position_number(self, pos: Position) -> int:
        return self.entry_number(pos.x, pos.y)

    def direction(self, name: str) -> Direction:
        """Get the Direction record by name ("across" or "down")"""
        if name.lower() == ACROSS:
            return self.across
        if name.lower() == DOWN:
            return self.down
        raise ValueError(f"unknown direction {name!r}")

    @property
    def directions(self) -> List[Direction]:
        return [self.across, self.down]

    @property
    def fillable_cell_count(self) -> int:
        return sum(1 for row in self.solution_grid for b in row if b != BLACK)

    def answer_grid(self) -> List[str]:
        """Solution rows as text"""
        return [decode_text(bytes(row)) for row in self.solution_grid]

    def solution(self) -> str:
        """Solution grid with each row followed by a newline"""
        return "".join(row + "\n" for row in self.answer_grid())

    def refresh_answers(self):
        """Rebuild the answer maps from the solution grid; they stay empty while scrambled"""
        for d in self.directions:
            d.answers.clear()
            if self.scrambled:
                continue
            for n in d.numbers:
                d.answers[n] = decode_text(bytes(self.solution_grid[y][x] for x, y in d.words[n]))

    def unlock(self, workers: Optional[int] = None) -> int:
        """Find the smallest key that unlocks the puzzle, apply it and return it"""
        return descrambler.unlock(self, workers=workers)

    def unlock_with_key(self, key: int):
        """Unlock the puzzle with a known key"""
        descrambler.unlock_with_key(self, key)
