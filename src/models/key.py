from dataclasses import dataclass, field
from typing import Iterator, List

from models.errors import RangeError

KEY_DIGITS = 4
MAX_KEY = 10 ** KEY_DIGITS - 1


@dataclass
class Key:
    """A 4-digit descrambling key, most significant digit first"""
    digits: List[int] = field(default_factory=lambda: [0] * KEY_DIGITS)

    def __post_init__(self):
        if len(self.digits) != KEY_DIGITS or any(not 0 <= d <= 9 for d in self.digits):
            raise RangeError(f"key digits {self.digits} must be {KEY_DIGITS} values in 0 .. 9")

    @classmethod
    def from_int(cls, value: int) -> "Key":
        """Build a key from its 0000..9999 integer form"""
        if not 0 <= value <= MAX_KEY:
            raise RangeError(f"key ({value}) must be in the range 0000 .. {MAX_KEY}")
        return cls([int(c) for c in f"{value:0{KEY_DIGITS}d}"])

    def __int__(self) -> int:
        n = 0
        for d in self.digits:
            n = 10 * n + d
        return n

    def __str__(self) -> str:
        return "".join(str(d) for d in self.digits)

    def increment(self) -> bool:
        """Advance to the next key in numeric order. Returns False after wrapping past 9999."""
        for i in reversed(range(KEY_DIGITS)):
            self.digits[i] += 1
            if self.digits[i] != 10:
                return True
            self.digits[i] = 0
        return False

    @classmethod
    def all_keys(cls, start: int = 0, stop: int = MAX_KEY + 1) -> Iterator["Key"]:
        """Yield keys start .. stop-1 in ascending order"""
        if start >= stop:
            return
        key = cls.from_int(start)
        for _ in range(start, stop):
            yield key
            key = Key(list(key.digits))
            key.increment()
