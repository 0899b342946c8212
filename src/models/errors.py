from typing import Optional


class PuzzleError(Exception):
    """Base class for every error raised while reading or unlocking a puzzle"""


class DecodeError(PuzzleError, ValueError):
    """The byte buffer could not be decoded into a puzzle"""


class FormatError(DecodeError):
    """Buffer too short, header missing, or a malformed grid/string region"""


class ChecksumError(DecodeError):
    """A stored checksum does not match the recomputed one"""

    def __init__(self, region: str, computed: int, expected: int, width: int = 4):
        self.region = region
        self.computed = computed
        self.expected = expected
        super().__init__(
            f"{region} checksum = {computed:0{width}X}, expected {expected:0{width}X}"
        )


class StructuralError(DecodeError):
    """The grid and the clue list disagree"""


class UnsupportedExtensionError(DecodeError):
    """An extension section with an unknown tag"""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"unsupported {tag} extension")


class UnlockError(PuzzleError):
    """Descrambling failed; the puzzle is left as it was"""


class RangeError(UnlockError, ValueError):
    """Key outside 0000..9999, or a key given for a puzzle that is not locked"""


class KeyMismatchError(UnlockError):
    """The key does not unlock this puzzle"""

    def __init__(self, key: int, message: Optional[str] = None):
        self.key = key
        super().__init__(message or f"key {key:04d} does not unlock this puzzle")


class StateError(UnlockError):
    """The puzzle is not in a state the cipher can operate on"""


class UnlockFailedError(UnlockError):
    """No key in 0000..9999 unlocks the puzzle"""
