"""Recovering the solution of a scrambled puzzle.

Scrambling works on the letters of the solution grid read column by column,
skipping black squares. Each of four rounds shifts every letter by a key
digit, rotates the buffer and interleaves its halves. Only the reverse
direction is implemented here. The sole test of a candidate key is the
scrambled-solution checksum stored in the header.
"""
import logging
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Sequence

from models.errors import KeyMismatchError, RangeError, StateError, UnlockFailedError
from models.key import KEY_DIGITS, MAX_KEY, Key
from parsers.checksums import checksum

logger = logging.getLogger(__name__)

BLACK = ord('.')
ROUNDS = KEY_DIGITS
KEY_SPACE = MAX_KEY + 1
# shards per worker, so an early hit lets later shards be cancelled
SHARDS_PER_WORKER = 4


def _unshift_table(d: int) -> bytes:
    # only the A-Z entries are ever used
    return bytes(ord('A') + (c - ord('A') - d) % 26 for c in range(256))


UNSHIFT_TABLES = [_unshift_table(d) for d in range(10)]


def compress(puzzle) -> bytes:
    """Letters of the solution grid in column-major order, black squares skipped"""
    return bytes(puzzle.solution_grid[y][x]
                 for x in range(puzzle.width)
                 for y in range(puzzle.height)
                 if puzzle.solution_grid[y][x] != BLACK)


def expand(puzzle, buf: bytes) -> List[bytearray]:
    """Inverse of compress: put letters back into a copy of the solution grid"""
    grid = [bytearray(row) for row in puzzle.solution_grid]
    letters = iter(buf)
    for x in range(puzzle.width):
        for y in range(puzzle.height):
            if grid[y][x] != BLACK:
                grid[y][x] = next(letters)
    return grid


def unshuffle(buf: bytes) -> bytes:
    """Odd-indexed bytes followed by even-indexed bytes"""
    return buf[1::2] + buf[0::2]


def unshift(buf: bytes, digits: Sequence[int]) -> bytes:
    """Move each letter back by key[i % 4] places in the alphabet"""
    out = bytearray(len(buf))
    for j in range(KEY_DIGITS):
        out[j::KEY_DIGITS] = buf[j::KEY_DIGITS].translate(UNSHIFT_TABLES[digits[j]])
    return bytes(out)


def unscramble(src: bytes, digits: Sequence[int]) -> bytes:
    n = len(src)
    buf = src
    for i in range(ROUNDS):
        buf = unshuffle(buf)
        k = digits[ROUNDS - 1 - i] % n if n else 0
        buf = buf[n - k:] + buf[:n - k]
        buf = unshift(buf, digits)
    return buf


def search_keys(src: bytes, target: int, start: int, stop: int) -> Optional[int]:
    """Smallest key in [start, stop) whose plaintext checksum is target, or None"""
    for key in Key.all_keys(start, stop):
        if checksum(unscramble(src, key.digits)) == target:
            return int(key)
    return None


def _shards(workers: int) -> List[range]:
    count = workers * SHARDS_PER_WORKER
    size = -(-KEY_SPACE // count)
    return [range(lo, min(lo + size, KEY_SPACE)) for lo in range(0, KEY_SPACE, size)]


def _parallel_search(src: bytes, target: int, workers: int) -> Optional[int]:
    shards = _shards(workers)
    with ProcessPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(search_keys, src, target, r.start, r.stop) for r in shards]
        # consume in shard order so the smallest key wins
        for i, future in enumerate(futures):
            found = future.result()
            if found is not None:
                for pending in futures[i + 1:]:
                    pending.cancel()
                return found
    return None


def _letters(puzzle) -> bytes:
    src = compress(puzzle)
    if not src:
        raise StateError("puzzle has no squares to unscramble")
    for i, b in enumerate(src):
        if not ord('A') <= b <= ord('Z'):
            raise StateError(f"scrambled square {i} holds {chr(b)!r}; only A-Z can be unscrambled")
    return src


def _apply(puzzle, plaintext: bytes):
    puzzle.solution_grid = expand(puzzle, plaintext)
    puzzle.scrambled = False
    puzzle.refresh_answers()


def unlock(puzzle, workers: Optional[int] = None) -> int:
    """Brute-force the key, unlock the puzzle and return the key.

    Keys are tried in ascending order and the first one whose plaintext
    matches the scrambled checksum is used. With workers > 1 the key space is
    searched by a process pool in ascending shards; the result is the same.
    """
    if not puzzle.scrambled:
        return 0
    src = _letters(puzzle)
    target = puzzle.checksums.scrambled
    logger.debug("searching %d keys for %d letters (workers: %s)", KEY_SPACE, len(src), workers or 1)
    if workers and workers > 1:
        found = _parallel_search(src, target, workers)
    else:
        found = search_keys(src, target, 0, KEY_SPACE)
    if found is None:
        raise UnlockFailedError("brute-force unlocking failed")
    _apply(puzzle, unscramble(src, Key.from_int(found).digits))
    logger.info("unlocked puzzle with key %04d", found)
    return found


def unlock_with_key(puzzle, key: int):
    if not 0 <= key <= MAX_KEY:
        raise RangeError(f"key ({key}) must be in the range 0000 .. {MAX_KEY}")
    if not puzzle.scrambled:
        if key == 0:
            return
        raise RangeError("puzzle is already unlocked")
    src = _letters(puzzle)
    plaintext = unscramble(src, Key.from_int(key).digits)
    if checksum(plaintext) != puzzle.checksums.scrambled:
        raise KeyMismatchError(key)
    _apply(puzzle, plaintext)
    logger.info("unlocked puzzle with key %04d", key)
