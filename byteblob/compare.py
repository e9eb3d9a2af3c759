"""
Byte-equality policies for Blobs.

Both comparators return True when the inputs are NOT equal, matching the
``!=`` operator they back. A length mismatch is always "not equal" and is
reported immediately; lengths are not considered secret.

    compare_fast:      short-circuits on the first differing byte
    compare_constant:  touches every byte regardless of content, so running
                       time depends only on length (tokens, digests, MACs)
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from byteblob import WORD_SIZE


class CompareType(Enum):
    """Equality policy bound to a Blob at construction."""

    FAST = "fast"
    CONSTANT = "constant"


class Comparison(Enum):
    """Outcome of Blob.compare()."""

    EQ = "eq"
    NE = "ne"


def as_byte_view(obj) -> memoryview:
    """Return a flat unsigned-byte memoryview over a Blob or bytes-like object."""
    if isinstance(obj, memoryview):
        mv = obj
    else:
        data = getattr(obj, "data", None)
        mv = data if isinstance(data, memoryview) else memoryview(obj)
    # Strided views cannot be cast; take a contiguous copy first
    if not mv.c_contiguous:
        mv = memoryview(mv.tobytes())
    if mv.format != "B" or mv.ndim != 1:
        mv = mv.cast("B")
    return mv


def compare_fast(a, b) -> bool:
    """Standard comparison (may terminate early if different).

    Returns True if not equal, False if equal.
    """
    av = as_byte_view(a)
    bv = as_byte_view(b)
    if av.nbytes != bv.nbytes:
        return True
    return av != bv


def compare_constant(a, b) -> bool:
    """Constant-time comparison for inputs of the same length.

    XORs corresponding 64-bit words, then the remaining tail bytes, OR-ing
    every difference into a single accumulator. The loop never exits early.

    Returns True if not equal, False if equal.
    """
    av = as_byte_view(a)
    bv = as_byte_view(b)
    size = av.nbytes
    if size != bv.nbytes:
        return True

    result = 0
    words = size // WORD_SIZE
    if words:
        aw = av[: words * WORD_SIZE].cast("Q")
        bw = bv[: words * WORD_SIZE].cast("Q")
        for x, y in zip(aw, bw):
            result |= x ^ y

    for i in range(words * WORD_SIZE, size):
        result |= av[i] ^ bv[i]

    return result != 0


_COMPARATORS: dict[CompareType, Callable] = {
    CompareType.FAST: compare_fast,
    CompareType.CONSTANT: compare_constant,
}


def comparator_for(compare_type: CompareType) -> Callable:
    """Return the comparator function for a CompareType."""
    try:
        return _COMPARATORS[CompareType(compare_type)]
    except ValueError:
        raise ValueError(f"Unknown compare type: {compare_type!r}") from None
