"""
Container — sole owner of one byte allocation and its scrub policy.

A Container is never handed to callers directly; Blob and MutableBlob hold
references on it. The reference count is guarded by a lock so that two
threads dropping the last two views at the same time still run the scrubber
exactly once.

Scrub policies:
    NONE:   leave the bytes as they are
    ZEROS:  overwrite every byte with 0 before the allocation is dropped
            (64-bit words first, then the remaining tail bytes)
"""

from __future__ import annotations

import ctypes
import logging
import operator
import threading
from enum import Enum
from typing import Callable

from byteblob import MAX_ALLOCATION, WORD_SIZE

log = logging.getLogger(__name__)


class AllocationError(MemoryError):
    """A Container could not be allocated."""


class ScrubType(Enum):
    """Action run over a Container's bytes right before it is dropped."""

    NONE = "none"
    ZEROS = "zeros"


def scrub_null(buffer, size: int) -> None:
    """The default scrubber does nothing to the data."""


def scrub_zeros(buffer, size: int) -> None:
    """Overwrite the first ``size`` bytes of a writable buffer with zeros.

    Whole 64-bit words are cleared through a ``Q``-cast view, the remainder
    one byte at a time. Bytes past ``size`` are left untouched.
    """
    mv = memoryview(buffer)
    try:
        size = min(size, mv.nbytes)
        words = size // WORD_SIZE
        if words:
            wv = mv[: words * WORD_SIZE].cast("Q")
            try:
                for i in range(words):
                    wv[i] = 0
            finally:
                wv.release()
        for i in range(words * WORD_SIZE, size):
            mv[i] = 0
    finally:
        mv.release()


_SCRUBBERS: dict[ScrubType, Callable] = {
    ScrubType.NONE: scrub_null,
    ScrubType.ZEROS: scrub_zeros,
}


def scrubber_for(scrub_type: ScrubType) -> Callable:
    """Return the scrub function for a ScrubType."""
    try:
        return _SCRUBBERS[ScrubType(scrub_type)]
    except ValueError:
        raise ValueError(f"Unknown scrub type: {scrub_type!r}") from None


class Container:
    """A reference-counted, fixed-size, zero-initialised byte allocation.

    Usage:
        c = Container(32, ScrubType.ZEROS)
        c.acquire()
        c.buffer[0] = 0xFF
        c.release()   # last reference: bytes are zeroed, buffer dropped
    """

    def __init__(self, size: int = 0, scrub: ScrubType = ScrubType.NONE) -> None:
        size = operator.index(size)
        if size < 0:
            raise AllocationError(f"Cannot allocate a negative size ({size})")
        if size > MAX_ALLOCATION:
            raise AllocationError(
                f"Allocation of {size} bytes exceeds limit ({MAX_ALLOCATION})"
            )
        try:
            self._buffer: bytearray | None = bytearray(size)
        except (MemoryError, OverflowError) as e:
            raise AllocationError(f"Failed to allocate {size} bytes") from e

        self._size = size
        self._scrub_type = ScrubType(scrub)
        self._scrubber = scrubber_for(self._scrub_type)
        self._refs = 0
        self._released = False
        self._lock = threading.Lock()

    def __copy__(self):
        raise TypeError("Container cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("Container cannot be copied")

    def __repr__(self) -> str:
        state = "released" if self._released else f"refs={self._refs}"
        return f"Container(size={self._size}, scrub={self._scrub_type.value}, {state})"

    @property
    def buffer(self) -> bytearray | None:
        """The underlying bytearray (None once released)."""
        return self._buffer

    @property
    def size(self) -> int:
        return self._size

    @property
    def scrub_type(self) -> ScrubType:
        return self._scrub_type

    @property
    def refs(self) -> int:
        return self._refs

    @property
    def released(self) -> bool:
        return self._released

    @property
    def address(self) -> int:
        """Memory address of the first byte (0 if empty or released)."""
        buf = self._buffer
        if not buf:
            return 0
        return ctypes.addressof(ctypes.c_char.from_buffer(buf))

    def acquire(self) -> Container:
        """Take a reference. Returns self for chaining."""
        with self._lock:
            if self._released:
                raise RuntimeError("Container has already been released")
            self._refs += 1
        return self

    def release(self) -> None:
        """Drop a reference; the last one scrubs and frees the allocation."""
        with self._lock:
            if self._refs <= 0:
                raise RuntimeError("Container released more times than acquired")
            self._refs -= 1
            if self._refs:
                return
            self._released = True
            buf, self._buffer = self._buffer, None

        if self._scrub_type is not ScrubType.NONE:
            log.debug("Scrubbing %d-byte container (%s)", self._size, self._scrub_type.value)
        self._scrubber(buf, self._size)
