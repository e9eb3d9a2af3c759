"""
Tests for Container and the comparator policies.

TestScrubbers     — zero scrub on aligned / unaligned sizes, dispatch
TestContainer     — allocation, reference counting, scrub-on-release
TestComparators   — fast vs constant-time agreement, length mismatch
"""

from __future__ import annotations

import copy
import random
import sys
import threading
from array import array
from unittest import TestCase
from unittest.mock import MagicMock

import pytest


# ══════════════════════════════════════════════════════════════════════════
# Scrubbers
# ══════════════════════════════════════════════════════════════════════════


class TestScrubbers(TestCase):
    """Tests for scrub_zeros / scrub_null / scrubber_for."""

    def test_scrub_zeros_aligned(self):
        from byteblob.container import scrub_zeros

        buf = bytearray(b"\xff" * 1024)
        scrub_zeros(buf, 1024)
        assert not any(buf)

    def test_scrub_zeros_unaligned(self):
        from byteblob.container import scrub_zeros

        buf = bytearray(b"\xff" * 1024)
        scrub_zeros(buf, 1021)
        assert not any(buf[:1021])
        assert buf[1021] == 0xFF
        assert buf[1022] == 0xFF
        assert buf[1023] == 0xFF

    def test_scrub_zeros_smaller_than_a_word(self):
        from byteblob.container import scrub_zeros

        buf = bytearray(b"\xaa" * 7)
        scrub_zeros(buf, 7)
        assert buf == bytearray(7)

    def test_scrub_zeros_empty(self):
        from byteblob.container import scrub_zeros

        buf = bytearray()
        scrub_zeros(buf, 0)
        assert buf == bytearray()

    def test_scrub_null_leaves_data(self):
        from byteblob.container import scrub_null

        buf = bytearray(b"secret")
        scrub_null(buf, len(buf))
        assert buf == bytearray(b"secret")

    def test_scrubber_for(self):
        from byteblob.container import ScrubType, scrub_null, scrub_zeros, scrubber_for

        assert scrubber_for(ScrubType.NONE) is scrub_null
        assert scrubber_for(ScrubType.ZEROS) is scrub_zeros
        assert scrubber_for("zeros") is scrub_zeros

    def test_scrubber_for_unknown(self):
        from byteblob.container import scrubber_for

        with pytest.raises(ValueError, match="Unknown scrub type"):
            scrubber_for("shred")


# ══════════════════════════════════════════════════════════════════════════
# Container
# ══════════════════════════════════════════════════════════════════════════


class TestContainer(TestCase):
    """Tests for byteblob.container.Container."""

    def test_zero_initialised(self):
        from byteblob.container import Container

        c = Container(16)
        assert c.size == 16
        assert c.buffer == bytearray(16)
        assert c.refs == 0
        assert not c.released

    def test_empty(self):
        from byteblob.container import Container

        c = Container()
        assert c.size == 0
        assert c.address == 0

    def test_address(self):
        from byteblob.container import Container

        c = Container(8)
        assert c.address != 0

    def test_negative_size(self):
        from byteblob.container import AllocationError, Container

        with pytest.raises(AllocationError, match="negative"):
            Container(-1)

    def test_absurd_size(self):
        from byteblob.container import AllocationError, Container

        with pytest.raises(AllocationError, match="exceeds limit"):
            Container(sys.maxsize + 1)

    def test_allocation_error_is_memory_error(self):
        from byteblob.container import AllocationError

        assert issubclass(AllocationError, MemoryError)

    def test_non_integer_size(self):
        from byteblob.container import Container

        with pytest.raises(TypeError):
            Container(1.5)

    def test_release_scrubs_zeros(self):
        from byteblob.container import Container, ScrubType

        for size in (1, 7, 8, 1021, 1024):
            c = Container(size, ScrubType.ZEROS)
            buf = c.buffer
            buf[:] = b"\xff" * size
            c.acquire()
            c.release()
            assert not any(buf), f"bytes left after scrub (size {size})"
            assert c.released
            assert c.buffer is None

    def test_release_without_scrub_keeps_bytes(self):
        from byteblob.container import Container, ScrubType

        c = Container(4, ScrubType.NONE)
        buf = c.buffer
        buf[:] = b"abcd"
        c.acquire()
        c.release()
        assert buf == bytearray(b"abcd")
        assert c.released

    def test_scrub_runs_once_on_last_release(self):
        from byteblob.container import Container

        c = Container(32)
        scrubber = MagicMock()
        c._scrubber = scrubber
        buf = c.buffer

        for _ in range(3):
            c.acquire()
        c.release()
        c.release()
        scrubber.assert_not_called()
        c.release()
        scrubber.assert_called_once_with(buf, 32)

    def test_over_release(self):
        from byteblob.container import Container

        c = Container(4)
        with pytest.raises(RuntimeError, match="more times than acquired"):
            c.release()

    def test_acquire_after_release(self):
        from byteblob.container import Container

        c = Container(4).acquire()
        c.release()
        with pytest.raises(RuntimeError, match="already been released"):
            c.acquire()

    def test_concurrent_release_scrubs_once(self):
        from byteblob.container import Container, ScrubType

        threads_n = 16
        c = Container(64, ScrubType.ZEROS)
        scrubber = MagicMock()
        c._scrubber = scrubber
        for _ in range(threads_n):
            c.acquire()

        barrier = threading.Barrier(threads_n)

        def drop():
            barrier.wait()
            c.release()

        threads = [threading.Thread(target=drop) for _ in range(threads_n)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert scrubber.call_count == 1
        assert c.released

    def test_cannot_copy(self):
        from byteblob.container import Container

        c = Container(4)
        with pytest.raises(TypeError):
            copy.copy(c)
        with pytest.raises(TypeError):
            copy.deepcopy(c)


# ══════════════════════════════════════════════════════════════════════════
# Comparators
# ══════════════════════════════════════════════════════════════════════════


class TestComparators:
    """Tests for byteblob.compare."""

    @pytest.mark.parametrize("fn_name", ["compare_fast", "compare_constant"])
    def test_basic_outcomes(self, fn_name):
        from byteblob import compare

        fn = getattr(compare, fn_name)
        assert fn(b"", b"") is False
        assert fn(b"abc", b"abc") is False
        assert fn(b"abc", b"abd") is True
        assert fn(b"abc", b"ab") is True
        assert fn(b"x" * 17, b"x" * 17) is False
        assert fn(b"x" * 16 + b"y", b"x" * 17) is True

    def test_agreement_on_random_pairs(self):
        from byteblob.compare import compare_constant, compare_fast

        rng = random.Random(1234)
        for _ in range(400):
            size = rng.randint(0, 100)
            a = rng.randbytes(size)
            choice = rng.randrange(4)
            if choice == 0:
                b = bytes(a)
            elif choice == 1 and size:
                flipped = bytearray(a)
                flipped[rng.randrange(size)] ^= 1 << rng.randrange(8)
                b = bytes(flipped)
            elif choice == 2:
                b = a + b"\x00"
            else:
                b = rng.randbytes(size)
            assert compare_fast(a, b) == compare_constant(a, b)

    def test_mismatch_in_every_position(self):
        from byteblob.compare import compare_constant

        base = bytes(range(19))
        for i in range(len(base)):
            other = bytearray(base)
            other[i] ^= 0x80
            assert compare_constant(base, bytes(other)) is True

    def test_accepts_blobs(self):
        from byteblob.blob import Blob, MutableBlob
        from byteblob.compare import compare_constant, compare_fast

        a = Blob(b"hello world")
        b = MutableBlob.from_bytes(b"hello world")
        assert compare_fast(a, b) is False
        assert compare_constant(a, b) is False
        assert compare_constant(a[6:], b"world") is False

    def test_non_byte_memoryview(self):
        from byteblob.compare import compare_constant, compare_fast

        a = array("I", [1, 2, 3])
        b = bytes(memoryview(a).cast("B"))
        assert compare_fast(a, b) is False
        assert compare_constant(a, b) is False

    def test_comparator_for(self):
        from byteblob.compare import CompareType, compare_constant, compare_fast, comparator_for

        assert comparator_for(CompareType.FAST) is compare_fast
        assert comparator_for(CompareType.CONSTANT) is compare_constant
        assert comparator_for("constant") is compare_constant
        with pytest.raises(ValueError, match="Unknown compare type"):
            comparator_for("slow")

    def test_agreement_on_strided_views(self):
        from byteblob.compare import compare_constant, compare_fast

        strided = memoryview(bytes(range(32)))[::2]
        same = bytes(range(0, 32, 2))
        other = bytes(range(1, 32, 2))
        assert compare_fast(strided, same) is False
        assert compare_constant(strided, same) is False
        assert compare_fast(strided, other) is True
        assert compare_constant(strided, other) is True

    def test_constant_blob_equals_strided_view(self):
        from byteblob.blob import Blob
        from byteblob.compare import CompareType

        strided = memoryview(bytes(range(32)))[::2]
        blob = Blob(bytes(range(0, 32, 2)), compare=CompareType.CONSTANT)
        assert blob == strided
        assert not blob != strided
        assert Blob(strided) == blob
