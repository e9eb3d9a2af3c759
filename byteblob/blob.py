"""
Blob and MutableBlob — shareable byte buffers with automatic cleanup.

A Blob is a read-only window onto a Container's bytes. Blobs can be created
as subsets of other Blobs without copying any of the underlying data, and
creating or dropping one Blob never affects another, even when they share
the same Container. The Container is scrubbed (if requested) and dropped
once the last Blob referring to it goes away.

    - A Blob created from raw bytes copies them; a Blob created from another
      Blob shares its Container.
    - Subset bounds are clamped, never rejected: an offset past the end
      becomes the end, a size past the end becomes the remaining bytes.
    - replace() and clear() rebind one Blob; other views keep the old data.
    - A MutableBlob is the only writable buffer. It always owns a private
      Container, cannot be copied, and converts to a Blob by copying
      (single writer, then many readers).

Blobs are safe to share between threads: their bytes never change after
construction and the Container reference count is lock-protected. A
MutableBlob must have a single writer; hand it to another thread with move().

Usage:
    b1 = Blob(b"\\x00\\x01\\x02\\x03")
    b2 = b1[1:]                 # shares b1's Container, no copy
    assert b2.address == b1.address + 1
    secret = Blob(token, scrub=ScrubType.ZEROS, compare=CompareType.CONSTANT)
    text = secret.encode("base58")
"""

from __future__ import annotations

import operator
from typing import Iterable, Iterator

from byteblob.compare import (
    CompareType,
    Comparison,
    as_byte_view,
    comparator_for,
)
from byteblob.container import Container, ScrubType

_BYTES_LIKE = (bytes, bytearray, memoryview)


def _clamp(total: int, size: int | None, offset: int) -> tuple[int, int]:
    """Clamp (offset, size) so that offset + size <= total."""
    offset = operator.index(offset)
    if offset < 0:
        offset = 0
    if offset > total:
        offset = total
    remaining = total - offset
    if size is None:
        return offset, remaining
    size = operator.index(size)
    if size < 0:
        size = 0
    if size > remaining:
        size = remaining
    return offset, size


def _copy_into(source, size: int | None, offset: int, scrub: ScrubType) -> Container:
    """Copy a (clamped) range of a bytes-like source into a fresh Container."""
    if isinstance(source, str):
        raise TypeError("Blob needs bytes, not str (use Blob.decode for text)")
    view = as_byte_view(source)
    start, length = _clamp(view.nbytes, size, offset)
    container = Container(length, scrub)
    container.buffer[:] = view[start : start + length]
    return container.acquire()


class Blob:
    """Read-only, shareable view of a byte Container.

    Args:
        source: bytes-like object or MutableBlob (copied), or another Blob
            (shared, no copy).
        size: Number of bytes to take from ``source`` (default: all).
        offset: First byte to take from ``source``.
        scrub: Scrub policy for a freshly copied Container. Shared views
            inherit the source's policy.
        compare: Equality policy used by ``==`` and ``!=``.
    """

    def __init__(
        self,
        source=b"",
        size: int | None = None,
        offset: int = 0,
        *,
        scrub: ScrubType | None = None,
        compare: CompareType | None = None,
    ) -> None:
        self._container: Container | None = None

        if isinstance(source, Blob):
            if (scrub is not None and ScrubType(scrub) is not source._scrub_type) or (
                compare is not None and CompareType(compare) is not source._compare_type
            ):
                raise ValueError("A shared view inherits the scrub and compare policy of its source")
            start, length = _clamp(source._size, size, offset)
            self._bind(
                source._container.acquire(),
                source._offset + start,
                length,
                source._compare_type,
            )
            return

        # A MutableBlob hands its policies on unless told otherwise
        if scrub is None:
            scrub = getattr(source, "scrub_type", ScrubType.NONE)
        if compare is None:
            compare = getattr(source, "compare_type", CompareType.FAST)
        container = _copy_into(source, size, offset, scrub)
        self._bind(container, 0, container.size, compare)

    def _bind(self, container: Container, offset: int, size: int, compare: CompareType) -> None:
        """Point this view at an acquired Container, releasing the previous one."""
        previous = self._container
        self._container = container
        self._offset = offset
        self._size = size
        self._scrub_type = container.scrub_type
        self._compare_type = CompareType(compare)
        self._comparator = comparator_for(self._compare_type)
        if previous is not None:
            previous.release()

    @classmethod
    def _adopt(cls, container: Container, compare: CompareType) -> Blob:
        """Wrap an already acquired Container without copying."""
        blob = cls.__new__(cls)
        blob._container = None
        blob._bind(container, 0, container.size, compare)
        return blob

    def __del__(self) -> None:
        container = getattr(self, "_container", None)
        if container is not None:
            self._container = None
            container.release()

    # -- Alternate constructors --------------------------------------------

    @classmethod
    def concat(
        cls,
        blobs: Iterable,
        *,
        scrub: ScrubType = ScrubType.NONE,
        compare: CompareType = CompareType.FAST,
    ) -> Blob:
        """Combine (copy) several Blobs or bytes-like objects into one.

        The result gets the requested policies, not those of its inputs.
        """
        views = [as_byte_view(b) for b in blobs]
        container = Container(sum(v.nbytes for v in views), scrub)
        buf = container.buffer
        pos = 0
        for v in views:
            buf[pos : pos + v.nbytes] = v
            pos += v.nbytes
        return cls._adopt(container.acquire(), compare)

    @classmethod
    def decode(
        cls,
        text,
        codec,
        *,
        scrub: ScrubType = ScrubType.NONE,
        compare: CompareType = CompareType.FAST,
        strict: bool = False,
    ) -> Blob:
        """Build a Blob by decoding text with a codec (object or name)."""
        from byteblob.encoders import get_codec

        return get_codec(codec).decode(text, scrub=scrub, compare=compare, strict=strict)

    # -- Rebinding ------------------------------------------------------------

    def replace(
        self,
        source,
        size: int | None = None,
        *,
        scrub: ScrubType = ScrubType.NONE,
        compare: CompareType = CompareType.FAST,
    ) -> None:
        """Rebind to a fresh copy of ``source``. Other views are unaffected."""
        container = _copy_into(source, size, 0, scrub)
        self._bind(container, 0, container.size, compare)

    def clear(self) -> None:
        """Rebind to an empty Blob with default policies."""
        self._bind(Container(0).acquire(), 0, 0, CompareType.FAST)

    def subset(self, size: int | None = None, offset: int = 0) -> Blob:
        """Shared view of ``size`` bytes starting at ``offset`` (clamped)."""
        return Blob(self, size, offset)

    # -- Access -----------------------------------------------------------------

    def __getitem__(self, key):
        """Byte at ``index``, or a shared view for a slice.

        Integer indexing is unchecked against the view length: the caller
        must keep ``0 <= index < len(blob)``. Use byte_at() for a checked read.
        """
        if isinstance(key, slice):
            start, stop, step = key.indices(self._size)
            if step != 1:
                raise ValueError("Blob slices must be contiguous (step 1)")
            return Blob(self, max(stop - start, 0), start)
        return self._container.buffer[self._offset + key]

    def byte_at(self, index: int) -> int:
        """Checked indexed access."""
        index = operator.index(index)
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError(f"Blob index out of range [0, {self._size})")
        return self._container.buffer[self._offset + index]

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[int]:
        return iter(self.data)

    def __bytes__(self) -> bytes:
        return bytes(self.data)

    def __repr__(self) -> str:
        return (
            f"Blob(size={self._size}, scrub={self._scrub_type.value}, "
            f"compare={self._compare_type.value})"
        )

    @property
    def size(self) -> int:
        return self._size

    @property
    def offset(self) -> int:
        """Offset of this view within its Container."""
        return self._offset

    @property
    def scrub_type(self) -> ScrubType:
        return self._scrub_type

    @property
    def compare_type(self) -> CompareType:
        return self._compare_type

    @property
    def container(self) -> Container:
        return self._container

    @property
    def data(self) -> memoryview:
        """Read-only memoryview of the visible bytes."""
        start = self._offset
        return memoryview(self._container.buffer)[start : start + self._size].toreadonly()

    @property
    def address(self) -> int:
        """Memory address of the first visible byte (0 for an empty Container)."""
        base = self._container.address
        return base + self._offset if base else 0

    # -- Comparison -------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, (Blob, MutableBlob) + _BYTES_LIKE):
            return NotImplemented
        return not self._comparator(self, other)

    def __ne__(self, other) -> bool:
        if not isinstance(other, (Blob, MutableBlob) + _BYTES_LIKE):
            return NotImplemented
        return self._comparator(self, other)

    __hash__ = None

    def compare(self, other, compare_type: CompareType) -> Comparison:
        """Compare with an explicit policy, ignoring the bound one."""
        if comparator_for(compare_type)(self, other):
            return Comparison.NE
        return Comparison.EQ

    def __add__(self, other) -> Blob:
        if not isinstance(other, (Blob, MutableBlob) + _BYTES_LIKE):
            return NotImplemented
        return Blob.concat([self, other], scrub=self._scrub_type, compare=self._compare_type)

    # -- Copying ----------------------------------------------------------------

    def __copy__(self) -> Blob:
        return Blob(self)

    def __deepcopy__(self, memo) -> Blob:
        return Blob(self.data, scrub=self._scrub_type, compare=self._compare_type)

    # -- Encoding ---------------------------------------------------------------

    def encode(self, codec) -> str:
        """Encode the visible bytes with a codec (object or name)."""
        from byteblob.encoders import get_codec

        return get_codec(codec).encode(self.data)


class MutableBlob:
    """Writable byte buffer with sole ownership of a private Container.

    MutableBlobs are never shared and never copied. Convert to a read-only
    Blob with freeze() (or ``Blob(mutable)``), which copies the bytes.
    """

    def __init__(
        self,
        size: int = 0,
        *,
        scrub: ScrubType = ScrubType.NONE,
        compare: CompareType = CompareType.FAST,
    ) -> None:
        self._container: Container | None = None
        self._container = Container(size, scrub).acquire()
        self._compare_type = CompareType(compare)
        self._comparator = comparator_for(self._compare_type)

    @classmethod
    def from_bytes(
        cls,
        data,
        *,
        scrub: ScrubType = ScrubType.NONE,
        compare: CompareType = CompareType.FAST,
    ) -> MutableBlob:
        """Allocate a MutableBlob holding a copy of ``data``."""
        if isinstance(data, MutableBlob):
            raise TypeError("MutableBlob cannot be created from another MutableBlob")
        if isinstance(data, str):
            raise TypeError("MutableBlob needs bytes, not str")
        view = as_byte_view(data)
        blob = cls(view.nbytes, scrub=scrub, compare=compare)
        blob._container.buffer[:] = view
        return blob

    @classmethod
    def from_blob(
        cls,
        blob: Blob,
        *,
        scrub: ScrubType | None = None,
        compare: CompareType | None = None,
    ) -> MutableBlob:
        """Copy a Blob's visible bytes; policies default to the Blob's."""
        if not isinstance(blob, Blob):
            raise TypeError(f"Expected a Blob, got {type(blob).__name__}")
        return cls.from_bytes(
            blob.data,
            scrub=blob.scrub_type if scrub is None else scrub,
            compare=blob.compare_type if compare is None else compare,
        )

    def __del__(self) -> None:
        container = getattr(self, "_container", None)
        if container is not None:
            self._container = None
            container.release()

    def __copy__(self):
        raise TypeError("MutableBlob cannot be copied (use move() or freeze())")

    def __deepcopy__(self, memo):
        raise TypeError("MutableBlob cannot be copied (use move() or freeze())")

    def move(self) -> MutableBlob:
        """Transfer sole ownership to a new MutableBlob; this one becomes empty."""
        moved = MutableBlob.__new__(MutableBlob)
        moved._container = self._container
        moved._compare_type = self._compare_type
        moved._comparator = self._comparator
        self._container = Container(0).acquire()
        self._compare_type = CompareType.FAST
        self._comparator = comparator_for(CompareType.FAST)
        return moved

    def freeze(self) -> Blob:
        """Copy the current bytes into a new read-only Blob."""
        return Blob(self)

    def __getitem__(self, key):
        """Byte at ``index`` (unchecked), or a writable memoryview for a slice."""
        if isinstance(key, slice):
            return self.data[key]
        return self._container.buffer[key]

    def __setitem__(self, key, value) -> None:
        if isinstance(key, slice):
            self.data[key] = value
            return
        self._container.buffer[key] = value

    def __len__(self) -> int:
        return self._container.size

    def __bytes__(self) -> bytes:
        return bytes(self._container.buffer)

    def __repr__(self) -> str:
        return (
            f"MutableBlob(size={self.size}, scrub={self.scrub_type.value}, "
            f"compare={self._compare_type.value})"
        )

    @property
    def size(self) -> int:
        return self._container.size

    @property
    def scrub_type(self) -> ScrubType:
        return self._container.scrub_type

    @property
    def compare_type(self) -> CompareType:
        return self._compare_type

    @property
    def data(self) -> memoryview:
        """Writable memoryview over the whole buffer."""
        return memoryview(self._container.buffer)

    @property
    def address(self) -> int:
        return self._container.address

    def __eq__(self, other) -> bool:
        if not isinstance(other, (Blob, MutableBlob) + _BYTES_LIKE):
            return NotImplemented
        return not self._comparator(self, other)

    def __ne__(self, other) -> bool:
        if not isinstance(other, (Blob, MutableBlob) + _BYTES_LIKE):
            return NotImplemented
        return self._comparator(self, other)

    __hash__ = None

    def encode(self, codec) -> str:
        from byteblob.encoders import get_codec

        return get_codec(codec).encode(self.data)
