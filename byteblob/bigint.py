"""
Unsigned arbitrary-precision integer helpers used by the base58/base62 codecs.

Backed by Python's built-in ``int``. Everything here is unsigned: negative
operands are rejected rather than silently sign-extended.
"""

from __future__ import annotations


def _check_unsigned(n: int, what: str = "value") -> None:
    if n < 0:
        raise ValueError(f"{what} must be unsigned, got {n}")


def from_bytes(data) -> int:
    """Import a big-endian unsigned byte sequence."""
    return int.from_bytes(data, "big")


def to_bytes(n: int) -> bytes:
    """Export to the minimal big-endian byte sequence (b"" for zero)."""
    _check_unsigned(n)
    return n.to_bytes((bit_length(n) + 7) // 8, "big")


def divmod_small(n: int, divisor: int) -> tuple[int, int]:
    """Unsigned divide-with-remainder by a small positive divisor."""
    _check_unsigned(n)
    if divisor <= 0:
        raise ValueError(f"divisor must be positive, got {divisor}")
    return divmod(n, divisor)


def mul_add(n: int, multiplier: int, addend: int) -> int:
    """Return ``n * multiplier + addend``."""
    _check_unsigned(n)
    _check_unsigned(multiplier, "multiplier")
    _check_unsigned(addend, "addend")
    return n * multiplier + addend


def bit_length(n: int) -> int:
    """Size of ``n`` in bits (0 for zero)."""
    _check_unsigned(n)
    return n.bit_length()
