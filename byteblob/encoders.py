"""
Byte encoders — convert Blob contents to and from text alphabets.

Codec     Name      Alphabet / rule
--------  --------  -----------------------------------------------------
string    "string"  raw bytes <-> text (latin-1, one char per byte)
binary    "bin"     8 x '0'/'1' per byte, most significant bit first
hex       "hex"     2 uppercase hex digits per byte, high nibble first
base58    "base58"  Bitcoin alphabet, whole input as one big-endian integer
base62    "base62"  0-9A-Za-z, same big-integer scheme
base64    "base64"  standard alphabet, no '=' padding emitted or required

Leading zero bytes map to one leading '1' (base58) or '0' (base62) each.

Malformed lengths are truncated, never rejected: binary drops a partial
octet, hex a dangling nibble, base64 a single leftover character.

Characters outside an alphabet are read as value 0 and a warning is logged
(the decoded bytes are then not meaningful). Pass ``strict=True`` to raise
DecodeError instead.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Callable

from byteblob import (
    BASE58_ALPHABET,
    BASE58_RESERVE_RATIO,
    BASE62_ALPHABET,
    BASE62_RESERVE_RATIO,
    BASE64_ALPHABET,
    HEX_ALPHABET,
    bigint,
)
from byteblob.blob import Blob, MutableBlob
from byteblob.compare import CompareType, as_byte_view
from byteblob.container import ScrubType

log = logging.getLogger(__name__)


class DecodeError(ValueError):
    """Text could not be decoded in strict mode."""


_BIN_DIGITS = [format(i, "08b") for i in range(256)]
_BIN_VALUES = {"0": 0, "1": 1}
_HEX_VALUES = {c: i for i, c in enumerate(HEX_ALPHABET)}
_HEX_VALUES.update({c.lower(): i for c, i in list(_HEX_VALUES.items()) if c.isalpha()})
_B58_VALUES = {c: i for i, c in enumerate(BASE58_ALPHABET)}
_B62_VALUES = {c: i for i, c in enumerate(BASE62_ALPHABET)}
_B64_VALUES = {c: i for i, c in enumerate(BASE64_ALPHABET)}


def _text(text) -> str:
    """Accept str or raw text bytes (read as latin-1)."""
    if isinstance(text, str):
        return text
    return bytes(as_byte_view(text)).decode("latin-1")


def _digits(text: str, values: dict[str, int], name: str, strict: bool) -> list[int]:
    """Map each character to its digit value; unknown characters become 0."""
    out = []
    bad = 0
    for pos, ch in enumerate(text):
        v = values.get(ch)
        if v is None:
            if strict:
                raise DecodeError(f"Invalid {name} character {ch!r} at position {pos}")
            bad += 1
            v = 0
        out.append(v)
    if bad:
        log.warning("%s decode: %d character(s) outside the alphabet read as 0", name, bad)
    return out


# ---------------------------------------------------------------------------
# String (passthrough)
# ---------------------------------------------------------------------------

def encode_string(data) -> str:
    return bytes(as_byte_view(data)).decode("latin-1")


def decode_string(
    text,
    *,
    scrub: ScrubType = ScrubType.NONE,
    compare: CompareType = CompareType.FAST,
    strict: bool = False,
) -> Blob:
    if isinstance(text, str):
        try:
            raw = text.encode("latin-1")
        except UnicodeEncodeError as e:
            if strict:
                raise DecodeError(f"string decode: {e}") from None
            log.warning("string decode: text is not latin-1, storing it as UTF-8")
            raw = text.encode("utf-8")
    else:
        raw = as_byte_view(text)
    return MutableBlob.from_bytes(raw, scrub=scrub, compare=compare).freeze()


# ---------------------------------------------------------------------------
# Base 2 (binary)
# ---------------------------------------------------------------------------

def encode_bin(data) -> str:
    return "".join(_BIN_DIGITS[b] for b in as_byte_view(data))


def decode_bin(
    text,
    *,
    scrub: ScrubType = ScrubType.NONE,
    compare: CompareType = CompareType.FAST,
    strict: bool = False,
) -> Blob:
    text = _text(text)
    out_size = len(text) // 8
    bits = _digits(text[: out_size * 8], _BIN_VALUES, "bin", strict)

    out = MutableBlob(out_size, scrub=scrub, compare=compare)
    pos = 0
    for i in range(out_size):
        byte = 0
        for bit in bits[pos : pos + 8]:
            byte = (byte << 1) | bit
        out[i] = byte
        pos += 8
    return out.freeze()


# ---------------------------------------------------------------------------
# Base 16 (hex)
# ---------------------------------------------------------------------------

def encode_hex(data) -> str:
    return as_byte_view(data).hex().upper()


def decode_hex(
    text,
    *,
    scrub: ScrubType = ScrubType.NONE,
    compare: CompareType = CompareType.FAST,
    strict: bool = False,
) -> Blob:
    text = _text(text)
    # Ignore a dangling nibble if present
    out_size = len(text) // 2
    nibbles = _digits(text[: out_size * 2], _HEX_VALUES, "hex", strict)

    out = MutableBlob(out_size, scrub=scrub, compare=compare)
    for i in range(out_size):
        out[i] = (nibbles[2 * i] << 4) | nibbles[2 * i + 1]
    return out.freeze()


# ---------------------------------------------------------------------------
# Base 58 / base 62 (big-integer radix conversion)
# ---------------------------------------------------------------------------

def _encode_radix(data, alphabet: str, ratio: tuple[int, int]) -> str:
    view = as_byte_view(data)
    size = view.nbytes
    radix = len(alphabet)
    symbols = alphabet.encode("ascii")

    leading_zeros = 0
    for b in view:
        if b:
            break
        leading_zeros += 1

    # Output reserve: log(256) / log(radix), rounded up
    num, den = ratio
    reserve = (size - leading_zeros) * num // den + 1 + leading_zeros
    out = bytearray(reserve)
    pos = reserve

    n = bigint.from_bytes(view)
    while n:
        n, r = bigint.divmod_small(n, radix)
        pos -= 1
        if pos < 0:
            raise RuntimeError(f"base{radix} output reserve of {reserve} exceeded")
        out[pos] = symbols[r]
    for _ in range(leading_zeros):
        pos -= 1
        if pos < 0:
            raise RuntimeError(f"base{radix} output reserve of {reserve} exceeded")
        out[pos] = symbols[0]
    return out[pos:].decode("ascii")


def _decode_radix(
    text,
    alphabet: str,
    values: dict[str, int],
    name: str,
    scrub: ScrubType,
    compare: CompareType,
    strict: bool,
) -> Blob:
    text = _text(text)
    radix = len(alphabet)

    leading_zeros = len(text) - len(text.lstrip(alphabet[0]))

    # p = p * radix + digit for every remaining character
    p = 0
    for digit in _digits(text[leading_zeros:], values, name, strict):
        p = bigint.mul_add(p, radix, digit)
    body = bigint.to_bytes(p)

    out = MutableBlob(leading_zeros + len(body), scrub=scrub, compare=compare)
    out[leading_zeros:] = body
    return out.freeze()


def encode_base58(data) -> str:
    return _encode_radix(data, BASE58_ALPHABET, BASE58_RESERVE_RATIO)


def decode_base58(
    text,
    *,
    scrub: ScrubType = ScrubType.NONE,
    compare: CompareType = CompareType.FAST,
    strict: bool = False,
) -> Blob:
    return _decode_radix(text, BASE58_ALPHABET, _B58_VALUES, "base58", scrub, compare, strict)


def encode_base62(data) -> str:
    return _encode_radix(data, BASE62_ALPHABET, BASE62_RESERVE_RATIO)


def decode_base62(
    text,
    *,
    scrub: ScrubType = ScrubType.NONE,
    compare: CompareType = CompareType.FAST,
    strict: bool = False,
) -> Blob:
    return _decode_radix(text, BASE62_ALPHABET, _B62_VALUES, "base62", scrub, compare, strict)


# ---------------------------------------------------------------------------
# Base 64 (no padding)
# ---------------------------------------------------------------------------

def encode_base64(data) -> str:
    return base64.b64encode(as_byte_view(data)).rstrip(b"=").decode("ascii")


def decode_base64(
    text,
    *,
    scrub: ScrubType = ScrubType.NONE,
    compare: CompareType = CompareType.FAST,
    strict: bool = False,
) -> Blob:
    text = _text(text).rstrip("=")
    groups, stragglers = divmod(len(text), 4)
    # 2 or 3 leftover characters carry 1 or 2 bytes; a single one is dropped
    tail = stragglers if stragglers >= 2 else 0
    d = _digits(text[: groups * 4 + tail], _B64_VALUES, "base64", strict)

    out = MutableBlob(groups * 3 + max(tail - 1, 0), scrub=scrub, compare=compare)
    o = 0
    for i in range(0, groups * 4, 4):
        a, b, c, e = d[i : i + 4]
        out[o] = ((a << 2) | (b >> 4)) & 0xFF
        out[o + 1] = ((b << 4) | (c >> 2)) & 0xFF
        out[o + 2] = ((c << 6) | e) & 0xFF
        o += 3
    if tail:
        i = groups * 4
        a, b = d[i], d[i + 1]
        out[o] = ((a << 2) | (b >> 4)) & 0xFF
        if tail == 3:
            out[o + 1] = ((b << 4) | (d[i + 2] >> 2)) & 0xFF
    return out.freeze()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Codec:
    """A named, stateless encode/decode function pair.

    Attributes:
        name: Registry name (e.g. "base58").
        encode: bytes-like or Blob -> str.
        decode: str or text bytes -> Blob (keyword args scrub, compare, strict).
    """

    name: str
    encode: Callable[..., str]
    decode: Callable[..., Blob]


PASSTHROUGH = Codec("string", encode_string, decode_string)
BINARY = Codec("bin", encode_bin, decode_bin)
HEX = Codec("hex", encode_hex, decode_hex)
BASE58 = Codec("base58", encode_base58, decode_base58)
BASE62 = Codec("base62", encode_base62, decode_base62)
BASE64 = Codec("base64", encode_base64, decode_base64)

CODECS: dict[str, Codec] = {
    c.name: c for c in (PASSTHROUGH, BINARY, HEX, BASE58, BASE62, BASE64)
}

_ALIASES = {
    "raw": "string",
    "binary": "bin",
    "base16": "hex",
}


def get_codec(codec) -> Codec:
    """Resolve a Codec instance or a registered name (case-insensitive)."""
    if isinstance(codec, Codec):
        return codec
    name = str(codec).lower()
    name = _ALIASES.get(name, name)
    try:
        return CODECS[name]
    except KeyError:
        raise ValueError(
            f"Unknown codec: {codec!r} (choose from {', '.join(sorted(CODECS))})"
        ) from None
