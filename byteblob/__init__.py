"""
byteblob — shareable byte buffers and binary-to-text codecs.

Architecture:
    Container:    one bytearray allocation + scrub policy, reference counted
    Blob:         read-only window onto a Container (subsets never copy)
    MutableBlob:  writable buffer that always owns a private Container
    Codecs:       string / bin / hex / base58 / base62 / base64 (no padding)
"""

import sys
from pathlib import Path

__version__ = "0.1.0"

# Scrubber and constant-time comparator operate on 64-bit words
WORD_SIZE = 8

# Largest single allocation a Container will attempt
MAX_ALLOCATION = sys.maxsize

# Codec alphabets (case matters)
HEX_ALPHABET = "0123456789ABCDEF"
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
BASE62_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

# Output reserve for base-N encoders: log(256)/log(radix) rounded up, as (num, den)
BASE58_RESERVE_RATIO = (138, 100)  # log(256)/log(58) ~= 1.3657
BASE62_RESERVE_RATIO = (137, 100)  # log(256)/log(62) ~= 1.3436

# Configuration
DEFAULT_CONFIG_PATH = Path.home() / ".byteblob" / "config.toml"
ENV_PREFIX = "BYTEBLOB_"
