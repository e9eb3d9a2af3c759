"""
byteblob CLI — encode and decode bytes with the byteblob codecs.

Commands:
  byteblob encode   - Encode a file (or stdin) as text
  byteblob decode   - Decode text (argument or stdin) back to bytes
  byteblob convert  - Re-encode text from one codec to another
  byteblob compare  - Compare two files (exit 0 if equal, 1 otherwise)
  byteblob codecs   - List available codecs

Defaults for codec, scrub/compare policy, strict decoding and log level come
from ~/.byteblob/config.toml and BYTEBLOB_* environment variables.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any


def _read_input(path: str | None) -> bytes:
    """Read bytes from a file path, or stdin when path is None or '-'."""
    if path is None or path == "-":
        return sys.stdin.buffer.read()
    p = Path(path)
    if not p.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    return p.read_bytes()


def _read_text(text: str | None, codec) -> str:
    """Text from the command line or stdin.

    Surrounding whitespace is removed for the alphabet codecs. Passthrough
    text is kept byte for byte, except the newline ending stdin.
    """
    from byteblob.encoders import PASSTHROUGH, get_codec

    from_stdin = text is None or text == "-"
    if from_stdin:
        text = sys.stdin.read()
    try:
        passthrough = get_codec(codec) is PASSTHROUGH
    except ValueError:
        passthrough = False
    if not passthrough:
        return text.strip()
    if from_stdin and text.endswith("\n"):
        text = text[:-2] if text.endswith("\r\n") else text[:-1]
    return text


def _policies(config: dict[str, Any]) -> dict[str, Any]:
    from byteblob.config import compare_type, scrub_type

    try:
        return {"scrub": scrub_type(config), "compare": compare_type(config)}
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_encode(args: argparse.Namespace, config: dict[str, Any]) -> None:
    """Encode a file (or stdin) as text."""
    from byteblob.blob import Blob

    data = _read_input(args.path)
    blob = Blob(data, **_policies(config))
    try:
        print(blob.encode(args.codec or config["codec"]))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_decode(args: argparse.Namespace, config: dict[str, Any]) -> None:
    """Decode text back to bytes."""
    from byteblob.blob import Blob

    codec = args.codec or config["codec"]
    text = _read_text(args.text, codec)
    strict = args.strict or bool(config["strict"])
    try:
        blob = Blob.decode(text, codec, strict=strict, **_policies(config))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        Path(args.output).write_bytes(bytes(blob))
        print(f"Wrote {len(blob)} bytes to {args.output}", file=sys.stderr)
    else:
        sys.stdout.buffer.write(bytes(blob))
        sys.stdout.buffer.flush()


def cmd_convert(args: argparse.Namespace, config: dict[str, Any]) -> None:
    """Re-encode text from one codec to another."""
    from byteblob.blob import Blob

    text = _read_text(args.text, args.from_codec)
    strict = args.strict or bool(config["strict"])
    try:
        blob = Blob.decode(text, args.from_codec, strict=strict, **_policies(config))
        print(blob.encode(args.to_codec))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_compare(args: argparse.Namespace, config: dict[str, Any]) -> None:
    """Compare two files byte for byte."""
    from byteblob.blob import Blob
    from byteblob.compare import CompareType, Comparison

    policies = _policies(config)
    compare = CompareType.CONSTANT if args.constant_time else policies["compare"]

    a = Blob(_read_input(args.a), scrub=policies["scrub"])
    b = Blob(_read_input(args.b), scrub=policies["scrub"])

    if a.compare(b, compare) is Comparison.EQ:
        print(f"equal ({len(a)} bytes, {compare.value})")
        sys.exit(0)
    print(f"not equal ({len(a)} vs {len(b)} bytes, {compare.value})")
    sys.exit(1)


def cmd_codecs(args: argparse.Namespace, config: dict[str, Any]) -> None:
    """List available codecs."""
    from byteblob.encoders import CODECS

    default = str(config["codec"]).lower()
    for name in CODECS:
        marker = " (default)" if name == default else ""
        print(f"  {name}{marker}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="byteblob",
        description="byteblob — encode and decode bytes as binary, hex, base58, base62 or base64 text.",
    )
    from byteblob import __version__
    parser.add_argument("--version", action="version", version=f"byteblob {__version__}")
    parser.add_argument("--config", help="Path to config.toml (default: ~/.byteblob/config.toml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # encode
    p_enc = sub.add_parser("encode", help="Encode a file (or stdin) as text")
    p_enc.add_argument("path", nargs="?", help="Input file (default: stdin)")
    p_enc.add_argument("-c", "--codec", help="Codec name (default from config)")

    # decode
    p_dec = sub.add_parser("decode", help="Decode text back to bytes")
    p_dec.add_argument("text", nargs="?", help="Encoded text (default: stdin)")
    p_dec.add_argument("-c", "--codec", help="Codec name (default from config)")
    p_dec.add_argument("-o", "--output", help="Output file (default: stdout)")
    p_dec.add_argument("--strict", action="store_true", help="Reject characters outside the alphabet")

    # convert
    p_conv = sub.add_parser("convert", help="Re-encode text from one codec to another")
    p_conv.add_argument("text", nargs="?", help="Encoded text (default: stdin)")
    p_conv.add_argument("--from", dest="from_codec", required=True, help="Codec of the input text")
    p_conv.add_argument("--to", dest="to_codec", required=True, help="Codec of the output text")
    p_conv.add_argument("--strict", action="store_true", help="Reject characters outside the alphabet")

    # compare
    p_cmp = sub.add_parser("compare", help="Compare two files")
    p_cmp.add_argument("a", help="First file")
    p_cmp.add_argument("b", help="Second file")
    p_cmp.add_argument("--constant-time", action="store_true", help="Use constant-time comparison")

    # codecs
    sub.add_parser("codecs", help="List available codecs")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    from byteblob.config import load_config

    config = load_config(args.config)
    level = logging.getLevelName(str(config["log_level"]).upper())
    if args.verbose:
        level = logging.DEBUG
    elif not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    commands = {
        "encode": cmd_encode,
        "decode": cmd_decode,
        "convert": cmd_convert,
        "compare": cmd_compare,
        "codecs": cmd_codecs,
    }

    commands[args.command](args, config)


if __name__ == "__main__":
    main()
