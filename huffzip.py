# huffzip.py
"""
Command line front end for the Huffman code-table compressor.

  python huffzip.py compress notes.txt
      -> notes.txt.code  (two lines per leaf: symbol, then path)
      -> notes.txt.short (packed bits, MSB first, ends with the EOF code)

  python huffzip.py decompress notes.txt.code notes.txt.short --output notes.txt.new
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import huffman as huff
from bitio import BitReader


DEFAULT_ALPHABET_SIZE = 256 # byte symbols, the EOF sentinel is 256


def compress_file(input_path: Path, code_path: Path, short_path: Path, alphabet_size: int = DEFAULT_ALPHABET_SIZE) -> int:
    data = input_path.read_bytes()
    frequencies = huff.count_frequencies(data, alphabet_size)
    root = huff.build_huffman_tree(frequencies)

    with code_path.open("w", encoding="ascii", newline="\n") as f:
        leaves = huff.write_code_table(root, f)

    code_map = huff.generate_huffman_codes(root)
    bitstring = huff.huffman_encode(data, code_map, eof=alphabet_size)
    short_path.write_bytes(huff.pack_bits(bitstring))
    return leaves


def decompress_file(code_path: Path, short_path: Path, output_path: Path, alphabet_size: int = DEFAULT_ALPHABET_SIZE) -> int:
    with code_path.open("r", encoding="ascii", newline="") as f:
        root = huff.read_code_table(f)

    # validate before the output file is created
    symbols = huff.code_lengths(root)
    if alphabet_size not in symbols:
        raise huff.MalformedTreeData(f"no end of file symbol {alphabet_size} in {code_path}")
    outside = sorted(s for s in symbols if s > alphabet_size)
    if outside:
        raise huff.MalformedTreeData(f"symbol {outside[0]} outside alphabet of size {alphabet_size}")

    written = 0
    with short_path.open("rb") as src, output_path.open("wb") as dst:
        for symbol in huff.huffman_decode(root, BitReader(src), eof=alphabet_size):
            dst.write(bytes([symbol]))
            written += 1
    return written


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffzip", description="Huffman compress/decompress with a text code table")
    sub = ap.add_subparsers(dest="command", required=True)

    cp = sub.add_parser("compress", help="Write INPUT.code and INPUT.short")
    cp.add_argument("input", type=Path, help="File to compress")
    cp.add_argument("--code", type=Path, default=None, help="Code table output (default: INPUT.code)")
    cp.add_argument("--output", type=Path, default=None, help="Compressed output (default: INPUT.short)")
    cp.add_argument("--alphabet-size", type=int, default=DEFAULT_ALPHABET_SIZE,
                    help="Number of real symbols; the EOF sentinel is this value")

    dp = sub.add_parser("decompress", help="Rebuild the tree from CODE and decode SHORT")
    dp.add_argument("code", type=Path, help="Code table written by compress")
    dp.add_argument("short", type=Path, help="Compressed bitstream written by compress")
    dp.add_argument("--output", type=Path, default=None, help="Decoded output (default: SHORT.new)")
    dp.add_argument("--alphabet-size", type=int, default=DEFAULT_ALPHABET_SIZE,
                    help="Must match the value used to compress")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.alphabet_size < 1 or args.alphabet_size > 256:
        print("error: --alphabet-size must be between 1 and 256", file=sys.stderr)
        return 1

    try:
        if args.command == "compress":
            code_path = args.code or args.input.with_name(args.input.name + ".code")
            short_path = args.output or args.input.with_name(args.input.name + ".short")
            leaves = compress_file(args.input, code_path, short_path, args.alphabet_size)
            print(f"Wrote {leaves} codes to {code_path}")
            print(f"Wrote {short_path.stat().st_size} bytes to {short_path}")
        else:
            output_path = args.output or args.short.with_name(args.short.name + ".new")
            written = decompress_file(args.code, args.short, output_path, args.alphabet_size)
            print(f"Wrote {written} bytes to {output_path}")
    except huff.MalformedTreeData as e:
        print(f"error: malformed code table: {e}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"error: {e.filename}: no such file", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
