#!/usr/bin/env python3
"""Generate placeholder sprites for a forest_sim renderer (eagle, rat, background, tree)."""
from __future__ import annotations

import argparse
import struct
import zlib
from pathlib import Path

# file name -> (width, height, rgb)
SPRITES = {
    "eagle.png": (64, 64, (139, 90, 43)),
    "rat.png": (32, 32, (128, 128, 128)),
    "background.png": (16, 16, (34, 85, 34)),
    "tree.png": (48, 96, (20, 60, 20)),
}


def build_png(width: int, height: int, color: tuple[int, int, int]) -> bytes:
    r, g, b = color
    row = bytes([r, g, b]) * width
    raw = b"".join(b"\x00" + row for _ in range(height))
    compressed = zlib.compress(raw)

    def chunk(chunk_type: bytes, data: bytes) -> bytes:
        return (
            struct.pack(">I", len(data))
            + chunk_type
            + data
            + struct.pack(">I", zlib.crc32(chunk_type + data) & 0xFFFFFFFF)
        )

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", compressed) + chunk(
        b"IEND", b""
    )


def write_asset(path: Path, data: bytes, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(f"{path} already exists. Use --overwrite to replace.")
    path.write_bytes(data)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate placeholder sprites for the predator/prey renderer."
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("resources"),
        help="Directory to write sprites into.",
    )
    parser.add_argument(
        "--overwrite", action="store_true", help="Overwrite existing files."
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    for name, (width, height, color) in SPRITES.items():
        write_asset(output_dir / name, build_png(width, height, color), args.overwrite)

    print(f"Generated dummy sprites in {output_dir}")


if __name__ == "__main__":
    main()
