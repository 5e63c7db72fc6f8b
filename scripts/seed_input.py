#!/usr/bin/env python3
"""Drop sample files into the demo input directory.

Writes a binary file and a text file that the bundled pipelines pick up:
filecopy-binary and filecopy-bytes copy both, filecopy-text only the .txt.
The input directory is prepared first, exactly as `filecopy run` does.

Usage:
    python scripts/seed_input.py --size 65536
"""

import os
from pathlib import Path

import typer

from filecopy.directories import DEFAULT_INPUT_DIR, DEFAULT_OUTPUT_DIR, setup_directories


app = typer.Typer(
    help="Write sample files into the filecopy input directory",
    add_completion=False,
)


@app.command()
def main(
    input_dir: Path = typer.Option(
        DEFAULT_INPUT_DIR,
        "--input-dir",
        help="Input directory watched by the pipeline",
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        "--output-dir",
        help="Output directory (prepared alongside the input directory)",
    ),
    size: int = typer.Option(
        4096,
        "--size",
        help="Size of the random binary sample in bytes",
    ),
) -> None:
    """
    Write sample.bin (random bytes) and sample.txt into the input directory.

    Example:
        python scripts/seed_input.py --input-dir /tmp/in --output-dir /tmp/out
    """
    layout = setup_directories(input_dir, output_dir)

    binary = layout.input_dir / "sample.bin"
    binary.write_bytes(os.urandom(size))
    typer.echo(f"Wrote {binary} ({size} bytes)")

    text = layout.input_dir / "sample.txt"
    text.write_text("Hello from the file-copy demo.\n", encoding="utf-8")
    typer.echo(f"Wrote {text}")


if __name__ == "__main__":
    app()
