"""
Input file helpers.

Data store files are often shipped gzipped next to their plain
counterparts and a README; converters read both kinds the same way
and skip the README.
"""

import gzip
from pathlib import Path
from typing import TextIO

GZIP_SUFFIXES = (".gz", ".gzip")


def open_file(
    filepath: Path,
    mode: str = "r",
    gzip_aware: bool = True,
    encoding: str = "utf-8",
) -> TextIO:
    """
    Open an input file as text, decompressing .gz/.gzip files.

    Args:
        filepath: File to open
        mode: "r" unless writing
        gzip_aware: Decompress by suffix
        encoding: Text encoding of the (decompressed) content

    Returns:
        Text file handle
    """
    if gzip_aware and str(filepath).endswith(GZIP_SUFFIXES):
        if "b" not in mode and "t" not in mode:
            mode += "t"
        return gzip.open(filepath, mode, encoding=encoding)
    return open(filepath, mode, encoding=encoding)


def is_readme(filepath: Path) -> bool:
    """README files share data directories with the data files."""
    return "README" in Path(filepath).name
