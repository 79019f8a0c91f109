"""Find the documents to translate and where their translations go."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable


def discover_files(
    source: Path,
    destination: Path,
    *,
    extensions: Iterable[str] = ("md",),
    max_depth: int | None = None,
    include_hidden: bool = False,
) -> list[tuple[Path, Path]]:
    """Map source documents to destination paths.

    A file source maps to ``destination`` itself. A directory source is
    walked recursively and every matching file maps to the same relative
    path under ``destination``.

    Args:
        source: Input file or directory.
        destination: Output file or directory. A path without a suffix is
            treated as a directory.
        extensions: File extensions to translate (without leading dot),
            compared case-insensitively. Only applied when walking a directory.
        max_depth: Maximum number of subdirectory levels to descend into.
            ``0`` only takes files directly inside ``source``; None is
            unlimited.
        include_hidden: If True, also visit files and directories whose name
            starts with a dot.

    Returns:
        ``(source_path, destination_path)`` pairs in a stable, sorted order.

    Raises:
        FileNotFoundError: If ``source`` does not exist.
        ValueError: If one of ``source``/``destination`` is a directory and
            the other a file.
    """
    if not source.exists():
        raise FileNotFoundError(f"Input {source} does not exist")

    destination_is_dir = destination.suffix == ""
    if source.is_dir() != destination_is_dir:
        raise ValueError("Input and output should be both directories or both files")

    if source.is_file():
        return [(source, destination)]

    wanted = {extension.lstrip(".").lower() for extension in extensions}
    pairs: list[tuple[Path, Path]] = []
    for root, dirnames, filenames in os.walk(source):
        root_path = Path(root)
        depth = len(root_path.relative_to(source).parts)
        if max_depth is not None and depth >= max_depth:
            dirnames[:] = []
        else:
            dirnames[:] = sorted(
                name for name in dirnames if include_hidden or not name.startswith(".")
            )
        for filename in sorted(filenames):
            if not include_hidden and filename.startswith("."):
                continue
            if Path(filename).suffix.lstrip(".").lower() not in wanted:
                continue
            path = root_path / filename
            pairs.append((path, destination / path.relative_to(source)))
    return pairs
