"""Async file helpers for reading sources and writing translations."""

from __future__ import annotations

import asyncio
from pathlib import Path

from cmarktrans.exceptions import ParseError


async def read_document(path: Path, encoding: str = "utf-8") -> str:
    """Read a source document in a worker thread.

    Args:
        path: Document to read.
        encoding: Text encoding to use.

    Returns:
        The document text.

    Raises:
        ParseError: If the file is not valid text in ``encoding``.
    """

    def _read() -> str:
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError as exc:
            raise ParseError(f"{path} is not valid {encoding} text: {exc.reason}") from exc

    return await asyncio.to_thread(_read)


async def write_document(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write a translated document, creating missing parent directories.

    The content is written in one call so a failed translation never leaves
    a partial file behind.
    """

    def _write() -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding=encoding)

    await asyncio.to_thread(_write)
