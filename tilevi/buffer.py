"""Character buffer with line-oriented accessors."""

from __future__ import annotations

import logging
from typing import Optional

from .errors import UnresolvedPositionError

logger = logging.getLogger(__name__)


class TextBuffer:
    """Mutable sequence of characters where newlines delimit lines.

    Characters are decoded one per byte, so offsets and columns are plain
    character counts. Carriage returns are dropped on load; ``crlf``
    remembers whether the source had any so that ``serialize`` can put
    them back.
    """

    def __init__(self, text: str = ""):
        self.data: list[str] = list(text)
        self.crlf = False

    def __len__(self) -> int:
        return len(self.data)

    def __str__(self) -> str:
        return "".join(self.data)

    def __bytes__(self) -> bytes:
        out = bytearray()
        self.serialize(out)
        return bytes(out)

    def load(self, raw: bytes) -> None:
        """Replace the content with raw bytes, stripping carriage returns."""
        text = raw.decode("latin-1")
        self.crlf = "\r" in text
        self.data = [c for c in text if c != "\r"]

    def serialize(self, out: bytearray) -> None:
        """Append the buffer to out, restoring CRLF line endings if needed."""
        for c in self.data:
            if c == "\n" and self.crlf:
                out += b"\r\n"
            elif ord(c) < 256:
                out.append(ord(c))
            else:
                # Typed in after load; there is no single byte for it
                out += c.encode("utf-8")

    def lines(self) -> list[str]:
        return str(self).split("\n")

    def line(self, i: int) -> Optional[str]:
        """Return line i without its terminator, or None if there is no such line."""
        if i < 0:
            return None
        lines = self.lines()
        if i >= len(lines):
            return None
        return lines[i]

    def line_len(self, i: int) -> Optional[int]:
        line = self.line(i)
        if line is None:
            return None
        return len(line)

    def line_count(self) -> int:
        return self.data.count("\n") + 1

    def offset(self, col: int, row: int) -> int:
        """Resolve (col, row) to an index into the character sequence.

        The result may equal the buffer length when the position is the
        very end of the text.

        Raises:
            UnresolvedPositionError: if no character sits at (col, row)
        """
        line_count = 0
        col_count = 0
        for i, c in enumerate(self.data):
            if line_count == row and col_count == col:
                return i
            if c == "\n":
                line_count += 1
                col_count = 0
            else:
                col_count += 1

        if line_count == row and col_count == col:
            return len(self.data)

        raise UnresolvedPositionError(
            "no such position in buffer", {"col": col, "row": row}
        )

    def insert(self, c: str, col: int, row: int) -> bool:
        """Insert character c at (col, row). Returns False if nothing was inserted."""
        try:
            i = self.offset(col, row)
        except UnresolvedPositionError as e:
            logger.warning(f"insert ignored: {e}")
            return False
        self.data.insert(i, c)
        return True

    def delete(self, col: int, row: int) -> Optional[str]:
        """Remove and return the character at (col, row).

        Returns None at the end of the buffer or for an unresolvable position.
        """
        try:
            i = self.offset(col, row)
        except UnresolvedPositionError as e:
            logger.warning(f"delete ignored: {e}")
            return None
        if i >= len(self.data):
            return None
        return self.data.pop(i)
