"""Terminal interface using Blessed for display and Curtsies for input."""

import select
import sys
from typing import Optional

import blessed
from curtsies import Input

from .drawing import CursorStyle
from .utils import fit_width


class TerminalInterface:
    """Handles terminal I/O: fullscreen, raw key input, cursor and line writes.

    Use it as a context manager so the terminal is restored on every exit
    path, exceptions included.
    """

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._input: Optional[Input] = None

    def __enter__(self) -> "TerminalInterface":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def setup(self):
        """Enter fullscreen and raw key input."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.clear, end='', flush=True)
        self.is_fullscreen = True
        if self._input is None:
            try:
                self._input = Input(keynames='curtsies')
                self._input.__enter__()
            except BaseException:
                self._input = None
                self.cleanup()
                raise

    def cleanup(self):
        """Leave raw key input and fullscreen, and restore the cursor."""
        if self._input is not None:
            try:
                self._input.__exit__(None, None, None)
            finally:
                self._input = None
        if self.is_fullscreen:
            print(self.term.home + self.term.clear, end='')
            print("\x1b[0 q", end='')  # Terminal's default caret shape
            print(self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False

    def fileno(self) -> int:
        """File descriptor to wait on for key input."""
        return sys.stdin.fileno()

    def clear_screen(self):
        """Clear the entire screen."""
        print(self.term.home + self.term.clear, end='', flush=True)

    def move_cursor(self, y: int, x: int):
        """Move the cursor without drawing."""
        print(self.term.move(y, x), end='', flush=True)

    def set_cursor_style(self, style: CursorStyle):
        """Set the caret shape with a DECSCUSR sequence."""
        print(f"\x1b[{style.value} q", end='', flush=True)

    def show_cursor(self):
        print(self.term.normal_cursor, end='', flush=True)

    def hide_cursor(self):
        print(self.term.hide_cursor, end='', flush=True)

    def draw_line(self, y: int, x: int, text: str, width: int, dim: int = 0):
        """Write text at (x, y), truncated or padded to exactly width columns.

        The first dim columns are drawn with the dim attribute.
        """
        line = fit_width(text, width)
        if dim > 0:
            line = self.term.dim + line[:dim] + self.term.normal + line[dim:]
        print(self.term.move(y, x) + line, end='', flush=True)

    def get_key(self, timeout=None):
        """Get a single key token from curtsies.

        Args:
            timeout: Timeout in seconds (None for blocking, 0 for non-blocking)

        Returns:
            The key name as a string, or None if nothing arrived in time.
        """
        if self._input is None:
            return None
        if timeout is not None:
            r, _, _ = select.select([self.fileno()], [], [], float(timeout))
            if not r:
                return None
        return str(next(self._input))

    @property
    def width(self):
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self):
        """Terminal height in rows."""
        return self.term.height
