"""Editor module: a text buffer behind a scrolling viewport.

The module turns actions into buffer mutations and keeps a pending
redraw plan which the host collects through ``on_draw``.

Cursor state is split in two. ``row``/``col`` is where the user means
to be; ``col`` in particular survives vertical moves across short lines.
``render_row``/``render_col`` is what is shown, clamped into the view
and into the length of the current line.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import List, Optional

from .actions import (
    Action, Backspace, ChangeMode, Delete, InsertChar, Mode, Move, Movement,
    OpenFile, Quit, Resize, SaveFile, ScrollBy, WriteFile,
)
from .buffer import TextBuffer
from .constants import EditorConstants
from .drawing import (
    MODE_CURSOR_STYLES, AskRedraw, CursorTo, DrawIntent, Redraw, RedrawAll,
    RedrawCursor, RedrawLine, RedrawRange,
)
from .errors import UnsupportedError
from .events import (
    File, HostChangeMode, HostEvent, HostQuit, IncomingEvent, Key, Message,
    ModeChanged, SaveRequest,
)
from .keymap import Keymap
from .layout import Rect
from .module import Module
from .utils import clamp, fit_width, truncate_at

logger = logging.getLogger(__name__)


@dataclass
class View:
    """Visible region of the buffer; bottom and right are inclusive."""
    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0


class EditorModule(Module):
    """Modal text editor occupying one layout tile."""

    name = EditorConstants.EDITOR_MODULE_NAME

    def __init__(self, line_numbered: bool = True, keymap: Optional[Keymap] = None):
        self.file_path: Optional[str] = None
        self.buffer = TextBuffer()
        self.row = 0
        self.col = 0
        self.render_row = 0
        self.render_col = 0
        self.view = View()
        self.container = Rect()
        self.mode = Mode.NORMAL
        self.pending_redraw: Optional[Redraw] = None
        self.line_numbered = line_numbered
        self.keymap = keymap or Keymap()

    @property
    def gutter(self) -> int:
        return EditorConstants.GUTTER_WIDTH if self.line_numbered else 0

    # --- Module contract ---

    def on_load(self) -> None:
        logger.debug("editor module loaded")
        self._request(RedrawAll())

    def on_event(self, event: IncomingEvent) -> Optional[List[HostEvent]]:
        if isinstance(event, Key):
            return self.apply(self.keymap.actions_for(self.mode, event.key))
        if isinstance(event, File):
            return self.apply([OpenFile(event.path)])
        if isinstance(event, SaveRequest):
            return self.apply([WriteFile(event.path)] if event.path else [SaveFile()])
        return None

    def proxy_trigger(self, event: IncomingEvent, self_index: int) -> Optional[List[HostEvent]]:
        # Another module (the command prompt) handed the mode back
        if isinstance(event, ModeChanged) and event.mode != self.mode and event.mode != Mode.VISUAL:
            self.mode = event.mode
            self._request(RedrawCursor())
        return None

    def on_resize(self, top: int, right: int, bottom: int, left: int) -> None:
        self.container = Rect(top=top, right=right, bottom=bottom, left=left)
        self.apply([Resize(top, right, bottom, left)])

    def on_destroy(self) -> None:
        logger.debug(f"editor module closing {self.file_path or '[no file]'}")

    def get_container(self) -> Rect:
        return self.container

    # --- Actions ---

    def apply(self, actions: List[Action]) -> Optional[List[HostEvent]]:
        """Run actions in order and return the host events they produced."""
        self.pending_redraw = None
        events: List[HostEvent] = []

        for action in actions:
            if isinstance(action, Move):
                self.move_cursor(action.direction)
            elif isinstance(action, InsertChar):
                self.insert_char(action.char)
            elif isinstance(action, Backspace):
                self.backspace()
            elif isinstance(action, Delete):
                self.delete_char()
            elif isinstance(action, ScrollBy):
                self.scroll_by(action.lines)
            elif isinstance(action, Resize):
                self.resize(action.top, action.right, action.bottom, action.left)
            elif isinstance(action, ChangeMode):
                try:
                    events.extend(self.change_mode(action.mode))
                except UnsupportedError as e:
                    logger.error(str(e))
                    events.append(Message(self.name, e.message))
            elif isinstance(action, OpenFile):
                events.extend(self.open_file(action.path))
            elif isinstance(action, SaveFile):
                events.append(self.save_file())
            elif isinstance(action, WriteFile):
                events.append(self.write_file(action.path))
            elif isinstance(action, Quit):
                events.append(HostQuit())

        return events or None

    def change_mode(self, mode: Mode) -> List[HostEvent]:
        """Switch mode and announce it to the host.

        Raises:
            UnsupportedError: for Visual mode
        """
        if mode == Mode.VISUAL:
            raise UnsupportedError("visual mode is not supported", {"mode": mode.value})
        self.mode = mode
        self._request(RedrawCursor())
        return [HostChangeMode(mode)]

    def move_cursor(self, movement: Movement) -> None:
        self._request(RedrawCursor())
        self._sync_intent()

        line_len = self.buffer.line_len(self.row) or 0
        current = min(self.col, line_len)
        wrap_left = False

        if movement == Movement.UP:
            if self.render_row == self.view.top and self.view.top > 0:
                self._scroll_to(self.view.left, self.view.top - 1)
                self._request(RedrawAll())
            self.row = max(0, self.row - 1)
        elif movement == Movement.DOWN:
            if self.render_row == self.view.bottom and self.buffer.line(self.row + 1) is not None:
                self._scroll_to(self.view.left, self.view.top + 1)
                self._request(RedrawAll())
            self.row = min(self.view.bottom, self.row + 1)
        elif movement == Movement.LEFT:
            if current == 0 and self.row != 0:
                self.row -= 1
                wrap_left = True
            else:
                self.col = max(0, current - 1)
        elif movement == Movement.RIGHT:
            self.col = current + 1
            if self.col > line_len:
                self.col = 0
                self.row += 1
        elif movement == Movement.LINE_START:
            self.col = 0
        elif movement == Movement.LINE_END:
            self.col = line_len

        # Never rest past the end of the buffer
        while self.row > 0 and self.buffer.line(self.row) is None:
            self.row -= 1

        line_len = self.buffer.line_len(self.row) or 0
        if wrap_left:
            self.col = line_len
        self.render_col = min(line_len, self.col)

        self._follow_vertically()
        self._follow_horizontally()
        self.render_row = clamp(self.row, self.view.top, self.view.bottom)

    def insert_char(self, c: str) -> None:
        self._sync_intent(reset_col=True)
        if not self.buffer.insert(c, self.render_col, self.row):
            self._request(RedrawCursor())
            return
        self.move_cursor(Movement.RIGHT)

        if c == '\n':
            self._request(RedrawAll())
        else:
            self._request_line(self.render_row)

    def backspace(self) -> None:
        self._sync_intent(reset_col=True)
        if self.render_row == 0 and self.render_col == 0:
            self._request(RedrawCursor())
            return
        self.move_cursor(Movement.LEFT)
        self._after_delete(self.buffer.delete(self.render_col, self.row))

    def delete_char(self) -> None:
        self._sync_intent(reset_col=True)
        self._after_delete(self.buffer.delete(self.render_col, self.row))

    def scroll_by(self, lines: int) -> None:
        # The last line can reach the top of the view but not leave it
        last_row = self.buffer.line_count() - 1
        self._scroll_to(self.view.left, min(self.view.top + lines, last_row))
        self._follow_horizontally()
        self._request(RedrawAll())

    def resize(self, top: int, right: int, bottom: int, left: int) -> None:
        height = max(1, bottom - top)
        width = max(1, right - left)
        self.view.bottom = self.view.top + height - 1
        self.view.right = self.view.left + width - 1

        self.render_row = clamp(self.row, self.view.top, self.view.bottom)
        self.render_col = min(self.col, self.buffer.line_len(self.render_row) or 0)
        self._follow_horizontally()
        self._request(RedrawAll())

    # --- File I/O ---

    def open_file(self, path: str) -> List[HostEvent]:
        """Load path into the buffer.

        A missing file starts an empty buffer that will be created on
        save. Any other failure leaves the buffer empty and is reported.
        """
        logger.info(f"loading file '{path}'")
        self.file_path = path
        self.buffer = TextBuffer()
        self.row = self.col = self.render_row = self.render_col = 0
        self._scroll_to(0, 0)
        self._request(RedrawAll())

        try:
            with open(path, 'rb') as f:
                raw = f.read()
        except FileNotFoundError:
            logger.info(f"'{path}' does not exist yet; starting a new file")
            return [Message(self.name, f'"{path}" [New]')]
        except OSError as e:
            logger.error(f"error while loading '{path}': {e}")
            return [Message(self.name, f"cannot open {path}: {e.strerror or e}")]

        self.buffer.load(raw)
        logger.info(f"'{path}' loaded ({len(raw)} bytes)")
        return []

    def save_file(self) -> HostEvent:
        if self.file_path is None:
            logger.error("there isn't any file opened!")
            return Message(self.name, "no file name")
        return self.write_file(self.file_path)

    def write_file(self, path: str) -> HostEvent:
        """Write the buffer to path atomically."""
        data = bytes(self.buffer)
        try:
            self._atomic_write(path, data)
        except OSError as e:
            logger.error(f"error while writing '{path}': {e}")
            return Message(self.name, f"cannot write {path}: {e.strerror or e}")
        logger.info(f"'{path}' written ({len(data)} bytes)")
        return Message(self.name, f'"{path}" {self.buffer.line_count()}L, {len(data)}B written')

    @staticmethod
    def _atomic_write(path: str, data: bytes) -> None:
        # Temp file in the target directory so os.replace stays on one filesystem
        dir_name = os.path.dirname(path) or '.'
        temp_filename = None
        try:
            with tempfile.NamedTemporaryFile(mode='wb', dir=dir_name, prefix='.',
                                             suffix='.tmp', delete=False) as temp_file:
                temp_filename = temp_file.name
                temp_file.write(data)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.replace(temp_filename, path)
        except OSError:
            if temp_filename and os.path.exists(temp_filename):
                try:
                    os.remove(temp_filename)
                except OSError:
                    logger.warning(f"could not remove temporary file {temp_filename}")
            raise

    # --- Drawing ---

    def on_draw(self) -> Optional[List[DrawIntent]]:
        plan = self.pending_redraw
        if plan is None:
            return None
        self.pending_redraw = None

        if isinstance(plan, RedrawRange):
            logger.warning(f"range redraw {plan.start}..{plan.end} is not supported; repainting everything")
            plan = RedrawAll()

        intents: List[DrawIntent] = []
        if isinstance(plan, RedrawAll):
            for row in range(self.view.top, self.view.bottom + 1):
                intents.append(AskRedraw(self._format_row(row)))
        elif isinstance(plan, RedrawLine):
            if self.view.top <= plan.y <= self.view.bottom:
                intents.append(AskRedraw(self._format_row(plan.y, plan.text)))

        intents.append(CursorTo(
            self.render_col + self.gutter - self.view.left,
            self.render_row - self.view.top,
            MODE_CURSOR_STYLES[self.mode],
        ))
        return intents

    def _format_row(self, row: int, text: Optional[str] = None) -> RedrawLine:
        """Render buffer row as a screen line in local coordinates."""
        width = self.view.right - self.view.left + 1
        screen_y = row - self.view.top
        if text is None:
            text = self.buffer.line(row)

        if text is None:
            if not self.gutter:
                return RedrawLine(screen_y, fit_width("", width))
            marker = f"{EditorConstants.PAST_EOF_MARKER:>4}".ljust(self.gutter)
            return RedrawLine(screen_y, fit_width(marker, width), dim=self.gutter)

        gutter = f"{row + 1:>4}  " if self.gutter else ""
        return RedrawLine(screen_y, fit_width(gutter + truncate_at(text, self.view.left), width))

    # --- Internals ---

    def _request(self, redraw: Redraw) -> None:
        """Merge redraw into the pending plan, keeping the wider of the two."""
        current = self.pending_redraw
        if current is None or isinstance(current, RedrawCursor):
            self.pending_redraw = redraw
        elif isinstance(redraw, RedrawCursor) or isinstance(current, RedrawAll):
            return
        elif isinstance(current, RedrawLine) and isinstance(redraw, RedrawLine) and current.y == redraw.y:
            self.pending_redraw = redraw
        elif current != redraw:
            self.pending_redraw = RedrawAll()

    def _request_line(self, row: int) -> None:
        line = self.buffer.line(row)
        if line is None:
            self._request(RedrawAll())
        else:
            self._request(RedrawLine(row, line))

    def _after_delete(self, deleted: Optional[str]) -> None:
        if deleted == '\n':
            self._request(RedrawAll())
        else:
            self._request_line(self.render_row)

    def _sync_intent(self, reset_col: bool = False) -> None:
        """Restart from what is on screen once the rendered row drifted."""
        if self.render_row != self.row or reset_col:
            self.row = self.render_row
            self.col = self.render_col
            if self.buffer.line(self.row) is None:
                while self.row > 0 and self.buffer.line(self.row) is None:
                    self.row -= 1
                self.col = self.render_col = min(self.col, self.buffer.line_len(self.row) or 0)
                self.render_row = self.row
                self._follow_vertically()
                self._follow_horizontally()

    def _scroll_to(self, left: int, top: int) -> None:
        """Translate the view, keeping its size, and re-clamp the render position."""
        width_span = self.view.right - self.view.left
        height_span = self.view.bottom - self.view.top
        self.view.left = max(0, left)
        self.view.right = self.view.left + width_span
        self.view.top = max(0, top)
        self.view.bottom = self.view.top + height_span

        self.render_row = clamp(self.row, self.view.top, self.view.bottom)
        self.render_col = min(self.col, self.buffer.line_len(self.render_row) or 0)

    def _follow_vertically(self) -> None:
        if self.row < self.view.top:
            self._scroll_to(self.view.left, self.row)
            self._request(RedrawAll())
        elif self.row > self.view.bottom:
            self._scroll_to(self.view.left, self.row - (self.view.bottom - self.view.top))
            self._request(RedrawAll())

    def _follow_horizontally(self) -> None:
        span = self.view.right - self.view.left
        if span < self.gutter:
            return
        if self.render_col < self.view.left:
            self._scroll_to(self.render_col, self.view.top)
            self._request(RedrawAll())
        elif self.render_col > self.view.right - self.gutter:
            self._scroll_to(self.render_col + self.gutter - span, self.view.top)
            self._request(RedrawAll())
