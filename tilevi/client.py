"""Console client: hosts modules in a tiled terminal screen.

One frame of the main loop reads a single terminal event, offers it to
every module through the proxy pass, dispatches it to the focused
module, executes the host events the modules returned, and finally asks
every module for draw intents which it translates into terminal writes.
"""

from __future__ import annotations

import logging
import os
import select
import signal
from typing import List, Optional, Tuple

from .constants import EditorConstants
from .drawing import AskRedraw, CursorStyle, CursorTo, DrawIntent, RedrawAll, RedrawLine, RedrawRange
from .errors import LayoutError
from .events import (
    Broadcast, DisableProxy, EnableProxy, File, FocusMe, HostChangeMode,
    HostEvent, HostQuit, IncomingEvent, Interrupt, Key, Message, ModeChanged,
    Notice, ResizeEvent, UnfocusMe,
)
from .keyboard import KeyboardHandler
from .layout import BspLayout, Rect
from .module import Module

logger = logging.getLogger(__name__)


class ConsoleClient:
    """Owns the terminal, the modules, the focus stack and the layout."""

    def __init__(self, terminal, bsp_depth: int = EditorConstants.BSP_DEPTH):
        self.terminal = terminal
        self.keyboard = KeyboardHandler(terminal)
        self.modules: List[Module] = []
        self.focus_stack: List[int] = []
        self.layout = BspLayout()
        self.bsp_depth = bsp_depth
        self.proxy_enabled = True
        self.running = False
        # Last cursor placement in screen coordinates
        self._cursor: Optional[Tuple[int, int, CursorStyle]] = None
        self._resize_pipe_r: Optional[int] = None
        self._resize_pipe_w: Optional[int] = None

    # --- Lifecycle ---

    def load(self) -> None:
        """Partition the screen; call once the terminal is set up."""
        self.layout.setup(self.bsp_depth, self.terminal.width, self.terminal.height)
        self.running = True

    def attach_module(self, module: Module, focus: bool = True) -> Optional[int]:
        """Place module in the layout, load it and (by default) focus it.

        Returns the module index, or None if the layout had no room.
        """
        module_idx = len(self.modules)
        try:
            self.layout.insert(module_idx)
        except LayoutError as e:
            logger.error(f"cannot attach {module.name}: {e}")
            return None

        module.on_load()
        self.modules.append(module)
        if focus:
            self.change_focus(module_idx)
        logger.info(f"attached {module.name} as module {module_idx}")

        self.trigger_resize()
        return module_idx

    def change_focus(self, idx: int) -> None:
        self.focus_stack.append(idx)

    def focused(self) -> Optional[int]:
        return self.focus_stack[-1] if self.focus_stack else None

    def open_file(self, path: str) -> None:
        """Offer a file to every module; the ones that care will open it."""
        self.handle_outcoming_events(self.trigger_broadcast(File(path)))

    def before_quit(self) -> None:
        for module in self.modules:
            module.on_destroy()

    # --- Main loop ---

    def run(self) -> int:
        """Run frames until a module asks to quit. Returns the exit code."""
        self._resize_pipe_r, self._resize_pipe_w = os.pipe()
        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)
        try:
            self.draw()
            while self.running:
                event = self.read_event()
                if event is None:
                    continue
                self.update(event)
                self.draw()
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
            os.close(self._resize_pipe_r)
            os.close(self._resize_pipe_w)
            self._resize_pipe_r = self._resize_pipe_w = None
            self.before_quit()
        return 0

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame  # Unused
        # Write to pipe to wake up select()
        os.write(self._resize_pipe_w, EditorConstants.RESIZE_PIPE_MARKER)

    def read_event(self) -> Optional[IncomingEvent]:
        """Block until a key press or a resize arrives and decode it."""
        watched = [self.terminal.fileno(), self._resize_pipe_r]
        ready, _, _ = select.select(watched, [], [])

        if self._resize_pipe_r in ready:
            os.read(self._resize_pipe_r, 1024)
            return ResizeEvent(self.terminal.width, self.terminal.height)

        key_event = self.keyboard.get_key_event(timeout=EditorConstants.KEY_TIMEOUT)
        if key_event is None:
            return None
        return Key(key_event)

    def update(self, event: IncomingEvent) -> None:
        """Process one incoming event: proxy pass, then focused dispatch."""
        if isinstance(event, ResizeEvent):
            self.layout.resize(event.width, event.height)
            self.trigger_resize()
            return
        if isinstance(event, File):
            self.handle_outcoming_events(self.trigger_broadcast(event))
            return

        if self.proxy_enabled:
            if not self.handle_outcoming_events(self.trigger_proxy(event)):
                return
            if not self.running:
                return

        self.handle_outcoming_events(self.trigger_events(event))

    def trigger_proxy(self, event: IncomingEvent) -> List[HostEvent]:
        all_post_actions: List[HostEvent] = []
        for idx, module in enumerate(self.modules):
            post_actions = module.proxy_trigger(event, idx)
            if post_actions:
                all_post_actions.extend(post_actions)
        return all_post_actions

    def trigger_events(self, event: IncomingEvent) -> List[HostEvent]:
        idx = self.focused()
        if idx is None:
            logger.warning("no module has focus")
            return []
        return self.modules[idx].on_event(event) or []

    def trigger_broadcast(self, event: IncomingEvent) -> List[HostEvent]:
        all_post_actions: List[HostEvent] = []
        for module in self.modules:
            post_actions = module.on_event(event)
            if post_actions:
                all_post_actions.extend(post_actions)
        return all_post_actions

    def handle_outcoming_events(self, events: List[HostEvent]) -> bool:
        """Execute host events in order.

        Returns False when an Interrupt (or Quit) stops the rest of the frame.
        """
        for event in events:
            if isinstance(event, HostQuit):
                self.terminal.clear_screen()
                self.running = False
                return False
            elif isinstance(event, EnableProxy):
                self.proxy_enabled = True
            elif isinstance(event, DisableProxy):
                self.proxy_enabled = False
            elif isinstance(event, FocusMe):
                self.change_focus(event.index)
            elif isinstance(event, UnfocusMe):
                if self.focus_stack:
                    self.focus_stack.pop()
            elif isinstance(event, Interrupt):
                return False
            elif isinstance(event, Message):
                logger.info(f"[{event.module}] {event.text}")
                if not self.handle_outcoming_events(self.trigger_broadcast(Notice(event.module, event.text))):
                    return False
            elif isinstance(event, Broadcast):
                if not self.handle_outcoming_events(self.trigger_broadcast(event.event)):
                    return False
            elif isinstance(event, HostChangeMode):
                logger.debug(f"mode changed to {event.mode.value}")
                if self.proxy_enabled:
                    if not self.handle_outcoming_events(self.trigger_proxy(ModeChanged(event.mode))):
                        return False
        return True

    def trigger_resize(self) -> None:
        """Clear the screen and hand every module its current rectangle."""
        self.terminal.clear_screen()
        self._cursor = None
        for idx, module in enumerate(self.modules):
            rect = self.layout.get(idx)
            module.on_resize(rect.top, rect.right, rect.bottom, rect.left)

    # --- Drawing ---

    def draw(self) -> None:
        """Collect draw intents from every module and write them out."""
        all_draw_actions: List[Tuple[DrawIntent, Rect]] = []
        for idx, module in enumerate(self.modules):
            draw_actions = module.on_draw()
            if not draw_actions:
                continue
            container = self.layout.get(idx)
            for action in draw_actions:
                all_draw_actions.append((action, container))

        wrote = False
        for action, container in all_draw_actions:
            if isinstance(action, CursorTo):
                self.draw_cursor(action, container)
            elif isinstance(action, AskRedraw):
                wrote = self.draw_redraw(action, container) or wrote

        # Line writes leave the terminal cursor at their end
        if wrote and self._cursor is not None:
            x, y, style = self._cursor
            self.terminal.set_cursor_style(style)
            self.terminal.move_cursor(y, x)
            self.terminal.show_cursor()

    def draw_cursor(self, action: CursorTo, container: Rect) -> None:
        x = action.x + container.left
        y = action.y + container.top
        self._cursor = (x, y, action.style)
        self.terminal.set_cursor_style(action.style)
        self.terminal.move_cursor(y, x)
        self.terminal.show_cursor()

    def draw_redraw(self, action: AskRedraw, container: Rect) -> bool:
        """Execute one redraw request; returns True if anything was written."""
        redraw = action.redraw
        if isinstance(redraw, RedrawAll):
            self.terminal.hide_cursor()
            for line_num in range(container.height):
                self.terminal.draw_line(container.top + line_num, container.left, "", container.width)
            return True
        if isinstance(redraw, RedrawLine):
            if not 0 <= redraw.y < container.height:
                logger.debug(f"line {redraw.y} outside of {container}")
                return False
            self.terminal.draw_line(container.top + redraw.y, container.left, redraw.text,
                                    container.width, dim=redraw.dim)
            return True
        if isinstance(redraw, RedrawRange):
            logger.error(f"range redraw {redraw.start}..{redraw.end} is not supported")
        return False
