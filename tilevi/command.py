"""Command prompt module: a one-line ':' prompt."""

from __future__ import annotations

import logging
from typing import List, Optional

from .actions import (
    Action, Backspace, ChangeMode, Delete, InsertChar, Mode, Move, Movement,
    Noop, Resize,
)
from .constants import EditorConstants
from .drawing import AskRedraw, CursorStyle, CursorTo, DrawIntent, RedrawLine
from .errors import UnknownCommandError
from .events import (
    Broadcast, DisableProxy, EnableProxy, FocusMe, HostChangeMode, HostEvent,
    HostQuit, IncomingEvent, Key, Message, ModeChanged, Notice, SaveRequest,
    UnfocusMe,
)
from .keyboard import KeyEvent, KeyType
from .layout import Rect
from .module import Module

logger = logging.getLogger(__name__)

KEY_ACTIONS = {
    'escape': ChangeMode(Mode.NORMAL),
    'backspace': Backspace(),
    'delete': Delete(),
    'left': Move(Movement.LEFT),
    'right': Move(Movement.RIGHT),
    'home': Move(Movement.LINE_START),
    'end': Move(Movement.LINE_END),
    'enter': InsertChar('\n'),
}


class CommandModule(Module):
    """Accumulates a command after ':' and turns it into host events on Enter.

    The prompt sits idle until a ModeChanged(COMMAND) event reaches it
    through the proxy pass; it then asks the host for focus and hands it
    back on commit or cancel.
    """

    name = EditorConstants.COMMAND_MODULE_NAME

    def __init__(self):
        self.container = Rect()
        self.width = 0
        self.render_col = 0
        self.command_str = ""
        self.active = False
        self.message = ""

    def get_container(self) -> Rect:
        return self.container

    def on_resize(self, top: int, right: int, bottom: int, left: int) -> None:
        self.container = Rect(top=top, right=right, bottom=bottom, left=left)
        self.trigger_actions([Resize(top, right, bottom, left)])

    def proxy_trigger(self, event: IncomingEvent, self_index: int) -> Optional[List[HostEvent]]:
        if isinstance(event, ModeChanged) and event.mode == Mode.COMMAND and not self.active:
            self.active = True
            self.message = ""
            self.command_str = ""
            self.render_col = 0
            return [FocusMe(self_index), DisableProxy()]
        return None

    def on_event(self, event: IncomingEvent) -> Optional[List[HostEvent]]:
        if isinstance(event, Key):
            return self.trigger_actions(self.convert_key_to_actions(event.key))
        if isinstance(event, Notice):
            self.message = event.text
        return None

    def convert_key_to_actions(self, key: KeyEvent) -> List[Action]:
        if key.is_printable:
            return [InsertChar(key.value)]
        if key.key_type == KeyType.SPECIAL and key.value in KEY_ACTIONS:
            return [KEY_ACTIONS[key.value]]
        return [Noop()]

    def trigger_actions(self, actions: List[Action]) -> Optional[List[HostEvent]]:
        for action in actions:
            if isinstance(action, Move):
                if action.direction == Movement.LEFT:
                    self.render_col = max(0, self.render_col - 1)
                elif action.direction == Movement.RIGHT:
                    self.render_col = min(len(self.command_str), self.render_col + 1)
                elif action.direction == Movement.LINE_START:
                    self.render_col = 0
                elif action.direction == Movement.LINE_END:
                    self.render_col = len(self.command_str)
            elif isinstance(action, InsertChar):
                if action.char == '\n':
                    return self.commit()
                self.command_str = (self.command_str[:self.render_col] + action.char
                                    + self.command_str[self.render_col:])
                self.render_col += 1
            elif isinstance(action, Backspace):
                if self.render_col > 0:
                    self.command_str = (self.command_str[:self.render_col - 1]
                                        + self.command_str[self.render_col:])
                    self.render_col -= 1
            elif isinstance(action, Delete):
                if self.render_col < len(self.command_str):
                    self.command_str = (self.command_str[:self.render_col]
                                        + self.command_str[self.render_col + 1:])
            elif isinstance(action, ChangeMode) and action.mode == Mode.NORMAL:
                return self.cancel()
            elif isinstance(action, Resize):
                self.width = action.right - action.left

        return None

    def commit(self) -> List[HostEvent]:
        """Run the typed command and release focus."""
        command = self.command_str
        self.command_str = ""
        self.render_col = 0
        logger.debug(f"processing command: {command!r}")

        try:
            events = self.process_command(command)
        except UnknownCommandError as e:
            logger.warning(str(e))
            self.message = f"unknown command: {command}"
            events = [Message(self.name, self.message)]
        return events + self._release()

    def cancel(self) -> List[HostEvent]:
        self.command_str = ""
        self.render_col = 0
        return self._release()

    def process_command(self, command: str) -> List[HostEvent]:
        """Translate a command line into host events.

        Raises:
            UnknownCommandError: for anything that is not a known command
        """
        name, _, argument = command.strip().partition(" ")
        argument = argument.strip()
        if not name:
            return []
        if name in ("q", "quit") and not argument:
            return [HostQuit()]
        if name in ("w", "write"):
            return [Broadcast(SaveRequest(argument or None))]
        raise UnknownCommandError("command unknown", {"command": command})

    def _release(self) -> List[HostEvent]:
        self.active = False
        return [UnfocusMe(), EnableProxy(), HostChangeMode(Mode.NORMAL)]

    def on_draw(self) -> Optional[List[DrawIntent]]:
        if not self.active:
            return [AskRedraw(RedrawLine(0, self.message))]
        return [
            AskRedraw(RedrawLine(0, EditorConstants.COMMAND_PROMPT + self.command_str)),
            CursorTo(self.render_col + 1, 0, CursorStyle.BLINKING_BLOCK),
        ]
