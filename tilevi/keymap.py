"""Per-mode key bindings mapping key events to editor actions."""

from typing import Dict, List, Tuple

from .actions import (
    Action, Backspace, ChangeMode, Delete, InsertChar, Mode, Move, Movement,
    Noop, Quit, SaveFile, ScrollBy,
)
from .keyboard import KeyEvent, KeyType

KeyBinding = Tuple[KeyType, str]

ARROWS = {
    'left': Movement.LEFT,
    'right': Movement.RIGHT,
    'up': Movement.UP,
    'down': Movement.DOWN,
}


class Keymap:
    """Registry mapping (mode, key) to the list of actions it triggers."""

    def __init__(self):
        self._bindings: Dict[Mode, Dict[KeyBinding, List[Action]]] = {mode: {} for mode in Mode}
        self._setup_default_bindings()

    def _setup_default_bindings(self):
        normal = Mode.NORMAL
        for key, movement in (('h', Movement.LEFT), ('j', Movement.DOWN),
                              ('k', Movement.UP), ('l', Movement.RIGHT)):
            self.register(normal, (KeyType.REGULAR, key), [Move(movement)])
        self.register(normal, (KeyType.REGULAR, 'i'), [ChangeMode(Mode.INSERT)])
        self.register(normal, (KeyType.REGULAR, 'I'), [Move(Movement.LINE_START), ChangeMode(Mode.INSERT)])
        self.register(normal, (KeyType.REGULAR, 'a'), [Move(Movement.RIGHT), ChangeMode(Mode.INSERT)])
        self.register(normal, (KeyType.REGULAR, 'A'), [Move(Movement.LINE_END), ChangeMode(Mode.INSERT)])
        self.register(normal, (KeyType.REGULAR, 's'), [SaveFile()])
        self.register(normal, (KeyType.REGULAR, ':'), [ChangeMode(Mode.COMMAND)])
        self.register(normal, (KeyType.SPECIAL, 'page_up'), [ScrollBy(-1)])
        self.register(normal, (KeyType.SPECIAL, 'page_down'), [ScrollBy(1)])
        self.register(normal, (KeyType.SPECIAL, 'enter'), [Move(Movement.DOWN)])
        self.register(normal, (KeyType.SPECIAL, 'backspace'), [Move(Movement.LEFT)])
        self.register(normal, (KeyType.REGULAR, 'q'), [Quit()])
        self.register(normal, (KeyType.SPECIAL, 'escape'), [Quit()])

        insert = Mode.INSERT
        self.register(insert, (KeyType.SPECIAL, 'enter'), [InsertChar('\n')])
        self.register(insert, (KeyType.SPECIAL, 'backspace'), [Backspace()])
        self.register(insert, (KeyType.SPECIAL, 'delete'), [Delete()])
        self.register(insert, (KeyType.SPECIAL, 'escape'), [ChangeMode(Mode.NORMAL)])

        for mode in (normal, insert):
            for name, movement in ARROWS.items():
                self.register(mode, (KeyType.SPECIAL, name), [Move(movement)])

    def register(self, mode: Mode, key: KeyBinding, actions: List[Action]):
        """Bind a key to a sequence of actions in one mode."""
        self._bindings[mode][key] = list(actions)

    def actions_for(self, mode: Mode, key_event: KeyEvent) -> List[Action]:
        """Return the actions bound to key_event in mode.

        Printable characters insert themselves in Insert mode. Anything
        unbound maps to a single Noop.
        """
        actions = self._bindings[mode].get((key_event.key_type, key_event.value))
        if actions is not None:
            return list(actions)
        if mode == Mode.INSERT and key_event.is_printable:
            return [InsertChar(key_event.value)]
        return [Noop()]
