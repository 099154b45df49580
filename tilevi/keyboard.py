"""Keyboard input decoding from curtsies-style key tokens."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    ALT = "alt"
    CTRL = "ctrl"
    SPECIAL = "special"


@dataclass(frozen=True)
class KeyEvent:
    """A decoded key press."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'left', 'backspace')
    raw: str = ""  # The token as read from the terminal

    @property
    def is_printable(self) -> bool:
        return (self.key_type == KeyType.REGULAR
                and len(self.value) == 1
                and (ord(self.value) >= 32 or self.value == '\t'))


SPECIAL_KEYS = frozenset({
    'left', 'right', 'up', 'down', 'home', 'end', 'enter', 'backspace',
    'delete', 'page_up', 'page_down', 'insert', 'escape',
})

# Token spellings that differ from the names used in keymaps
KEY_ALIASES = {
    'pageup': 'page_up',
    'pgup': 'page_up',
    'pagedown': 'page_down',
    'pgdn': 'page_down',
    'esc': 'escape',
    'return': 'enter',
    'del': 'delete',
}


def special(name: str) -> KeyEvent:
    return KeyEvent(KeyType.SPECIAL, name, name)


def char(c: str) -> KeyEvent:
    return KeyEvent(KeyType.REGULAR, c, c)


class KeyboardHandler:
    """Reads tokens from a terminal interface and decodes them."""

    def __init__(self, terminal_interface):
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        """Get the next key event, or None when nothing arrived in time."""
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Decode a curtsies key token such as 'a', '<UP>' or '<Ctrl-x>'."""
        key_str = str(key)

        if len(key_str) > 2 and key_str.startswith('<') and key_str.endswith('>'):
            return self._parse_named(key_str)

        if len(key_str) == 1:
            o = ord(key_str)
            if key_str in ('\r', '\n'):
                return KeyEvent(KeyType.SPECIAL, 'enter', key_str)
            if key_str in ('\x7f', '\x08'):
                return KeyEvent(KeyType.SPECIAL, 'backspace', key_str)
            if key_str == '\x1b':
                return KeyEvent(KeyType.SPECIAL, 'escape', key_str)
            if 1 <= o <= 26 and key_str != '\t':
                return KeyEvent(KeyType.CTRL, chr(ord('a') + o - 1), key_str)

        return KeyEvent(KeyType.REGULAR, key_str, key_str)

    def _parse_named(self, key_str: str) -> KeyEvent:
        # Support both '-' and '+' as modifier separators (e.g., '<Esc+u>')
        name = key_str[1:-1].replace('+', '-')
        if len(name) > 1:
            name = name.lower()
        parts = name.split('-') if len(name) > 1 and '-' in name else [name]
        base = KEY_ALIASES.get(parts[-1], parts[-1])
        mods = set(parts[:-1])
        if 'meta' in mods or 'esc' in mods:
            mods.add('alt')

        if not mods:
            if base in ('space', 'spacebar', 'spc'):
                return KeyEvent(KeyType.REGULAR, ' ', key_str)
            if base == 'tab':
                return KeyEvent(KeyType.REGULAR, '\t', key_str)
            if base in SPECIAL_KEYS:
                return KeyEvent(KeyType.SPECIAL, base, key_str)

        if 'ctrl' in mods and len(base) == 1:
            # Ctrl-J / Ctrl-M are what terminals send for Enter
            if base in ('j', 'm'):
                return KeyEvent(KeyType.SPECIAL, 'enter', key_str)
            if base == 'h':
                return KeyEvent(KeyType.SPECIAL, 'backspace', key_str)
            return KeyEvent(KeyType.CTRL, base, key_str)

        if 'alt' in mods and (base in SPECIAL_KEYS or len(base) == 1):
            return KeyEvent(KeyType.ALT, base, key_str)

        # Unknown token
        return KeyEvent(KeyType.SPECIAL, base, key_str)
