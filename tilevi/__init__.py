"""tilevi - A modal terminal text editor hosted in a tiled layout."""

from .buffer import TextBuffer
from .client import ConsoleClient
from .command import CommandModule
from .editor import EditorModule
from .layout import BspLayout, Rect
from .module import Module

__all__ = [
    'TextBuffer',
    'ConsoleClient',
    'CommandModule',
    'EditorModule',
    'BspLayout',
    'Rect',
    'Module',
]
