"""tilevi CLI entry point.

Allows running via `python -m tilevi` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import contextlib
import logging
import sys
import termios
from typing import Optional

from .version import get_version_string

logger = logging.getLogger(__name__)


def _escape_bytes(s: str) -> str:
    """Return a printable representation of raw key string."""
    return s.encode('unicode_escape').decode('ascii')


def run_keyboard_test() -> int:
    """Print decoded key events until ESC is pressed."""
    from .terminal import TerminalInterface
    from .keyboard import KeyboardHandler, KeyType

    with TerminalInterface() as term:
        print("Keyboard test mode: press keys to see parsed events.")
        print("Quit with ESC.")
        kb = KeyboardHandler(term)
        while True:
            ev = kb.get_key_event(timeout=None)
            if not ev:
                continue
            if ev.key_type == KeyType.SPECIAL and ev.value == 'escape':
                break
            flags = ' printable' if ev.is_printable else ''
            print(f"type={ev.key_type.value} value={ev.value!r} raw='{_escape_bytes(ev.raw)}'{flags}")
    print("Exiting keyboard test.")
    return 0


def run_editor(path: Optional[str]) -> int:
    """Set up the terminal, attach the editor and the command prompt, and run."""
    # Lazy import to avoid importing UI deps for --version
    from .client import ConsoleClient
    from .command import CommandModule
    from .editor import EditorModule
    from .log import setup_logging
    from .settings import load_settings
    from .terminal import TerminalInterface

    settings = load_settings()
    log_path = setup_logging(settings.log_level, settings.log_file)
    logger.info(f"starting {get_version_string()}, logging to {log_path}")

    with contextlib.ExitStack() as stack:
        try:
            terminal = stack.enter_context(TerminalInterface())
        except (OSError, termios.error) as e:
            logger.error(f"terminal setup failed: {e}")
            print(f"tilevi: cannot set up the terminal: {e}", file=sys.stderr)
            return 1

        client = ConsoleClient(terminal, bsp_depth=settings.bsp_depth)
        client.load()
        client.attach_module(EditorModule(line_numbered=settings.line_numbers))
        client.attach_module(CommandModule(), focus=False)
        if path:
            client.open_file(path)
        return client.run()


def main(argv: Optional[list[str]] = None) -> int:
    # Very small arg parsing: version, keyboard test mode, optional filename
    args = sys.argv[1:] if argv is None else argv
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return 0
    if args and args[0] in ('--keytest', '--keyboard-test'):
        return run_keyboard_test()
    return run_editor(args[0] if args else None)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
