"""Constants and configuration defaults for the tilevi editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    # Layout
    BSP_DEPTH = 3  # Pre-split depth of the screen partition (up to 2**depth tiles)
    MAX_BSP_DEPTH = 6

    # Editor module
    GUTTER_WIDTH = 6  # "{n:>4}  " line-number column
    PAST_EOF_MARKER = "~"

    # Command module
    COMMAND_PROMPT = ":"
    COMMAND_MODULE_NAME = "command"
    EDITOR_MODULE_NAME = "editor"

    # Keyboard timing
    KEY_TIMEOUT = 0  # Non-blocking read once select() reported stdin ready

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize

    # Logging
    LOG_FORMAT = "%(asctime)s %(name)s:%(lineno)d %(levelname)s - %(message)s"
    DEFAULT_LOG_LEVEL = "INFO"

    # Application identity for platformdirs
    APP_NAME = "tilevi"
    APP_AUTHOR = "tilevi"
    CONFIG_ENV_VAR = "TILEVI_CONFIG"
    CONFIG_FILENAME = "config.json"
    LOG_FILENAME = "tilevi.log"
