"""String helpers shared by modules and the terminal layer."""


def fit_width(text: str, width: int) -> str:
    """Truncate or pad text so it is exactly width characters."""
    if width <= 0:
        return ""
    return text[:width].ljust(width)


def truncate_at(text: str, start: int) -> str:
    """Drop the first start characters; empty when the text is shorter."""
    if start > len(text):
        return ""
    return text[start:]


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))
