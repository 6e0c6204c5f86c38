"""Style block envelope for collected CSS."""
from typing import TextIO

STYLE_OPEN = "<style>"
STYLE_CLOSE = "</style>"


def render_style(css: str) -> str:
    """Wrap css in a <style> block. The css is already valid and is not escaped."""
    return f"{STYLE_OPEN}{css}{STYLE_CLOSE}"


def write_style(out: TextIO, css: str) -> None:
    """Write the <style> block to out. Write errors propagate to the caller."""
    out.write(STYLE_OPEN)
    out.write(css)
    out.write(STYLE_CLOSE)
