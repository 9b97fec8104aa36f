"""ANSI color codes for terminal output."""

from ..engines.registry import PANE_OSCILLATOR, PANE_PRICE, PANE_VOLUME


class Colors:
    """ANSI escape codes for terminal coloring."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Foreground
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"


PANE_COLORS = {
    PANE_PRICE: Colors.CYAN,
    PANE_OSCILLATOR: Colors.MAGENTA,
    PANE_VOLUME: Colors.BLUE,
}


def pane_color(pane: str) -> str:
    """Heading color for an indicator's chart pane."""
    return PANE_COLORS.get(pane, Colors.WHITE)
