# treeview_cli/colors.py
from typing import Dict, List

# Depth color cycle. Depth 0 (the root) is red, depth 1 green, and so on.
PALETTE: List[str] = [
    "red",
    "green",
    "blue",
    "orange",
    "purple",
    "teal",
    "amber",
    "lime",
    "indigo",
]

START_COLOR = "cyan"
GOAL_COLOR = "pink"

ROLE_COLORS: Dict[str, str] = {
    "start": START_COLOR,
    "goal": GOAL_COLOR,
}

# Material 500 shades, for renderers that need concrete values.
COLOR_HEX: Dict[str, str] = {
    "red": "#F44336",
    "green": "#4CAF50",
    "blue": "#2196F3",
    "orange": "#FF9800",
    "purple": "#9C27B0",
    "teal": "#009688",
    "amber": "#FFC107",
    "lime": "#CDDC39",
    "indigo": "#3F51B5",
    "cyan": "#00BCD4",
    "pink": "#E91E63",
}


def color_for_depth(depth: int) -> str:
    """Returns the palette color for a depth. Negative depths wrap around (-1 is the last color)."""
    return PALETTE[depth % len(PALETTE)]
