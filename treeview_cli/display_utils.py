# treeview_cli/display_utils.py
import os
import sys


class Colors:
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'


USE_COLORS = "NO_COLOR" not in os.environ

# level -> (prefix, color). Levels not listed here print without prefix or color.
_LEVEL_STYLES = {
    "INFO": ("[i] ", Colors.OKBLUE),
    "SUCCESS": ("[+] ", Colors.OKGREEN),
    "WARNING": ("[!] ", Colors.WARNING),
    "ERROR": ("[x] ", Colors.FAIL),
    "HEADER": ("", Colors.HEADER + Colors.BOLD),
    "USAGE": ("Usage: ", Colors.BOLD),
    "COMMAND_NAME": ("", Colors.OKCYAN),
    "RESULT": ("", Colors.OKGREEN),
    "DETAIL": ("", Colors.DIM),
    "ACTION": ("> ", Colors.OKCYAN),
}


def formatted_print(message: str, level: str = "INFO", use_prefix: bool = True, indent: int = 0):
    """Prints a message with a level prefix and color. Errors go to stderr."""
    stream = sys.stderr if level == "ERROR" else sys.stdout
    prefix, color = _LEVEL_STYLES.get(level, ("", ""))
    if level == "USAGE" and message.lower().startswith("usage:"):
        prefix = "" # Message already carries it
    text = ("  " * indent) + (prefix if use_prefix else "") + message
    if USE_COLORS and color and stream.isatty():
        text = f"{color}{text}{Colors.ENDC}"
    print(text, file=stream)
