# treeview_cli/interactive_cli.py
import json
import shlex
import sys
from typing import List, Optional

from .commands_core import (
    new_tree_action, add_node_action, remove_node_action, select_node_action,
    relatives_action, export_tree_action, layout_table_action,
    get_general_help_text, get_specific_help_text, CommandStatus
)
from .display_utils import Colors, formatted_print, USE_COLORS
from .layout_engine import TreeLayoutEngine

try:
    import readline
except ImportError:
    readline = None # Tab completion will be disabled if readline is not available

# Global state for interactive session
current_engine: Optional[TreeLayoutEngine] = None
_rl_completion_matches: List[str] = []


def _require_engine() -> TreeLayoutEngine:
    global current_engine
    if current_engine is None:
        _, current_engine, _ = new_tree_action()
    return current_engine


def _report(status: str, msg: str):
    formatted_print(msg, level="SUCCESS" if status == CommandStatus.SUCCESS else "ERROR")


def cmd_add(args_list: List[str]):
    engine = _require_engine()
    if args_list:
        parent_arg = args_list[0]
    elif engine.selected_node is not None:
        parent_arg = engine.selected_node_id
    else:
        formatted_print("No parent given and no node selected. Use 'add <PARENT_ID>' or 'select <NODE_ID>' first.", level="ERROR")
        return
    status, _, msg = add_node_action(engine, parent_arg)
    _report(status, msg)


def cmd_remove(args_list: List[str]):
    engine = _require_engine()
    if args_list:
        node_arg = args_list[0]
    elif engine.selected_node is not None:
        node_arg = engine.selected_node_id
    else:
        formatted_print(get_specific_help_text("remove"), level="NONE", use_prefix=False)
        return
    status, _, msg = remove_node_action(engine, node_arg)
    _report(status, msg)


def cmd_select(args_list: List[str]):
    if not args_list:
        formatted_print(get_specific_help_text("select"), level="NONE", use_prefix=False)
        return
    status, _, msg = select_node_action(_require_engine(), args_list[0])
    _report(status, msg)


def cmd_tree(args_list: List[str]):
    _, content, msg = export_tree_action(_require_engine())
    if content:
        formatted_print(content, level="NONE", use_prefix=False)
    else:
        formatted_print(msg, level="INFO")


def cmd_layout(args_list: List[str]):
    engine = _require_engine()
    if "--json" in args_list:
        formatted_print(json.dumps(engine.to_dict(), indent=2), level="NONE", use_prefix=False)
        return
    _, content, msg = layout_table_action(engine)
    formatted_print(content, level="NONE", use_prefix=False)
    formatted_print(msg, level="INFO")


def cmd_relatives(args_list: List[str]):
    engine = _require_engine()
    node_arg = args_list[0] if args_list else engine.selected_node_id
    if node_arg is None:
        formatted_print(get_specific_help_text("relatives"), level="NONE", use_prefix=False)
        return
    status, relatives, msg = relatives_action(engine, node_arg)
    if status != CommandStatus.SUCCESS:
        formatted_print(msg, level="ERROR")
        return
    formatted_print(msg, level="INFO")
    for name, related_id in relatives.items():
        formatted_print(f"{name.replace('_', ' ')}: {related_id if related_id is not None else '-'}", level="RESULT", use_prefix=False, indent=1)


def cmd_reset(args_list: List[str]):
    engine = _require_engine()
    engine.initialize()
    formatted_print(f"Tree reset to {len(engine.nodes)} node(s).", level="SUCCESS")


def cmd_help(args_list: List[str]):
    if not args_list:
        lines = get_general_help_text().strip().split('\n')
        formatted_print(lines[0], level="HEADER", use_prefix=False)
        for line_content in lines[1:]:
            if line_content.startswith("  "):
                formatted_print(line_content, level="COMMAND_NAME", use_prefix=False)
            elif line_content.strip():
                formatted_print(line_content.strip(), level="INFO", use_prefix=False, indent=1)
        return

    help_text = get_specific_help_text(args_list[0])
    if "Unknown command" in help_text:
        formatted_print(help_text, level="ERROR")
        return
    for line_content in help_text.strip().split('\n'):
        if line_content.lower().startswith("usage:"):
            formatted_print(line_content, level="USAGE")
        else:
            formatted_print(line_content, level="NONE", use_prefix=False, indent=1)


def cmd_exit(args_list: Optional[List[str]] = None):
    sys.exit(0)


# Command mapping for interactive session
interactive_commands_map = {
    "add": cmd_add,
    "remove": cmd_remove, "rm": cmd_remove, "del": cmd_remove,
    "select": cmd_select, "sel": cmd_select,
    "tree": cmd_tree,
    "layout": cmd_layout, "ls": cmd_layout,
    "relatives": cmd_relatives, "rel": cmd_relatives,
    "reset": cmd_reset,
    "help": cmd_help, "h": cmd_help,
    "exit": cmd_exit, "quit": cmd_exit,
}


def _command_completer(text: str, state: int) -> Optional[str]:
    """Readline completer function for interactive commands."""
    global _rl_completion_matches
    if state == 0:
        original_commands = list(interactive_commands_map.keys())
        if text:
            _rl_completion_matches = [cmd for cmd in original_commands if cmd.startswith(text)]
        else:
            _rl_completion_matches = original_commands[:]
    try:
        return _rl_completion_matches[state]
    except IndexError:
        return None


def setup_readline_completion():
    """Sets up readline for command completion if available."""
    if readline:
        readline.set_completer(_command_completer)
        readline.parse_and_bind("tab: complete")
        readline.set_completer_delims(" \t\n;")


def build_prompt() -> str:
    engine = _require_engine()
    selected = engine.selected_node
    selected_part = f":{selected.id}" if selected else ""
    if USE_COLORS and sys.stdout.isatty():
        return f"{Colors.OKGREEN}treeview{Colors.ENDC} [{Colors.OKCYAN}{len(engine.nodes)} nodes{Colors.ENDC}{Colors.HEADER}{selected_part}{Colors.ENDC}]> "
    return f"treeview [{len(engine.nodes)} nodes{selected_part}]> "


def run_line(line: str) -> bool:
    """Runs one line of input. Returns False if the line was not a known command."""
    if not line.strip():
        return True
    parts = shlex.split(line)
    command_name_input = parts[0].lower()
    command_args_input = parts[1:]
    if command_name_input not in interactive_commands_map:
        formatted_print(f"Unknown command: '{command_name_input}'. Type 'help'.", level="ERROR")
        return False
    interactive_commands_map[command_name_input](command_args_input)
    return True


def interactive_session(engine: Optional[TreeLayoutEngine] = None):
    global current_engine
    current_engine = engine
    _require_engine()

    setup_readline_completion()

    formatted_print("\nWelcome to TreeView Interactive Mode!", level="HEADER", use_prefix=False)
    formatted_print("Type 'help' for commands. The root is node 1.", level="INFO")

    while True:
        try:
            run_line(input(build_prompt()))
        except EOFError:
            formatted_print("\nExiting...", level="INFO")
            break
        except KeyboardInterrupt:
            formatted_print("\nInterrupted. Type 'exit' or 'quit'.", level="WARNING")
            continue
        except SystemExit:
            formatted_print("Exiting application...", level="INFO")
            break
        except ValueError as e: # shlex errors such as unbalanced quotes
            formatted_print(f"Could not parse input: {e}", level="ERROR")
