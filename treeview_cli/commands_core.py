# treeview_cli/commands_core.py
import shlex
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import LayoutConfig
from .errors import NodeNotFoundError, RootExistsError
from .layout_engine import TreeLayoutEngine
from .models import Node

NodeIdArg = Union[int, str, None]


class CommandStatus:
    SUCCESS = "success"
    ERROR = "error"
    NOT_FOUND = "not_found"
    INVALID_OPERATION = "invalid_operation" # Removing the root or a pinned start/goal node

# Result tuple structure: (status: CommandStatus, data: Any, message: str)
# 'data' can be a TreeLayoutEngine, Node, list of ids, etc., depending on the command.


def parse_node_id(value: NodeIdArg) -> Optional[int]:
    """Converts a user-supplied id to int. Raises ValueError for anything that is not a positive integer."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid node ID '{value}'.")
    try:
        node_id = int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid node ID '{value}'. Node IDs are positive integers.") from e
    if node_id < 1:
        raise ValueError(f"Invalid node ID '{value}'. Node IDs are positive integers.")
    return node_id


def new_tree_action(config: Optional[LayoutConfig] = None) -> Tuple[str, TreeLayoutEngine, str]:
    """Action to create a fresh tree."""
    engine = TreeLayoutEngine(config)
    return CommandStatus.SUCCESS, engine, f"Created new {engine.variant} tree with {len(engine.nodes)} node(s)."


def add_node_action(engine: TreeLayoutEngine, parent_id_arg: NodeIdArg) -> Tuple[str, Optional[Node], str]:
    """Action to add a new leaf under a parent."""
    try:
        parent_id = parse_node_id(parent_id_arg)
    except ValueError as e:
        return CommandStatus.ERROR, None, str(e)
    if parent_id is None:
        return CommandStatus.ERROR, None, "A parent node ID is required to add a node."

    try:
        new_node = engine.add_node(parent_id)
    except NodeNotFoundError:
        return CommandStatus.NOT_FOUND, None, f"Parent node with ID '{parent_id}' not found."
    except RootExistsError as e:
        return CommandStatus.INVALID_OPERATION, None, str(e)
    return CommandStatus.SUCCESS, new_node, f"Added node {new_node.id} under node {parent_id} at ({new_node.x:g}, {new_node.y:g})."


def remove_node_action(engine: TreeLayoutEngine, node_id_arg: NodeIdArg) -> Tuple[str, List[int], str]:
    """Action to remove a node and its subtree. Returns the removed ids."""
    try:
        node_id = parse_node_id(node_id_arg)
    except ValueError as e:
        return CommandStatus.ERROR, [], str(e)

    node = engine.get_node(node_id)
    if not node:
        return CommandStatus.NOT_FOUND, [], f"Node with ID '{node_id_arg}' not found for removal."
    if node.is_root:
        return CommandStatus.INVALID_OPERATION, [], "The root node cannot be removed."
    if node.role:
        return CommandStatus.INVALID_OPERATION, [], f"The '{node.role}' node cannot be removed."

    removed_ids = engine.subtree_ids(node.id)
    if engine.remove_node(node.id):
        return CommandStatus.SUCCESS, removed_ids, f"Removed node {node.id} and {len(removed_ids) - 1} descendant(s)."
    return CommandStatus.ERROR, [], f"Failed to remove node {node.id}."


def select_node_action(engine: TreeLayoutEngine, node_id_arg: NodeIdArg) -> Tuple[str, Optional[Node], str]:
    """Action to select a node. Unlike engine.select_node, this checks that the node exists."""
    try:
        node_id = parse_node_id(node_id_arg)
    except ValueError as e:
        return CommandStatus.ERROR, None, str(e)
    node = engine.get_node(node_id)
    if not node:
        return CommandStatus.NOT_FOUND, None, f"Node with ID '{node_id_arg}' not found."
    engine.select_node(node.id)
    return CommandStatus.SUCCESS, node, f"Selected node {node.id}."


def relatives_action(engine: TreeLayoutEngine, node_id_arg: NodeIdArg) -> Tuple[str, Optional[Dict[str, Optional[int]]], str]:
    """Action to look up the nodes a renderer links with relative connectors."""
    try:
        node_id = parse_node_id(node_id_arg)
    except ValueError as e:
        return CommandStatus.ERROR, None, str(e)
    if engine.get_node(node_id) is None:
        return CommandStatus.NOT_FOUND, None, f"Node with ID '{node_id_arg}' not found."

    def _id(node: Optional[Node]) -> Optional[int]:
        return node.id if node else None

    relatives = {
        "left_uncle": _id(engine.left_uncle(node_id)),
        "right_aunt": _id(engine.right_aunt(node_id)),
        "leftmost_descendant": _id(engine.leftmost_descendant(node_id)),
        "rightmost_descendant": _id(engine.rightmost_descendant(node_id)),
    }
    return CommandStatus.SUCCESS, relatives, f"Relatives of node {node_id}."


def _describe_node(engine: TreeLayoutEngine, node: Node) -> str:
    label = f"[{node.id}]"
    if node.role:
        label += f" {node.role}"
    marker = " *" if engine.selected_node_id == node.id else ""
    return f"{label} ({node.x:g}, {node.y:g}) {node.color}{marker}"


def export_tree_action(engine: TreeLayoutEngine) -> Tuple[str, Optional[str], str]:
    """Action to render the tree as indented text with coordinates. Returns (status, content, message)."""
    if not engine.nodes:
        return CommandStatus.SUCCESS, None, "Tree is empty, nothing to export."

    output_lines: List[str] = []
    visited = set()

    def generate_text_tree_recursive(node_id: int, indent_str: str = "", is_last_child: bool = True):
        node = engine.get_node(node_id)
        if not node or node_id in visited:
            return
        visited.add(node_id)
        connector = "└── " if is_last_child else "├── "
        output_lines.append(f"{indent_str}{connector}{_describe_node(engine, node)}")
        new_indent_str = indent_str + ("    " if is_last_child else "│   ")
        for i, child_id_val in enumerate(node.children_ids):
            generate_text_tree_recursive(child_id_val, new_indent_str, i == len(node.children_ids) - 1)

    for root_node in engine.root_nodes():
        visited.add(root_node.id)
        output_lines.append(_describe_node(engine, root_node))
        for i, child_id_val in enumerate(root_node.children_ids):
            generate_text_tree_recursive(child_id_val, "", i == len(root_node.children_ids) - 1)

    return CommandStatus.SUCCESS, "\n".join(output_lines), f"Tree with {len(engine.nodes)} node(s)."


def layout_table_action(engine: TreeLayoutEngine) -> Tuple[str, str, str]:
    """Action to list every node's layout as an aligned table, in id order."""
    header = ("ID", "PARENT", "DEPTH", "X", "Y", "COLOR")
    rows = [header]
    for node_id in sorted(engine.nodes):
        node = engine.nodes[node_id]
        rows.append((
            str(node.id),
            "-" if node.parent_id is None else str(node.parent_id),
            str(engine.depth(node.id)),
            f"{node.x:g}",
            f"{node.y:g}",
            node.color + (f" ({node.role})" if node.role else ""),
        ))
    widths = [max(len(row[col]) for row in rows) for col in range(len(header))]
    lines = ["  ".join(cell.ljust(widths[col]) for col, cell in enumerate(row)).rstrip() for row in rows]
    width, height = engine.canvas_size()
    return CommandStatus.SUCCESS, "\n".join(lines), f"Max depth {engine.max_depth}, canvas {width:g} x {height:g}."


def execute_command_action(engine: TreeLayoutEngine, command_name: str, args: List[Any]) -> Tuple[str, Any, str]:
    """Dispatches one editing command by name. Used by scripts and the websocket server."""
    command_name = command_name.lower()
    command_name = command_aliases.get(command_name, command_name)
    if command_name == "add":
        parent_arg = args[0] if args else engine.selected_node_id
        return add_node_action(engine, parent_arg)
    if command_name in ("remove", "select", "relatives"):
        if not args:
            return CommandStatus.ERROR, None, f"'{command_name}' requires a node ID."
        handler = {"remove": remove_node_action, "select": select_node_action, "relatives": relatives_action}[command_name]
        return handler(engine, args[0])
    if command_name == "reset":
        engine.initialize()
        return CommandStatus.SUCCESS, engine, f"Tree reset to {len(engine.nodes)} node(s)."
    return CommandStatus.ERROR, None, f"Unknown command '{command_name}'."


def run_script_action(engine: TreeLayoutEngine, script: str) -> Tuple[str, int, str]:
    """
    Runs a ';'-separated script such as "add 1; add 1; add 2; remove 3".
    Stops at the first failing statement. Returns the number of statements executed.
    """
    executed = 0
    for statement in script.split(";"):
        try:
            parts = shlex.split(statement)
        except ValueError as e:
            return CommandStatus.ERROR, executed, f"Could not parse '{statement.strip()}': {e}"
        if not parts:
            continue
        status, _, msg = execute_command_action(engine, parts[0], parts[1:])
        if status != CommandStatus.SUCCESS:
            return status, executed, f"Statement {executed + 1} ('{statement.strip()}') failed: {msg}"
        executed += 1
    return CommandStatus.SUCCESS, executed, f"Executed {executed} statement(s)."


# --- Help Messages ---
detailed_help_messages = {
    "add": """Usage: add [PARENT_ID]\nAdds a new leaf node. Defaults to the selected node in interactive mode.""",
    "remove": """Usage: remove <NODE_ID>\nRemoves a node and all its descendants. The root (and start/goal nodes) cannot be removed.""",
    "select": """Usage: select <NODE_ID>\nMarks a node as selected. 'add' without a parent adds under it.""",
    "tree": """Usage: tree\nDisplays the tree with each node's coordinates and color.""",
    "layout": """Usage: layout [--json]\nDisplays the layout table (or the JSON snapshot).""",
    "relatives": """Usage: relatives [<NODE_ID>]\nShows the left uncle, right aunt and extreme descendants of a node.""",
    "reset": """Usage: reset\nDiscards the tree and starts again from a single root.""",
    "interactive": """Usage: interactive\nStarts the interactive shell (one-shot mode only).""",
    "help": """Usage: help [<command>]\nDisplays help.""",
    "exit": """Usage: exit\nExits the application.""",
}

command_aliases = {
    "rm": "remove",
    "del": "remove",
    "sel": "select",
    "ls": "layout",
    "rel": "relatives",
    "h": "help",
    "quit": "exit",
}


def get_general_help_text() -> str:
    lines = ["\nTreeView CLI - Available Commands", "Type 'help <command>' for more details."]
    main_commands = sorted(detailed_help_messages.keys())
    max_len = max(len(cmd) for cmd in main_commands)

    for cmd_name in main_commands:
        summary = detailed_help_messages[cmd_name].split('\n')[0]
        aliases_for_this_cmd = sorted([alias for alias, target in command_aliases.items() if target == cmd_name])
        alias_info = f" (Aliases: {', '.join(aliases_for_this_cmd)})" if aliases_for_this_cmd else ""
        lines.append(f"  {cmd_name:<{max_len + 2}} {summary.replace('Usage: ', '')}{alias_info}")

    lines.append("\nNode IDs are positive integers assigned in creation order; the root is 1.")
    return "\n".join(lines)


def get_specific_help_text(command_name: str) -> str:
    command_name = command_name.lower()
    main_command_name = command_aliases.get(command_name, command_name) # Resolve alias
    if main_command_name in detailed_help_messages:
        help_text = detailed_help_messages[main_command_name].strip()
        aliases_for_this_cmd = sorted([alias for alias, target in command_aliases.items() if target == main_command_name])
        if aliases_for_this_cmd:
            help_text += f"\n(Aliases: {', '.join(aliases_for_this_cmd)})"
        return help_text
    return f"Unknown command '{command_name}'. Type 'help' for a list."
