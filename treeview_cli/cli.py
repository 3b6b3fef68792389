# treeview_cli/cli.py
import argparse
import functools
import json
import sys
from typing import Callable, List, Optional

from loguru import logger

from .commands_core import (
    new_tree_action, run_script_action, relatives_action, export_tree_action,
    layout_table_action, get_general_help_text, get_specific_help_text, CommandStatus
)
from .config import LayoutConfig, VARIANTS, load_config, setup_logging
from .display_utils import formatted_print
from .layout_engine import TreeLayoutEngine


def build_config(args: argparse.Namespace) -> LayoutConfig:
    """Merges command line options over the environment. Exits on invalid values."""
    log_level = "DEBUG" if getattr(args, "verbose", False) else None
    try:
        return load_config(
            space_x=getattr(args, "space_x", None),
            space_y=getattr(args, "space_y", None),
            variant=getattr(args, "variant", None),
            log_level=log_level,
        )
    except ValueError as e:
        formatted_print(f"Invalid configuration: {e}", level="ERROR")
        sys.exit(2)


# Decorator for commands that operate on a tree
def tree_command(func: Callable[[TreeLayoutEngine, argparse.Namespace], None]):
    """
    Decorator that prepares a tree for a one-shot command.
    - Builds the layout config from the options and TREEVIEW_* variables.
    - Creates a fresh tree and applies the -e/--exec script to it.
    - Exits with status 1 if the script fails, otherwise calls the command.
    """
    @functools.wraps(func)
    def wrapper(args: argparse.Namespace) -> None:
        config = build_config(args)
        setup_logging(config.log_level)
        _, engine, _ = new_tree_action(config)

        script: Optional[str] = getattr(args, "exec_script", None)
        if script:
            status, executed, msg = run_script_action(engine, script)
            if status != CommandStatus.SUCCESS:
                formatted_print(msg, level="ERROR")
                sys.exit(1)
            logger.debug(msg)

        func(engine, args)
    return wrapper


@tree_command
def handle_tree(engine: TreeLayoutEngine, args: argparse.Namespace) -> None:
    """Prints the tree with coordinates."""
    status, content, msg = export_tree_action(engine)
    if content:
        formatted_print(content, level="NONE", use_prefix=False)
    else:
        formatted_print(msg, level="INFO")


@tree_command
def handle_layout(engine: TreeLayoutEngine, args: argparse.Namespace) -> None:
    """Prints the layout table, or the JSON snapshot with --json."""
    if args.json:
        print(json.dumps(engine.to_dict(), indent=2))
        return
    status, content, msg = layout_table_action(engine)
    formatted_print(content, level="NONE", use_prefix=False)
    formatted_print(msg, level="INFO")


@tree_command
def handle_relatives(engine: TreeLayoutEngine, args: argparse.Namespace) -> None:
    status, relatives, msg = relatives_action(engine, args.node_id)
    if status != CommandStatus.SUCCESS:
        formatted_print(msg, level="ERROR")
        sys.exit(1)
    formatted_print(msg, level="INFO")
    for name, related_id in relatives.items():
        formatted_print(f"{name.replace('_', ' ')}: {related_id if related_id is not None else '-'}", level="RESULT", use_prefix=False, indent=1)


@tree_command
def handle_interactive(engine: TreeLayoutEngine, args: argparse.Namespace) -> None:
    from .interactive_cli import interactive_session
    interactive_session(engine)


def handle_help(args: argparse.Namespace) -> None:
    if args.command_name:
        help_text = get_specific_help_text(args.command_name[0])
        if "Unknown command" in help_text:
            formatted_print(help_text, level="ERROR")
            return
        for line_content in help_text.strip().split('\n'):
            if line_content.lower().startswith("usage:"):
                formatted_print(line_content, level="USAGE")
            else:
                formatted_print(line_content, level="NONE", use_prefix=False, indent=1)
    else:
        lines = get_general_help_text().strip().split('\n')
        formatted_print(lines[0], level="HEADER", use_prefix=False)
        for line_content in lines[1:]:
            if line_content.startswith("  "):
                formatted_print(line_content, level="COMMAND_NAME", use_prefix=False)
            elif line_content.strip():
                formatted_print(line_content.strip(), level="INFO", use_prefix=False, indent=1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="treeview", description="TreeView CLI: build a tree and print its layout.")
    parser.add_argument("-s", "--space-x", type=float, help="Horizontal spacing between leaves (default 60).")
    parser.add_argument("-y", "--space-y", type=float, help="Vertical spacing between depth levels (default 100).")
    parser.add_argument("--variant", choices=VARIANTS, help="Initial tree shape.")
    parser.add_argument("-e", "--exec", dest="exec_script", metavar="SCRIPT",
                        help="Commands applied before the command runs, e.g. \"add 1; add 1; add 2\".")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine activity to stderr.")

    subparsers = parser.add_subparsers(dest="command", title="Available commands")
    subparsers.required = True

    p_tree = subparsers.add_parser("tree", help=get_specific_help_text("tree").split('\n')[1])
    p_tree.set_defaults(func=handle_tree)

    p_layout = subparsers.add_parser("layout", help=get_specific_help_text("layout").split('\n')[1])
    p_layout.add_argument("--json", action="store_true", help="Print the JSON snapshot instead of a table.")
    p_layout.set_defaults(func=handle_layout)

    p_rel = subparsers.add_parser("relatives", help=get_specific_help_text("relatives").split('\n')[1])
    p_rel.add_argument("node_id", help="ID of the node.")
    p_rel.set_defaults(func=handle_relatives)

    p_inter = subparsers.add_parser("interactive", help=get_specific_help_text("interactive").split('\n')[1])
    p_inter.set_defaults(func=handle_interactive)

    p_help = subparsers.add_parser("help", help="Show help.")
    p_help.add_argument("command_name", nargs="*", help="Command to get help for.")
    p_help.set_defaults(func=handle_help)
    return parser


def main_cli(argv: Optional[List[str]] = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        formatted_print(get_general_help_text(), level="NONE", use_prefix=False)
        sys.exit(0)

    parser = build_parser()
    parsed_args = parser.parse_args(argv)
    parsed_args.func(parsed_args)


if __name__ == "__main__":
    main_cli()
