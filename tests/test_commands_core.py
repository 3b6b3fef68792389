import pytest

from treeview_cli.commands_core import (
    CommandStatus,
    add_node_action,
    execute_command_action,
    export_tree_action,
    get_general_help_text,
    get_specific_help_text,
    layout_table_action,
    new_tree_action,
    parse_node_id,
    relatives_action,
    remove_node_action,
    run_script_action,
    select_node_action,
)
from treeview_cli.config import LayoutConfig, VARIANT_START_GOAL


@pytest.mark.parametrize("value, expected", [("3", 3), (7, 7), (None, None)])
def test_parse_node_id(value, expected):
    assert parse_node_id(value) == expected


@pytest.mark.parametrize("value", ["abc", "0", -2, True, "1.5"])
def test_parse_node_id_rejects_invalid(value):
    with pytest.raises(ValueError):
        parse_node_id(value)


def test_new_tree_action():
    status, engine, msg = new_tree_action(LayoutConfig(variant=VARIANT_START_GOAL))
    assert status == CommandStatus.SUCCESS
    assert len(engine.nodes) == 3
    assert "start_goal" in msg


def test_add_node_action(engine):
    status, node, msg = add_node_action(engine, "1")
    assert status == CommandStatus.SUCCESS
    assert node.id == 2
    assert msg == "Added node 2 under node 1 at (0, 100)."


@pytest.mark.parametrize("parent, expected_status", [
    ("abc", CommandStatus.ERROR),
    (None, CommandStatus.ERROR),
    ("99", CommandStatus.NOT_FOUND),
])
def test_add_node_action_failures(engine, parent, expected_status):
    status, node, _ = add_node_action(engine, parent)
    assert status == expected_status
    assert node is None
    assert len(engine.nodes) == 1


def test_remove_node_action_returns_removed_ids(small_tree):
    status, removed, msg = remove_node_action(small_tree, 2)
    assert status == CommandStatus.SUCCESS
    assert removed == [2, 4]
    assert msg == "Removed node 2 and 1 descendant(s)."


def test_remove_node_action_protects_root(small_tree):
    status, removed, _ = remove_node_action(small_tree, "1")
    assert status == CommandStatus.INVALID_OPERATION
    assert removed == []
    assert len(small_tree.nodes) == 4


def test_remove_node_action_protects_start_and_goal():
    _, engine, _ = new_tree_action(LayoutConfig(variant=VARIANT_START_GOAL))
    status, _, msg = remove_node_action(engine, 3)
    assert status == CommandStatus.INVALID_OPERATION
    assert "goal" in msg


def test_remove_node_action_unknown(small_tree):
    status, _, _ = remove_node_action(small_tree, 50)
    assert status == CommandStatus.NOT_FOUND


def test_select_node_action_validates(small_tree):
    status, _, _ = select_node_action(small_tree, 50)
    assert status == CommandStatus.NOT_FOUND
    assert small_tree.selected_node_id is None

    status, node, _ = select_node_action(small_tree, "3")
    assert status == CommandStatus.SUCCESS
    assert small_tree.selected_node_id == 3


def test_relatives_action(family_tree):
    status, relatives, _ = relatives_action(family_tree, 8)
    assert status == CommandStatus.SUCCESS
    assert relatives == {
        "left_uncle": 2,
        "right_aunt": None,
        "leftmost_descendant": 8,
        "rightmost_descendant": 8,
    }
    assert relatives_action(family_tree, 404)[0] == CommandStatus.NOT_FOUND


def test_export_tree_action(small_tree):
    small_tree.select_node(3)
    status, content, _ = export_tree_action(small_tree)
    assert status == CommandStatus.SUCCESS
    assert content.split("\n") == [
        "[1] (30, 0) red",
        "├── [2] (0, 100) green",
        "│   └── [4] (0, 200) blue",
        "└── [3] (60, 100) green *",
    ]


def test_layout_table_action(small_tree):
    status, content, msg = layout_table_action(small_tree)
    lines = content.split("\n")
    assert lines[0].split() == ["ID", "PARENT", "DEPTH", "X", "Y", "COLOR"]
    assert lines[1].split() == ["1", "-", "0", "30", "0", "red"]
    assert lines[4].split() == ["4", "2", "2", "0", "200", "blue"]
    assert msg == "Max depth 2, canvas 360 x 400."


def test_execute_command_action_uses_selection_for_add(small_tree):
    small_tree.select_node(3)
    status, node, _ = execute_command_action(small_tree, "add", [])
    assert status == CommandStatus.SUCCESS
    assert node.parent_id == 3


def test_execute_command_action_aliases_and_unknown(small_tree):
    assert execute_command_action(small_tree, "rm", ["4"])[0] == CommandStatus.SUCCESS
    assert execute_command_action(small_tree, "select", [])[0] == CommandStatus.ERROR
    assert execute_command_action(small_tree, "frobnicate", [])[0] == CommandStatus.ERROR


def test_execute_command_action_reset(small_tree):
    status, _, _ = execute_command_action(small_tree, "reset", [])
    assert status == CommandStatus.SUCCESS
    assert list(small_tree.nodes) == [1]


def test_run_script_action(engine):
    status, executed, _ = run_script_action(engine, "add 1; add 1;; add 2 ; select 4")
    assert status == CommandStatus.SUCCESS
    assert executed == 4
    assert engine.nodes[2].children_ids == [4]
    assert engine.selected_node_id == 4


def test_run_script_action_stops_at_first_failure(engine):
    status, executed, msg = run_script_action(engine, "add 1; remove 1; add 1")
    assert status == CommandStatus.INVALID_OPERATION
    assert executed == 1
    assert "Statement 2" in msg
    assert len(engine.nodes) == 2


def test_help_texts():
    assert "TreeView CLI" in get_general_help_text()
    remove_help = get_specific_help_text("rm")
    assert remove_help.startswith("Usage: remove")
    assert "(Aliases: del, rm)" in remove_help
    assert get_specific_help_text("nope").startswith("Unknown command")
