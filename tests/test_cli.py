import json

import pytest

from treeview_cli import interactive_cli
from treeview_cli.cli import main_cli
from treeview_cli.layout_engine import TreeLayoutEngine


@pytest.fixture(autouse=True)
def no_color(monkeypatch):
    monkeypatch.setattr("treeview_cli.display_utils.USE_COLORS", False)


def test_layout_json(capsys):
    main_cli(["-e", "add 1; add 1; add 2", "layout", "--json"])
    data = json.loads(capsys.readouterr().out)
    assert set(data["nodes"]) == {"1", "2", "3", "4"}
    assert data["nodes"]["1"]["x"] == 30.0
    assert data["max_depth"] == 2


def test_layout_table_respects_spacing(capsys):
    main_cli(["-s", "10", "-y", "20", "-e", "add 1; add 1", "layout"])
    out = capsys.readouterr().out
    assert "canvas 60 x 60" in out


def test_tree_command(capsys):
    main_cli(["-e", "add 1", "tree"])
    out = capsys.readouterr().out
    assert "[1] (0, 0) red" in out
    assert "└── [2] (0, 100) green" in out


def test_start_goal_variant(capsys):
    main_cli(["--variant", "start_goal", "tree"])
    out = capsys.readouterr().out
    assert "[2] start" in out
    assert "[3] goal" in out


def test_relatives_command(capsys):
    main_cli(["-e", "add 1; add 1; add 3", "relatives", "4"])
    out = capsys.readouterr().out
    assert "left uncle: 2" in out
    assert "right aunt: -" in out


def test_relatives_unknown_node_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main_cli(["relatives", "9"])
    assert exc_info.value.code == 1
    assert "not found" in capsys.readouterr().err


def test_failing_script_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main_cli(["-e", "add 1; remove 1", "tree"])
    assert exc_info.value.code == 1
    assert "root node cannot be removed" in capsys.readouterr().err


def test_invalid_spacing_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main_cli(["-s", "0", "tree"])
    assert exc_info.value.code == 2


def test_no_arguments_prints_help(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main_cli([])
    assert exc_info.value.code == 0
    assert "Available Commands" in capsys.readouterr().out


def test_help_for_command(capsys):
    main_cli(["help", "rm"])
    out = capsys.readouterr().out
    assert "Usage: remove <NODE_ID>" in out


class TestInteractive:

    @pytest.fixture
    def engine(self):
        engine = TreeLayoutEngine()
        interactive_cli.current_engine = engine
        yield engine
        interactive_cli.current_engine = None

    def test_add_select_remove(self, engine, capsys):
        assert interactive_cli.run_line("add 1")
        assert interactive_cli.run_line("select 2")
        assert interactive_cli.run_line("add")
        assert engine.nodes[2].children_ids == [3]
        assert interactive_cli.run_line("rm 2")
        assert list(engine.nodes) == [1]
        assert engine.selected_node_id is None

    def test_add_without_selection_reports_error(self, engine, capsys):
        interactive_cli.run_line("add")
        assert "No parent given" in capsys.readouterr().err
        assert len(engine.nodes) == 1

    def test_unknown_command(self, engine, capsys):
        assert interactive_cli.run_line("jump 3") is False
        assert "Unknown command" in capsys.readouterr().err

    def test_prompt_shows_selection(self, engine):
        engine.add_node(1)
        engine.select_node(2)
        assert interactive_cli.build_prompt() == "treeview [2 nodes:2]> "

    def test_session_runs_until_exit(self, engine, monkeypatch, capsys):
        lines = iter(["add 1", "add 1", "tree", "exit", "add 1"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
        interactive_cli.interactive_session(engine)
        assert len(engine.nodes) == 3
        assert "[3] (60, 100) green" in capsys.readouterr().out

    def test_session_ends_on_eof(self, engine, monkeypatch):
        def fake_input(prompt=""):
            raise EOFError
        monkeypatch.setattr("builtins.input", fake_input)
        interactive_cli.interactive_session(engine)
        assert len(engine.nodes) == 1
