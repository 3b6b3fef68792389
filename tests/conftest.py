import pytest

from treeview_cli.config import LayoutConfig
from treeview_cli.layout_engine import TreeLayoutEngine


@pytest.fixture
def engine():
    return TreeLayoutEngine(LayoutConfig())


@pytest.fixture
def small_tree(engine):
    """
    1
    ├── 2
    │   └── 4
    └── 3
    """
    engine.add_node(1)
    engine.add_node(1)
    engine.add_node(2)
    return engine


@pytest.fixture
def family_tree(engine):
    """
    1
    ├── 2
    │   ├── 4
    │   │   └── 7
    │   └── 5
    └── 3
        └── 6
            └── 8
    """
    for parent_id in (1, 1, 2, 2, 3, 4, 6):
        engine.add_node(parent_id)
    return engine
