from .config import LayoutConfig, load_config
from .errors import NodeNotFoundError, RootExistsError, TreeError
from .layout_engine import TreeLayoutEngine
from .models import Node

__all__ = [
    "LayoutConfig",
    "load_config",
    "Node",
    "NodeNotFoundError",
    "RootExistsError",
    "TreeError",
    "TreeLayoutEngine",
]
