# treeview_cli/errors.py
from typing import Optional


class TreeError(ValueError):
    """Base class for rejected tree mutations."""


class NodeNotFoundError(TreeError):
    def __init__(self, node_id: Optional[int]):
        self.node_id = node_id
        super().__init__(f"Node with ID '{node_id}' not found.")


class RootExistsError(TreeError):
    def __init__(self, root_id: Optional[int] = None):
        self.root_id = root_id
        super().__init__(f"Tree already has a root (ID: {root_id}). A parent ID is required for new nodes.")
