# treeview_cli/models.py
from typing import List, Dict, Any, Optional

from .colors import COLOR_HEX


class Node:
    """Represents a single element of the tree, together with its computed layout."""
    def __init__(self, node_id: int, color: str, parent_id: Optional[int] = None,
                 children_ids: Optional[List[int]] = None, x: float = 0.0, y: float = 0.0,
                 role: Optional[str] = None):
        self.id: int = node_id
        self.parent_id: Optional[int] = parent_id
        self.children_ids: List[int] = children_ids if children_ids is not None else []
        self.color: str = color
        self.x: float = x
        self.y: float = y
        self.role: Optional[str] = role # "start" / "goal" for the pinned children, else None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the node to a dictionary."""
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "children_ids": list(self.children_ids),
            "color": self.color,
            "color_hex": COLOR_HEX.get(self.color),
            "x": self.x,
            "y": self.y,
            "role": self.role,
        }

    def __repr__(self) -> str:
        return f"Node(id={self.id}, parent={self.parent_id}, x={self.x}, y={self.y}, children={len(self.children_ids)})"
