# treeview_cli/layout_engine.py
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from loguru import logger

from .colors import ROLE_COLORS, color_for_depth
from .config import LayoutConfig, VARIANT_START_GOAL
from .errors import NodeNotFoundError, RootExistsError
from .models import Node

Listener = Callable[["TreeLayoutEngine"], None]


class TreeLayoutEngine:
    """Owns the tree's node table, computes its layout and answers topology queries."""
    ROOT_SEPARATION = 5 # Gap between separate root trees, in units of space_x

    def __init__(self, config: Optional[LayoutConfig] = None):
        config = config or LayoutConfig()
        self.space_x: float = float(config.space_x)
        self.space_y: float = float(config.space_y)
        self.variant: str = config.variant
        self.max_depth: int = 0
        self.nodes: Dict[int, Node] = {}
        self._next_node_id: int = 1
        self._selected_node_id: Optional[int] = None
        self._listeners: List[Listener] = []
        self.initialize()

    # --- Change notification ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a callback invoked after every mutation. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify_listeners(self):
        for listener in list(self._listeners):
            listener(self)

    # --- Mutations ---

    def initialize(self):
        """Resets the tree to a fresh root (plus start/goal children for that variant)."""
        self.nodes.clear()
        self._next_node_id = 1
        self._selected_node_id = None

        root = self._create_node(parent_id=None)
        if self.variant == VARIANT_START_GOAL:
            self._create_node(parent_id=root.id, role="start")
            self._create_node(parent_id=root.id, role="goal")

        logger.debug("Initialized {} tree with {} node(s)", self.variant, len(self.nodes))
        self.recalculate_positions()
        self._notify_listeners()

    def _create_node(self, parent_id: Optional[int], role: Optional[str] = None) -> Node:
        if role:
            color = ROLE_COLORS[role]
        else:
            color = color_for_depth(self.depth(parent_id) + 1)
        node = Node(node_id=self._next_node_id, color=color, parent_id=parent_id, role=role)
        self._next_node_id += 1
        self.nodes[node.id] = node

        if parent_id is not None:
            siblings = self.nodes[parent_id].children_ids
            if role is None and self._goal_child_index(parent_id) is not None:
                # New children of the root go before "goal" so it stays last.
                siblings.insert(len(siblings) - 1, node.id)
            else:
                siblings.append(node.id)
        return node

    def _goal_child_index(self, parent_id: int) -> Optional[int]:
        children = self.nodes[parent_id].children_ids
        if children:
            last = self.nodes.get(children[-1])
            if last is not None and last.role == "goal":
                return len(children) - 1
        return None

    def add_node(self, parent_id: Optional[int] = None) -> Node:
        """
        Adds a new leaf under parent_id and recomputes the layout.
        A parentless node is only accepted while the tree is empty.
        """
        if parent_id is None:
            if self.nodes:
                raise RootExistsError(self.root.id if self.root else None)
        elif parent_id not in self.nodes:
            raise NodeNotFoundError(parent_id)

        new_node = self._create_node(parent_id)
        logger.debug("Added node {} under {}", new_node.id, parent_id)
        self.recalculate_positions()
        self._notify_listeners()
        return new_node

    def remove_node(self, node_id: int) -> bool:
        """
        Removes a node and its whole subtree. Returns False without changing
        anything when the node is missing, is the root, or is a pinned start/goal node.
        """
        node_to_remove = self.get_node(node_id)
        if not node_to_remove:
            return False
        if node_to_remove.parent_id is None or node_to_remove.role is not None:
            logger.debug("Refusing to remove protected node {}", node_id)
            return False

        parent = self.get_node(node_to_remove.parent_id)
        if parent and node_id in parent.children_ids:
            parent.children_ids.remove(node_id)

        removed = self.subtree_ids(node_id)
        for removed_id in removed:
            del self.nodes[removed_id]
        if self._selected_node_id in removed:
            self._selected_node_id = None

        logger.debug("Removed node {} and {} descendant(s)", node_id, len(removed) - 1)
        self.recalculate_positions()
        self._notify_listeners()
        return True

    def select_node(self, node_id: Optional[int]):
        """Stores the selected id. Existence is checked when it is read (see selected_node)."""
        self._selected_node_id = node_id
        self._notify_listeners()

    def clear_selection(self):
        self.select_node(None)

    # --- Accessors ---

    @property
    def selected_node_id(self) -> Optional[int]:
        return self._selected_node_id

    @property
    def selected_node(self) -> Optional[Node]:
        if self._selected_node_id is None:
            return None
        return self.get_node(self._selected_node_id)

    @property
    def root(self) -> Optional[Node]:
        for node in self.nodes.values():
            if node.parent_id is None:
                return node
        return None

    def root_nodes(self) -> List[Node]:
        return [node for node in self.nodes.values() if node.parent_id is None]

    def get_node(self, node_id: Optional[int]) -> Optional[Node]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def get_children_nodes(self, node_id: int) -> List[Node]:
        """Returns the child Node objects of a node, in draw order."""
        parent_node = self.get_node(node_id)
        if not parent_node:
            return []
        return [self.nodes[child_id] for child_id in parent_node.children_ids if child_id in self.nodes]

    def subtree_ids(self, node_id: int) -> List[int]:
        """Ids of a node and all its descendants, pre-order. Empty for unknown ids."""
        if node_id not in self.nodes:
            return []
        result: List[int] = []
        visited: Set[int] = set()
        stack = [node_id]
        while stack:
            current_id = stack.pop()
            if current_id in visited or current_id not in self.nodes:
                continue
            visited.add(current_id)
            result.append(current_id)
            stack.extend(reversed(self.nodes[current_id].children_ids))
        return result

    def depth(self, node_id: Optional[int]) -> int:
        """Root is 0, its children 1. None and unknown ids give -1."""
        depth = 0
        current_id = node_id
        # A well-formed chain has at most len(nodes) links; stop there on cycles.
        for _ in range(len(self.nodes) + 1):
            if current_id is None:
                break
            node = self.nodes.get(current_id)
            if node is None:
                break
            current_id = node.parent_id
            depth += 1
        else:
            logger.warning("Parent chain of node {} does not reach a root", node_id)
        return depth - 1

    def edges(self) -> List[Tuple[int, int]]:
        """(parent_id, child_id) pairs, one per parent/child connector."""
        return [
            (node.parent_id, node.id)
            for node in self.nodes.values()
            if node.parent_id is not None and node.parent_id in self.nodes
        ]

    def canvas_size(self) -> Tuple[float, float]:
        """Extent a renderer should reserve: the layout's far corner plus a margin."""
        max_x = max([0.0] + [node.x for node in self.nodes.values()])
        max_y = max([0.0] + [node.y for node in self.nodes.values()])
        return max_x + self.space_x * 5, max_y + self.space_y * 2

    # --- Layout ---

    def recalculate_positions(self):
        """Recomputes x, y and color of every node from the current structure."""
        if not self.nodes:
            self.max_depth = 0
            return

        depths = {node_id: self.depth(node_id) for node_id in self.nodes}
        self.max_depth = max([0] + list(depths.values()))

        # Depth-first placement; internal nodes get a provisional x.
        visited: Set[int] = set()
        current_x = 0.0
        for root_node in self.root_nodes():
            self._position_nodes_dfs(root_node.id, 0, current_x, visited)
            current_x = self._max_x(root_node.id, set()) + self.space_x * self.ROOT_SEPARATION

        # Bottom-up: center each parent over its first and last child.
        for level in range(self.max_depth, -1, -1):
            for node_id, node_depth in depths.items():
                if node_depth != level:
                    continue
                node = self.nodes[node_id]
                first_child = self.nodes.get(node.children_ids[0]) if node.children_ids else None
                last_child = self.nodes.get(node.children_ids[-1]) if node.children_ids else None
                if first_child and last_child:
                    node.x = (first_child.x + last_child.x) / 2

        logger.debug("Laid out {} node(s), max depth {}", len(self.nodes), self.max_depth)

    def _position_nodes_dfs(self, node_id: int, depth: int, current_x: float, visited: Set[int]) -> float:
        node = self.nodes[node_id]
        visited.add(node_id)
        node.y = depth * self.space_y
        if node.role is None:
            node.color = color_for_depth(depth)

        children = [child_id for child_id in node.children_ids if child_id in self.nodes and child_id not in visited]
        if not children:
            node.x = current_x
            return current_x + self.space_x

        next_x = current_x
        for child_id in children:
            next_x = self._position_nodes_dfs(child_id, depth + 1, next_x, visited)
        node.x = current_x # Provisional, centered in the bottom-up pass
        return next_x

    def _max_x(self, node_id: int, visited: Set[int]) -> float:
        node = self.nodes[node_id]
        visited.add(node_id)
        max_x = node.x
        for child_id in node.children_ids:
            if child_id in self.nodes and child_id not in visited:
                max_x = max(max_x, self._max_x(child_id, visited))
        return max_x

    # --- Relative-connector queries ---

    def _adjacent_ancestor_sibling(self, node_id: int, offset: int) -> Optional[Node]:
        node = self.get_node(node_id)
        if not node:
            return None
        current = self.get_node(node.parent_id)
        visited: Set[int] = set()
        while current is not None and current.id not in visited:
            visited.add(current.id)
            parent = self.get_node(current.parent_id)
            if parent is None:
                return None
            siblings = parent.children_ids
            if current.id in siblings:
                index = siblings.index(current.id) + offset
                if 0 <= index < len(siblings):
                    return self.get_node(siblings[index])
            current = parent
        return None

    def left_uncle(self, node_id: int) -> Optional[Node]:
        """Nearest preceding sibling of an ancestor, searching upward from the parent."""
        return self._adjacent_ancestor_sibling(node_id, -1)

    def right_aunt(self, node_id: int) -> Optional[Node]:
        """Nearest following sibling of an ancestor, searching upward from the parent."""
        return self._adjacent_ancestor_sibling(node_id, 1)

    def _extreme_descendant(self, node_id: int, index: int) -> Optional[Node]:
        node = self.get_node(node_id)
        visited: Set[int] = set()
        while node is not None and node.children_ids and node.id not in visited:
            visited.add(node.id)
            child = self.get_node(node.children_ids[index])
            if child is None:
                break
            node = child
        return node

    def leftmost_descendant(self, node_id: int) -> Optional[Node]:
        return self._extreme_descendant(node_id, 0)

    def rightmost_descendant(self, node_id: int) -> Optional[Node]:
        return self._extreme_descendant(node_id, -1)

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        width, height = self.canvas_size()
        return {
            "nodes": {node_id: node.to_dict() for node_id, node in self.nodes.items()},
            "selected_node_id": self._selected_node_id,
            "space_x": self.space_x,
            "space_y": self.space_y,
            "max_depth": self.max_depth,
            "variant": self.variant,
            "width": width,
            "height": height,
            "edges": [list(edge) for edge in self.edges()],
        }
