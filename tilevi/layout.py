"""Binary space partition of the screen into module tiles."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Optional

from .errors import LayoutError, LayoutFullError, LayoutMissingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    """Screen rectangle; right and bottom are exclusive."""
    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def contains(self, other: "Rect") -> bool:
        return (self.left <= other.left and other.right <= self.right
                and self.top <= other.top and other.bottom <= self.bottom)


@dataclass
class LayoutNode:
    rect: Rect
    module_id: Optional[int] = None
    occupied: bool = False
    left: Optional[int] = None
    right: Optional[int] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


class BspLayout:
    """Array-indexed binary tree tiling a rectangular screen.

    Node 0 is the root. Children are appended in breadth-first order, so
    for a freshly set up tree the leaves are the last nodes in the list.
    """

    def __init__(self):
        self.nodes: list[LayoutNode] = []
        self.depth = 0

    def setup(self, depth: int, width: int, height: int) -> None:
        """Build a complete partition of {0, 0, width, height}.

        Splitting is breadth first, starting with a horizontal cut
        through the middle of the height and alternating with vertical
        cuts, until the tree holds at least 2**depth nodes.
        """
        self.depth = depth
        self.nodes = [LayoutNode(Rect(top=0, right=width, bottom=height, left=0))]
        if depth <= 0:
            return

        queue = deque([(0, False)])
        while queue:
            idx, vertical = queue.popleft()
            parent = self.nodes[idx].rect
            if vertical:
                edge = parent.left + parent.width // 2
                first = replace(parent, right=edge)
                second = replace(parent, left=edge)
            else:
                edge = parent.top + parent.height // 2
                first = replace(parent, bottom=edge)
                second = replace(parent, top=edge)

            left_idx = len(self.nodes)
            self.nodes.append(LayoutNode(first))
            self.nodes.append(LayoutNode(second))
            self.nodes[idx].left = left_idx
            self.nodes[idx].right = left_idx + 1

            if len(self.nodes) < (1 << depth):
                queue.append((left_idx, not vertical))
                queue.append((left_idx + 1, not vertical))

    def resize(self, width: int, height: int) -> None:
        """Rebuild the partition for a new screen size, keeping every module placed."""
        module_ids = sorted(n.module_id for n in self.nodes if n.module_id is not None)
        self.setup(self.depth, width, height)
        for module_id in module_ids:
            self.insert(module_id)

    def insert(self, module_id: int) -> Rect:
        """Place module_id at the first free node and return its rectangle.

        A node already holding a module is split: the existing module
        moves to the left child and the new one takes the right child.

        Raises:
            LayoutFullError: if no node can take the module
        """
        if not self.nodes:
            raise LayoutFullError("layout has not been set up")

        queue = deque([0])
        while queue:
            idx = queue.popleft()
            node = self.nodes[idx]

            if not node.occupied:
                node.module_id = module_id
                self._refresh_occupied()
                return node.rect

            if node.module_id is not None:
                if node.left is None or node.right is None:
                    raise LayoutFullError(
                        "no room left to split", {"module_id": module_id, "node": idx}
                    )
                self.nodes[node.left].module_id = node.module_id
                self.nodes[node.right].module_id = module_id
                node.module_id = None
                self._refresh_occupied()
                return self.nodes[node.right].rect

            for child in (node.left, node.right):
                if child is not None:
                    queue.append(child)

        raise LayoutFullError("no free space in layout", {"module_id": module_id})

    def remove(self, module_id: int) -> None:
        """Remove module_id and collapse subtrees left with a single module.

        Raises:
            LayoutMissingError: if module_id is not in the layout
        """
        self.nodes[self._find(module_id)].module_id = None
        self._refresh_occupied()

        changed = True
        while changed:
            changed = False
            for node in self.nodes:
                if node.is_leaf or node.module_id is not None:
                    continue
                left = self.nodes[node.left]
                right = self.nodes[node.right]
                if left.occupied == right.occupied:
                    continue
                only = left if left.occupied else right
                if only.module_id is None:
                    continue
                node.module_id = only.module_id
                only.module_id = None
                changed = True
            self._refresh_occupied()

    def get(self, module_id: int) -> Rect:
        """Return the rectangle of module_id.

        Raises:
            LayoutMissingError: if module_id is not in the layout
        """
        return self.nodes[self._find(module_id)].rect

    def module_ids(self) -> list[int]:
        return [n.module_id for n in self.nodes if n.module_id is not None]

    def leaves(self) -> list[LayoutNode]:
        return [n for n in self.nodes if n.is_leaf]

    def _find(self, module_id: int) -> int:
        for idx, node in enumerate(self.nodes):
            if node.module_id == module_id:
                return idx
        raise LayoutMissingError("module not in layout", {"module_id": module_id})

    def _refresh_occupied(self) -> bool:
        if not self.nodes:
            return False

        def visit(idx: int) -> bool:
            node = self.nodes[idx]
            occupied = node.module_id is not None
            for child in (node.left, node.right):
                if child is not None and visit(child):
                    occupied = True
            node.occupied = occupied
            return occupied

        return visit(0)

    def check_invariants(self) -> None:
        """Verify that children tile their parent and occupancy is consistent.

        Raises:
            LayoutError: naming the first node that breaks an invariant
        """
        for idx, node in enumerate(self.nodes):
            if not node.is_leaf:
                if node.left is None or node.right is None:
                    raise LayoutError("split node with a single child", {"node": idx})
                a = self.nodes[node.left].rect
                b = self.nodes[node.right].rect
                union = Rect(top=min(a.top, b.top), right=max(a.right, b.right),
                             bottom=max(a.bottom, b.bottom), left=min(a.left, b.left))
                if not (node.rect.contains(a) and node.rect.contains(b)) or union != node.rect:
                    raise LayoutError("children do not cover their parent", {"node": idx})
                if a.width * a.height + b.width * b.height != node.rect.width * node.rect.height:
                    raise LayoutError("children overlap", {"node": idx})
            descendants = node.module_id is not None or any(
                self.nodes[c].occupied for c in (node.left, node.right) if c is not None
            )
            if node.occupied != descendants:
                raise LayoutError("stale occupied flag", {"node": idx})
        placed = self.module_ids()
        if len(placed) != len(set(placed)):
            raise LayoutError("module placed twice", {"modules": placed})
