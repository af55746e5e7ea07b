"""Dependency tree construction and ASCII rendering.

The tree for a root ticket follows ``deps`` edges outward. Both depth
passes use explicit stacks instead of recursion, and every traversal
carries the set of ancestors on the current path so that dependency
cycles terminate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tkt.constants import TREE_BRANCH, TREE_LAST, TREE_PIPE, TREE_SPACE

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from tkt.models import Ticket


@dataclass
class TreeNode:
    """A ticket as seen by the dependency tree."""

    id: str
    status: str
    title: str
    deps: list[str] = field(default_factory=list[str])
    max_depth: int = -1  # Deepest level this node is reached at from the root
    subtree_depth: int = 0  # Deepest max_depth within this node's subtree

    def label(self) -> str:
        """Return the display line for this node."""
        return f"{self.id} [{self.status}] {self.title}"


class DependencyTree:
    """A dependency tree rooted at one ticket."""

    def __init__(
        self,
        nodes: dict[str, TreeNode],
        root_id: str,
        *,
        full: bool = False,
    ) -> None:
        self.nodes = nodes
        self.root_id = root_id
        self.full = full

    @classmethod
    def build(
        cls,
        tickets: Mapping[str, Ticket],
        root_id: str,
        *,
        full: bool = False,
    ) -> DependencyTree:
        """Build a tree from already-loaded tickets.

        Args:
            tickets: All tickets keyed by ID
            root_id: Full ID of the root ticket
            full: If True, render every occurrence of a node instead of
                only its deepest one

        Returns:
            The tree with depth metadata computed
        """
        nodes = {
            ticket_id: TreeNode(
                id=ticket_id,
                status=ticket.status.value,
                title=ticket.title,
                deps=[dep for dep in ticket.deps if dep],
            )
            for ticket_id, ticket in tickets.items()
        }
        tree = cls(nodes, root_id, full=full)
        tree._compute_max_depths()
        tree._compute_subtree_depths()
        return tree

    def node(self, node_id: str) -> TreeNode | None:
        """Return the node for an ID, or None if it is not a known ticket."""
        return self.nodes.get(node_id)

    def _compute_max_depths(self) -> None:
        """Record the deepest level at which each node is reached."""
        stack: list[tuple[str, int, frozenset[str]]] = [
            (self.root_id, 0, frozenset()),
        ]

        while stack:
            node_id, depth, ancestors = stack.pop()

            node = self.nodes.get(node_id)
            if node is None:
                continue
            if node_id in ancestors:
                # Cycle along this path; other paths may still reach it
                continue

            node.max_depth = max(node.max_depth, depth)

            path = ancestors | {node_id}
            # Reversed so children are popped in declaration order
            stack.extend((dep, depth + 1, path) for dep in reversed(node.deps))

    def _compute_subtree_depths(self) -> None:
        """Compute subtree depths with an iterative post-order walk."""
        computed: set[str] = set()
        # (node id, ancestors, children already pushed)
        stack: list[tuple[str, frozenset[str], bool]] = [
            (self.root_id, frozenset(), False),
        ]

        while stack:
            node_id, ancestors, expanded = stack[-1]

            node = self.nodes.get(node_id)
            if node is None or node_id in ancestors:
                stack.pop()
                continue

            if not expanded:
                stack[-1] = (node_id, ancestors, True)
                path = ancestors | {node_id}
                stack.extend(
                    (dep, path, False)
                    for dep in reversed(node.deps)
                    if dep not in computed
                )
                continue

            stack.pop()
            deepest = node.max_depth
            for dep in node.deps:
                child = self.nodes.get(dep)
                if child is None or dep in ancestors or dep == node_id:
                    continue
                deepest = max(deepest, child.subtree_depth)
            node.subtree_depth = deepest
            computed.add(node_id)

    def _renderable_children(
        self,
        node: TreeNode,
        path: frozenset[str],
        depth: int,
        printed: set[str],
    ) -> list[TreeNode]:
        children: list[TreeNode] = []
        for dep in node.deps:
            child = self.nodes.get(dep)
            if child is None or dep in path:
                continue
            if not self.full and (dep in printed or child.max_depth != depth + 1):
                continue
            if any(existing.id == dep for existing in children):
                continue
            children.append(child)

        children.sort(key=lambda child: (child.subtree_depth, child.id))
        return children

    def render(self) -> list[str]:
        """Render the tree as lines of text.

        In the default mode a node reachable at several depths is printed
        once, at its deepest occurrence. In full mode every occurrence is
        printed, stopping only at cycles. Siblings are ordered by subtree
        depth, then ID. An unknown root renders nothing.
        """
        root = self.nodes.get(self.root_id)
        if root is None:
            return []

        lines = [root.label()]
        printed: set[str] = {root.id}

        # Explicit stack of (children, next index, prefix, ancestor path, depth)
        frames: list[tuple[list[TreeNode], int, str, frozenset[str], int]] = []

        def push(node: TreeNode, prefix: str, path: frozenset[str], depth: int) -> None:
            children = self._renderable_children(node, path, depth, printed)
            if children:
                frames.append((children, 0, prefix, path, depth))

        push(root, "", frozenset({root.id}), 0)

        while frames:
            children, idx, prefix, path, depth = frames[-1]
            if idx >= len(children):
                frames.pop()
                continue
            frames[-1] = (children, idx + 1, prefix, path, depth)

            child = children[idx]
            is_last = idx == len(children) - 1
            if not self.full:
                printed.add(child.id)
            connector = TREE_LAST if is_last else TREE_BRANCH
            lines.append(f"{prefix}{connector}{child.label()}")

            child_prefix = prefix + (TREE_SPACE if is_last else TREE_PIPE)
            push(child, child_prefix, path | {child.id}, depth + 1)

        return lines

    def render_to(self, echo: Callable[[str], object]) -> None:
        """Write each rendered line through ``echo`` (e.g. ``typer.echo``)."""
        for line in self.render():
            echo(line)
