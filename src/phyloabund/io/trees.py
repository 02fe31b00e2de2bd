"""
Newick tree parsing.

Only the tip labels and their order are used by the simulator; the tree
itself stays opaque and is handed on unchanged to downstream tools.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..errors import InvalidInput

_DELIMITERS = ",:();[ \t\n\r"


@dataclass
class TreeNode:
    """
    Phylogenetic tree node.

    Attributes
    ----------
    id : int
        Node identifier, assigned in parse order
    name : Optional[str]
        Tip label, or support/clade label on internal nodes
    parent : Optional[TreeNode]
        Parent node (None at the root)
    children : list[TreeNode]
        Child nodes
    branch_length : Optional[float]
        Length of the branch to the parent, if given
    """

    id: int
    name: Optional[str] = None
    parent: Optional["TreeNode"] = field(default=None, repr=False)
    children: list["TreeNode"] = field(default_factory=list, repr=False)
    branch_length: Optional[float] = None

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0


@dataclass
class Tree:
    """
    Rooted phylogenetic tree.

    Attributes
    ----------
    root : TreeNode
        Root node
    leaf_names : list[str]
        Tip labels, left to right as written in the Newick string
    """

    root: TreeNode
    leaf_names: list[str]

    @property
    def n_leaves(self) -> int:
        return len(self.leaf_names)

    @classmethod
    def from_newick(cls, newick_string: str) -> "Tree":
        """
        Parse a Newick string.

        Bracketed comments (``[&R]``, ``[support]``) are dropped. Single
        quoted labels keep their spaces. Unnamed tips are rejected because
        tips label the rows of the abundance table.

        Parameters
        ----------
        newick_string : str
            Newick tree terminated by ``;``

        Returns
        -------
        Tree

        Raises
        ------
        ValueError
            If the string is not valid Newick
        InvalidInput
            If a tip is unnamed or a tip label occurs twice
        """
        newick = re.sub(r"\[[^\]]*\]", "", newick_string).strip()
        if ";" not in newick:
            raise ValueError("Invalid Newick format: missing semicolon")
        newick = newick[: newick.index(";")]
        if not newick:
            raise ValueError("Invalid Newick format: no tree found")

        counter = [0]

        def skip_whitespace(pos: int) -> int:
            while pos < len(newick) and newick[pos] in " \t\n\r":
                pos += 1
            return pos

        def parse_label(pos: int) -> tuple[Optional[str], int]:
            if pos < len(newick) and newick[pos] == "'":
                end = newick.find("'", pos + 1)
                if end < 0:
                    raise ValueError(f"Unterminated quoted label at position {pos}")
                return newick[pos + 1:end], end + 1
            start = pos
            while pos < len(newick) and newick[pos] not in _DELIMITERS:
                pos += 1
            label = newick[start:pos] if pos > start else None
            return label, pos

        def parse_node(pos: int, parent: Optional[TreeNode]) -> tuple[TreeNode, int]:
            node = TreeNode(id=counter[0], parent=parent)
            counter[0] += 1
            pos = skip_whitespace(pos)

            if pos < len(newick) and newick[pos] == "(":
                pos += 1
                while True:
                    child, pos = parse_node(pos, node)
                    node.children.append(child)
                    pos = skip_whitespace(pos)
                    if pos < len(newick) and newick[pos] == ",":
                        pos += 1
                    elif pos < len(newick) and newick[pos] == ")":
                        pos += 1
                        break
                    else:
                        raise ValueError(f"Expected ',' or ')' at position {pos}")

            pos = skip_whitespace(pos)
            node.name, pos = parse_label(pos)
            pos = skip_whitespace(pos)

            if pos < len(newick) and newick[pos] == ":":
                pos = skip_whitespace(pos + 1)
                start = pos
                while pos < len(newick) and newick[pos] not in _DELIMITERS:
                    pos += 1
                try:
                    node.branch_length = float(newick[start:pos])
                except ValueError:
                    raise ValueError(f"Invalid branch length: {newick[start:pos]!r}")

            return node, pos

        root, pos = parse_node(0, None)
        if skip_whitespace(pos) != len(newick):
            raise ValueError(f"Unexpected trailing text at position {pos}")

        tree = cls(root=root, leaf_names=[])
        for node in tree.preorder():
            if node.is_leaf:
                if not node.name:
                    raise InvalidInput(f"Tip node {node.id} has no label")
                tree.leaf_names.append(node.name)

        counts = Counter(tree.leaf_names)
        dupes = sorted(name for name, n in counts.items() if n > 1)
        if dupes:
            raise InvalidInput(f"Duplicate tip labels: {', '.join(dupes)}")

        return tree

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Tree":
        """Read the first tree in a Newick file."""
        with open(path) as f:
            return cls.from_newick(f.read())

    def preorder(self) -> list[TreeNode]:
        """Nodes in pre-order (root first, children left to right)."""
        result = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(node.children))
        return result

    def postorder(self) -> list[TreeNode]:
        """Nodes in post-order (leaves before their parents)."""
        result = []

        def traverse(node: TreeNode) -> None:
            for child in node.children:
                traverse(child)
            result.append(node)

        traverse(self.root)
        return result
