"""
Input modules for trees and trait tables.

- **Trees**: Newick format; tip labels define species order
- **Traits**: two-column TSV/CSV tables of per-tip trait values
"""

from phyloabund.io.trees import Tree, TreeNode
from phyloabund.io.traits import read_traits, align_traits

__all__ = ["Tree", "TreeNode", "read_traits", "align_traits"]
