"""
phyloabund: trait-driven microbiome abundance simulation on a phylogeny.

Simulates sequence-count tables whose composition shifts with an
environmental disturbance covariate according to each species' trait value,
producing realistic input for phylogenetic log-ratio methods such as PhILR
and phylofactorization.

Quick Start
-----------
Simulate one sample:

>>> import numpy as np
>>> from phyloabund import simulate_abundance
>>> counts = simulate_abundance(0.8, [1, 2, 2, 5], rng=np.random.default_rng(0))

Simulate a full table on a tree:

>>> from phyloabund import Tree, AbundanceTable
>>> tree = Tree.from_newick("((A:1,B:1):1,(C:1,D:1):1);")
>>> table = AbundanceTable.from_tree(
...     tree, {"A": 1, "B": 2, "C": 4, "D": 7}, n_samples=20, rng=42
... )
>>> table = table.with_pseudocount()
>>> print(table.summary())
"""

__version__ = "0.1.0"

from .config import SimulationConfig
from .errors import InvalidInput, NumericOverflow
from .io.trees import Tree
from .io.traits import read_traits, align_traits
from .simulate import (
    AbundanceDraw,
    AbundanceSimulator,
    AbundanceTable,
    disturbance_frequencies,
    expected_counts,
    relative_abundance,
    simulate_abundance,
    simulate_table,
)

__all__ = [
    # Simulation
    "simulate_abundance",
    "AbundanceSimulator",
    "AbundanceDraw",
    "disturbance_frequencies",
    "simulate_table",
    "AbundanceTable",
    "expected_counts",
    "relative_abundance",

    # Configuration and errors
    "SimulationConfig",
    "InvalidInput",
    "NumericOverflow",

    # I/O
    "Tree",
    "read_traits",
    "align_traits",

    # Version
    "__version__",
]
