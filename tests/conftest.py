"""
Pytest configuration and shared fixtures.
"""

import numpy as np
import pytest
from typer.testing import CliRunner

from phyloabund.io.trees import Tree


@pytest.fixture
def cli_runner():
    """CLI test runner for Typer apps."""
    return CliRunner()


@pytest.fixture
def rng():
    """Seeded random source."""
    return np.random.default_rng(20170101)


@pytest.fixture
def newick_string():
    return "((t1:0.3,t2:0.2):0.4,((t3:0.1,t4:0.5):0.2,(t5:0.3,t6:0.1):0.6):0.1);"


@pytest.fixture
def six_tip_tree(newick_string):
    return Tree.from_newick(newick_string)


@pytest.fixture
def copy_numbers():
    """16S copy number per tip, deliberately out of tree order."""
    return {"t6": 7.0, "t1": 1.0, "t2": 2.0, "t3": 1.0, "t4": 4.0, "t5": 3.0}


@pytest.fixture
def tree_file(tmp_path, newick_string):
    path = tmp_path / "tree.nwk"
    path.write_text(newick_string + "\n")
    return path


@pytest.fixture
def traits_file(tmp_path, copy_numbers):
    path = tmp_path / "traits.tsv"
    lines = ["tip\tcopy_number"]
    lines.extend(f"{tip}\t{value:g}" for tip, value in copy_numbers.items())
    path.write_text("\n".join(lines) + "\n")
    return path
