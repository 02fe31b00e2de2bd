"""
Abundance simulation for phyloabund.

Simulates microbiome count tables in which each species' expected relative
abundance responds to a per-sample disturbance covariate through its trait
value (e.g. 16S copy number). Useful for:
- Generating test data for phylogenetic log-ratio methods (PhILR,
  phylofactorization)
- Power analysis for trait-based abundance shifts
- Teaching examples

Main entry points:
- simulate_abundance: one sample of counts
- AbundanceSimulator: reusable simulator with a config and random source
- disturbance_frequencies: sorted log-exponential covariate
- simulate_table / AbundanceTable: species x sample tables
"""

from .abundance import (
    AbundanceDraw,
    AbundanceSimulator,
    expected_counts,
    log_mean,
    make_rng,
    relative_abundance,
    simulate_abundance,
)
from .disturbance import disturbance_frequencies
from .output import SimulationOutput
from .table import AbundanceTable, simulate_table

__all__ = [
    'AbundanceDraw',
    'AbundanceSimulator',
    'AbundanceTable',
    'SimulationOutput',
    'disturbance_frequencies',
    'expected_counts',
    'log_mean',
    'make_rng',
    'relative_abundance',
    'simulate_abundance',
    'simulate_table',
]
