"""
Species x sample abundance tables.
"""

import json
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..config import SimulationConfig
from ..errors import InvalidInput
from ..io.traits import align_traits
from ..io.trees import Tree
from .abundance import AbundanceSimulator, RandomSource, make_rng
from .disturbance import disturbance_frequencies

TraitInput = Union[pd.Series, Mapping[str, float]]


@dataclass(frozen=True, eq=False)
class AbundanceTable:
    """
    Simulated abundance table.

    Rows are species (tip labels), columns are samples. Instances are
    immutable; transformations return new tables.

    Attributes
    ----------
    counts : pd.DataFrame
        Counts, species x samples. Integer until a pseudocount is applied.
    disturbance : pd.Series
        Disturbance value per sample, indexed by sample name
    trait : pd.Series
        Trait value per species, indexed by tip label
    config : SimulationConfig
        Parameters the table was simulated with
    pseudocount_applied : bool
        Whether zeros have been replaced by the pseudocount
    """

    counts: pd.DataFrame
    disturbance: pd.Series
    trait: pd.Series
    config: SimulationConfig = field(default_factory=SimulationConfig)
    pseudocount_applied: bool = False

    @classmethod
    def from_tree(
        cls,
        tree: Tree,
        traits: TraitInput,
        disturbance: Optional[Sequence[float]] = None,
        n_samples: Optional[int] = None,
        config: Optional[SimulationConfig] = None,
        rng: RandomSource = None,
    ) -> "AbundanceTable":
        """
        Simulate a table whose rows follow the tree's tip order.

        Either ``disturbance`` or ``n_samples`` must be given; with
        ``n_samples`` the disturbance values are drawn from the same random
        source before the counts.
        """
        config = config if config is not None else SimulationConfig()
        rng = make_rng(rng)
        if disturbance is None:
            if n_samples is None:
                raise InvalidInput("Give either disturbance values or n_samples")
            disturbance = disturbance_frequencies(
                n_samples, rate=config.disturbance_rate, rng=rng
            )
        aligned = align_traits(traits, tree.leaf_names)
        return simulate_table(aligned, disturbance, config=config, rng=rng)

    @property
    def n_species(self) -> int:
        return self.counts.shape[0]

    @property
    def n_samples(self) -> int:
        return self.counts.shape[1]

    @property
    def zero_fraction(self) -> float:
        """Fraction of entries equal to zero."""
        return float((self.counts.to_numpy() == 0).mean())

    def with_pseudocount(self, value: Optional[float] = None) -> "AbundanceTable":
        """
        Replace zero counts with a pseudocount.

        Log-ratio transforms are undefined at zero, so this is required
        before any log-ratio analysis. Non-zero entries are unchanged.

        Parameters
        ----------
        value : float, optional
            Pseudocount; defaults to ``config.pseudocount``

        Returns
        -------
        AbundanceTable
            New table with float counts and no zeros
        """
        value = self.config.pseudocount if value is None else value
        if not np.isfinite(value) or value <= 0:
            raise InvalidInput(f"pseudocount must be finite and > 0, got {value}")

        zero_fraction = self.zero_fraction
        if zero_fraction > 0.5:
            warnings.warn(
                f"{zero_fraction:.0%} of counts are zero and will be replaced "
                f"by the pseudocount {value}",
                UserWarning,
            )

        counts = self.counts.astype(float)
        counts = counts.mask(counts == 0, value)
        return AbundanceTable(
            counts=counts,
            disturbance=self.disturbance,
            trait=self.trait,
            config=self.config.replace(pseudocount=value),
            pseudocount_applied=True,
        )

    def relative(self) -> pd.DataFrame:
        """
        Closure of each sample: counts divided by the sample total.

        Raises
        ------
        InvalidInput
            If a sample has a total of zero
        """
        totals = self.counts.sum(axis=0)
        empty = totals.index[totals == 0]
        if len(empty) > 0:
            raise InvalidInput(
                f"Cannot close sample(s) with zero total: {', '.join(map(str, empty))}"
            )
        return self.counts / totals

    def summary(self) -> str:
        """
        Generate a formatted summary of the table.

        Returns
        -------
        str
            Multi-line summary
        """
        totals = self.counts.sum(axis=0)
        lines = []
        lines.append("=" * 60)
        lines.append("SIMULATED ABUNDANCE TABLE")
        lines.append("=" * 60)
        lines.append(f"Species: {self.n_species}")
        lines.append(f"Samples: {self.n_samples}")
        lines.append(
            f"Disturbance range: {self.disturbance.min():.4f} "
            f"to {self.disturbance.max():.4f}"
        )
        lines.append(f"Trait range: {self.trait.min():g} to {self.trait.max():g}")
        lines.append(f"Sample totals: mean {totals.mean():.1f}, "
                     f"min {totals.min():g}, max {totals.max():g}")
        if self.pseudocount_applied:
            lines.append(f"Pseudocount applied: {self.config.pseudocount:g}")
        else:
            lines.append(f"Zero entries: {self.zero_fraction:.1%}")
        lines.append("")
        lines.append("Parameters:")
        for key, value in self.config.to_dict().items():
            lines.append(f"  {key} = {value:g}")
        lines.append("=" * 60)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """
        Export the table as a dictionary.

        Counts are nested as ``{sample: {tip: count}}``.
        """
        return {
            "config": self.config.to_dict(),
            "pseudocount_applied": self.pseudocount_applied,
            "disturbance": {k: float(v) for k, v in self.disturbance.items()},
            "trait": {k: float(v) for k, v in self.trait.items()},
            "counts": {
                sample: {tip: _to_builtin(v) for tip, v in column.items()}
                for sample, column in self.counts.items()
            },
        }

    def to_json(self, filepath: Optional[str] = None, indent: int = 2) -> str:
        """
        Export the table as JSON.

        Parameters
        ----------
        filepath : str, optional
            If provided, also write the JSON to this file
        indent : int, default=2
            Indentation level

        Returns
        -------
        str
            JSON string
        """
        json_str = json.dumps(self.to_dict(), indent=indent)
        if filepath:
            with open(filepath, "w") as f:
                f.write(json_str)
        return json_str

    def __str__(self) -> str:
        return self.summary()


def _to_builtin(value):
    if isinstance(value, (np.integer, int)):
        return int(value)
    return float(value)


def sample_names(n_samples: int) -> list[str]:
    return [f"sample_{i + 1}" for i in range(n_samples)]


def simulate_table(
    trait: TraitInput,
    disturbance: Sequence[float],
    config: Optional[SimulationConfig] = None,
    rng: RandomSource = None,
) -> AbundanceTable:
    """
    Simulate one column of counts per disturbance value.

    Parameters
    ----------
    trait : pd.Series or mapping
        Trait value per species, indexed by tip label; row order follows it
    disturbance : sequence of float
        Disturbance value per sample; column order follows it
    config : SimulationConfig, optional
        Simulation parameters
    rng : numpy.random.Generator or int, optional
        Random source, or a seed for a new one

    Returns
    -------
    AbundanceTable
    """
    config = config if config is not None else SimulationConfig()
    if not isinstance(trait, pd.Series):
        trait = pd.Series(trait, dtype=float)
    trait = trait.astype(float).rename("trait").rename_axis("tip")

    disturbance = np.asarray(disturbance, dtype=float)
    if disturbance.ndim != 1 or disturbance.size == 0:
        raise InvalidInput("Disturbance must be a non-empty one-dimensional sequence")
    if not np.all(np.isfinite(disturbance)):
        raise InvalidInput("Disturbance values must be finite")

    simulator = AbundanceSimulator(config=config, rng=rng)
    draws = simulator.simulate_many(disturbance, trait.to_numpy())

    names = sample_names(len(draws))
    counts = pd.DataFrame(
        np.column_stack([d.counts for d in draws]),
        index=trait.index.copy(),
        columns=names,
    )
    counts.columns.name = "sample"
    return AbundanceTable(
        counts=counts,
        disturbance=pd.Series(disturbance, index=names, name="disturbance"),
        trait=trait,
        config=config,
    )
