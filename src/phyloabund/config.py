"""
Simulation configuration.
"""

import json
import math
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Union

from .errors import InvalidInput


@dataclass
class SimulationConfig:
    """
    Parameters shared by every abundance simulation.

    The defaults reproduce the classic PhILR / phylofactor tutorial set-up.

    Attributes
    ----------
    mu_total : float
        Expected total count per sample (sequencing depth), default 10000
    dispersion : float
        Negative-binomial size parameter; smaller is more overdispersed
    trait_scale : float
        Multiplier on ``disturbance * log(trait)`` in the log-mean
    pseudocount : float
        Value substituted for zero counts before log-ratio analysis
    disturbance_rate : float
        Rate of the exponential distribution disturbance values are drawn from
    """

    mu_total: float = 10000.0
    dispersion: float = 1.0
    trait_scale: float = 3.0
    pseudocount: float = 0.65
    disturbance_rate: float = 1.0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check every field.

        Raises
        ------
        InvalidInput
            If any value is non-finite or out of range
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInput(f"{f.name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InvalidInput(f"{f.name} must be finite, got {value}")

        if self.mu_total < 0:
            raise InvalidInput(f"mu_total must be >= 0, got {self.mu_total}")
        if self.dispersion <= 0:
            raise InvalidInput(f"dispersion must be > 0, got {self.dispersion}")
        if self.pseudocount <= 0:
            raise InvalidInput(f"pseudocount must be > 0, got {self.pseudocount}")
        if self.disturbance_rate <= 0:
            raise InvalidInput(
                f"disturbance_rate must be > 0, got {self.disturbance_rate}"
            )

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "SimulationConfig":
        """
        Build a config from a dictionary, rejecting unknown keys.

        Parameters
        ----------
        values : dict
            Field name to value; missing fields keep their defaults

        Returns
        -------
        SimulationConfig
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise InvalidInput(
                f"Unknown configuration key(s): {', '.join(unknown)}. "
                f"Valid keys: {', '.join(sorted(known))}"
            )
        return cls(**values)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "SimulationConfig":
        """Load a config from a JSON object file."""
        with open(path) as f:
            values = json.load(f)
        if not isinstance(values, dict):
            raise InvalidInput(f"Config file {path} must contain a JSON object")
        return cls.from_dict(values)

    def replace(self, **overrides) -> "SimulationConfig":
        """
        Return a copy with the given fields replaced.

        ``None`` values are ignored so CLI options that were not given
        fall through to the current value.
        """
        values = self.to_dict()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return self.from_dict(values)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
