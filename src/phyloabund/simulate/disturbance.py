"""
Disturbance-frequency covariate.
"""

import math

import numpy as np

from ..errors import InvalidInput
from .abundance import RandomSource, make_rng


def disturbance_frequencies(
    n_samples: int,
    rate: float = 1.0,
    rng: RandomSource = None,
) -> np.ndarray:
    """
    Draw log-scaled disturbance frequencies, one per sample.

    Values are ``log(x)`` for ``x ~ Exponential(rate)``, sorted ascending so
    that sample order follows the covariate.

    Parameters
    ----------
    n_samples : int
        Number of samples (>= 1)
    rate : float, default=1.0
        Rate of the exponential distribution
    rng : numpy.random.Generator or int, optional
        Random source, or a seed for a new one

    Returns
    -------
    np.ndarray
        Sorted float array of length ``n_samples``
    """
    if isinstance(n_samples, bool) or int(n_samples) != n_samples or n_samples < 1:
        raise InvalidInput(f"n_samples must be a positive integer, got {n_samples}")
    if not math.isfinite(rate) or rate <= 0:
        raise InvalidInput(f"rate must be finite and > 0, got {rate}")

    draws = make_rng(rng).exponential(scale=1.0 / rate, size=int(n_samples))
    return np.sort(np.log(draws))
