"""
Exceptions raised by phyloabund.
"""


class InvalidInput(ValueError):
    """
    Input rejected before any simulation takes place.

    Raised for empty or mismatched trait vectors, non-positive trait values,
    non-finite disturbance values and invalid configuration.
    """


class NumericOverflow(OverflowError):
    """Log-mean abundances could not be brought into a finite range."""
