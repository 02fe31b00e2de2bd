"""
Output formatting for simulated abundance tables.
"""

import json
from pathlib import Path
from typing import Mapping, Optional, Sequence

import numpy as np

from .table import AbundanceTable


class SimulationOutput:
    """
    Write simulation results to disk.

    Provides methods to write:
    - Abundance tables (TSV, species rows x sample columns)
    - Per-sample disturbance values (TSV)
    - Single-sample counts (TSV)
    - Parameters (JSON)
    """

    @staticmethod
    def write_table(
        table: AbundanceTable,
        output_path: Path,
        float_format: str = "%.6g",
    ):
        """
        Write an abundance table as TSV.

        The first column is the tip label; the header row holds sample
        names. Integer counts are written without a decimal point.

        Parameters
        ----------
        table : AbundanceTable
            Table to write
        output_path : Path
            Output file path
        float_format : str
            Format for float entries (pseudocount-adjusted tables)
        """
        table.counts.to_csv(Path(output_path), sep="\t", float_format=float_format)

    @staticmethod
    def write_disturbance(table: AbundanceTable, output_path: Path):
        """
        Write the disturbance value of each sample.

        Output Format
        -------------
        sample      disturbance
        sample_1    -2.3412
        sample_2    -0.8120
        ...
        """
        table.disturbance.rename_axis("sample").to_csv(
            Path(output_path), sep="\t", header=True
        )

    @staticmethod
    def write_counts(
        tips: Sequence[str],
        counts: np.ndarray,
        output_path: Optional[Path] = None,
    ) -> str:
        """
        Format single-sample counts as ``tip<TAB>count`` lines.

        Parameters
        ----------
        tips : sequence of str
            Tip labels, in count order
        counts : np.ndarray
            One count per tip
        output_path : Path, optional
            If provided, also write the text to this file

        Returns
        -------
        str
            The formatted text
        """
        lines = ["tip\tcount"]
        lines.extend(f"{tip}\t{int(c)}" for tip, c in zip(tips, counts))
        text = "\n".join(lines) + "\n"
        if output_path is not None:
            Path(output_path).write_text(text)
        return text

    @staticmethod
    def write_parameters(
        params: Mapping,
        output_path: Path,
        indent: int = 2,
    ):
        """
        Write simulation parameters to a JSON file.

        Parameters
        ----------
        params : dict
            Simulation parameters
        output_path : Path
            Output file path
        indent : int
            JSON indentation level
        """
        with open(Path(output_path), "w") as f:
            json.dump(dict(params), f, indent=indent)
