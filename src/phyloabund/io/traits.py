"""
Trait table reading and alignment to tree tips.
"""

from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

import pandas as pd

from ..errors import InvalidInput

_HEADER_NAMES = {
    "tip", "tips", "tip_label", "taxon", "taxa", "species", "otu", "asv",
    "feature", "feature_id", "label", "name", "id",
}


def read_traits(path: Union[str, Path], header: Optional[bool] = None) -> pd.Series:
    """
    Read a two-column trait table.

    The first column holds tip labels, the second the trait value
    (e.g. 16S copy number). Files ending in ``.csv`` are comma separated,
    anything else is read as tab separated.

    With ``header=None`` the first line is taken as a header only when its
    trait field is not a number and its first field is a usual column name
    (``tip``, ``taxon``, ``species``, ``otu``, ...). Any other non-numeric
    trait, including one on the first line, is an error.

    Parameters
    ----------
    path : str or Path
        Trait table file
    header : bool, optional
        Whether the first line is a header; detected when None

    Returns
    -------
    pd.Series
        Float trait values indexed by tip label, in file order

    Raises
    ------
    InvalidInput
        If the table cannot be parsed, is empty, has fewer than two
        columns, repeats a tip or contains a non-numeric trait
    """
    path = Path(path)
    sep = "," if path.suffix.lower() == ".csv" else "\t"

    try:
        raw = pd.read_csv(
            path, sep=sep, header=None, dtype=str, comment="#", skip_blank_lines=True
        )
    except pd.errors.EmptyDataError:
        raise InvalidInput(f"{path}: no trait rows found")
    except pd.errors.ParserError as e:
        raise InvalidInput(f"{path}: malformed trait table: {e}")
    except UnicodeDecodeError as e:
        raise InvalidInput(f"{path}: not a UTF-8 text file: {e}")
    if raw.shape[1] < 2:
        raise InvalidInput(f"{path}: expected at least two columns (tip, trait)")
    if raw.empty:
        raise InvalidInput(f"{path}: no trait rows found")

    if header is None:
        header = _looks_like_header(raw.iloc[0, 0], raw.iloc[0, 1])
    if header:
        raw = raw.iloc[1:]
    if raw.empty:
        raise InvalidInput(f"{path}: no trait rows found")

    tips = raw.iloc[:, 0].str.strip()
    values = pd.to_numeric(raw.iloc[:, 1].str.strip(), errors="coerce")
    bad = tips[values.isna()]
    if len(bad) > 0:
        raise InvalidInput(
            f"{path}: non-numeric trait value for tip(s) {', '.join(bad.astype(str))}"
        )

    traits = pd.Series(values.to_numpy(dtype=float), index=tips.to_numpy(), name="trait")
    traits.index.name = "tip"
    _check_unique(traits.index)
    return traits


def align_traits(
    traits: Union[pd.Series, Mapping[str, float]],
    tip_labels: Sequence[str],
) -> pd.Series:
    """
    Reorder trait values to match the tree's tip order.

    Parameters
    ----------
    traits : pd.Series or mapping
        Trait value per tip label
    tip_labels : sequence of str
        Tip labels in the order rows of the abundance table should follow

    Returns
    -------
    pd.Series
        Trait values indexed by ``tip_labels``

    Raises
    ------
    InvalidInput
        If a tip has no trait or a trait has no tip
    """
    if not isinstance(traits, pd.Series):
        traits = pd.Series(traits, dtype=float)
    _check_unique(traits.index)

    tips = pd.Index(tip_labels)
    missing = tips.difference(traits.index)
    extra = traits.index.difference(tips)
    if len(missing) > 0:
        raise InvalidInput(f"No trait value for tip(s): {', '.join(map(str, missing))}")
    if len(extra) > 0:
        raise InvalidInput(f"Trait given for unknown tip(s): {', '.join(map(str, extra))}")

    return traits.reindex(tips).astype(float).rename("trait").rename_axis("tip")


def _check_unique(index: pd.Index) -> None:
    dupes = index[index.duplicated()].unique()
    if len(dupes) > 0:
        raise InvalidInput(f"Duplicate tip(s) in trait table: {', '.join(map(str, dupes))}")



def _looks_like_header(first: str, second: str) -> bool:
    if pd.notna(pd.to_numeric(pd.Series([second]), errors="coerce").iloc[0]):
        return False
    return str(first).strip().lower() in _HEADER_NAMES
