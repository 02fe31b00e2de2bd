"""Simulate command for phyloabund CLI."""

from pathlib import Path
from typing import Optional

import typer

from ...config import SimulationConfig
from ...errors import InvalidInput, NumericOverflow
from ...io.traits import read_traits
from ...io.trees import Tree
from ...simulate.abundance import AbundanceSimulator, make_rng
from ...simulate.output import SimulationOutput
from ...simulate.table import AbundanceTable

app = typer.Typer(help="Simulate abundance counts under the trait-disturbance model")


def _load_config(
    config_file: Optional[Path],
    **overrides,
) -> SimulationConfig:
    """Config file values, then explicit options on top."""
    try:
        config = SimulationConfig.from_json(config_file) if config_file else SimulationConfig()
        return config.replace(**overrides)
    except ValueError as e:
        typer.echo(f"Error in configuration: {e}", err=True)
        raise typer.Exit(code=1)


@app.command(name="sample")
def simulate_sample(
    traits: Path = typer.Option(
        ...,
        "--traits", "-T",
        help="Trait table (tip, trait), TSV or CSV",
        exists=True,
        dir_okay=False,
    ),
    header: Optional[bool] = typer.Option(
        None,
        "--header/--no-header",
        help="Whether the trait table has a header line [default: detect]",
    ),
    disturbance: float = typer.Option(
        ...,
        "--disturbance", "-d",
        help="Log-scaled disturbance frequency of the sample",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output TSV file (default: stdout)",
    ),
    mu_total: Optional[float] = typer.Option(
        None,
        "--mu-total",
        help="Expected total count [default: 10000]",
    ),
    dispersion: Optional[float] = typer.Option(
        None,
        "--dispersion",
        help="Negative-binomial size parameter [default: 1.0]",
    ),
    trait_scale: Optional[float] = typer.Option(
        None,
        "--trait-scale",
        help="Multiplier on disturbance * log(trait) [default: 3.0]",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Simulation parameters JSON file",
        exists=True,
        dir_okay=False,
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducibility",
    ),
):
    """
    Simulate counts for a single sample.

    Writes one 'tip<TAB>count' line per species, in trait-file order.

    Examples:

        \b
        phyloabund simulate sample -T traits.tsv -d 0.5 --seed 1
    """
    config = _load_config(
        config_file, mu_total=mu_total, dispersion=dispersion, trait_scale=trait_scale
    )

    try:
        trait_values = read_traits(traits, header=header)
        draw = AbundanceSimulator(config=config, rng=seed).simulate(
            disturbance, trait_values.to_numpy()
        )
    except (InvalidInput, NumericOverflow) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    text = SimulationOutput.write_counts(trait_values.index, draw.counts, output)
    if output is None:
        typer.echo(text, nl=False)


@app.command(name="table")
def simulate_table(
    tree: Path = typer.Option(
        ...,
        "--tree", "-t",
        help="Tree file (Newick format); tip labels define row order",
        exists=True,
        dir_okay=False,
    ),
    traits: Path = typer.Option(
        ...,
        "--traits", "-T",
        help="Trait table (tip, trait), TSV or CSV",
        exists=True,
        dir_okay=False,
    ),
    header: Optional[bool] = typer.Option(
        None,
        "--header/--no-header",
        help="Whether the trait table has a header line [default: detect]",
    ),
    output: Path = typer.Option(
        ...,
        "--output", "-o",
        help="Output TSV file",
    ),
    samples: int = typer.Option(
        40,
        "--samples", "-n",
        help="Number of samples",
        min=1,
    ),
    replicates: int = typer.Option(
        1,
        "--replicates", "-r",
        help="Number of tables to simulate",
        min=1,
    ),
    pseudocount: bool = typer.Option(
        True,
        "--pseudocount/--no-pseudocount",
        help="Replace zero counts with the configured pseudocount",
    ),
    mu_total: Optional[float] = typer.Option(
        None,
        "--mu-total",
        help="Expected total count per sample [default: 10000]",
    ),
    dispersion: Optional[float] = typer.Option(
        None,
        "--dispersion",
        help="Negative-binomial size parameter [default: 1.0]",
    ),
    trait_scale: Optional[float] = typer.Option(
        None,
        "--trait-scale",
        help="Multiplier on disturbance * log(trait) [default: 3.0]",
    ),
    pseudocount_value: Optional[float] = typer.Option(
        None,
        "--pseudocount-value",
        help="Value substituted for zero counts [default: 0.65]",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Simulation parameters JSON file",
        exists=True,
        dir_okay=False,
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducibility",
    ),
    output_params: bool = typer.Option(
        True,
        "--output-params/--no-output-params",
        help="Write parameters to JSON file",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Suppress progress messages",
    ),
):
    """
    Simulate species x sample abundance tables.

    Disturbance values are drawn as sorted log-exponential values, one per
    sample, and each sample's counts are simulated from the trait values.
    The disturbance of every sample is written next to the table.

    Examples:

        \b
        # 40 samples with zeros replaced by 0.65
        phyloabund simulate table -t tree.nwk -T traits.tsv -o counts.tsv

        \b
        # 10 reproducible replicates, raw counts
        phyloabund simulate table -t tree.nwk -T traits.tsv -o counts.tsv \\
            -r 10 --no-pseudocount --seed 42
    """
    if not quiet:
        typer.echo("phyloabund Abundance Simulator")
        typer.echo("=" * 50)

    config = _load_config(
        config_file,
        mu_total=mu_total,
        dispersion=dispersion,
        trait_scale=trait_scale,
        pseudocount=pseudocount_value,
    )

    try:
        if not quiet:
            typer.echo(f"Loading tree from {tree}...")
        tree_obj = Tree.from_file(tree)
        if not quiet:
            typer.echo(f"Loading traits from {traits}...")
        trait_values = read_traits(traits, header=header)
    except ValueError as e:
        typer.echo(f"Error reading input: {e}", err=True)
        raise typer.Exit(code=1)

    if not quiet:
        typer.echo("\nSimulation parameters:")
        typer.echo(f"  Species: {tree_obj.n_leaves}")
        typer.echo(f"  Samples: {samples}")
        typer.echo(f"  Total count (mu_total): {config.mu_total:g}")
        typer.echo(f"  Dispersion: {config.dispersion:g}")
        typer.echo(f"  Trait scale: {config.trait_scale:g}")
        if pseudocount:
            typer.echo(f"  Pseudocount: {config.pseudocount:g}")
        typer.echo(f"  Replicates: {replicates}")
        if seed is not None:
            typer.echo(f"  Seed: {seed}")
        typer.echo(f"\nSimulating {replicates} replicate(s)...")

    rng = make_rng(seed)
    for rep in range(replicates):
        try:
            table = AbundanceTable.from_tree(
                tree_obj, trait_values, n_samples=samples, config=config, rng=rng
            )
            if pseudocount:
                table = table.with_pseudocount()
        except (InvalidInput, NumericOverflow) as e:
            typer.echo(f"Error simulating replicate {rep+1}: {e}", err=True)
            raise typer.Exit(code=1)

        if replicates == 1:
            out_path = output
        else:
            out_path = output.parent / f"{output.stem}_rep{rep+1}{output.suffix}"
        disturbance_path = out_path.parent / f"{out_path.stem}.disturbance.tsv"

        try:
            SimulationOutput.write_table(table, out_path)
            SimulationOutput.write_disturbance(table, disturbance_path)
        except OSError as e:
            typer.echo(f"Error writing output: {e}", err=True)
            raise typer.Exit(code=1)

        if not quiet:
            typer.echo(f"  Replicate {rep+1} -> {out_path}")

    if output_params:
        params_path = output.parent / f"{output.stem}.params.json"
        params = AbundanceSimulator(config=config).get_parameters()
        params["seed"] = seed
        params["samples"] = samples
        params["replicates"] = replicates
        params["pseudocount_applied"] = pseudocount
        try:
            SimulationOutput.write_parameters(params, params_path)
        except OSError as e:
            typer.echo(f"Error writing parameters: {e}", err=True)
            raise typer.Exit(code=1)
        if not quiet:
            typer.echo(f"\nParameters -> {params_path}")

    if not quiet:
        typer.echo("\nSimulation complete!")
