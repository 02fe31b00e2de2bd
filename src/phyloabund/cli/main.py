"""Main CLI application for phyloabund."""

import typer

from .. import __version__
from .commands import simulate as simulate_cmd

app = typer.Typer(
    name="phyloabund",
    help="Simulate trait-driven microbiome abundance tables on a phylogeny",
    no_args_is_help=True,
)

# Add simulate subcommand
app.add_typer(simulate_cmd.app, name="simulate")


@app.command()
def version():
    """Print the phyloabund version."""
    typer.echo(f"phyloabund {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
